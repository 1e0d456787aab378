"""
PURPOSE: Tests for lognormal percentile fitting and the cycle-time forecaster.

Tests verify:
- The fitted distribution reproduces the input percentiles
- Worker scheduling finishes no later on average than batch processing
- Working-day cycle times are converted to calendar days
- A realistic backlog produces a plausible, right-skewed spread
"""

import math
from datetime import date

import numpy as np
import pytest
from scipy.stats import lognorm, norm

from forecast_internal.monte_carlo.cycle_time import CycleTimeForecaster, fit_lognormal
from forecast_internal.monte_carlo.models import CycleTimeConfig, SimulationConfig

START = date(2024, 1, 1)


class TestFitLognormal:
    def test_two_point_fit(self):
        params = fit_lognormal(5.0, 15.0)
        assert params.mu == pytest.approx(math.log(5.0))
        assert params.sigma == pytest.approx(math.log(3.0) / norm.ppf(0.95))
        assert params.percentile(0.5) == pytest.approx(5.0, abs=1e-6)
        assert params.percentile(0.95) == pytest.approx(15.0, abs=1e-6)

    def test_matches_scipy_lognorm(self):
        params = fit_lognormal(3.94, 34.06)
        dist = lognorm(s=params.sigma, scale=math.exp(params.mu))
        assert dist.ppf(0.5) == pytest.approx(3.94, abs=1e-6)
        assert dist.ppf(0.95) == pytest.approx(34.06, abs=1e-6)

    def test_four_point_fit_recovers_parameters(self):
        mu, sigma = 1.2, 0.6
        value = lambda p: math.exp(mu + sigma * norm.ppf(p))  # noqa: E731
        params = fit_lognormal(value(0.5), value(0.95), p80=value(0.8), p85=value(0.85))
        assert params.mu == pytest.approx(mu)
        assert params.sigma == pytest.approx(sigma)

    def test_unordered_percentiles_give_positive_sigma(self):
        params = fit_lognormal(10.0, 5.0)
        assert params.sigma > 0

    def test_equal_percentiles_give_zero_sigma(self):
        assert fit_lognormal(3.0, 3.0).sigma == pytest.approx(0.0)


class TestCycleTimeForecaster:
    def _config(self, **overrides):
        values = dict(backlog_size=50, p50_cycle_time=3.94, p95_cycle_time=34.06, wip_limit=7)
        values.update(overrides)
        return CycleTimeConfig(**values)

    def test_realistic_backlog(self):
        sim = SimulationConfig(trials=1000, start_date=START, seed=11)
        result = CycleTimeForecaster(self._config()).forecast(sim)
        p50 = result.interval_for(0.5).days_from_start
        p95 = result.interval_for(0.95).days_from_start
        assert result.trials == 1000
        assert p50 > 15
        assert 50 < p50 < 300
        assert p95 > p50
        assert result.statistics.skewness > 0

    def test_whole_days(self):
        sim = SimulationConfig(trials=100, start_date=START, seed=5)
        result = CycleTimeForecaster(self._config(backlog_size=10)).forecast(sim)
        assert all(float(d).is_integer() for d in result.completion_days)
        assert result.capped_trials == 0

    @pytest.mark.parametrize("mode", ["worker-scheduling", "batch-max"])
    def test_seeded_runs_are_reproducible(self, mode):
        config = self._config(backlog_size=30, processing_mode=mode)
        sim = SimulationConfig(trials=200, start_date=START, seed=21)
        first = CycleTimeForecaster(config).forecast(sim)
        second = CycleTimeForecaster(config).forecast(sim)
        assert first.completion_days == second.completion_days

    def test_batch_max_slower_than_worker_scheduling(self):
        sim = SimulationConfig(trials=500, start_date=START, seed=11)
        scheduled = CycleTimeForecaster(self._config(backlog_size=20, wip_limit=4)).forecast(sim)
        batched = CycleTimeForecaster(
            self._config(backlog_size=20, wip_limit=4, processing_mode="batch-max")
        ).forecast(sim)
        assert batched.statistics.mean > scheduled.statistics.mean

    @pytest.mark.parametrize("mode", ["worker-scheduling", "batch-max"])
    def test_calendar_conversion(self, mode):
        """A fixed 3 working-day cycle time is 4.2 calendar days at five working days a week."""
        config = self._config(
            backlog_size=14, p50_cycle_time=3.0, p95_cycle_time=3.0, processing_mode=mode
        )
        sim = SimulationConfig(trials=10, start_date=START, seed=2)
        result = CycleTimeForecaster(config).forecast(sim)
        # two rounds of 4.2 days each
        assert np.all(np.asarray(result.completion_days) == 9)

    def test_empty_backlog(self):
        sim = SimulationConfig(trials=10, start_date=START, seed=2)
        result = CycleTimeForecaster(self._config(backlog_size=0)).forecast(sim)
        assert all(d == 0 for d in result.completion_days)

    def test_unordered_percentiles_warn(self, caplog):
        with caplog.at_level("WARNING"):
            CycleTimeForecaster(self._config(p50_cycle_time=10.0, p95_cycle_time=5.0))
        assert "not strictly increasing" in caplog.text
