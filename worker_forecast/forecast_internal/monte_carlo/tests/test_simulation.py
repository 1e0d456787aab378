"""
PURPOSE: Tests for the legacy week-granular simulation.

Tests verify:
- Zero variability gives ceil(backlog / mean) weeks in every trial
- Results are whole weeks expressed in days
- P50 <= P80 <= P95
- Missing model inputs are rejected before any trial runs
"""

import unittest
from datetime import date, timedelta

from pydantic import ValidationError

from forecast_internal.monte_carlo.errors import ForecastConfigurationError
from forecast_internal.monte_carlo.simulation import (
    LegacySimulation,
    SimulationInput,
    run_monte_carlo_simulation,
)

START = date(2024, 1, 1)


class TestLegacySimulation(unittest.TestCase):
    """Test suite for the legacy simulation entry point."""

    def test_deterministic_throughput(self):
        sim_input = SimulationInput(backlog_size=100, trials=50, start_date=START, mean_throughput=10.0)
        result = run_monte_carlo_simulation(sim_input)
        expected = (START + timedelta(days=70)).strftime("%Y-%m-%d")
        self.assertEqual(result.p50_date, expected)
        self.assertEqual(result.p95_date, expected)
        self.assertEqual(result.statistics.mean, 70.0)
        self.assertEqual(result.statistics.range, 0.0)
        self.assertEqual(len(result.completion_days), 50)

    def test_deterministic_rounds_weeks_up(self):
        sim_input = SimulationInput(
            backlog_size=25, trials=5, start_date=START, mean_throughput=10.0, variability_cv=0
        )
        result = run_monte_carlo_simulation(sim_input)
        self.assertTrue(all(d == 21 for d in result.completion_days))

    def test_stochastic_throughput(self):
        sim_input = SimulationInput(
            backlog_size=100, trials=500, start_date=START, mean_throughput=10.0, variability_cv=30, seed=1
        )
        result = run_monte_carlo_simulation(sim_input)
        self.assertTrue(all(d % 7 == 0 for d in result.completion_days))
        self.assertLessEqual(result.p50_date, result.p80_date)
        self.assertLessEqual(result.p80_date, result.p95_date)
        self.assertGreater(result.statistics.std_dev, 0)

    def test_cycle_time_model(self):
        sim_input = SimulationInput(
            backlog_size=20,
            trials=200,
            start_date=START,
            use_cycle_time=True,
            p50_cycle_time=2.0,
            p95_cycle_time=6.0,
            seed=3,
        )
        result = run_monte_carlo_simulation(sim_input)
        self.assertEqual(len(result.completion_days), 200)
        self.assertTrue(all(d > 0 and d % 7 == 0 for d in result.completion_days))

    def test_seeded_runs_are_reproducible(self):
        sim_input = SimulationInput(
            backlog_size=40, trials=100, start_date=START, mean_throughput=5.0, variability_cv=40, seed=9
        )
        first = run_monte_carlo_simulation(sim_input)
        second = run_monte_carlo_simulation(sim_input)
        self.assertEqual(first.completion_days, second.completion_days)

    def test_week_cap(self):
        sim_input = SimulationInput(
            backlog_size=1000, trials=3, start_date=START, mean_throughput=1.0, variability_cv=10, seed=2
        )
        result = LegacySimulation(max_weeks=4).run(sim_input)
        self.assertEqual(result.capped_trials, 3)
        self.assertTrue(all(d == 28 for d in result.completion_days))

    def test_finishing_in_last_allowed_week_is_not_capped(self):
        sim_input = SimulationInput(backlog_size=40, trials=3, start_date=START, mean_throughput=10.0)
        result = LegacySimulation(max_weeks=4).run(sim_input)
        self.assertEqual(result.completion_days, [28.0, 28.0, 28.0])
        self.assertEqual(result.capped_trials, 0)

    def test_deterministic_run_is_bounded_by_week_cap(self):
        sim_input = SimulationInput(backlog_size=1000, trials=3, start_date=START, mean_throughput=1.0)
        result = run_monte_carlo_simulation(sim_input)
        self.assertEqual(result.completion_days, [728.0, 728.0, 728.0])
        self.assertEqual(result.capped_trials, 3)

    def test_sampled_trial_finishing_at_cap_is_not_capped(self):
        # 7 / 1 items per week reaches a backlog of 28 in exactly four weeks
        sim_input = SimulationInput(
            backlog_size=28,
            trials=5,
            start_date=START,
            use_cycle_time=True,
            p50_cycle_time=1.0,
            p95_cycle_time=1.0,
            seed=4,
        )
        result = LegacySimulation(max_weeks=4).run(sim_input)
        self.assertTrue(all(d == 28 for d in result.completion_days))
        self.assertEqual(result.capped_trials, 0)

    def test_missing_mean_throughput(self):
        sim_input = SimulationInput(backlog_size=10, trials=10, start_date=START)
        with self.assertRaises(ForecastConfigurationError) as ctx:
            run_monte_carlo_simulation(sim_input)
        self.assertIn("Mean throughput is required", str(ctx.exception))

    def test_missing_cycle_times(self):
        sim_input = SimulationInput(
            backlog_size=10, trials=10, start_date=START, use_cycle_time=True, p50_cycle_time=2.0
        )
        with self.assertRaises(ForecastConfigurationError) as ctx:
            run_monte_carlo_simulation(sim_input)
        self.assertIn("P50 and P95 cycle times are required", str(ctx.exception))

    def test_backlog_must_be_positive(self):
        with self.assertRaises(ValidationError):
            SimulationInput(backlog_size=0, trials=10, start_date=START, mean_throughput=1.0)


if __name__ == "__main__":
    unittest.main()
