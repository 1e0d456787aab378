"""
Unit tests for dependency delay and team capacity helpers.
"""

from datetime import date

import pytest

from forecast_internal.monte_carlo.dependencies import (
    DependencyDelay,
    model_dependencies,
    model_team_capacity,
    pert_moments,
)
from forecast_internal.monte_carlo.distributions import RandomVariateGenerator
from forecast_internal.monte_carlo.models import PertEstimate, SimulationConfig


def test_pert_moments():
    mean, std_dev = pert_moments(2.0, 4.0, 12.0)
    assert mean == pytest.approx(5.0)
    assert std_dev == pytest.approx(10.0 / 6.0)


def test_model_dependencies_mean():
    generator = RandomVariateGenerator()
    draws = [model_dependencies(2.0, 4.0, 12.0, generator) for _ in range(20000)]
    assert sum(draws) / len(draws) == pytest.approx(5.0, abs=0.1)


class TestTeamCapacity:
    def test_nominal_team(self):
        capacity = model_team_capacity(10.0, 0, 1, RandomVariateGenerator(seed=1), burnout_factor=0.0)
        assert capacity == pytest.approx(10.0)

    def test_communication_overhead_floor(self):
        capacity = model_team_capacity(10.0, 0, 11, RandomVariateGenerator(seed=1), burnout_factor=0.0)
        assert capacity == pytest.approx(7.0)

    def test_learning_curve_increases_capacity(self):
        capacity = model_team_capacity(10.0, 12, 1, RandomVariateGenerator(seed=1), burnout_factor=0.0)
        assert capacity > 10.0

    def test_burnout_never_below_seventy_percent(self):
        generator = RandomVariateGenerator()
        draws = [model_team_capacity(10.0, 0, 1, generator, burnout_factor=1.0) for _ in range(500)]
        assert min(draws) >= 7.0
        assert max(draws) <= 10.0

    def test_invalid_inputs(self):
        with pytest.raises(ValueError):
            model_team_capacity(10.0, -1, 1, RandomVariateGenerator())
        with pytest.raises(ValueError):
            model_team_capacity(10.0, 0, 0, RandomVariateGenerator())


class TestDependencyDelay:
    start = date(2024, 1, 1)

    def test_inactive_by_default(self):
        sim = SimulationConfig(trials=1, start_date=self.start)
        delay = DependencyDelay.from_simulation(sim)
        assert not delay.active
        assert delay.sample(RandomVariateGenerator()) == 0.0

    def test_flag_without_estimate_is_ignored(self):
        sim = SimulationConfig(trials=1, start_date=self.start, include_dependencies=True)
        assert not DependencyDelay.from_simulation(sim).active

    def test_estimate_without_flag_is_ignored(self):
        sim = SimulationConfig(
            trials=1,
            start_date=self.start,
            dependency_delay=PertEstimate(optimistic=3, most_likely=3, pessimistic=3),
        )
        assert not DependencyDelay.from_simulation(sim).active

    def test_fixed_estimate(self):
        sim = SimulationConfig(
            trials=1,
            start_date=self.start,
            include_dependencies=True,
            dependency_delay=PertEstimate(optimistic=3, most_likely=3, pessimistic=3),
        )
        delay = DependencyDelay.from_simulation(sim)
        assert delay.active
        assert delay.sample(RandomVariateGenerator(seed=4)) == pytest.approx(3.0)

    def test_delay_never_negative(self):
        sim = SimulationConfig(
            trials=1,
            start_date=self.start,
            include_dependencies=True,
            dependency_delay=PertEstimate(optimistic=0, most_likely=0, pessimistic=30),
        )
        delay = DependencyDelay.from_simulation(sim)
        generator = RandomVariateGenerator()
        assert all(delay.sample(generator) >= 0.0 for _ in range(500))
