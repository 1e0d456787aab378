"""
PURPOSE: Unit tests for aggregation.py.

Tests cover:
1. Confidence intervals from interpolated percentiles
2. Calendar date conversion
3. Capped trial accounting
4. Serialization to JSON-compatible dicts
"""

from datetime import date, timedelta

import pytest

from forecast_internal.monte_carlo.aggregation import add_days, aggregate, round_half_up
from forecast_internal.monte_carlo.models import SimulationConfig

START = date(2024, 1, 1)


@pytest.fixture
def sim():
    return SimulationConfig(trials=100, start_date=START)


class TestAggregate:
    def test_confidence_intervals(self, sim):
        result = aggregate(list(range(1, 101)), sim)
        days = {ci.level: ci.days_from_start for ci in result.confidence_intervals}
        assert days == {0.5: 51, 0.8: 80, 0.95: 95}
        assert result.interval_for(0.5).completion_date == START + timedelta(days=51)

    def test_intervals_non_decreasing(self, sim):
        result = aggregate([30, 10, 20, 60, 40, 50, 90, 70, 80], sim)
        days = [ci.days_from_start for ci in result.confidence_intervals]
        assert days == sorted(days)

    def test_trial_order_preserved(self, sim):
        result = aggregate([3, 1, 2], sim)
        assert result.completion_days == (3.0, 1.0, 2.0)
        assert result.completion_dates[0] == START + timedelta(days=3)

    def test_custom_levels(self):
        sim = SimulationConfig(trials=4, start_date=START, confidence_levels=[0.9, 0.25])
        result = aggregate([10, 20, 30, 40], sim)
        assert [ci.level for ci in result.confidence_intervals] == [0.25, 0.9]
        assert result.interval_for(0.5) is None

    def test_capped_count(self, sim):
        result = aggregate([728, 728, 10], sim, capped=[True, True, False])
        assert result.capped_trials == 2
        assert result.capped_ratio == pytest.approx(2 / 3)

    def test_empty_raises(self, sim):
        with pytest.raises(ValueError):
            aggregate([], sim)

    def test_to_dict(self, sim):
        data = aggregate([5, 6, 7], sim).to_dict()
        assert data["trials"] == 3
        assert data["start_date"] == "2024-01-01"
        assert data["confidence_intervals"][0]["completion_date"] == "2024-01-07"
        assert data["risk_analysis"] is None


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4) == 2
    assert round_half_up(0.0) == 0


def test_add_days_fractional():
    assert add_days(START, 1.5) == START + timedelta(days=1)
