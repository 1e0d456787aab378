"""
Unit tests for risk event sampling.

STRATEGY:
    1. Test pure Bernoulli: certain and impossible events
    2. Test the ledger: added days and observed rates
    3. Test edge cases and error handling
"""

import unittest

import numpy as np

from forecast_internal.monte_carlo.distributions import RandomVariateGenerator
from forecast_internal.monte_carlo.models import RiskFactor
from forecast_internal.monte_carlo.risk_events import (
    RiskLedger,
    expected_risk_delay,
    sample_occurrence,
)


class TestSampleOccurrence(unittest.TestCase):
    """Test Bernoulli occurrence."""

    def test_certain_event(self):
        generator = RandomVariateGenerator(seed=1)
        self.assertTrue(all(sample_occurrence(1.0, generator) for _ in range(200)))

    def test_impossible_event(self):
        generator = RandomVariateGenerator(seed=1)
        self.assertFalse(any(sample_occurrence(0.0, generator) for _ in range(200)))

    def test_probability_accuracy(self):
        generator = RandomVariateGenerator()
        hits = np.mean([sample_occurrence(0.3, generator) for _ in range(20000)])
        self.assertAlmostEqual(hits, 0.3, delta=0.02)

    def test_invalid_probability_raises_error(self):
        generator = RandomVariateGenerator()
        with self.assertRaises(ValueError):
            sample_occurrence(1.5, generator)
        with self.assertRaises(ValueError):
            sample_occurrence(-0.1, generator)


class TestRiskLedger(unittest.TestCase):
    """Test per-trial risk accumulation."""

    def test_certain_risk_adds_impact(self):
        ledger = RiskLedger([RiskFactor(name="vendor", probability=1.0, impact_days=5)])
        generator = RandomVariateGenerator(seed=3)
        delays = [ledger.sample_trial(generator) for _ in range(10)]
        self.assertEqual(delays, [5.0] * 10)

        summary = ledger.summarize()
        self.assertEqual(summary.probability_of_delay, 1.0)
        self.assertEqual(summary.expected_delay_days, 5.0)
        self.assertEqual(summary.trigger_rates, {"vendor": 1.0})
        self.assertEqual(summary.risk_factor_impacts, {"vendor": 5.0})

    def test_never_firing_risk(self):
        ledger = RiskLedger([RiskFactor(name="audit", probability=0.0, impact_days=10)])
        generator = RandomVariateGenerator(seed=3)
        for _ in range(5):
            ledger.sample_trial(generator)
        summary = ledger.summarize()
        self.assertEqual(summary.probability_of_delay, 0.0)
        self.assertEqual(summary.trigger_rates["audit"], 0.0)

    def test_no_factors(self):
        ledger = RiskLedger([])
        self.assertEqual(ledger.sample_trial(RandomVariateGenerator()), 0.0)
        self.assertIsNone(ledger.summarize())

    def test_expected_risk_delay(self):
        factors = [
            RiskFactor(name="a", probability=0.5, impact_days=10),
            RiskFactor(name="b", probability=0.2, impact_days=5),
        ]
        self.assertAlmostEqual(expected_risk_delay(factors), 6.0)
        self.assertEqual(expected_risk_delay([]), 0.0)


if __name__ == "__main__":
    unittest.main()
