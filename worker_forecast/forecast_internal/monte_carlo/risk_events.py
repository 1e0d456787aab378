"""
Risk event sampling for forecast trials.

PURPOSE:
    Model discrete risk factors as independent Bernoulli trials. A risk factor
    occurs with its probability and, when it occurs, adds its impact days to
    the trial's completion time.

RESPONSIBILITIES:
    - Sample one Bernoulli occurrence per risk factor per trial
    - Track how often each factor fired across a forecast
    - Summarize the observed delay into a RiskAnalysis
    - NO trial simulation, NO percentile calculation
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np

from .distributions import RandomVariateGenerator
from .models import RiskFactor


@dataclass(frozen=True)
class RiskAnalysis:
    """Observed effect of risk factors across all trials of a forecast.

    Attributes:
        probability_of_delay (float): Share of trials where at least one factor fired.
        expected_delay_days (float): Mean risk delay per trial.
        risk_factor_impacts (dict): Factor name -> mean delay it contributed per trial.
        trigger_rates (dict): Factor name -> share of trials where it fired.
    """
    probability_of_delay: float
    expected_delay_days: float
    risk_factor_impacts: Dict[str, float]
    trigger_rates: Dict[str, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "probability_of_delay": round(self.probability_of_delay, 4),
            "expected_delay_days": round(self.expected_delay_days, 2),
            "risk_factor_impacts": {k: round(v, 2) for k, v in self.risk_factor_impacts.items()},
            "trigger_rates": {k: round(v, 4) for k, v in self.trigger_rates.items()},
        }


def sample_occurrence(probability: float, generator: RandomVariateGenerator) -> bool:
    """
    Bernoulli trial: does the event occur?

    Raises:
        ValueError: If probability not in [0, 1]
    """
    if not 0 <= probability <= 1:
        raise ValueError(f"probability must be in [0, 1], got {probability}")
    return generator.uniform() < probability


@dataclass
class RiskLedger:
    """Accumulates risk-factor outcomes trial by trial."""

    risk_factors: Sequence[RiskFactor]
    trials: int = 0
    delayed_trials: int = 0
    total_delay: float = 0.0
    trigger_counts: Dict[str, int] = field(default_factory=dict)
    impact_totals: Dict[str, float] = field(default_factory=dict)

    def sample_trial(self, generator: RandomVariateGenerator) -> float:
        """Apply every risk factor once and return the trial's added days."""
        delay = 0.0
        fired = False
        for risk in self.risk_factors:
            if not sample_occurrence(risk.probability, generator):
                continue
            fired = True
            self.trigger_counts[risk.name] = self.trigger_counts.get(risk.name, 0) + 1
            self.impact_totals[risk.name] = self.impact_totals.get(risk.name, 0.0) + risk.impact_days
            delay += risk.impact_days
        self.trials += 1
        if fired:
            self.delayed_trials += 1
        self.total_delay += delay
        return delay

    def summarize(self) -> RiskAnalysis | None:
        if not self.risk_factors or self.trials == 0:
            return None
        names = [risk.name for risk in self.risk_factors]
        return RiskAnalysis(
            probability_of_delay=self.delayed_trials / self.trials,
            expected_delay_days=self.total_delay / self.trials,
            risk_factor_impacts={name: self.impact_totals.get(name, 0.0) / self.trials for name in names},
            trigger_rates={name: self.trigger_counts.get(name, 0) / self.trials for name in names},
        )


def expected_risk_delay(risk_factors: List[RiskFactor]) -> float:
    """Analytic mean delay: sum of probability * impact_days."""
    if not risk_factors:
        return 0.0
    return float(np.sum([risk.probability * risk.impact_days for risk in risk_factors]))
