"""
PURPOSE: Reduce raw per-trial completion days into a ForecastResult.

This module turns the N-length completion-day array produced by a forecaster
into confidence intervals, descriptive statistics, histogram/CDF data and
calendar dates.

SRP/DRY: Single responsibility = aggregation of trial outcomes.
         No simulation, no scenario comparison.
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Optional, Sequence, Tuple

import numpy as np

from .models import SimulationConfig
from .risk_events import RiskAnalysis
from .summary_statistics import (
    DescriptiveStatistics,
    Histogram,
    SCurvePoint,
    describe,
    histogram,
    percentile_interpolated,
    s_curve,
)
from .trends import ThroughputTrendAnalysis

logger = logging.getLogger(__name__)

ForecastStatistics = DescriptiveStatistics
DistributionData = Histogram


@dataclass(frozen=True)
class ConfidenceInterval:
    level: float
    completion_date: date
    days_from_start: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "completion_date": self.completion_date.isoformat(),
            "days_from_start": self.days_from_start,
        }


@dataclass(frozen=True)
class ForecastResult:
    """Immutable outcome of one forecast.

    Attributes:
        completion_days (tuple): Completion day count per trial, in trial order.
        completion_dates (tuple): start_date + completion_days, one per trial.
        confidence_intervals (tuple): One ConfidenceInterval per requested level, ascending.
        statistics (ForecastStatistics): Moments and extremes of completion_days.
        distribution_data (DistributionData): Histogram bins, frequencies, CDF.
        s_curve (tuple): Cumulative probability at each distinct completion day.
        capped_trials (int): Trials that hit the simulation safety cap.
        risk_analysis (RiskAnalysis): Observed risk factor effect, if any factors were given.
        throughput_trends (ThroughputTrendAnalysis): Historical trend, throughput forecasts only.
    """
    start_date: date
    completion_days: Tuple[float, ...]
    completion_dates: Tuple[date, ...]
    confidence_intervals: Tuple[ConfidenceInterval, ...]
    statistics: ForecastStatistics
    distribution_data: DistributionData
    s_curve: Tuple[SCurvePoint, ...]
    capped_trials: int = 0
    risk_analysis: Optional[RiskAnalysis] = None
    throughput_trends: Optional[ThroughputTrendAnalysis] = None

    @property
    def trials(self) -> int:
        return len(self.completion_days)

    @property
    def capped_ratio(self) -> float:
        return self.capped_trials / self.trials if self.trials else 0.0

    def interval_for(self, level: float) -> Optional[ConfidenceInterval]:
        for interval in self.confidence_intervals:
            if np.isclose(interval.level, level):
                return interval
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert results to dictionary for JSON serialization."""
        return {
            "start_date": self.start_date.isoformat(),
            "trials": self.trials,
            "completion_days": list(self.completion_days),
            "completion_dates": [d.isoformat() for d in self.completion_dates],
            "confidence_intervals": [ci.to_dict() for ci in self.confidence_intervals],
            "statistics": self.statistics.to_dict(),
            "distribution_data": self.distribution_data.to_dict(),
            "s_curve": [point.to_dict() for point in self.s_curve],
            "capped_trials": self.capped_trials,
            "risk_analysis": self.risk_analysis.to_dict() if self.risk_analysis else None,
            "throughput_trends": self.throughput_trends.to_dict() if self.throughput_trends else None,
        }


@dataclass(frozen=True)
class TrialBatch:
    """Raw per-trial outcomes of one forecaster run, in trial order."""
    completion_days: np.ndarray
    capped: np.ndarray
    risk_analysis: Optional[RiskAnalysis] = None

    @property
    def capped_trials(self) -> int:
        return int(np.sum(self.capped))


def add_days(start: date, days: float) -> date:
    return start + timedelta(days=float(days))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def aggregate(
    completion_days: Sequence[float],
    sim: SimulationConfig,
    capped: Optional[Sequence[bool]] = None,
    risk_analysis: Optional[RiskAnalysis] = None,
    throughput_trends: Optional[ThroughputTrendAnalysis] = None,
) -> ForecastResult:
    """
    Build a ForecastResult from raw trial outcomes.

    Args:
        completion_days: One completion day count per trial
        sim: Simulation config (start date, confidence levels)
        capped: Optional per-trial flags marking trials that hit the safety cap

    Raises:
        ValueError: If completion_days is empty
    """
    days = np.asarray(completion_days, dtype=float)
    if days.size == 0:
        raise ValueError("completion_days must contain at least one trial")

    sorted_days = np.sort(days)
    statistics = describe(days)

    intervals = []
    for level in sim.confidence_levels:
        days_from_start = round_half_up(percentile_interpolated(sorted_days, level))
        intervals.append(
            ConfidenceInterval(
                level=level,
                completion_date=add_days(sim.start_date, days_from_start),
                days_from_start=days_from_start,
            )
        )

    capped_trials = int(np.sum(capped)) if capped is not None else 0
    if capped_trials:
        logger.warning(
            "%s of %s trials hit the simulation safety cap; the forecast is likely misconfigured",
            capped_trials,
            days.size,
        )

    return ForecastResult(
        start_date=sim.start_date,
        completion_days=tuple(float(d) for d in days),
        completion_dates=tuple(add_days(sim.start_date, d) for d in days),
        confidence_intervals=tuple(intervals),
        statistics=statistics,
        distribution_data=histogram(days),
        s_curve=tuple(s_curve(days)),
        capped_trials=capped_trials,
        risk_analysis=risk_analysis,
        throughput_trends=throughput_trends,
    )
