"""
PURPOSE: Public forecasting API consumed by UI and export collaborators.

RESPONSIBILITIES:
- forecast_by_throughput / forecast_by_cycle_time: run a forecaster and return a ForecastResult
- calculate_completion_probability: chance of finishing by a target date
- calculate_target_requirements: latest start dates that hit a target date at
  50/80/95% confidence
- No I/O, no formatting beyond plain result objects
"""

import logging
import math
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import numpy as np

from .aggregation import ForecastResult
from .cycle_time import CycleTimeForecaster
from .distributions import RandomVariateGenerator
from .errors import ForecastConfigurationError
from .models import CycleTimeConfig, SimulationConfig, ThroughputConfig
from .summary_statistics import percentile_interpolated
from .throughput import ThroughputForecaster

logger = logging.getLogger(__name__)

# (level, label, description, schedule risk of starting this late)
START_DATE_OPTIONS = [
    (0.50, "50%", "Optimistic start date", "High"),
    (0.80, "80%", "Balanced start date", "Medium"),
    (0.95, "95%", "Conservative start date", "Low"),
]


def forecast_by_throughput(
    config: ThroughputConfig,
    sim: SimulationConfig,
    generator: Optional[RandomVariateGenerator] = None,
) -> ForecastResult:
    """Throughput-based forecast from historical data or average/variability."""
    return ThroughputForecaster(config).forecast(sim, generator)


def forecast_by_cycle_time(
    config: CycleTimeConfig,
    sim: SimulationConfig,
    generator: Optional[RandomVariateGenerator] = None,
) -> ForecastResult:
    """Cycle-time-based forecast from P50/P80/P85/P95 percentiles."""
    return CycleTimeForecaster(config).forecast(sim, generator)


def _run_forecast(
    sim: SimulationConfig,
    throughput_config: Optional[ThroughputConfig],
    cycle_time_config: Optional[CycleTimeConfig],
    generator: Optional[RandomVariateGenerator],
) -> ForecastResult:
    if throughput_config is not None:
        return forecast_by_throughput(throughput_config, sim, generator)
    if cycle_time_config is not None:
        return forecast_by_cycle_time(cycle_time_config, sim, generator)
    raise ForecastConfigurationError("No configuration provided")


@dataclass(frozen=True)
class CompletionProbability:
    """Share of trials that finish on or before a target date."""
    target_date: date
    target_days: int
    successful_completions: int
    total_simulations: int
    probability_percentage: int
    forecast: ForecastResult

    @property
    def probability(self) -> float:
        return self.successful_completions / self.total_simulations

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_date": self.target_date.isoformat(),
            "target_days": self.target_days,
            "successful_completions": self.successful_completions,
            "total_simulations": self.total_simulations,
            "probability_percentage": self.probability_percentage,
        }


@dataclass(frozen=True)
class StartDateOption:
    confidence: str
    days: int
    start_date: date
    description: str
    risk_level: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "confidence": self.confidence,
            "days": self.days,
            "start_date": self.start_date.isoformat(),
            "description": self.description,
            "risk_level": self.risk_level,
        }


@dataclass(frozen=True)
class TargetRequirements:
    """Latest start dates that reach target_date at each confidence level."""
    target_date: date
    start_date_options: List[StartDateOption]
    project_duration: Dict[str, int]
    forecast: ForecastResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_date": self.target_date.isoformat(),
            "start_date_options": [option.to_dict() for option in self.start_date_options],
            "project_duration": dict(self.project_duration),
        }


def calculate_completion_probability(
    sim: SimulationConfig,
    target_date: date,
    throughput_config: Optional[ThroughputConfig] = None,
    cycle_time_config: Optional[CycleTimeConfig] = None,
    generator: Optional[RandomVariateGenerator] = None,
) -> CompletionProbability:
    """
    Run the forecast and count trials finishing by target_date.

    Raises:
        ForecastConfigurationError: If neither configuration is given
    """
    result = _run_forecast(sim, throughput_config, cycle_time_config, generator)
    target_days = (target_date - sim.start_date).days
    days = np.ceil(np.asarray(result.completion_days, dtype=float))
    successful = int(np.sum(days <= target_days))
    total = days.size

    logger.info("Completion probability by %s: %s/%s trials", target_date.isoformat(), successful, total)
    return CompletionProbability(
        target_date=target_date,
        target_days=target_days,
        successful_completions=successful,
        total_simulations=total,
        probability_percentage=int(math.floor(successful / total * 100 + 0.5)),
        forecast=result,
    )


def calculate_target_requirements(
    sim: SimulationConfig,
    target_date: date,
    throughput_config: Optional[ThroughputConfig] = None,
    cycle_time_config: Optional[CycleTimeConfig] = None,
    generator: Optional[RandomVariateGenerator] = None,
) -> TargetRequirements:
    """
    Work back from target_date to the start dates needed at 50/80/95% confidence.

    Raises:
        ForecastConfigurationError: If neither configuration is given
    """
    result = _run_forecast(sim, throughput_config, cycle_time_config, generator)
    sorted_days = np.sort(np.asarray(result.completion_days, dtype=float))

    options = []
    durations = {}
    for level, label, description, risk_level in START_DATE_OPTIONS:
        days = int(math.ceil(percentile_interpolated(sorted_days, level)))
        durations[f"p{int(level * 100)}"] = days
        options.append(
            StartDateOption(
                confidence=label,
                days=days,
                start_date=target_date - timedelta(days=days),
                description=description,
                risk_level=risk_level,
            )
        )

    return TargetRequirements(
        target_date=target_date,
        start_date_options=options,
        project_duration=durations,
        forecast=result,
    )
