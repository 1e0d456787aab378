"""
PURPOSE: Legacy-shaped Monte Carlo simulation combining both models behind one flag.

Runs week-granular trials for either the throughput model or the cycle-time
model and reports P50/P80/P95 completion dates as YYYY-MM-DD strings.

SINGLE RESPONSIBILITY:
- Execute N independent week-granular trials
- Compute nearest-rank percentiles and rounded summary statistics
- Return a SimulationResult (no I/O, no formatting beyond date strings)

CONSTRAINTS:
- Every trial stops at MAX_WEEKS
- Validation errors are raised before the trial loop starts
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
from pydantic import BaseModel, Field

from .config import DAYS_PER_WEEK, LEGACY_PERCENTILES, MAX_WEEKS
from .cycle_time import fit_lognormal
from .distributions import RandomVariateGenerator, compute_lognormal_params, create_generator
from .errors import ForecastConfigurationError
from .summary_statistics import percentile_nearest_rank

logger = logging.getLogger(__name__)

MIN_CYCLE_TIME_DAYS = 0.0001


class SimulationInput(BaseModel):
    backlog_size: int = Field(ge=1)
    trials: int = Field(ge=1)
    start_date: date
    use_cycle_time: bool = False
    # Throughput model
    mean_throughput: float | None = None
    variability_cv: float | None = None  # percent, e.g. 30 for CV = 0.3
    # Cycle time model
    p50_cycle_time: float | None = None
    p80_cycle_time: float | None = None
    p95_cycle_time: float | None = None
    seed: int | None = None


@dataclass(frozen=True)
class SimulationStatistics:
    trials: int
    mean: float
    std_dev: float
    range: float

    def to_dict(self) -> Dict[str, Any]:
        return {"trials": self.trials, "mean": self.mean, "std_dev": self.std_dev, "range": self.range}


@dataclass(frozen=True)
class SimulationResult:
    completion_days: List[float]
    p50_date: str
    p80_date: str
    p95_date: str
    statistics: SimulationStatistics
    capped_trials: int = 0
    percentile_days: Dict[float, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "completion_days": list(self.completion_days),
            "p50_date": self.p50_date,
            "p80_date": self.p80_date,
            "p95_date": self.p95_date,
            "statistics": self.statistics.to_dict(),
            "capped_trials": self.capped_trials,
        }


def format_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


class LegacySimulation:
    """
    Week-granular simulation for the simple forecast form.

    Throughput model: weekly throughput ~ Lognormal with mean mean_throughput
    and CV variability_cv / 100; CV <= 0 is deterministic
    (ceil(backlog / mean) weeks, bounded by max_weeks). Cycle-time model: each week completes
    7 / cycle_time items with cycle_time drawn from the fitted lognormal.
    """

    def __init__(self, max_weeks: int = MAX_WEEKS):
        self.max_weeks = max_weeks

    def run(self, sim_input: SimulationInput, generator: Optional[RandomVariateGenerator] = None) -> SimulationResult:
        """
        Execute the simulation.

        Raises:
            ForecastConfigurationError: If the selected model is missing required inputs
        """
        self._validate(sim_input)
        if generator is None:
            generator = create_generator(sim_input.seed)

        if sim_input.use_cycle_time:
            weeks, capped = self._run_cycle_time(sim_input, generator)
        else:
            weeks, capped = self._run_throughput(sim_input, generator)

        results = weeks * DAYS_PER_WEEK
        capped_trials = int(np.sum(capped))
        if capped_trials:
            logger.warning("%s of %s legacy trials hit the %s week cap", capped_trials, sim_input.trials, self.max_weeks)

        percentile_days = {p: int(round(percentile_nearest_rank(results, p))) for p in LEGACY_PERCENTILES}
        dates = {p: format_date(sim_input.start_date + timedelta(days=d)) for p, d in percentile_days.items()}

        return SimulationResult(
            completion_days=[float(x) for x in results],
            p50_date=dates[0.50],
            p80_date=dates[0.80],
            p95_date=dates[0.95],
            statistics=SimulationStatistics(
                trials=sim_input.trials,
                mean=round(float(np.mean(results)), 1),
                std_dev=round(float(np.std(results)), 1),
                range=float(np.max(results) - np.min(results)),
            ),
            capped_trials=capped_trials,
            percentile_days=percentile_days,
        )

    @staticmethod
    def _validate(sim_input: SimulationInput):
        if sim_input.use_cycle_time:
            if not sim_input.p50_cycle_time or not sim_input.p95_cycle_time:
                raise ForecastConfigurationError("P50 and P95 cycle times are required")
            if sim_input.p50_cycle_time <= 0 or sim_input.p95_cycle_time <= 0:
                raise ForecastConfigurationError("P50 and P95 cycle times must be positive")
        elif not sim_input.mean_throughput or sim_input.mean_throughput <= 0:
            raise ForecastConfigurationError("Mean throughput is required")

    def _run_cycle_time(self, sim_input: SimulationInput, generator: RandomVariateGenerator) -> Tuple[np.ndarray, np.ndarray]:
        """Returns per-trial (weeks, capped) arrays."""
        p80 = sim_input.p80_cycle_time if sim_input.p80_cycle_time and sim_input.p80_cycle_time > 0 else None
        params = fit_lognormal(sim_input.p50_cycle_time, sim_input.p95_cycle_time, p80=p80)

        weeks = np.zeros(sim_input.trials)
        capped = np.zeros(sim_input.trials, dtype=bool)
        for trial_idx in range(sim_input.trials):
            done = 0.0
            week = 0
            while done < sim_input.backlog_size and week < self.max_weeks:
                cycle_time = generator.lognormal(params.mu, params.sigma)
                done += DAYS_PER_WEEK / max(cycle_time, MIN_CYCLE_TIME_DAYS)
                week += 1
            weeks[trial_idx] = week
            capped[trial_idx] = done < sim_input.backlog_size
        return weeks, capped

    def _run_throughput(self, sim_input: SimulationInput, generator: RandomVariateGenerator) -> Tuple[np.ndarray, np.ndarray]:
        """Returns per-trial (weeks, capped) arrays."""
        mean = sim_input.mean_throughput
        cv_percent = sim_input.variability_cv

        if not cv_percent or cv_percent <= 0:
            # deterministic runs obey the same week cap as sampled runs
            deterministic_weeks = int(np.ceil(sim_input.backlog_size / mean))
            hit_cap = deterministic_weeks > self.max_weeks
            return (
                np.full(sim_input.trials, float(min(deterministic_weeks, self.max_weeks))),
                np.full(sim_input.trials, hit_cap, dtype=bool),
            )

        mu, sigma = compute_lognormal_params(mean, mean * cv_percent / 100.0)
        weeks = np.zeros(sim_input.trials)
        capped = np.zeros(sim_input.trials, dtype=bool)
        for trial_idx in range(sim_input.trials):
            done = 0.0
            week = 0
            while done < sim_input.backlog_size and week < self.max_weeks:
                done += generator.lognormal(mu, sigma)
                week += 1
            weeks[trial_idx] = week
            capped[trial_idx] = done < sim_input.backlog_size
        return weeks, capped


def run_monte_carlo_simulation(
    sim_input: SimulationInput,
    generator: Optional[RandomVariateGenerator] = None,
) -> SimulationResult:
    """Module-level entry point for the legacy simulation."""
    return LegacySimulation().run(sim_input, generator)
