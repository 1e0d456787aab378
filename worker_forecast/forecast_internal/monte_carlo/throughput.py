"""
PURPOSE: Throughput-based Monte Carlo forecaster.

Each trial burns the backlog down one simulated week at a time, spreading the
week's sampled throughput evenly over its days, and records the day the
backlog empties.

SINGLE RESPONSIBILITY:
- Sample weekly throughput (bootstrap + jitter, or lognormal)
- Run N independent burn-down trials
- Hand raw trial outcomes to the aggregator (no formatting)

CONSTRAINTS:
- Trials stop at MAX_WEEKS; capped trials are recorded, never looped forever
- Does NOT modify the input config; reads only
"""

import logging
import math
import time
from typing import Optional

import numpy as np

from .aggregation import ForecastResult, TrialBatch, aggregate
from .config import (
    COMPLETION_TOLERANCE,
    DAYS_PER_WEEK,
    HISTORICAL_JITTER_STD,
    MAX_WEEKS,
    MIN_JITTER_FACTOR,
    MIN_WEEKLY_THROUGHPUT,
)
from .dependencies import DependencyDelay
from .distributions import RandomVariateGenerator, create_generator
from .errors import ForecastConfigurationError
from .models import SimulationConfig, ThroughputConfig
from .risk_events import RiskLedger
from .trends import MIN_TREND_POINTS, analyze_throughput_trends

logger = logging.getLogger(__name__)


class ThroughputForecaster:
    """
    Week-by-week backlog burn-down simulation.

    Weekly throughput comes from one of two sources:
    - historical_throughput: bootstrap one past week, then multiply by
      max(MIN_JITTER_FACTOR, 1 + Normal(0, HISTORICAL_JITTER_STD))
    - average_throughput: Lognormal(ln(average), throughput_variability)
    The draw is clamped to weekly_capacity (if set) and floored at
    MIN_WEEKLY_THROUGHPUT.
    """

    def __init__(self, config: ThroughputConfig, max_weeks: int = MAX_WEEKS):
        if not config.uses_history and config.average_throughput is None:
            raise ForecastConfigurationError(
                "throughput forecast requires historical_throughput or average_throughput"
            )
        if max_weeks < 1:
            raise ForecastConfigurationError(f"max_weeks must be at least 1, got {max_weeks}")

        self.config = config
        self.max_weeks = max_weeks
        if config.uses_history:
            self._history = [float(x) for x in config.historical_throughput]
        else:
            self._history = None
            self._mu = math.log(config.average_throughput)
            self._sigma = config.throughput_variability or 0.0

    @property
    def cap_days(self) -> int:
        return self.max_weeks * DAYS_PER_WEEK

    def sample_weekly_throughput(self, generator: RandomVariateGenerator) -> float:
        """Draw one week's throughput, after capacity clamp and progress floor."""
        if self._history is not None:
            weekly = generator.bootstrap_sample(self._history)
            jitter = 1.0 + generator.normal(0.0, HISTORICAL_JITTER_STD)
            weekly *= max(MIN_JITTER_FACTOR, jitter)
        else:
            weekly = generator.lognormal(self._mu, self._sigma)

        if self.config.weekly_capacity is not None:
            weekly = min(weekly, self.config.weekly_capacity)
        return max(MIN_WEEKLY_THROUGHPUT, weekly)

    def _run_trial(self, generator: RandomVariateGenerator):
        """
        Burn down the backlog once.

        Returns:
            Tuple of (days_elapsed, capped_flag)
        """
        remaining = float(self.config.backlog_size)
        days_elapsed = 0
        weeks = 0

        while remaining > COMPLETION_TOLERANCE and weeks < self.max_weeks:
            daily = self.sample_weekly_throughput(generator) / DAYS_PER_WEEK
            for _ in range(DAYS_PER_WEEK):
                remaining -= min(daily, remaining)
                days_elapsed += 1
                if remaining <= COMPLETION_TOLERANCE:
                    break
            weeks += 1

        return days_elapsed, remaining > COMPLETION_TOLERANCE

    def run_trials(self, sim: SimulationConfig, generator: Optional[RandomVariateGenerator] = None) -> TrialBatch:
        """Run sim.trials independent trials and return their raw outcomes."""
        if generator is None:
            generator = create_generator(sim.seed)

        completion_days = np.zeros(sim.trials)
        capped = np.zeros(sim.trials, dtype=bool)
        ledger = RiskLedger(sim.risk_factors)
        dependency = DependencyDelay.from_simulation(sim)

        for trial_idx in range(sim.trials):
            days_elapsed, trial_capped = self._run_trial(generator)
            days_elapsed += ledger.sample_trial(generator)
            days_elapsed += dependency.sample(generator)
            completion_days[trial_idx] = days_elapsed
            capped[trial_idx] = trial_capped

        return TrialBatch(completion_days=completion_days, capped=capped, risk_analysis=ledger.summarize())

    def forecast(self, sim: SimulationConfig, generator: Optional[RandomVariateGenerator] = None) -> ForecastResult:
        started = time.perf_counter()
        source = "historical" if self._history is not None else "lognormal"
        logger.info(
            "Running throughput forecast: backlog=%s, trials=%s, source=%s",
            self.config.backlog_size,
            sim.trials,
            source,
        )

        batch = self.run_trials(sim, generator)

        trends = None
        if self._history is not None and len(self._history) >= MIN_TREND_POINTS:
            trends = analyze_throughput_trends(self._history)
            logger.debug("Throughput trend: %s (%s)", trends.trend, trends.trend_strength)

        result = aggregate(
            batch.completion_days,
            sim,
            capped=batch.capped,
            risk_analysis=batch.risk_analysis,
            throughput_trends=trends,
        )
        logger.info(
            "Throughput forecast finished in %.2fs: median=%.1f days, capped=%s",
            time.perf_counter() - started,
            result.statistics.median,
            result.capped_trials,
        )
        return result
