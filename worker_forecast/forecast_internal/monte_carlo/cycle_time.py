"""
PURPOSE: Cycle-time-based Monte Carlo forecaster.

Fits a lognormal distribution to the supplied cycle-time percentiles, then
simulates delivery of every backlog item under one of two processing modes:

- worker-scheduling: wip_limit workers, each item goes to whichever worker is
  free soonest; the trial ends when the last worker finishes.
- batch-max: items are processed in consecutive batches of wip_limit and each
  batch lasts as long as its slowest item.

Cycle times are in working days and converted to calendar days with
working_days_per_week.
"""

import heapq
import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy.stats import norm

from .aggregation import ForecastResult, TrialBatch, aggregate
from .config import DAYS_PER_WEEK
from .dependencies import DependencyDelay
from .distributions import RandomVariateGenerator, create_generator
from .models import CycleTimeConfig, SimulationConfig
from .risk_events import RiskLedger

logger = logging.getLogger(__name__)

Z_SCORES = {
    0.50: 0.0,
    0.80: float(norm.ppf(0.80)),
    0.85: float(norm.ppf(0.85)),
    0.95: float(norm.ppf(0.95)),
}


@dataclass(frozen=True)
class LognormalParams:
    mu: float
    sigma: float

    def percentile(self, p: float) -> float:
        """Analytic p-th percentile of the fitted distribution."""
        return math.exp(self.mu + self.sigma * float(norm.ppf(p)))


def fit_lognormal(p50: float, p95: float, p80: Optional[float] = None, p85: Optional[float] = None) -> LognormalParams:
    """
    Least-squares fit of ln(value) against standard-normal z-scores.

    sigma = sum((z - z_mean)(y - y_mean)) / sum((z - z_mean)^2)
    mu = y_mean - sigma * z_mean

    With only P50 and P95 this is the two-point slope. A zero denominator
    falls back to the two-point formula. A negative slope (inconsistent
    ordering) is returned as |sigma|.
    """
    points = [(Z_SCORES[0.50], p50)]
    if p80 is not None and p80 > 0:
        points.append((Z_SCORES[0.80], p80))
    if p85 is not None and p85 > 0:
        points.append((Z_SCORES[0.85], p85))
    points.append((Z_SCORES[0.95], p95))

    zs = np.array([z for z, _ in points])
    ys = np.log(np.array([value for _, value in points], dtype=float))
    z_mean = zs.mean()
    y_mean = ys.mean()

    denominator = float(np.sum((zs - z_mean) ** 2))
    if denominator == 0:
        sigma = (math.log(p95) - math.log(p50)) / (Z_SCORES[0.95] - Z_SCORES[0.50])
    else:
        sigma = float(np.sum((zs - z_mean) * (ys - y_mean))) / denominator

    mu = float(y_mean - sigma * z_mean)
    return LognormalParams(mu=mu, sigma=abs(sigma))


class CycleTimeForecaster:
    """Per-item cycle-time simulation under worker scheduling or batch processing."""

    def __init__(self, config: CycleTimeConfig):
        self.config = config
        if not config.percentiles_ordered:
            logger.warning(
                "Cycle time percentiles are not strictly increasing (p50=%s, p80=%s, p85=%s, p95=%s); "
                "the fitted sigma is taken as absolute value",
                config.p50_cycle_time,
                config.p80_cycle_time,
                config.p85_cycle_time,
                config.p95_cycle_time,
            )
        self.params = fit_lognormal(
            config.p50_cycle_time,
            config.p95_cycle_time,
            p80=config.p80_cycle_time,
            p85=config.p85_cycle_time,
        )
        self._calendar_factor = DAYS_PER_WEEK / config.working_days_per_week
        logger.debug("Fitted cycle time lognormal: mu=%.4f, sigma=%.4f", self.params.mu, self.params.sigma)

    def sample_cycle_time(self, generator: RandomVariateGenerator) -> float:
        """One item's cycle time in calendar days."""
        return generator.lognormal(self.params.mu, self.params.sigma) * self._calendar_factor

    def _worker_scheduling_duration(self, generator: RandomVariateGenerator) -> float:
        workers = [0.0] * self.config.wip_limit
        for _ in range(self.config.backlog_size):
            available_at = heapq.heappop(workers)
            heapq.heappush(workers, max(available_at, 0.0) + self.sample_cycle_time(generator))
        return max(workers)

    def _batch_max_duration(self, generator: RandomVariateGenerator) -> float:
        total = 0.0
        remaining = self.config.backlog_size
        while remaining > 0:
            batch_size = min(self.config.wip_limit, remaining)
            total += max(self.sample_cycle_time(generator) for _ in range(batch_size))
            remaining -= batch_size
        return total

    def _run_trial(self, generator: RandomVariateGenerator) -> float:
        if self.config.processing_mode == "batch-max":
            return self._batch_max_duration(generator)
        return self._worker_scheduling_duration(generator)

    def run_trials(self, sim: SimulationConfig, generator: Optional[RandomVariateGenerator] = None) -> TrialBatch:
        """Run sim.trials independent trials; each total is rounded up to whole days."""
        if generator is None:
            generator = create_generator(sim.seed)

        completion_days = np.zeros(sim.trials)
        ledger = RiskLedger(sim.risk_factors)
        dependency = DependencyDelay.from_simulation(sim)

        for trial_idx in range(sim.trials):
            total = self._run_trial(generator)
            total += ledger.sample_trial(generator)
            total += dependency.sample(generator)
            completion_days[trial_idx] = math.ceil(total)

        return TrialBatch(
            completion_days=completion_days,
            capped=np.zeros(sim.trials, dtype=bool),
            risk_analysis=ledger.summarize(),
        )

    def forecast(self, sim: SimulationConfig, generator: Optional[RandomVariateGenerator] = None) -> ForecastResult:
        started = time.perf_counter()
        logger.info(
            "Running cycle time forecast: backlog=%s, trials=%s, mode=%s, wip_limit=%s",
            self.config.backlog_size,
            sim.trials,
            self.config.processing_mode,
            self.config.wip_limit,
        )
        batch = self.run_trials(sim, generator)
        result = aggregate(batch.completion_days, sim, capped=batch.capped, risk_analysis=batch.risk_analysis)
        logger.info(
            "Cycle time forecast finished in %.2fs: median=%.1f days",
            time.perf_counter() - started,
            result.statistics.median,
        )
        return result
