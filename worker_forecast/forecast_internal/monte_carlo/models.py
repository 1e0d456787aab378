"""
Input models for the forecasting engine.

Field-level problems (negative backlog, probabilities outside [0, 1],
confidence levels outside (0, 1)) are rejected when the model is built.
Cross-field choices such as which throughput source to use are left to the
forecasters.
"""
from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from .config import (
    DEFAULT_CONFIDENCE_LEVELS,
    DEFAULT_PROCESSING_MODE,
    DEFAULT_WIP_LIMIT,
    DEFAULT_WORKING_DAYS_PER_WEEK,
    NUM_TRIALS,
)

ProcessingMode = Literal["worker-scheduling", "batch-max"]


class RiskFactor(BaseModel):
    name: str
    probability: float = Field(ge=0.0, le=1.0)
    impact_days: float = Field(ge=0.0)


class PertEstimate(BaseModel):
    """Three-point estimate for an external dependency delay, in calendar days."""

    optimistic: float = Field(ge=0.0)
    most_likely: float = Field(ge=0.0)
    pessimistic: float = Field(ge=0.0)

    @model_validator(mode="after")
    def _check_order(self):
        if not (self.optimistic <= self.most_likely <= self.pessimistic):
            raise ValueError(
                f"PERT estimate must satisfy optimistic <= most_likely <= pessimistic, "
                f"got {self.optimistic}, {self.most_likely}, {self.pessimistic}"
            )
        return self


class ThroughputConfig(BaseModel):
    backlog_size: int = Field(ge=0)
    historical_throughput: list[float] | None = None  # most recent period first
    average_throughput: float | None = Field(default=None, gt=0.0)
    throughput_variability: float | None = Field(default=None, ge=0.0)
    weekly_capacity: float | None = Field(default=None, gt=0.0)

    @field_validator("historical_throughput")
    @classmethod
    def _check_history(cls, value):
        if value is None:
            return value
        if len(value) == 0:
            raise ValueError("historical_throughput must not be empty")
        if any(x < 0 for x in value):
            raise ValueError("historical_throughput values must be non-negative")
        if sum(value) <= 0:
            raise ValueError("historical_throughput must contain at least one positive value")
        return value

    @property
    def uses_history(self) -> bool:
        return bool(self.historical_throughput)


class CycleTimeConfig(BaseModel):
    backlog_size: int = Field(ge=0)
    p50_cycle_time: float = Field(gt=0.0)
    p80_cycle_time: float | None = Field(default=None, gt=0.0)
    p85_cycle_time: float | None = Field(default=None, gt=0.0)
    p95_cycle_time: float = Field(gt=0.0)
    working_days_per_week: float = Field(default=DEFAULT_WORKING_DAYS_PER_WEEK, gt=0.0, le=7.0)
    processing_mode: ProcessingMode = DEFAULT_PROCESSING_MODE
    wip_limit: int = Field(default=DEFAULT_WIP_LIMIT, ge=1)

    @property
    def percentiles_ordered(self) -> bool:
        """True when p50 < p80/p85 (if given) < p95."""
        chain = [self.p50_cycle_time]
        chain += [p for p in (self.p80_cycle_time, self.p85_cycle_time) if p is not None]
        chain.append(self.p95_cycle_time)
        return all(a < b for a, b in zip(chain, chain[1:]))


class SimulationConfig(BaseModel):
    trials: int = Field(default=NUM_TRIALS, ge=1)
    start_date: date
    confidence_levels: list[float] = Field(default_factory=lambda: list(DEFAULT_CONFIDENCE_LEVELS))
    risk_factors: list[RiskFactor] = Field(default_factory=list)
    # Opt-in: adds one PERT-distributed delay per trial when dependency_delay is also set.
    include_dependencies: bool = False
    dependency_delay: PertEstimate | None = None
    seed: int | None = None

    @field_validator("confidence_levels")
    @classmethod
    def _check_levels(cls, value):
        if not value:
            raise ValueError("at least one confidence level is required")
        for level in value:
            if not 0.0 < level < 1.0:
                raise ValueError(f"confidence levels must be in (0, 1), got {level}")
        return sorted(set(value))
