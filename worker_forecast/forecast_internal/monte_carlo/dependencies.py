"""
PURPOSE: Dependency delay and team capacity helpers.

RESPONSIBILITIES:
- PERT three-point dependency delay, approximated by a weighted normal
- Team capacity adjusted for learning curve, team size overhead and burnout
- Per-trial dependency delay hook used when SimulationConfig.include_dependencies
  is set together with a dependency_delay estimate
"""

import logging
import math

from .distributions import RandomVariateGenerator
from .models import PertEstimate, SimulationConfig

logger = logging.getLogger(__name__)

MIN_COMMUNICATION_EFFICIENCY = 0.7
COMMUNICATION_OVERHEAD_PER_MEMBER = 0.05
LEARNING_RATE = 0.1
MAX_FATIGUE_REDUCTION = 0.3


def pert_moments(optimistic, most_likely, pessimistic):
    """PERT mean (o + 4m + p) / 6 and standard deviation (p - o) / 6."""
    mean = (optimistic + 4.0 * most_likely + pessimistic) / 6.0
    std_dev = (pessimistic - optimistic) / 6.0
    return mean, std_dev


def model_dependencies(optimistic, most_likely, pessimistic, generator: RandomVariateGenerator):
    """Draw one dependency duration from the PERT-weighted normal approximation."""
    mean, std_dev = pert_moments(optimistic, most_likely, pessimistic)
    return generator.normal(mean, std_dev)


def model_team_capacity(
    base_capacity,
    experience_weeks,
    team_size,
    generator: RandomVariateGenerator,
    burnout_factor=0.1,
):
    """
    Effective weekly capacity of a team.

    Args:
        base_capacity: Items per week at nominal performance
        experience_weeks: Weeks the team has worked together (learning curve)
        team_size: Number of people (communication overhead, floored at 70%)
        generator: Random stream for the burnout draw
        burnout_factor: Probability that a week loses up to 30% to fatigue

    Returns:
        float capacity for one simulated week
    """
    if experience_weeks < 0:
        raise ValueError(f"experience_weeks must be non-negative, got {experience_weeks}")
    if team_size < 1:
        raise ValueError(f"team_size must be at least 1, got {team_size}")

    learning_factor = 1.0 + math.log(1.0 + experience_weeks) * LEARNING_RATE
    communication = max(MIN_COMMUNICATION_EFFICIENCY, 1.0 - (team_size - 1) * COMMUNICATION_OVERHEAD_PER_MEMBER)

    fatigue = 1.0
    if generator.uniform() < burnout_factor:
        fatigue -= generator.uniform() * MAX_FATIGUE_REDUCTION

    return base_capacity * learning_factor * communication * fatigue


class DependencyDelay:
    """Per-trial PERT delay, active only when the simulation opts in."""

    def __init__(self, estimate: PertEstimate | None):
        self.estimate = estimate

    @classmethod
    def from_simulation(cls, sim: SimulationConfig) -> "DependencyDelay":
        if not sim.include_dependencies:
            return cls(None)
        if sim.dependency_delay is None:
            logger.warning("include_dependencies is set but no dependency_delay estimate was given; ignoring")
            return cls(None)
        return cls(sim.dependency_delay)

    @property
    def active(self) -> bool:
        return self.estimate is not None

    def sample(self, generator: RandomVariateGenerator) -> float:
        """Delay in days for one trial, never negative."""
        if self.estimate is None:
            return 0.0
        delay = model_dependencies(
            self.estimate.optimistic,
            self.estimate.most_likely,
            self.estimate.pessimistic,
            generator,
        )
        return max(0.0, delay)
