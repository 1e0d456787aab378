"""
PURPOSE: Random variate generation for throughput and cycle-time simulation.

RESPONSIBILITIES:
- Uniform draws from either numpy's default generator or a seeded
  linear-congruential generator (bit-for-bit reproducible)
- Normal (Box-Muller), lognormal, gamma (Marsaglia-Tsang), beta draws
- Bootstrap resampling from historical data
- Process-wide seed tracking for reproducible repeated calls
- Single responsibility: only sampling, no aggregation
"""

import logging
import math
import threading

import numpy as np

from .config import (
    BOX_MULLER_MIN_UNIFORM,
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    MAX_REJECTION_ITERATIONS,
    RANDOM_SEED,
)
from .errors import SimulationError

logger = logging.getLogger(__name__)

__all__ = [
    "LinearCongruentialGenerator",
    "RandomVariateGenerator",
    "compute_lognormal_params",
    "create_generator",
    "get_global_seed",
    "set_global_seed",
]


class LinearCongruentialGenerator:
    """Deterministic uniform source: state = (a * state + c) mod 2^32."""

    def __init__(self, seed, multiplier=LCG_MULTIPLIER, increment=LCG_INCREMENT, modulus=LCG_MODULUS):
        self.seed = int(seed)
        self.multiplier = multiplier
        self.increment = increment
        self.modulus = modulus
        self._state = self.seed % modulus

    def random(self):
        """Return the next value in [0, 1)."""
        self._state = (self.multiplier * self._state + self.increment) % self.modulus
        return self._state / self.modulus


class RandomVariateGenerator:
    """
    Owns one random stream and the Box-Muller spare value for it.

    Args:
        seed: None for platform randomness (numpy default_rng), or an int to
            drive every draw from a LinearCongruentialGenerator.
    """

    def __init__(self, seed=None):
        self.seed = seed
        if seed is None:
            self._source = np.random.default_rng()
        else:
            self._source = LinearCongruentialGenerator(seed)
        self._spare = None

    @property
    def is_seeded(self):
        return self.seed is not None

    def reset(self):
        """Drop the cached Box-Muller spare value."""
        self._spare = None

    def uniform(self):
        """Return a value in [0, 1)."""
        return float(self._source.random())

    def normal(self, mean=0.0, std_dev=1.0):
        """
        Box-Muller transform producing one normal variate per call.

        The unseeded path keeps the second output as a spare for the next
        call. The seeded path always consumes two fresh uniforms so a seeded
        sequence does not depend on how calls were interleaved before it.
        """
        if self._spare is not None and not self.is_seeded:
            z = self._spare
            self._spare = None
            return mean + std_dev * z

        u1 = max(self.uniform(), BOX_MULLER_MIN_UNIFORM)
        u2 = self.uniform()
        mag = math.sqrt(-2.0 * math.log(u1))
        if not self.is_seeded:
            self._spare = mag * math.sin(2.0 * math.pi * u2)
        return mean + std_dev * mag * math.cos(2.0 * math.pi * u2)

    def lognormal(self, mu, sigma):
        """exp(normal(mu, sigma)); always strictly positive."""
        return math.exp(self.normal(mu, sigma))

    def gamma(self, shape, scale=1.0):
        """
        Marsaglia-Tsang gamma sampler.

        For shape < 1 the draw is taken at shape + 1 and corrected with
        U ** (1 / shape).

        Raises:
            ValueError: if shape or scale is not positive
            SimulationError: if rejection sampling exceeds MAX_REJECTION_ITERATIONS
        """
        if shape <= 0 or scale <= 0:
            raise ValueError(f"shape and scale must be positive, got shape={shape}, scale={scale}")

        if shape < 1:
            u = max(self.uniform(), BOX_MULLER_MIN_UNIFORM)
            return self.gamma(shape + 1.0, scale) * u ** (1.0 / shape)

        d = shape - 1.0 / 3.0
        c = 1.0 / math.sqrt(9.0 * d)
        for _ in range(MAX_REJECTION_ITERATIONS):
            x = self.normal()
            v = 1.0 + c * x
            if v <= 0:
                continue
            v = v * v * v
            u = self.uniform()
            if u < 1.0 - 0.0331 * x ** 4:
                return d * v * scale
            if math.log(max(u, BOX_MULLER_MIN_UNIFORM)) < 0.5 * x * x + d * (1.0 - v + math.log(v)):
                return d * v * scale

        raise SimulationError(
            f"gamma sampler did not accept a draw within {MAX_REJECTION_ITERATIONS} iterations (shape={shape})"
        )

    def beta(self, alpha, beta):
        """Beta variate as X / (X + Y) with X ~ Gamma(alpha), Y ~ Gamma(beta)."""
        x = self.gamma(alpha, 1.0)
        y = self.gamma(beta, 1.0)
        return x / (x + y)

    def bootstrap_sample(self, data):
        """
        Pick one element of data uniformly at random.

        Raises:
            ValueError: if data is empty
        """
        n = len(data)
        if n == 0:
            raise ValueError("bootstrap_sample requires non-empty data")
        index = min(int(self.uniform() * n), n - 1)
        return data[index]


# Process-wide seed tracking. Each create_generator() call gets its own
# generator; only the tracked seed value is shared.
_seed_lock = threading.Lock()
_global_seed = RANDOM_SEED


def set_global_seed(seed):
    """Track a seed used by every later create_generator() call without one."""
    global _global_seed
    with _seed_lock:
        _global_seed = seed
    logger.debug("Global forecast seed set to %s", seed)


def get_global_seed():
    with _seed_lock:
        return _global_seed


def create_generator(seed=None):
    """Return a fresh generator from seed, falling back to the tracked global seed."""
    if seed is None:
        seed = get_global_seed()
    return RandomVariateGenerator(seed)


def compute_lognormal_params(mean, std_dev):
    """Compute lognormal parameters (mu, sigma) from mean and std dev.

    Given E[X]=mean, compute mu and sigma for Lognormal(mu, sigma).
    Uses CV = std_dev/mean as starting point.

    Args:
        mean: Expected value of the lognormal distribution
        std_dev: Standard deviation of the lognormal distribution

    Returns:
        tuple: (mu, sigma) in log space

    Raises:
        ValueError: if mean is not positive or std_dev is negative
    """
    if mean <= 0 or std_dev < 0:
        raise ValueError("mean must be positive and std_dev must be non-negative")

    cv = std_dev / mean  # coefficient of variation
    sigma = float(np.sqrt(np.log(cv**2 + 1)))  # exact relationship
    mu = float(np.log(mean) - sigma**2 / 2)
    return mu, sigma
