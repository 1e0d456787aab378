"""
Exceptions raised by the forecasting engine.

Degenerate numeric input (all trials identical, two-point percentile fits,
single-bin histograms) is handled where it occurs and never raised.
"""


class ForecastError(Exception):
    """Base class for forecasting engine errors."""


class ForecastConfigurationError(ForecastError, ValueError):
    """The forecast configuration cannot produce a meaningful simulation."""


class SimulationError(ForecastError, RuntimeError):
    """A sampler or trial loop failed to terminate normally."""
