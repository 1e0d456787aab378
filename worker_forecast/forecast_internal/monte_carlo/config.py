"""
PURPOSE: Simulation configuration and threshold parameters for the forecasting engine.

RESPONSIBILITIES:
- Define simulation hyperparameters (number of trials, random seed, safety cap)
- Throughput jitter and floor constants
- Seeded generator constants
- Histogram binning bounds and risk classification thresholds
- Single responsibility: configuration only, no simulation logic
"""

import os


def _env_int(name, default):
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


# Simulation Parameters
NUM_TRIALS = _env_int("FORECAST_NUM_TRIALS", 10000)  # Default Monte Carlo sample size
RANDOM_SEED = _env_int("FORECAST_RANDOM_SEED", None)  # Set to int for reproducibility, None for random

# Safety cap on simulated periods (2 years). Trials that hit it are recorded as capped.
MAX_WEEKS = 104
DAYS_PER_WEEK = 7

# Throughput model
HISTORICAL_JITTER_STD = 0.15  # week-to-week noise applied on top of a bootstrapped value
MIN_JITTER_FACTOR = 0.1
MIN_WEEKLY_THROUGHPUT = 0.1  # keeps every simulated week moving the backlog
COMPLETION_TOLERANCE = 1e-9  # remaining work at or below this counts as done

# Cycle time model
DEFAULT_WORKING_DAYS_PER_WEEK = 5
DEFAULT_WIP_LIMIT = 7
DEFAULT_PROCESSING_MODE = "worker-scheduling"

# Confidence levels reported when the caller does not pass any
DEFAULT_CONFIDENCE_LEVELS = [0.5, 0.8, 0.95]

# Random variates
BOX_MULLER_MIN_UNIFORM = 1e-12
MAX_REJECTION_ITERATIONS = 10000
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
LCG_MODULUS = 2**32

# Histogram binning
MIN_HISTOGRAM_BINS = 10
MAX_HISTOGRAM_BINS = 50

# Risk classification by coefficient of variation
RISK_CV_LOW = 0.2
RISK_CV_MEDIUM = 0.4
RISK_CV_HIGH = 0.6

# Scenario comparison
HIGH_RISK_SPREAD = 0.3
LOW_RISK_SPREAD = 0.1
CONVERGENCE_STEPS = 20
CONVERGENCE_THRESHOLD = 0.01

# Legacy simulation percentiles
LEGACY_PERCENTILES = [0.50, 0.80, 0.95]


def get_throughput_parameters():
    """Return the constants that shape a throughput trial."""
    return {
        "max_weeks": MAX_WEEKS,
        "days_per_week": DAYS_PER_WEEK,
        "jitter_std": HISTORICAL_JITTER_STD,
        "min_jitter_factor": MIN_JITTER_FACTOR,
        "min_weekly_throughput": MIN_WEEKLY_THROUGHPUT,
    }


def get_risk_thresholds():
    """Return coefficient-of-variation thresholds for risk classification."""
    return {
        "low": RISK_CV_LOW,
        "medium": RISK_CV_MEDIUM,
        "high": RISK_CV_HIGH,
    }
