"""
Monte Carlo forecasting engine for backlog completion dates.

PURPOSE:
    Answer "when will this backlog be done, and how sure are we?" by running
    thousands of independent trials against historical throughput or
    cycle-time percentiles and reporting completion dates at chosen
    confidence levels.

RESPONSIBILITIES:
    - Sample random variates (seeded or platform randomness)
    - Simulate throughput burn-down and cycle-time delivery
    - Reduce trial outcomes to statistics, intervals and chart data
    - Compare completed forecasts and classify their risk

SRP/DRY CHECK:
    Each submodule has a single responsibility:
    - distributions.py: Random variate generation only
    - summary_statistics.py: Percentiles, moments and binning only
    - throughput.py / cycle_time.py: Trial simulation only
    - aggregation.py: Trial outcomes -> ForecastResult only
    - engine.py: Public forecasting operations only
    - comparison.py: Scenario comparison only
    - simulation.py: Legacy week-granular simulation only
"""

from .aggregation import ConfidenceInterval, ForecastResult, aggregate
from .comparison import ForecastComparison, ForecastScenario, ScenarioConfig, classify_risk
from .distributions import RandomVariateGenerator, create_generator, set_global_seed
from .engine import (
    calculate_completion_probability,
    calculate_target_requirements,
    forecast_by_cycle_time,
    forecast_by_throughput,
)
from .errors import ForecastConfigurationError, ForecastError, SimulationError
from .models import CycleTimeConfig, PertEstimate, RiskFactor, SimulationConfig, ThroughputConfig
from .simulation import SimulationInput, SimulationResult, run_monte_carlo_simulation

__version__ = "0.1.0"

__all__ = [
    "ConfidenceInterval",
    "CycleTimeConfig",
    "ForecastComparison",
    "ForecastConfigurationError",
    "ForecastError",
    "ForecastResult",
    "ForecastScenario",
    "PertEstimate",
    "RandomVariateGenerator",
    "RiskFactor",
    "ScenarioConfig",
    "SimulationConfig",
    "SimulationError",
    "SimulationInput",
    "SimulationResult",
    "ThroughputConfig",
    "aggregate",
    "calculate_completion_probability",
    "calculate_target_requirements",
    "classify_risk",
    "create_generator",
    "forecast_by_cycle_time",
    "forecast_by_throughput",
    "run_monte_carlo_simulation",
    "set_global_seed",
]
