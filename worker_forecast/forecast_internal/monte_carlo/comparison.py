"""
PURPOSE: Statistical comparison of completed forecasts.

This module compares two or more ForecastResults: deltas against the first
(baseline) scenario, confidence-interval tables, coefficient-of-variation risk
classification and plain English recommendations.

SRP/DRY: Single responsibility = comparison of already-computed results.
         No simulation is performed here.
"""

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

import numpy as np

from .aggregation import ForecastResult
from .config import (
    CONVERGENCE_STEPS,
    CONVERGENCE_THRESHOLD,
    HIGH_RISK_SPREAD,
    LOW_RISK_SPREAD,
    RISK_CV_HIGH,
    RISK_CV_LOW,
    RISK_CV_MEDIUM,
)

RiskLevel = Literal["Low", "Medium", "High", "Very High"]


def classify_risk(cv: float) -> RiskLevel:
    """Risk level from coefficient of variation: <0.2 Low, <0.4 Medium, <0.6 High, else Very High."""
    if cv < RISK_CV_LOW:
        return "Low"
    if cv < RISK_CV_MEDIUM:
        return "Medium"
    if cv < RISK_CV_HIGH:
        return "High"
    return "Very High"


@dataclass(frozen=True)
class ScenarioConfig:
    type: Literal["throughput", "cycletime"]
    backlog_size: int
    start_date: date
    parameters: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ForecastScenario:
    id: str
    name: str
    result: ForecastResult
    config: ScenarioConfig
    description: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def cv(self) -> float:
        return self.result.statistics.coefficient_of_variation


@dataclass(frozen=True)
class StatisticsDeltas:
    mean_difference: List[float]
    median_difference: List[float]
    standard_deviation_difference: List[float]
    risk_difference: List[float]


@dataclass(frozen=True)
class ScenarioInterval:
    scenario_id: str
    days: int
    date: Optional[date]
    difference: Optional[int] = None


@dataclass(frozen=True)
class IntervalComparison:
    level: float
    scenarios: List[ScenarioInterval]


@dataclass(frozen=True)
class RiskSummary:
    most_optimistic: ForecastScenario
    most_pessimistic: ForecastScenario
    most_reliable: ForecastScenario
    risk_spread: float


@dataclass(frozen=True)
class Recommendations:
    best_case: str
    worst_case: str
    recommended: str
    reasoning: List[str]


@dataclass(frozen=True)
class ComparisonMetrics:
    scenarios: List[ForecastScenario]
    statistics: StatisticsDeltas
    confidence_intervals: List[IntervalComparison]
    risk_levels: Dict[str, RiskLevel]
    risk_analysis: RiskSummary
    recommendations: Recommendations

    def to_dict(self) -> Dict[str, Any]:
        """Convert comparison to dictionary for JSON serialization."""
        return {
            "scenarios": [s.id for s in self.scenarios],
            "statistics": {
                "mean_difference": self.statistics.mean_difference,
                "median_difference": self.statistics.median_difference,
                "standard_deviation_difference": self.statistics.standard_deviation_difference,
                "risk_difference": self.statistics.risk_difference,
            },
            "confidence_intervals": [
                {
                    "level": table.level,
                    "scenarios": [
                        {
                            "scenario_id": row.scenario_id,
                            "days": row.days,
                            "date": row.date.isoformat() if row.date else None,
                            "difference": row.difference,
                        }
                        for row in table.scenarios
                    ],
                }
                for table in self.confidence_intervals
            ],
            "risk_levels": dict(self.risk_levels),
            "risk_analysis": {
                "most_optimistic": self.risk_analysis.most_optimistic.id,
                "most_pessimistic": self.risk_analysis.most_pessimistic.id,
                "most_reliable": self.risk_analysis.most_reliable.id,
                "risk_spread": round(self.risk_analysis.risk_spread, 4),
            },
            "recommendations": {
                "best_case": self.recommendations.best_case,
                "worst_case": self.recommendations.worst_case,
                "recommended": self.recommendations.recommended,
                "reasoning": list(self.recommendations.reasoning),
            },
        }


class ForecastComparison:
    """Compares completed forecast scenarios. All methods are pure."""

    @staticmethod
    def compare_forecasts(scenarios: List[ForecastScenario]) -> ComparisonMetrics:
        """
        Compare two or more scenarios against the first one.

        Raises:
            ValueError: If fewer than two scenarios are given
        """
        if len(scenarios) < 2:
            raise ValueError("At least two scenarios required for comparison")

        risk_analysis = ForecastComparison._analyze_risk(scenarios)
        return ComparisonMetrics(
            scenarios=list(scenarios),
            statistics=ForecastComparison._statistics_differences(scenarios),
            confidence_intervals=ForecastComparison._compare_confidence_intervals(scenarios),
            risk_levels={s.id: classify_risk(s.cv) for s in scenarios},
            risk_analysis=risk_analysis,
            recommendations=ForecastComparison._generate_recommendations(scenarios, risk_analysis),
        )

    @staticmethod
    def _statistics_differences(scenarios: List[ForecastScenario]) -> StatisticsDeltas:
        baseline = scenarios[0]
        base = baseline.result.statistics
        return StatisticsDeltas(
            mean_difference=[s.result.statistics.mean - base.mean for s in scenarios],
            median_difference=[s.result.statistics.median - base.median for s in scenarios],
            standard_deviation_difference=[
                s.result.statistics.standard_deviation - base.standard_deviation for s in scenarios
            ],
            risk_difference=[s.cv - baseline.cv for s in scenarios],
        )

    @staticmethod
    def _compare_confidence_intervals(scenarios: List[ForecastScenario]) -> List[IntervalComparison]:
        levels = [ci.level for ci in scenarios[0].result.confidence_intervals]
        tables = []
        for level in levels:
            rows = []
            baseline_days = None
            for index, scenario in enumerate(scenarios):
                interval = scenario.result.interval_for(level)
                days = interval.days_from_start if interval else 0
                if index == 0:
                    baseline_days = days
                rows.append(
                    ScenarioInterval(
                        scenario_id=scenario.id,
                        days=days,
                        date=interval.completion_date if interval else None,
                        difference=None if index == 0 else days - baseline_days,
                    )
                )
            tables.append(IntervalComparison(level=level, scenarios=rows))
        return tables

    @staticmethod
    def _analyze_risk(scenarios: List[ForecastScenario]) -> RiskSummary:
        # min/max keep the first scenario on ties
        cvs = [s.cv for s in scenarios]
        return RiskSummary(
            most_optimistic=min(scenarios, key=lambda s: s.result.statistics.median),
            most_pessimistic=max(scenarios, key=lambda s: s.result.statistics.median),
            most_reliable=min(scenarios, key=lambda s: s.cv),
            risk_spread=max(cvs) - min(cvs),
        )

    @staticmethod
    def _generate_recommendations(scenarios: List[ForecastScenario], risk: RiskSummary) -> Recommendations:
        best = risk.most_optimistic
        worst = risk.most_pessimistic
        reliable = risk.most_reliable

        reasoning = [
            f"{best.name} offers the most optimistic timeline with "
            f"{round(best.result.statistics.median)} days median completion.",
            f"{worst.name} represents the most conservative estimate with "
            f"{round(worst.result.statistics.median)} days median completion.",
            f"{reliable.name} shows the most consistent predictions with "
            f"{reliable.cv * 100:.1f}% coefficient of variation ({classify_risk(reliable.cv)} risk).",
        ]

        if risk.risk_spread > HIGH_RISK_SPREAD:
            reasoning.append(
                "High variability between scenarios suggests significant uncertainty in project parameters."
            )
        elif risk.risk_spread < LOW_RISK_SPREAD:
            reasoning.append(
                "Low variability between scenarios indicates consistent forecasting across different assumptions."
            )

        average_median = float(np.mean([s.result.statistics.median for s in scenarios]))
        balanced = min(scenarios, key=lambda s: abs(s.result.statistics.median - average_median))
        reasoning.append(f"{balanced.name} provides a balanced approach considering both timeline and risk factors.")

        return Recommendations(
            best_case=best.name,
            worst_case=worst.name,
            recommended=balanced.name,
            reasoning=reasoning,
        )

    @staticmethod
    def calculate_sensitivity(base: ForecastScenario, scenarios: List[ForecastScenario]) -> List[Dict[str, Any]]:
        """Median change of each scenario relative to base, with risk deltas."""
        baseline = base.result.statistics.median
        rows = []
        for scenario in scenarios:
            difference = scenario.result.statistics.median - baseline
            rows.append(
                {
                    "scenario_id": scenario.id,
                    "scenario_name": scenario.name,
                    "absolute_change": difference,
                    "percent_change": difference / baseline * 100.0 if baseline else 0.0,
                    "risk_change": ForecastComparison._risk_change(base, scenario),
                }
            )
        return rows

    @staticmethod
    def _risk_change(base: ForecastScenario, other: ForecastScenario) -> Dict[str, float]:
        b, o = base.result.statistics, other.result.statistics
        return {
            "coefficient_of_variation_change": other.cv - base.cv,
            "range_change": (o.max - o.min) - (b.max - b.min),
            "skewness_change": o.skewness - b.skewness,
        }

    @staticmethod
    def analyze_convergence(scenarios: List[ForecastScenario]) -> List[Dict[str, Any]]:
        """
        Running mean of completion days over CONVERGENCE_STEPS growing prefixes.

        The convergence rate is the coefficient of variation of the last three
        running means; a scenario counts as converged below CONVERGENCE_THRESHOLD.
        """
        report = []
        for scenario in scenarios:
            days = np.asarray(scenario.result.completion_days, dtype=float)
            step = max(1, days.size // CONVERGENCE_STEPS)
            points = []
            for end in range(step, days.size + 1, step):
                points.append({"trials": end, "mean": float(days[:end].mean())})

            rate = ForecastComparison._convergence_rate([p["mean"] for p in points])
            report.append(
                {
                    "scenario_id": scenario.id,
                    "scenario_name": scenario.name,
                    "convergence_data": points,
                    "convergence_rate": rate,
                    "is_converged": rate < CONVERGENCE_THRESHOLD,
                }
            )
        return report

    @staticmethod
    def _convergence_rate(means: List[float]) -> float:
        if len(means) < 3:
            return 1.0
        last_three = np.asarray(means[-3:])
        if means[-1] == 0:
            return 0.0 if np.all(last_three == 0) else math.inf
        return float(np.std(last_three)) / means[-1]
