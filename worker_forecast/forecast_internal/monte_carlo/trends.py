"""
Trend analysis of historical throughput.

Describes whether recent throughput is rising, falling or stable. The result
is informational and never changes the forecast itself.
"""

from dataclasses import dataclass
from typing import Any, Dict, Sequence

import numpy as np

STABLE_SLOPE = 0.1
WEAK_CHANGE_PERCENT = 10.0
MODERATE_CHANGE_PERCENT = 25.0
MIN_TREND_POINTS = 3


@dataclass(frozen=True)
class ThroughputTrendAnalysis:
    trend: str  # "increasing" | "decreasing" | "stable"
    trend_strength: str  # "weak" | "moderate" | "strong"
    description: str
    recommendation: str
    recent_average: float
    overall_average: float
    change_percent: float
    linear_slope: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trend": self.trend,
            "trend_strength": self.trend_strength,
            "description": self.description,
            "recommendation": self.recommendation,
            "recent_average": self.recent_average,
            "overall_average": self.overall_average,
            "change_percent": self.change_percent,
            "linear_slope": self.linear_slope,
        }


_DESCRIPTIONS = {
    ("increasing", "strong"): (
        "Your throughput shows a strong upward trend (+{change:.1f}% recently). "
        "Team performance is significantly improving.",
        "Consider being more optimistic in your forecasts. This upward trend suggests you might "
        "complete work faster than baseline estimates.",
    ),
    ("increasing", "moderate"): (
        "Your throughput shows a moderate upward trend (+{change:.1f}% recently). "
        "Team performance is improving steadily.",
        "You may want to consider slightly more optimistic forecasts, but continue monitoring "
        "the trend for consistency.",
    ),
    ("increasing", "weak"): (
        "Your throughput shows a slight upward trend (+{change:.1f}% recently). "
        "Performance appears to be gradually improving.",
        "Current forecasts should be appropriate, but keep monitoring for sustained improvement.",
    ),
    ("decreasing", "strong"): (
        "Your throughput shows a strong downward trend (-{change:.1f}% recently). "
        "Team performance is declining significantly.",
        "Consider more conservative forecasts and investigate factors affecting team performance. "
        "You may need additional buffer time.",
    ),
    ("decreasing", "moderate"): (
        "Your throughput shows a moderate downward trend (-{change:.1f}% recently). "
        "Team performance is declining.",
        "Monitor the situation closely and consider slightly more conservative forecasts until "
        "the trend stabilizes.",
    ),
    ("decreasing", "weak"): (
        "Your throughput shows a slight downward trend (-{change:.1f}% recently). "
        "Performance appears to be gradually declining.",
        "Current forecasts should be appropriate, but monitor for continued decline and consider "
        "investigating causes.",
    ),
}


def _strength(change_percent: float) -> str:
    magnitude = abs(change_percent)
    if magnitude < WEAK_CHANGE_PERCENT:
        return "weak"
    if magnitude < MODERATE_CHANGE_PERCENT:
        return "moderate"
    return "strong"


def analyze_throughput_trends(data: Sequence[float]) -> ThroughputTrendAnalysis:
    """
    Analyze most-recent-first weekly throughput.

    The slope is a least-squares fit over chronological order. Recent average
    uses the newest min(4, n // 3) periods.
    """
    values = np.asarray(data, dtype=float)
    n = values.size
    overall_average = float(values.mean()) if n else 0.0

    if n < MIN_TREND_POINTS:
        return ThroughputTrendAnalysis(
            trend="stable",
            trend_strength="weak",
            description="Insufficient data for trend analysis",
            recommendation="Collect more historical data for trend insights",
            recent_average=float(values[0]) if n else 0.0,
            overall_average=overall_average,
            change_percent=0.0,
            linear_slope=0.0,
        )

    chronological = values[::-1]
    x = np.arange(n, dtype=float)
    x_centered = x - x.mean()
    denominator = float(np.sum(x_centered**2))
    slope = float(np.sum(x_centered * (chronological - chronological.mean())) / denominator) if denominator else 0.0

    recent_weeks = min(4, n // 3)
    recent_average = float(values[:recent_weeks].mean())
    change_percent = (recent_average - overall_average) / overall_average * 100.0 if overall_average else 0.0

    if abs(slope) < STABLE_SLOPE:
        trend = "stable"
    elif slope > 0:
        trend = "increasing"
    else:
        trend = "decreasing"
    strength = _strength(change_percent)

    if trend == "stable":
        sign = "+" if change_percent >= 0 else ""
        description = (
            f"Your throughput appears stable with minimal variation ({sign}{change_percent:.1f}% recently). "
            "Team performance is consistent."
        )
        recommendation = (
            "Your historical data shows consistent performance. Current forecasts should be reliable "
            "and representative of future performance."
        )
    else:
        template, recommendation = _DESCRIPTIONS[(trend, strength)]
        description = template.format(change=abs(change_percent))

    return ThroughputTrendAnalysis(
        trend=trend,
        trend_strength=strength,
        description=description,
        recommendation=recommendation,
        recent_average=round(recent_average, 1),
        overall_average=round(overall_average, 1),
        change_percent=round(change_percent, 1),
        linear_slope=round(slope, 2),
    )
