"""
PURPOSE: Descriptive statistics and chart-ready binning for completion-day samples.

RESPONSIBILITIES:
- Two percentile conventions, kept separate on purpose:
    percentile_interpolated: linear interpolation between order statistics.
        Used by the result aggregator (median, confidence intervals).
    percentile_nearest_rank: sorted[ceil(p * n) - 1], clamped.
        Used by the legacy simulation and by reference_lines() for chart P-lines.
- Moments (mean, population variance, skewness, excess kurtosis)
- Histogram, cumulative probabilities and S-curve construction
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
from scipy import stats

from .config import MAX_HISTOGRAM_BINS, MIN_HISTOGRAM_BINS


@dataclass(frozen=True)
class DescriptiveStatistics:
    mean: float
    median: float
    variance: float
    standard_deviation: float
    skewness: float
    kurtosis: float
    min: float
    max: float
    coefficient_of_variation: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "mean": self.mean,
            "median": self.median,
            "variance": self.variance,
            "standard_deviation": self.standard_deviation,
            "skewness": self.skewness,
            "kurtosis": self.kurtosis,
            "min": self.min,
            "max": self.max,
            "coefficient_of_variation": self.coefficient_of_variation,
        }


@dataclass(frozen=True)
class Histogram:
    bins: Tuple[float, ...]
    frequencies: Tuple[float, ...]
    cumulative_probabilities: Tuple[float, ...]

    def to_dict(self) -> Dict[str, List[float]]:
        return {
            "bins": list(self.bins),
            "frequencies": list(self.frequencies),
            "cumulative_probabilities": list(self.cumulative_probabilities),
        }


@dataclass(frozen=True)
class SCurvePoint:
    days: float
    probability: float

    def to_dict(self) -> Dict[str, Any]:
        return {"days": self.days, "probability": self.probability}


def _as_array(values) -> np.ndarray:
    arr = np.asarray(values, dtype=float)
    if arr.size == 0:
        raise ValueError("at least one value is required")
    return arr


def percentile_interpolated(sorted_values: Sequence[float], p: float) -> float:
    """
    Linear-interpolation percentile of an ascending sequence.

    p <= 0 returns the first element, p >= 1 the last; otherwise the value
    is interpolated between floor(idx) and ceil(idx) with idx = p * (n - 1).
    """
    n = len(sorted_values)
    if n == 0:
        raise ValueError("percentile of an empty sequence is undefined")
    if p <= 0:
        return float(sorted_values[0])
    if p >= 1:
        return float(sorted_values[-1])

    index = p * (n - 1)
    lower = math.floor(index)
    upper = min(math.ceil(index), n - 1)
    weight = index - lower
    return float(sorted_values[lower]) * (1.0 - weight) + float(sorted_values[upper]) * weight


def percentile_nearest_rank(values: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: sorted[ceil(p * n) - 1], index clamped to the array."""
    arr = np.sort(_as_array(values))
    index = math.ceil(p * arr.size) - 1
    index = max(0, min(index, arr.size - 1))
    return float(arr[index])


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std / mean. Zero when the mean is zero."""
    arr = _as_array(values)
    mean = float(np.mean(arr))
    if mean == 0:
        return 0.0
    return float(np.std(arr)) / mean


def describe(values: Sequence[float]) -> DescriptiveStatistics:
    """Mean, population variance, skewness and excess kurtosis of values."""
    arr = _as_array(values)
    sorted_arr = np.sort(arr)
    mean = float(np.mean(arr))
    variance = float(np.var(arr))
    std_dev = math.sqrt(variance)

    # all trials identical: shape statistics are defined as 0
    if std_dev == 0:
        skewness = 0.0
        kurtosis = 0.0
    else:
        skewness = float(stats.skew(arr, bias=True))
        kurtosis = float(stats.kurtosis(arr, fisher=True, bias=True))

    return DescriptiveStatistics(
        mean=mean,
        median=percentile_interpolated(sorted_arr, 0.5),
        variance=variance,
        standard_deviation=std_dev,
        skewness=skewness,
        kurtosis=kurtosis,
        min=float(sorted_arr[0]),
        max=float(sorted_arr[-1]),
        coefficient_of_variation=std_dev / mean if mean != 0 else 0.0,
    )


def histogram_bin_count(n: int) -> int:
    """
    Number of equal-width bins for n values: floor(sqrt(n)) clamped to
    [MIN_HISTOGRAM_BINS, MAX_HISTOGRAM_BINS].

    sqrt(n) is floored, so n = 200 gives 14 bins. A fractional square root
    with ceil(sqrt(n)) bins of width (max - min) / sqrt(n) would give 15.
    Whole-width bins are used so the last edge lands on max.
    """
    return int(min(MAX_HISTOGRAM_BINS, max(MIN_HISTOGRAM_BINS, math.floor(math.sqrt(n)))))


def cumulative_probabilities(frequencies: Sequence[float]) -> List[float]:
    return [float(x) for x in np.cumsum(frequencies)]


def histogram(values: Sequence[float]) -> Histogram:
    """
    Equal-width histogram over [min, max] with frequencies as proportions.

    The last bin is closed so every value is counted and the frequencies sum
    to 1. When min == max a single bin holds all the mass.
    """
    arr = _as_array(values)
    low, high = float(arr.min()), float(arr.max())
    n = arr.size

    if low == high:
        return Histogram(bins=(low,), frequencies=(1.0,), cumulative_probabilities=(1.0,))

    counts, edges = np.histogram(arr, bins=histogram_bin_count(n), range=(low, high))
    frequencies = [float(c) / n for c in counts]
    return Histogram(
        bins=tuple(float(e) for e in edges[:-1]),
        frequencies=tuple(frequencies),
        cumulative_probabilities=tuple(cumulative_probabilities(frequencies)),
    )


def s_curve(values: Sequence[float]) -> List[SCurvePoint]:
    """Cumulative completion probability at each distinct completion-day value."""
    arr = _as_array(values)
    days, counts = np.unique(arr, return_counts=True)
    cumulative = np.cumsum(counts) / arr.size
    return [SCurvePoint(days=float(d), probability=float(p)) for d, p in zip(days, cumulative)]


def reference_lines(values: Sequence[float], levels: Sequence[float]) -> Dict[float, float]:
    """Day value at each level using the nearest-rank convention, for chart P-lines."""
    return {level: percentile_nearest_rank(values, level) for level in levels}
