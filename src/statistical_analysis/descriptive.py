"""
Per-column descriptive statistics.

Quartiles and the median use the linear-interpolation quantile rule
(Hyndman & Fan type 7, numpy's ``method="linear"``): for sorted values
x[0..n-1] the p-quantile is ``x[h] + (h - floor(h)) (x[h+1] - x[h])`` with
``h = (n - 1) p``.
"""

import logging
import math
from datetime import datetime, timedelta

import numpy as np
import pandas as pd

from src.dataset.schema import VariableKind
from src.dataset.values import canonical_label, is_missing, to_number
from src.statistical_analysis.normality import (
    MIN_OBSERVATIONS,
    jarque_bera,
    sample_kurtosis,
    sample_skewness,
)
from src.statistical_analysis.results import (
    CategoricalStats,
    ContinuousStats,
    DateStats,
    FrequencyItem,
    finite_or_none,
)

logger = logging.getLogger(__name__)

QUANTILE_METHOD = "linear"


def range_scale(lo: float, hi: float) -> float:
    """
    Divisor that keeps ``hi - lo`` representable.

    1.0 unless the span of two finite values overflows, in which case the
    larger magnitude is returned so that values in [lo, hi] map into [-1, 1].
    """
    if math.isfinite(hi - lo) or not (math.isfinite(lo) and math.isfinite(hi)):
        return 1.0
    return max(abs(lo), abs(hi))


def quantiles(values, probabilities) -> list[float]:
    """Type 7 quantiles of a non-empty sample."""
    arr = np.asarray(values, dtype=float)
    scale = range_scale(float(arr.min()), float(arr.max()))
    return [float(q) * scale for q in np.quantile(arr / scale, probabilities, method=QUANTILE_METHOD)]


def sample_sd(values) -> float | None:
    """Sample standard deviation (n - 1 denominator); None for n < 2 or on overflow."""
    arr = np.asarray(values, dtype=float)
    if len(arr) < 2:
        return None
    if np.all(arr == arr[0]):
        return 0.0
    with np.errstate(over="ignore", invalid="ignore"):
        return finite_or_none(np.std(arr, ddof=1))


def calculate_continuous_stats(values) -> ContinuousStats:
    """
    Summary statistics for a continuous variable.

    Only values that parse as finite numbers are used; every other cell
    counts as missing. Skewness needs n >= 3, kurtosis n >= 4 and the
    Jarque-Bera normality test n >= 8; below those sizes the field is None.
    Fields whose arithmetic overflows are None as well.

    Parameters
    ----------
    values : list
        Raw column values.

    Returns
    -------
    ContinuousStats
        ``count + missing`` always equals ``len(values)``.
    """
    parsed = [to_number(v) for v in values]
    numeric = np.array([v for v in parsed if v is not None], dtype=float)
    count = len(numeric)
    missing = len(parsed) - count

    if count == 0:
        logger.debug("No numeric values found; continuous statistics not computable")
        return ContinuousStats(count=0, missing=missing)

    q1, median, q3 = quantiles(numeric, [0.25, 0.5, 0.75])
    with np.errstate(over="ignore", invalid="ignore"):
        mean = np.mean(numeric)
    skewness = sample_skewness(numeric)
    kurtosis = sample_kurtosis(numeric)

    normality_test = None
    if count >= MIN_OBSERVATIONS:
        normality_test = jarque_bera(
            count, skewness, None if kurtosis is None else kurtosis + 3.0
        )

    return ContinuousStats(
        count=count,
        missing=missing,
        mean=finite_or_none(mean),
        median=finite_or_none(median),
        sd=sample_sd(numeric),
        min=float(np.min(numeric)),
        max=float(np.max(numeric)),
        q1=finite_or_none(q1),
        q3=finite_or_none(q3),
        skewness=skewness,
        kurtosis=kurtosis,
        normality_test=normality_test,
    )


def _frequency_items(labels: list[str]) -> list[FrequencyItem]:
    """Count labels; order by descending count, ties in first-seen order."""
    counts: dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    total = len(labels)
    items = [
        FrequencyItem(value=label, count=count, percentage=count / total * 100.0)
        for label, count in counts.items()
    ]
    # sorted() is stable, so equal counts keep insertion order
    return sorted(items, key=lambda item: -item.count)


def calculate_categorical_stats(values) -> CategoricalStats:
    """
    Frequency table for a categorical (or boolean) variable.

    Percentages are relative to the non-missing count. The mode is the most
    frequent value, ties going to the value seen first.
    """
    labels = [canonical_label(v) for v in values if not is_missing(v)]
    missing = len(values) - len(labels)

    if not labels:
        return CategoricalStats(count=0, missing=missing)

    frequencies = _frequency_items(labels)
    return CategoricalStats(
        count=len(labels),
        missing=missing,
        unique_count=len(frequencies),
        frequencies=frequencies,
        mode=frequencies[0].value,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Dates
# ─────────────────────────────────────────────────────────────────────────────


def parse_datetime(value) -> datetime | None:
    """
    Parse a cell as a UTC timestamp.

    Accepts datetime objects and date strings; numbers, booleans and
    unparseable text give None.
    """
    if is_missing(value) or isinstance(value, (bool, int, float)):
        return None
    timestamp = pd.to_datetime(value, errors="coerce", utc=True)
    if timestamp is None or pd.isna(timestamp):
        return None
    return timestamp.to_pydatetime()


def floor_date(value: datetime, granularity: str) -> datetime:
    """
    Floor a timestamp to the start of its year, month, ISO week (Monday) or day.

    Raises
    ------
    ValueError
        If the granularity is unknown.
    """
    day = value.replace(hour=0, minute=0, second=0, microsecond=0)
    if granularity == "day":
        return day
    if granularity == "week":
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    if granularity == "year":
        return day.replace(month=1, day=1)
    raise ValueError(f"Unknown date granularity: {granularity}")


def calculate_date_stats(values, granularity: str = "day") -> DateStats:
    """
    Summary statistics for a datetime variable.

    Values are floored to the requested granularity before anything is
    computed, so min, max and mode are all floored values. The frequency
    table is in chronological order.
    """
    parsed = [parse_datetime(v) for v in values]
    floored = [floor_date(d, granularity) for d in parsed if d is not None]
    missing = len(values) - len(floored)

    if not floored:
        return DateStats(count=0, missing=missing, granularity=granularity)

    counts: dict[datetime, int] = {}
    for d in floored:
        counts[d] = counts.get(d, 0) + 1

    mode = max(counts, key=lambda d: counts[d])  # first-seen wins ties
    frequencies = [
        FrequencyItem(
            value=d.isoformat(),
            count=counts[d],
            percentage=counts[d] / len(floored) * 100.0,
        )
        for d in sorted(counts)
    ]

    return DateStats(
        count=len(floored),
        missing=missing,
        granularity=granularity,
        unique_count=len(counts),
        min=min(floored),
        max=max(floored),
        mode=mode,
        frequencies=frequencies,
    )


def describe_variable(values, kind: VariableKind, date_granularity: str = "day"):
    """
    Dispatch to the statistics for a declared variable kind.

    Boolean variables are summarized like categorical ones.

    Returns
    -------
    ContinuousStats, CategoricalStats, DateStats or None
        None for identifier columns, which have no meaningful summary.
    """
    if kind == VariableKind.CONTINUOUS:
        return calculate_continuous_stats(values)
    if kind in (VariableKind.CATEGORICAL, VariableKind.BOOLEAN):
        return calculate_categorical_stats(values)
    if kind == VariableKind.DATETIME:
        return calculate_date_stats(values, granularity=date_granularity)
    return None
