"""
Result types returned by the statistical engine.

Every optional numeric field uses None to mean "not computable" (a zero or
degenerate denominator, arithmetic that overflows, or a function saturating
at a domain boundary).
No field carries NaN.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime

import numpy as np
import pandas as pd

# Stand-in for a statistic whose denominator is exactly zero while the
# numerator is not (perfect separation). Finite so downstream arithmetic works.
SATURATED_STATISTIC = 1.0e300


def finite_or_none(value) -> float | None:
    """Return the value as a float, or None if it is missing, NaN or infinite."""
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None


class InsufficientDataError(ValueError):
    """Raised when a test's preconditions on the amount of data are not met."""

    pass


# ---------- Descriptive statistics ----------


@dataclass(frozen=True)
class NormalityTestResult:
    test_name: str
    statistic: float
    p_value: float
    is_normal: bool  # p > 0.05


@dataclass(frozen=True)
class ContinuousStats:
    count: int
    missing: int
    mean: float | None = None
    median: float | None = None
    sd: float | None = None
    min: float | None = None
    max: float | None = None
    q1: float | None = None
    q3: float | None = None
    skewness: float | None = None
    kurtosis: float | None = None  # excess kurtosis
    normality_test: NormalityTestResult | None = None


@dataclass(frozen=True)
class FrequencyItem:
    value: str
    count: int
    percentage: float


@dataclass(frozen=True)
class CategoricalStats:
    count: int
    missing: int
    unique_count: int = 0
    frequencies: list[FrequencyItem] = field(default_factory=list)
    mode: str | None = None

    @property
    def frequency_table(self) -> dict[str, int]:
        return {item.value: item.count for item in self.frequencies}


@dataclass(frozen=True)
class DateStats:
    count: int
    missing: int
    granularity: str
    unique_count: int = 0
    min: datetime | None = None
    max: datetime | None = None
    mode: datetime | None = None
    frequencies: list[FrequencyItem] = field(default_factory=list)


# ---------- Binning ----------


@dataclass(frozen=True)
class HistogramBin:
    bin_start: float
    bin_end: float
    bin_center: float
    count: int
    label: str


@dataclass(frozen=True)
class BoxPlotSummary:
    min: float
    q1: float
    median: float
    q3: float
    max: float
    outliers: list[float] = field(default_factory=list)

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


# ---------- Contingency table ----------


@dataclass(frozen=True, eq=False)
class ContingencyTable:
    """Observed counts with rows and columns keyed by sorted category labels."""

    row_variable: str
    column_variable: str
    row_labels: list[str]
    column_labels: list[str]
    counts: np.ndarray

    @property
    def shape(self) -> tuple[int, int]:
        return len(self.row_labels), len(self.column_labels)

    @property
    def row_totals(self) -> np.ndarray:
        return self.counts.sum(axis=1)

    @property
    def column_totals(self) -> np.ndarray:
        return self.counts.sum(axis=0)

    @property
    def grand_total(self) -> int:
        return int(self.counts.sum())

    def to_dict(self) -> dict[str, dict[str, int]]:
        """Nested mapping row label -> column label -> count, in sorted order."""
        return {
            row: {col: int(self.counts[i, j]) for j, col in enumerate(self.column_labels)}
            for i, row in enumerate(self.row_labels)
        }

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.counts, index=self.row_labels, columns=self.column_labels)
        df.index.name = self.row_variable
        df.columns.name = self.column_variable
        return df


# ---------- Hypothesis tests ----------


@dataclass(frozen=True)
class TTestResult:
    test_type: str
    statistic: float | None
    degrees_of_freedom: int
    p_value: float | None
    n1: int
    n2: int
    mean1: float | None
    mean2: float | None
    mean_difference: float | None
    pooled_sd: float | None
    standard_error: float | None
    confidence_level: float
    confidence_interval: tuple[float, float] | None
    effect_size: float | None  # Cohen's d
    interpretation: str


@dataclass(frozen=True, eq=False)
class ChiSquareResult:
    test_type: str
    statistic: float
    degrees_of_freedom: int
    p_value: float | None
    contingency_table: ContingencyTable
    expected: np.ndarray
    n: int
    cramers_v: float | None
    interpretation: str
    odds_ratio: float | None = None  # 2x2 tables only
    odds_ratio_ci: tuple[float, float] | None = None


@dataclass(frozen=True)
class GroupStats:
    group: str
    n: int
    mean: float | None
    sd: float | None
    min: float
    max: float


@dataclass(frozen=True)
class PairwiseComparison:
    group1: str
    group2: str
    mean_difference: float | None
    ci_lower: float | None
    ci_upper: float | None
    p_value: float | None
    adjusted_p_value: float | None  # Bonferroni
    is_significant: bool


@dataclass(frozen=True)
class ANOVAResult:
    test_type: str
    f_statistic: float | None
    df_between: int
    df_within: int
    p_value: float | None
    group_means: dict[str, float | None]
    ss_between: float | None
    ss_within: float | None
    ss_total: float | None
    ms_between: float | None
    ms_within: float | None
    eta_squared: float | None
    interpretation: str
    group_stats: list[GroupStats] = field(default_factory=list)
    pairwise_comparisons: list[PairwiseComparison] | None = None
    bonferroni_alpha: float | None = None
    saturated: bool = False  # zero within-group variance with distinct means


@dataclass(frozen=True)
class RegressionCoefficient:
    variable: str
    coefficient: float
    standard_error: float | None
    t_statistic: float | None
    p_value: float | None
    ci_lower: float | None
    ci_upper: float | None


@dataclass(frozen=True)
class RegressionResult:
    test_type: str
    outcome: str
    predictor: str
    n: int
    degrees_of_freedom: int
    slope: RegressionCoefficient | None
    intercept: RegressionCoefficient | None
    r_squared: float | None
    adjusted_r_squared: float | None
    residual_variance: float | None
    f_statistic: float | None
    f_p_value: float | None
    interpretation: str
