"""Configuration for the analysis pipeline."""

import os
from dataclasses import dataclass

# Default settings (can be overridden via environment variables)
DEFAULT_ALPHA = float(os.getenv("DATA_ANALYZER_ALPHA", "0.05"))
DEFAULT_CONFIDENCE_LEVEL = float(os.getenv("DATA_ANALYZER_CONFIDENCE_LEVEL", "0.95"))
DEFAULT_HISTOGRAM_BINS = int(os.getenv("DATA_ANALYZER_HISTOGRAM_BINS", "10"))
DEFAULT_DATE_GRANULARITY = os.getenv("DATA_ANALYZER_DATE_GRANULARITY", "day")

DATE_GRANULARITIES = ("year", "month", "week", "day")


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings shared by the descriptive and test pipelines."""

    alpha: float = DEFAULT_ALPHA
    confidence_level: float = DEFAULT_CONFIDENCE_LEVEL
    histogram_bins: int = DEFAULT_HISTOGRAM_BINS
    date_granularity: str = DEFAULT_DATE_GRANULARITY
    # Run Bonferroni pairwise comparisons after ANOVA
    post_hoc: bool = True

    def __post_init__(self):
        if not 0 < self.alpha < 1:
            raise ValueError(f"alpha must be in (0, 1), got {self.alpha}")
        if not 0 < self.confidence_level < 1:
            raise ValueError(f"confidence_level must be in (0, 1), got {self.confidence_level}")
        if self.histogram_bins < 1:
            raise ValueError(f"histogram_bins must be positive, got {self.histogram_bins}")
        if self.date_granularity not in DATE_GRANULARITIES:
            raise ValueError(
                f"date_granularity must be one of {DATE_GRANULARITIES}, "
                f"got '{self.date_granularity}'"
            )


def get_default_config() -> AnalysisConfig:
    """
    Get the default analysis configuration.

    Each default can be overridden with the DATA_ANALYZER_ALPHA,
    DATA_ANALYZER_CONFIDENCE_LEVEL, DATA_ANALYZER_HISTOGRAM_BINS and
    DATA_ANALYZER_DATE_GRANULARITY environment variables.
    """
    return AnalysisConfig()
