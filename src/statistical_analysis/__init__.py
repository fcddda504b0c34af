"""Statistical inference engine: descriptive statistics, hypothesis tests and special functions."""

from src.statistical_analysis.binning import create_box_plot_data, create_histogram
from src.statistical_analysis.config import AnalysisConfig, get_default_config
from src.statistical_analysis.descriptive import (
    calculate_categorical_stats,
    calculate_continuous_stats,
    calculate_date_stats,
    describe_variable,
)
from src.statistical_analysis.normality import jarque_bera, jarque_bera_test
from src.statistical_analysis.pipeline import (
    HypothesisTest,
    available_tests,
    run_descriptive_pipeline,
    run_test_pipeline,
)
from src.statistical_analysis.results import InsufficientDataError, SATURATED_STATISTIC
from src.statistical_analysis.statistical_tests import (
    chi_square_test,
    chi_square_test_from_table,
    independent_t_test,
    linear_regression,
    one_way_anova,
)
from src.statistical_analysis.utils import (
    build_contingency_table,
    contingency_table_from_counts,
    group_numeric_data,
)

__all__ = [
    # Pipelines
    "HypothesisTest",
    "available_tests",
    "run_descriptive_pipeline",
    "run_test_pipeline",
    # Configuration
    "AnalysisConfig",
    "get_default_config",
    # Descriptive statistics
    "calculate_categorical_stats",
    "calculate_continuous_stats",
    "calculate_date_stats",
    "describe_variable",
    "jarque_bera",
    "jarque_bera_test",
    # Hypothesis tests
    "chi_square_test",
    "chi_square_test_from_table",
    "independent_t_test",
    "linear_regression",
    "one_way_anova",
    # Binning and grouping
    "build_contingency_table",
    "contingency_table_from_counts",
    "create_box_plot_data",
    "create_histogram",
    "group_numeric_data",
    # Errors
    "InsufficientDataError",
    "SATURATED_STATISTIC",
]
