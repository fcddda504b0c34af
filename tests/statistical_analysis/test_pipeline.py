"""Tests for pipeline module."""

import pytest

from src.dataset.schema import Dataset, Variable, VariableKind
from src.statistical_analysis.config import AnalysisConfig
from src.statistical_analysis.pipeline import (
    HypothesisTest,
    available_tests,
    run_descriptive_pipeline,
    run_test_pipeline,
)
from src.statistical_analysis.results import (
    ANOVAResult,
    CategoricalStats,
    ChiSquareResult,
    ContinuousStats,
    DateStats,
    InsufficientDataError,
    RegressionResult,
    TTestResult,
)

# Test data fixtures - add more here as needed
TRIAL = Dataset(
    columns=["id", "arm", "site", "sex", "dose", "response", "enrolled"],
    rows=[
        {"id": "P01", "arm": "treatment", "site": "north", "sex": "F", "dose": 10, "response": 5.1, "enrolled": "2024-01-03"},
        {"id": "P02", "arm": "control", "site": "south", "sex": "M", "dose": 0, "response": 3.9, "enrolled": "2024-01-09"},
        {"id": "P03", "arm": "treatment", "site": "east", "sex": "M", "dose": 20, "response": 6.4, "enrolled": "2024-02-11"},
        {"id": "P04", "arm": "control", "site": "north", "sex": "F", "dose": 0, "response": 4.2, "enrolled": "2024-02-15"},
        {"id": "P05", "arm": "treatment", "site": "south", "sex": "F", "dose": 15, "response": 5.8, "enrolled": "2024-02-20"},
        {"id": "P06", "arm": "control", "site": "east", "sex": "M", "dose": 5, "response": "4.4", "enrolled": "2024-03-02"},
        {"id": "P07", "arm": "treatment", "site": "north", "sex": "M", "dose": 25, "response": 7.0, "enrolled": None},
        {"id": "P08", "arm": "control", "site": "south", "sex": "F", "dose": 5, "response": None, "enrolled": "2024-03-30"},
        {"id": "P09", "arm": "treatment", "site": "east", "sex": "F", "dose": 30, "response": 7.7, "enrolled": "2024-04-04"},
        {"id": "P10", "arm": "control", "site": "north", "sex": "M", "dose": 10, "response": 4.9, "enrolled": "2024-04-19"},
    ],
)


def variable(name: str, kind: VariableKind, include: bool = True) -> Variable:
    return Variable(name=name, kind=kind, inferred_kind=kind, include_in_analysis=include)


VARIABLES = [
    variable("id", VariableKind.ID),
    variable("arm", VariableKind.CATEGORICAL),
    variable("site", VariableKind.CATEGORICAL),
    variable("sex", VariableKind.BOOLEAN, include=False),
    variable("dose", VariableKind.CONTINUOUS),
    variable("response", VariableKind.CONTINUOUS),
    variable("enrolled", VariableKind.DATETIME),
]


# ─────────────────────────────────────────────────────────────────────────────
# Descriptive pipeline
# ─────────────────────────────────────────────────────────────────────────────


class TestRunDescriptivePipeline:
    def test_skips_id_and_excluded_variables(self):
        result = run_descriptive_pipeline(TRIAL, VARIABLES)
        assert list(result) == ["arm", "site", "dose", "response", "enrolled"]

    def test_statistics_by_kind(self):
        result = run_descriptive_pipeline(TRIAL, VARIABLES)

        assert isinstance(result["arm"]["statistics"], CategoricalStats)
        assert isinstance(result["response"]["statistics"], ContinuousStats)
        assert isinstance(result["enrolled"]["statistics"], DateStats)
        assert result["response"]["statistics"].count == 9
        assert result["response"]["statistics"].missing == 1
        assert result["enrolled"]["statistics"].missing == 1

    def test_continuous_variables_get_histogram_and_box_plot(self):
        config = AnalysisConfig(histogram_bins=3, date_granularity="month")
        result = run_descriptive_pipeline(TRIAL, VARIABLES, config=config)

        assert len(result["dose"]["histogram"]) == 3
        assert sum(b.count for b in result["dose"]["histogram"]) == 10
        assert result["dose"]["box_plot"].median == 10.0
        assert "histogram" not in result["arm"]
        assert result["enrolled"]["statistics"].granularity == "month"

    def test_boolean_summarized_as_categorical(self):
        dataset = Dataset(columns=["flag"], rows=[{"flag": True}, {"flag": False}, {"flag": True}])
        result = run_descriptive_pipeline(dataset, [variable("flag", VariableKind.BOOLEAN)])
        assert result["flag"]["statistics"].mode == "true"

    def test_unknown_column_raises(self):
        with pytest.raises(KeyError):
            run_descriptive_pipeline(TRIAL, [variable("weight", VariableKind.CONTINUOUS)])


# ─────────────────────────────────────────────────────────────────────────────
# Test dispatcher
# ─────────────────────────────────────────────────────────────────────────────


class TestRunTestPipeline:
    def test_t_test(self):
        result = run_test_pipeline(TRIAL, "t-test", outcome="response", predictor="arm")

        assert isinstance(result, TTestResult)
        # groups in sorted label order: control, treatment
        assert result.n1 == 4
        assert result.n2 == 5
        assert result.mean_difference < 0

    def test_t_test_requires_two_groups(self):
        with pytest.raises(InsufficientDataError, match="exactly 2 groups"):
            run_test_pipeline(TRIAL, HypothesisTest.T_TEST, outcome="response", predictor="site")

    def test_chi_square(self):
        result = run_test_pipeline(TRIAL, HypothesisTest.CHI_SQUARE, outcome="arm", predictor="site")

        assert isinstance(result, ChiSquareResult)
        assert result.contingency_table.row_labels == ["control", "treatment"]
        assert result.contingency_table.column_labels == ["east", "north", "south"]
        assert result.degrees_of_freedom == 2

    def test_anova(self):
        result = run_test_pipeline(TRIAL, "anova", outcome="response", predictor="site")

        assert isinstance(result, ANOVAResult)
        assert list(result.group_means) == ["east", "north", "south"]
        assert len(result.pairwise_comparisons) == 3

    def test_anova_without_post_hoc(self):
        config = AnalysisConfig(post_hoc=False)
        result = run_test_pipeline(TRIAL, "anova", outcome="response", predictor="site", config=config)
        assert result.pairwise_comparisons is None

    def test_regression_uses_predictor_as_x(self):
        result = run_test_pipeline(TRIAL, "regression", outcome="response", predictor="dose")

        assert isinstance(result, RegressionResult)
        assert result.n == 9
        assert result.outcome == "response"
        assert result.slope.variable == "dose"
        assert result.slope.coefficient > 0

    def test_alpha_from_config(self):
        config = AnalysisConfig(alpha=0.01)
        result = run_test_pipeline(TRIAL, "t-test", outcome="response", predictor="arm", config=config)
        assert "0.01)" in result.interpretation

    def test_unknown_test_type_raises(self):
        with pytest.raises(ValueError):
            run_test_pipeline(TRIAL, "mann-whitney", outcome="response", predictor="arm")

    def test_unknown_column_raises(self):
        with pytest.raises(KeyError, match="weight"):
            run_test_pipeline(TRIAL, "anova", outcome="weight", predictor="arm")


# ─────────────────────────────────────────────────────────────────────────────
# Available tests
# ─────────────────────────────────────────────────────────────────────────────


class TestAvailableTests:
    def test_all_tests_available(self):
        assert available_tests(VARIABLES) == [
            HypothesisTest.T_TEST,
            HypothesisTest.CHI_SQUARE,
            HypothesisTest.ANOVA,
            HypothesisTest.REGRESSION,
        ]

    def test_only_continuous(self):
        variables = [variable("a", VariableKind.CONTINUOUS), variable("b", VariableKind.CONTINUOUS)]
        assert available_tests(variables) == [HypothesisTest.REGRESSION]

    def test_excluded_and_id_variables_ignored(self):
        variables = [
            variable("a", VariableKind.CONTINUOUS),
            variable("b", VariableKind.CATEGORICAL, include=False),
            variable("c", VariableKind.ID),
        ]
        assert available_tests(variables) == []

    def test_boolean_counts_as_grouping_variable(self):
        variables = [variable("a", VariableKind.CONTINUOUS), variable("b", VariableKind.BOOLEAN)]
        assert available_tests(variables) == [HypothesisTest.T_TEST, HypothesisTest.ANOVA]
