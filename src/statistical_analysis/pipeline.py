import logging
from enum import Enum

from src.dataset.schema import Dataset, Variable, VariableKind
from src.statistical_analysis.binning import create_box_plot_data, create_histogram
from src.statistical_analysis.config import AnalysisConfig, get_default_config
from src.statistical_analysis.descriptive import describe_variable
from src.statistical_analysis.results import InsufficientDataError
from src.statistical_analysis.statistical_tests import (
    chi_square_test,
    independent_t_test,
    linear_regression,
    one_way_anova,
)
from src.statistical_analysis.utils import (
    extract_numeric_values,
    extract_paired_values,
    group_numeric_data,
)

logger = logging.getLogger(__name__)

GROUPING_KINDS = (VariableKind.CATEGORICAL, VariableKind.BOOLEAN)


class HypothesisTest(Enum):
    T_TEST = "t-test"
    CHI_SQUARE = "chi-square"
    ANOVA = "anova"
    REGRESSION = "regression"


def run_descriptive_pipeline(
    dataset: Dataset,
    variables: list[Variable],
    config: AnalysisConfig | None = None,
) -> dict:
    """
    Compute descriptive statistics for every included variable of a dataset.

    Variables of kind ``id`` and those with ``include_in_analysis`` unset are
    skipped. Boolean variables are summarized as categorical.

    Parameters
    ----------
    dataset : Dataset
        Loaded data.
    variables : list of Variable
        Column classification; the declared ``kind`` is trusted as given.
    config : AnalysisConfig, optional
        Histogram bin count and date granularity. Defaults to
        ``get_default_config()``.

    Returns
    -------
    dict
        {variable_name: {"kind": VariableKind, "statistics": ...}}. Continuous
        variables additionally carry "histogram" and "box_plot".

    Raises
    ------
    KeyError
        If a variable names a column that is not in the dataset.
    """
    config = config or get_default_config()
    out = {}

    for variable in variables:
        if not variable.include_in_analysis:
            logger.info(f"Skipping variable '{variable.name}': excluded from analysis")
            continue
        if variable.kind == VariableKind.ID:
            logger.info(f"Skipping variable '{variable.name}': identifier column")
            continue

        values = dataset.column(variable.name)
        stats = describe_variable(values, variable.kind, date_granularity=config.date_granularity)
        entry = {"kind": variable.kind, "statistics": stats}

        if variable.kind == VariableKind.CONTINUOUS:
            numeric = extract_numeric_values(dataset.rows, variable.name)
            entry["histogram"] = create_histogram(numeric, num_bins=config.histogram_bins)
            entry["box_plot"] = create_box_plot_data(numeric)

        if stats is not None and stats.count == 0:
            logger.warning(f"Variable '{variable.name}' has no usable values ({stats.missing} missing)")

        out[variable.name] = entry

    logger.info(f"Computed descriptive statistics for {len(out)} of {len(variables)} variables")

    return out


def run_test_pipeline(
    dataset: Dataset,
    test_type,
    outcome: str,
    predictor: str,
    config: AnalysisConfig | None = None,
):
    """
    Run one hypothesis test on two columns of a dataset.

    Parameters
    ----------
    dataset : Dataset
        Loaded data.
    test_type : HypothesisTest or str
        "t-test", "chi-square", "anova" or "regression".
    outcome : str
        Continuous outcome column (t-test, ANOVA, regression) or the row
        variable of the contingency table (chi-square).
    predictor : str
        Grouping column (t-test, ANOVA), continuous predictor (regression)
        or the column variable of the contingency table (chi-square).
    config : AnalysisConfig, optional
        Significance and confidence levels. Defaults to
        ``get_default_config()``.

    Returns
    -------
    TTestResult, ChiSquareResult, ANOVAResult or RegressionResult

    Raises
    ------
    ValueError
        If the test type is unknown.
    KeyError
        If either column is not in the dataset.
    InsufficientDataError
        If the data do not meet the test's preconditions.
    """
    test_type = HypothesisTest(test_type)
    config = config or get_default_config()
    for name in (outcome, predictor):
        if name not in dataset.columns:
            raise KeyError(f"Unknown column: {name}")

    rows = dataset.rows
    logger.info(f"Running {test_type.value}: outcome='{outcome}', predictor='{predictor}'")

    if test_type == HypothesisTest.T_TEST:
        groups = group_numeric_data(rows, outcome, predictor)
        if len(groups) != 2:
            raise InsufficientDataError(
                f"t-test requires exactly 2 groups in '{predictor}', found {len(groups)}"
            )
        (label1, group1), (label2, group2) = groups.items()
        logger.debug(f"t-test groups: '{label1}' (n={len(group1)}) vs '{label2}' (n={len(group2)})")
        return independent_t_test(
            group1, group2, confidence_level=config.confidence_level, alpha=config.alpha
        )

    if test_type == HypothesisTest.CHI_SQUARE:
        return chi_square_test(rows, outcome, predictor, alpha=config.alpha)

    if test_type == HypothesisTest.ANOVA:
        groups = group_numeric_data(rows, outcome, predictor)
        return one_way_anova(groups, post_hoc=config.post_hoc, alpha=config.alpha)

    x, y = extract_paired_values(rows, predictor, outcome)
    return linear_regression(
        x,
        y,
        outcome_name=outcome,
        predictor_name=predictor,
        alpha=config.alpha,
        confidence_level=config.confidence_level,
    )


def available_tests(variables: list[Variable]) -> list[HypothesisTest]:
    """
    List the tests whose variable requirements the included variables meet.

    t-test and ANOVA need a continuous and a categorical (or boolean)
    variable, chi-square two categorical ones, regression two continuous ones.
    """
    included = [v for v in variables if v.include_in_analysis and v.kind != VariableKind.ID]
    n_continuous = sum(v.kind == VariableKind.CONTINUOUS for v in included)
    n_grouping = sum(v.kind in GROUPING_KINDS for v in included)

    tests = []
    if n_continuous >= 1 and n_grouping >= 1:
        tests.append(HypothesisTest.T_TEST)
    if n_grouping >= 2:
        tests.append(HypothesisTest.CHI_SQUARE)
    if n_continuous >= 1 and n_grouping >= 1:
        tests.append(HypothesisTest.ANOVA)
    if n_continuous >= 2:
        tests.append(HypothesisTest.REGRESSION)
    return tests
