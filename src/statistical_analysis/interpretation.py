"""
Plain-language interpretation of test results.

Effect-size bands:

- Cohen's d (absolute): < 0.2 negligible, < 0.5 small, < 0.8 medium, else large
- Cramér's V: < 0.1 weak, < 0.3 moderate, else strong
- eta-squared: < 0.01 small, < 0.06 medium, else large
"""

import math

NOT_AVAILABLE = "N/A"


def format_statistic(value: float | None, decimals: int = 2) -> str:
    """Format a numeric result field, rendering not-computable values as "N/A"."""
    if value is None or not math.isfinite(value):
        return NOT_AVAILABLE
    return f"{value:.{decimals}f}"


def _significance(p_value: float | None, alpha: float, significant: str, not_significant: str):
    if p_value is None:
        return "Statistical significance could not be determined."
    if p_value < alpha:
        return f"{significant} (p < {alpha:g})."
    return f"{not_significant} (p ≥ {alpha:g})."


def cohens_d_band(d: float | None) -> str | None:
    if d is None:
        return None
    abs_d = abs(d)
    if abs_d < 0.2:
        return "negligible"
    if abs_d < 0.5:
        return "small"
    if abs_d < 0.8:
        return "medium"
    return "large"


def cramers_v_band(v: float | None) -> str | None:
    if v is None:
        return None
    if v < 0.1:
        return "weak"
    if v < 0.3:
        return "moderate"
    return "strong"


def eta_squared_band(eta_squared: float | None) -> str | None:
    if eta_squared is None:
        return None
    if eta_squared < 0.01:
        return "small"
    if eta_squared < 0.06:
        return "medium"
    return "large"


def interpret_t_test(p_value: float | None, cohens_d: float | None, alpha: float = 0.05) -> str:
    text = _significance(
        p_value,
        alpha,
        "Statistically significant difference between groups",
        "No statistically significant difference between groups",
    )
    band = cohens_d_band(cohens_d)
    if band is None:
        return text + " Effect size could not be computed."
    return text + f" Effect size is {band}."


def interpret_chi_square(p_value: float | None, cramers_v: float | None, alpha: float = 0.05) -> str:
    text = _significance(
        p_value,
        alpha,
        "Statistically significant association between variables",
        "No statistically significant association between variables",
    )
    band = cramers_v_band(cramers_v)
    if band is None:
        return text + " Strength of association could not be computed."
    return text + f" Association is {band}."


def interpret_anova(p_value: float | None, eta_squared: float | None, alpha: float = 0.05) -> str:
    text = _significance(
        p_value,
        alpha,
        "Statistically significant difference between groups",
        "No statistically significant difference between groups",
    )
    band = eta_squared_band(eta_squared)
    if band is None:
        return text + " Effect size could not be computed."
    return text + f" Effect size is {band}."


def interpret_regression(p_value: float | None, r_squared: float | None, alpha: float = 0.05) -> str:
    text = _significance(
        p_value,
        alpha,
        "The predictor is statistically significant",
        "The predictor is not statistically significant",
    )
    if r_squared is None:
        return text + " Explained variance could not be computed."
    return text + f" The model explains {r_squared * 100:.1f}% of the variance."


def interpret_skewness(skewness: float | None) -> str:
    if skewness is None:
        return NOT_AVAILABLE
    if skewness > 1:
        return "Highly right-skewed"
    if skewness > 0.5:
        return "Moderately right-skewed"
    if skewness > -0.5:
        return "Approximately symmetric"
    if skewness > -1:
        return "Moderately left-skewed"
    return "Highly left-skewed"


def interpret_kurtosis(kurtosis: float | None) -> str:
    """Describe excess kurtosis."""
    if kurtosis is None:
        return NOT_AVAILABLE
    if kurtosis > 3:
        return "Heavy-tailed (leptokurtic)"
    if kurtosis < -3:
        return "Light-tailed (platykurtic)"
    return "Normal-tailed (mesokurtic)"
