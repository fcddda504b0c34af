import logging
import math

import numpy as np

from src.statistical_analysis.results import InsufficientDataError, NormalityTestResult, finite_or_none
from src.statistical_analysis.special_functions import chi_square_sf

logger = logging.getLogger(__name__)

JARQUE_BERA = "Jarque-Bera"
MIN_OBSERVATIONS = 8
NORMALITY_ALPHA = 0.05


def _is_constant(arr: np.ndarray) -> bool:
    return len(arr) == 0 or bool(np.all(arr == arr[0]))


def sample_skewness(values) -> float | None:
    """
    Adjusted Fisher-Pearson sample skewness.

    ``n / ((n - 1)(n - 2)) * sum(((x - mean) / s)^3)`` with s the sample
    standard deviation. None when n < 3, the values are constant or the
    variance overflows.
    """
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    if n < 3 or _is_constant(arr):
        return None
    with np.errstate(over="ignore", invalid="ignore"):
        deviations = arr - arr.mean()
        sd = np.sqrt(np.sum(deviations**2) / (n - 1))
        if sd == 0 or not np.isfinite(sd):
            return None
        z = deviations / sd
        skewness = n * np.sum(z**3) / ((n - 1) * (n - 2))
    return finite_or_none(skewness)


def sample_kurtosis(values) -> float | None:
    """
    Unbiased sample excess kurtosis (G2).

    None when n < 4, the values are constant or the variance overflows.
    """
    arr = np.asarray(values, dtype=float)
    n = len(arr)
    if n < 4 or _is_constant(arr):
        return None
    with np.errstate(over="ignore", invalid="ignore"):
        deviations = arr - arr.mean()
        m2 = np.sum(deviations**2)
        if m2 == 0 or not np.isfinite(m2):
            return None
        # sum(z^4) == m4 / m2^2
        z = deviations / np.sqrt(m2)
        kurtosis = ((n - 1) / ((n - 2) * (n - 3))) * (n * (n + 1) * np.sum(z**4) - 3 * (n - 1))
    return finite_or_none(kurtosis)


def jarque_bera(n: int, skewness: float | None, kurtosis: float | None) -> NormalityTestResult | None:
    """
    Jarque-Bera normality test from precomputed moments.

    Parameters
    ----------
    n : int
        Number of observations.
    skewness : float or None
        Sample skewness S.
    kurtosis : float or None
        Sample (non-excess) kurtosis K; a normal distribution has K = 3.

    Returns
    -------
    NormalityTestResult or None
        ``JB = (n / 6) (S^2 + (K - 3)^2 / 4)`` with its chi-square(2) upper
        tail p-value, or None (not computable) when n < 8 or a moment is
        missing or non-finite.
    """
    if n < MIN_OBSERVATIONS:
        return None
    if skewness is None or kurtosis is None:
        return None
    if not (math.isfinite(skewness) and math.isfinite(kurtosis)):
        return None

    excess = kurtosis - 3.0
    statistic = (n / 6.0) * (skewness * skewness + excess * excess / 4.0)
    if not math.isfinite(statistic):
        return None
    p_value = chi_square_sf(statistic, 2)
    if math.isnan(p_value):
        return None
    p_value = min(1.0, max(0.0, p_value))

    logger.debug(f"Jarque-Bera: JB={statistic:.4f}, pvalue={p_value:.4f}, n={n}")

    return NormalityTestResult(
        test_name=JARQUE_BERA,
        statistic=statistic,
        p_value=p_value,
        is_normal=p_value > NORMALITY_ALPHA,
    )


def jarque_bera_test(values) -> NormalityTestResult | None:
    """
    Jarque-Bera test on raw observations.

    Non-finite values are dropped first.

    Raises
    ------
    InsufficientDataError
        If fewer than 8 finite observations remain.
    """
    arr = np.asarray(values, dtype=float)
    arr = arr[np.isfinite(arr)]
    if len(arr) < MIN_OBSERVATIONS:
        raise InsufficientDataError(
            f"Jarque-Bera test requires at least {MIN_OBSERVATIONS} observations, "
            f"found {len(arr)}"
        )

    skewness = sample_skewness(arr)
    excess_kurtosis = sample_kurtosis(arr)
    kurtosis = None if excess_kurtosis is None else excess_kurtosis + 3.0
    return jarque_bera(len(arr), skewness, kurtosis)
