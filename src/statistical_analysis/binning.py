import logging

import numpy as np

from src.statistical_analysis.descriptive import quantiles, range_scale
from src.statistical_analysis.results import BoxPlotSummary, HistogramBin

logger = logging.getLogger(__name__)

OUTLIER_FENCE = 1.5


def _format_edge(value: float) -> str:
    return f"{value:g}"


def create_histogram(values, num_bins: int = 10) -> list[HistogramBin]:
    """
    Bucket numeric values into equal-width bins over [min, max].

    Bins are half-open, ``[start, end)``, except the last which also holds
    the maximum.

    Parameters
    ----------
    values : array-like
        Numeric values; non-finite entries are dropped.
    num_bins : int, optional
        Number of bins. Defaults to 10.

    Returns
    -------
    list of HistogramBin
        Empty for an empty sample; a single bin when all values are equal.
        A range too wide for a float is binned on rescaled values, so the
        edges stay finite.

    Raises
    ------
    ValueError
        If num_bins < 1.
    """
    if num_bins < 1:
        raise ValueError(f"num_bins must be at least 1, got {num_bins}")

    arr = np.asarray(values, dtype=float)
    arr = arr[np.isfinite(arr)]
    if len(arr) == 0:
        return []

    lo, hi = float(arr.min()), float(arr.max())
    if lo == hi:
        return [
            HistogramBin(
                bin_start=lo,
                bin_end=hi,
                bin_center=lo,
                count=len(arr),
                label=f"[{_format_edge(lo)}, {_format_edge(hi)}]",
            )
        ]

    scale = range_scale(lo, hi)
    if scale != 1.0:
        logger.debug(f"Histogram: range [{lo:g}, {hi:g}] overflows, binning rescaled values")
    counts, edges = np.histogram(arr / scale, bins=num_bins, range=(lo / scale, hi / scale))
    edges = edges * scale
    edges[0], edges[-1] = lo, hi

    bins = []
    for i, count in enumerate(counts):
        start, end = float(edges[i]), float(edges[i + 1])
        closing = "]" if i == len(counts) - 1 else ")"
        bins.append(
            HistogramBin(
                bin_start=start,
                bin_end=end,
                bin_center=start / 2.0 + end / 2.0,
                count=int(count),
                label=f"[{_format_edge(start)}, {_format_edge(end)}{closing}",
            )
        )
    return bins


def create_box_plot_data(values) -> BoxPlotSummary | None:
    """
    Five-number summary with 1.5 x IQR outlier fences.

    Whiskers (``min`` and ``max``) are the most extreme values inside the
    fences; values outside are listed as outliers in ascending order.

    Returns
    -------
    BoxPlotSummary or None
        None when there are no finite values.
    """
    arr = np.asarray(values, dtype=float)
    arr = np.sort(arr[np.isfinite(arr)])
    if len(arr) == 0:
        return None

    q1, median, q3 = quantiles(arr, [0.25, 0.5, 0.75])
    iqr = q3 - q1
    lower_fence = q1 - OUTLIER_FENCE * iqr
    upper_fence = q3 + OUTLIER_FENCE * iqr

    inside = arr[(arr >= lower_fence) & (arr <= upper_fence)]
    outliers = arr[(arr < lower_fence) | (arr > upper_fence)]

    logger.debug(f"Box plot: IQR={iqr:.4f}, fences=({lower_fence:.4f}, {upper_fence:.4f}), {len(outliers)} outlier(s)")

    return BoxPlotSummary(
        min=float(inside.min()),
        q1=q1,
        median=median,
        q3=q3,
        max=float(inside.max()),
        outliers=[float(v) for v in outliers],
    )
