import logging

import numpy as np
import pandas as pd

from src.dataset.values import MISSING_LABEL, canonical_label, is_missing, to_number
from src.statistical_analysis.results import ContingencyTable

logger = logging.getLogger(__name__)


def extract_numeric_values(rows, variable: str) -> np.ndarray:
    """
    Collect the values of one column that parse as finite numbers.

    Parameters
    ----------
    rows : list of dict
        Row records of a Dataset.
    variable : str
        Column name.

    Returns
    -------
    np.ndarray
        Float array in row order; missing and non-numeric cells are dropped.
    """
    values = [to_number(row.get(variable)) for row in rows]
    return np.array([v for v in values if v is not None], dtype=float)


def extract_paired_values(rows, x_variable: str, y_variable: str) -> tuple[np.ndarray, np.ndarray]:
    """
    Collect (x, y) pairs from rows where both cells parse as finite numbers.

    Returns
    -------
    tuple of np.ndarray
        Aligned x and y arrays.
    """
    xs, ys = [], []
    for row in rows:
        x = to_number(row.get(x_variable))
        y = to_number(row.get(y_variable))
        if x is None or y is None:
            continue
        xs.append(x)
        ys.append(y)
    return np.array(xs, dtype=float), np.array(ys, dtype=float)


def get_unique_groups(rows, variable: str) -> list[str]:
    """Sorted canonical labels of the non-missing values of a column."""
    labels = {canonical_label(row.get(variable)) for row in rows}
    labels.discard(None)
    return sorted(labels)


def group_numeric_data(rows, numeric_variable: str, group_variable: str) -> dict[str, np.ndarray]:
    """
    Partition a numeric column by a categorical key.

    The key is coerced to its canonical label; a missing key becomes the
    "Missing" group. Rows whose numeric value is missing or does not parse
    are skipped.

    Returns
    -------
    dict
        {group_label: values}, ordered by sorted group label.
    """
    grouped: dict[str, list[float]] = {}
    skipped = 0

    for row in rows:
        value = to_number(row.get(numeric_variable))
        if value is None:
            skipped += 1
            continue
        label = canonical_label(row.get(group_variable))
        grouped.setdefault(MISSING_LABEL if label is None else label, []).append(value)

    if skipped:
        logger.debug(f"Skipped {skipped} row(s) with no numeric value for '{numeric_variable}'")

    return {label: np.array(grouped[label], dtype=float) for label in sorted(grouped)}


def build_contingency_table(rows, row_variable: str, column_variable: str) -> ContingencyTable:
    """
    Cross-tabulate two categorical columns.

    Values are keyed by canonical label and a missing value is counted in an
    explicit "Missing" category rather than dropped. Row and column labels
    are sorted.

    Returns
    -------
    ContingencyTable
        Observed counts; empty when there are no rows.
    """
    row_keys = []
    column_keys = []
    for row in rows:
        r = row.get(row_variable)
        c = row.get(column_variable)
        row_keys.append(MISSING_LABEL if is_missing(r) else canonical_label(r))
        column_keys.append(MISSING_LABEL if is_missing(c) else canonical_label(c))

    if not row_keys:
        return ContingencyTable(
            row_variable=row_variable,
            column_variable=column_variable,
            row_labels=[],
            column_labels=[],
            counts=np.zeros((0, 0), dtype=int),
        )

    table = pd.crosstab(
        pd.Series(row_keys, name=row_variable),
        pd.Series(column_keys, name=column_variable),
    )
    table = table.sort_index(axis=0).sort_index(axis=1)

    return ContingencyTable(
        row_variable=row_variable,
        column_variable=column_variable,
        row_labels=[str(label) for label in table.index],
        column_labels=[str(label) for label in table.columns],
        counts=table.to_numpy(dtype=int),
    )


def contingency_table_from_counts(
    counts,
    row_labels=None,
    column_labels=None,
    row_variable: str = "rows",
    column_variable: str = "columns",
) -> ContingencyTable:
    """
    Wrap a matrix of observed counts as a ContingencyTable.

    Parameters
    ----------
    counts : array-like
        2-D matrix of non-negative counts.
    row_labels, column_labels : list of str, optional
        Labels in matrix order. Default to "0", "1", ...

    Raises
    ------
    ValueError
        If the matrix is not 2-D, contains negative or non-finite counts, or
        the labels do not match its shape.
    """
    matrix = np.asarray(counts, dtype=float)
    if matrix.ndim != 2:
        raise ValueError("counts must be a 2-D matrix")
    if not np.all(np.isfinite(matrix)) or np.any(matrix < 0):
        raise ValueError("counts must be finite and non-negative")

    n_rows, n_cols = matrix.shape
    row_labels = [str(i) for i in range(n_rows)] if row_labels is None else list(row_labels)
    column_labels = [str(j) for j in range(n_cols)] if column_labels is None else list(column_labels)
    if len(row_labels) != n_rows or len(column_labels) != n_cols:
        raise ValueError("Labels do not match the shape of counts")

    return ContingencyTable(
        row_variable=row_variable,
        column_variable=column_variable,
        row_labels=row_labels,
        column_labels=column_labels,
        counts=matrix.astype(int),
    )
