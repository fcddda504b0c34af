"""Coercion helpers for the scalar cell values of a Dataset."""

import math
import numbers

MISSING_LABEL = "Missing"


def is_missing(value) -> bool:
    """Return True for None, NaN and blank strings."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def to_number(value) -> float | None:
    """
    Parse a cell value as a finite float.

    Booleans are never treated as numbers. Strings are parsed after stripping
    surrounding whitespace and must parse completely.

    Returns
    -------
    float or None
        The parsed value, or None if the value is missing, non-numeric, not
        finite or an integer too large for a float.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, numbers.Real):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def canonical_label(value) -> str | None:
    """
    Convert a cell value to the string used as a category key.

    Integral floats collapse onto their integer text so that ``2`` and ``2.0``
    land in the same category. Missing values map to None.
    """
    if is_missing(value):
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value).strip()
