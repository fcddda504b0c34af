"""Input data model consumed by the statistical engine."""

from src.dataset.schema import Dataset, Scalar, Variable, VariableKind
from src.dataset.values import MISSING_LABEL, canonical_label, is_missing, to_number

__all__ = [
    # Schema models
    "Dataset",
    "Scalar",
    "Variable",
    "VariableKind",
    # Value coercion
    "MISSING_LABEL",
    "canonical_label",
    "is_missing",
    "to_number",
]
