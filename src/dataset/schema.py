import math
from enum import Enum
from typing import Any, Union

import numpy as np
import pandas as pd
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)

# A single cell: number, text, boolean or missing.
Scalar = Union[StrictBool, StrictInt, StrictFloat, StrictStr, None]


# ---------- Variable ----------


class VariableKind(Enum):
    """Declared or inferred measurement level of a column."""

    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    ID = "id"


class Variable(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str
    kind: VariableKind
    inferred_kind: VariableKind
    sample_values: list[Scalar] = Field(default_factory=list)
    unique_count: int = Field(default=0, ge=0)
    include_in_analysis: bool = True


# ---------- Dataset ----------


class Dataset(BaseModel):
    """
    Immutable tabular snapshot handed to the engine by the ingestion layer.

    Fields cannot be reassigned, but ``rows`` holds plain dicts that Python
    cannot freeze. Callers must treat them as read-only; the engine never
    mutates them, and ``column()`` and ``to_frame()`` return fresh copies.
    Build a new Dataset (``from_records``, ``from_frame``) to change data.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    columns: list[str]
    rows: list[dict[str, Scalar]]

    @model_validator(mode="after")
    def _check_columns(self) -> "Dataset":
        seen = set()
        for name in self.columns:
            if name in seen:
                raise ValueError(f"Duplicate column name '{name}'.")
            seen.add(name)

        for i, row in enumerate(self.rows):
            unknown = set(row) - seen
            if unknown:
                raise ValueError(f"Row {i}: unknown column(s) {sorted(unknown)}.")
        return self

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def column(self, name: str) -> list[Any]:
        """Return the values of one column in row order; absent cells are None."""
        if name not in self.columns:
            raise KeyError(f"Unknown column: {name}")
        return [row.get(name) for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        """Return the dataset as a DataFrame with object columns."""
        return pd.DataFrame(self.rows, columns=self.columns, dtype=object)

    @classmethod
    def from_records(cls, records: list[dict[str, Any]]) -> "Dataset":
        """Build a dataset from row mappings, ordering columns by first appearance."""
        columns = []
        for record in records:
            for key in record:
                if key not in columns:
                    columns.append(key)
        return cls(columns=columns, rows=[dict(r) for r in records])

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "Dataset":
        """
        Build a dataset from a DataFrame.

        NaN/NaT cells become None, numpy scalars become Python scalars and
        timestamps become ISO-8601 strings.
        """
        columns = [str(c) for c in df.columns]
        rows = []
        for record in df.itertuples(index=False, name=None):
            rows.append({col: _to_scalar(value) for col, value in zip(columns, record)})
        return cls(columns=columns, rows=rows)


def _to_scalar(value):
    """Convert a DataFrame cell into a plain Python scalar."""
    if value is None or value is pd.NaT:
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, (bool, int, float, str)):
        return value
    return str(value)
