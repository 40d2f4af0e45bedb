from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

import pandas as pd

ColumnType = Literal["Integer", "Logical", "Numeric", "Factor", "Character", "Other"]

INFERRED_TYPE_MAP: dict[str, ColumnType] = {
    "integer": "Integer",
    "boolean": "Logical",
    "floating": "Numeric",
    "mixed-integer-float": "Numeric",
    "decimal": "Numeric",
    "categorical": "Factor",
    "string": "Character",
    "bytes": "Character",
    "mixed": "Character",
    "mixed-integer": "Character",
    "empty": "Character",
}


@dataclass(frozen=True)
class ColumnMetadata:
    name: str
    type: ColumnType
    missing_fraction: float
    distinct_count: int
    missing_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def infer_column_type(series: pd.Series) -> ColumnType:
    if isinstance(series.dtype, pd.CategoricalDtype):
        return "Factor"
    if pd.api.types.is_bool_dtype(series.dtype):
        return "Logical"
    inferred = pd.api.types.infer_dtype(series, skipna=True)
    return INFERRED_TYPE_MAP.get(inferred, "Other")


def profile_column(series: pd.Series, name: str | None = None) -> ColumnMetadata:
    total = int(len(series))
    missing_count = int(series.isna().sum())
    missing_fraction = float(missing_count / total) if total else 1.0
    return ColumnMetadata(
        name=str(name if name is not None else series.name),
        type=infer_column_type(series),
        missing_fraction=missing_fraction,
        distinct_count=int(series.nunique(dropna=True)),
        missing_count=missing_count,
    )


def profile_columns(df: pd.DataFrame) -> list[ColumnMetadata]:
    """Build one metadata record per column, in column order."""
    return [profile_column(df[column], name=str(column)) for column in df.columns]


def metadata_table(metadata: list[ColumnMetadata]) -> pd.DataFrame:
    if not metadata:
        return pd.DataFrame(
            columns=["name", "type", "missing_fraction", "distinct_count", "missing_count"]
        )
    return pd.DataFrame([record.to_dict() for record in metadata])
