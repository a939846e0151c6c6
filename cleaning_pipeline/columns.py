"""
Column Contracts
================
Classifies DataFrame columns into the three kinds the cleaning stages
understand (numeric, categorical, temporal) and enforces each stage's
input contract: the named columns must exist and be of the right kind.
"""

from typing import Any, Iterable

import pandas as pd

from cleaning_pipeline.config import COLUMN_KINDS
from cleaning_pipeline.exceptions import MissingColumnError, TypeMismatchError


def column_kind(series: pd.Series) -> str:
    """Return 'numeric', 'temporal' or 'categorical' for a column."""
    if pd.api.types.is_bool_dtype(series):
        return "categorical"
    if pd.api.types.is_datetime64_any_dtype(series) or pd.api.types.is_timedelta64_dtype(series):
        return "temporal"
    if isinstance(series.dtype, pd.CategoricalDtype):
        return "categorical"
    if pd.api.types.is_numeric_dtype(series):
        return "numeric"
    return "categorical"


def ensure_dataframe(df: Any, stage: str | None = None) -> pd.DataFrame:
    """Reject anything that is not a DataFrame."""
    if not isinstance(df, pd.DataFrame):
        raise TypeMismatchError(None, "a pandas DataFrame", type(df).__name__, stage=stage)
    return df


def resolve_columns(
    df: pd.DataFrame,
    columns: str | Iterable[str] | None,
    stage: str,
    kinds: Iterable[str] | None = None,
) -> list[str]:
    """
    Turn a stage's ``columns`` parameter into a checked list of names.

    ``None`` selects every column whose kind is in ``kinds`` (or all columns
    when ``kinds`` is not given). Explicitly named columns must exist and,
    when ``kinds`` is given, be of one of those kinds.
    """
    allowed = tuple(kinds) if kinds is not None else COLUMN_KINDS

    if columns is None:
        return [col for col in df.columns if column_kind(df[col]) in allowed]

    if isinstance(columns, str):
        columns = [columns]

    resolved = []
    for col in columns:
        require_column(df, col, stage)
        if kinds is not None:
            require_kind(df, col, allowed, stage)
        resolved.append(col)
    return resolved


def require_column(df: pd.DataFrame, column: str, stage: str) -> None:
    if column not in df.columns:
        raise MissingColumnError(column, stage=stage, available=list(df.columns))


def require_kind(df: pd.DataFrame, column: str, kinds: Iterable[str], stage: str) -> None:
    kinds = tuple(kinds)
    actual = column_kind(df[column])
    if actual not in kinds:
        raise TypeMismatchError(
            column,
            expected=" or ".join(kinds),
            actual=f"{actual} ({df[column].dtype})",
            stage=stage,
        )


def row_labels(mask: pd.Series) -> list:
    """Return the index labels where ``mask`` is True, as plain Python values."""
    return [to_python(label) for label in mask[mask].index]


def to_python(val: Any) -> Any:
    if hasattr(val, "item"):  # numpy types
        return val.item()
    return val
