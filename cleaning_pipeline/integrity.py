"""
Integrity Checks Module
=======================
Rule-based checks that guard the consistency of a dataset:

  - referential integrity: foreign-key values must exist in a reference set
  - unique keys
  - not-null columns
  - allowed (categorical) values
  - numeric ranges

Every check takes an ``action``:
  flag   record the violating rows in the report, leave the data unchanged
  drop   remove the violating rows
  raise  stop the pipeline with IntegrityError
"""

import logging
from typing import Any, Iterable

import pandas as pd

from cleaning_pipeline.columns import require_column, require_kind, resolve_columns, row_labels
from cleaning_pipeline.config import INTEGRITY_ACTIONS
from cleaning_pipeline.exceptions import ConfigurationError, IntegrityError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Integrity"

# Violating row labels quoted in IntegrityError messages
MAX_EXAMPLES = 5


# ------------------------------------------------------------------
# Referential integrity
# ------------------------------------------------------------------
def check_referential_integrity(
    df: pd.DataFrame,
    column: str,
    reference: Iterable | pd.Series | pd.DataFrame,
    reference_column: str | None = None,
    action: str = "flag",
) -> tuple[pd.DataFrame, StageResult]:
    """
    Every non-missing value of ``column`` must appear in ``reference``.

    ``reference`` is a collection of valid keys, a Series, or a DataFrame
    together with ``reference_column``.
    """
    stage = "check_referential_integrity"
    _check_action(action, stage)
    require_column(df, column, stage)

    if isinstance(reference, pd.DataFrame):
        if reference_column is None:
            raise ConfigurationError(f"{stage}: reference_column is required when reference is a DataFrame")
        require_column(reference, reference_column, stage)
        keys = reference[reference_column].dropna()
    elif isinstance(reference, (str, bytes)) or not isinstance(reference, Iterable):
        raise ConfigurationError(f"{stage}: reference must be a collection of keys, got {type(reference).__name__}")
    else:
        keys = pd.Series(list(reference), dtype=object).dropna()

    mask = df[column].notna() & ~df[column].isin(keys.unique())
    return _resolve(
        df, mask, stage, action, column,
        f"{column}: {{n}} value(s) missing from reference ({keys.nunique()} keys)",
        {"reference_keys": int(keys.nunique())},
    )


# ------------------------------------------------------------------
# Unique keys
# ------------------------------------------------------------------
def check_unique(
    df: pd.DataFrame,
    columns: str | list[str],
    action: str = "flag",
) -> tuple[pd.DataFrame, StageResult]:
    """Key columns must be unique; repeats after the first occurrence violate."""
    stage = "check_unique"
    _check_action(action, stage)
    cols = resolve_columns(df, columns, stage)
    mask = df.duplicated(subset=cols, keep="first")
    key = ", ".join(map(str, cols))
    return _resolve(df, mask, stage, action, key, f"{key}: {{n}} duplicate key(s)", {})


# ------------------------------------------------------------------
# Not null
# ------------------------------------------------------------------
def check_not_null(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    action: str = "flag",
) -> tuple[pd.DataFrame, StageResult]:
    stage = "check_not_null"
    _check_action(action, stage)
    cols = resolve_columns(df, columns, stage)
    mask = df[cols].isna().any(axis=1) if cols else pd.Series(False, index=df.index)
    per_column = {col: int(df[col].isna().sum()) for col in cols if df[col].isna().any()}
    key = ", ".join(map(str, cols)) if columns is not None else "all columns"
    return _resolve(df, mask, stage, action, key, f"{key}: {{n}} row(s) with missing values", per_column)


# ------------------------------------------------------------------
# Allowed values
# ------------------------------------------------------------------
def check_allowed_values(
    df: pd.DataFrame,
    column: str,
    allowed: Iterable,
    action: str = "flag",
    case_sensitive: bool = True,
) -> tuple[pd.DataFrame, StageResult]:
    """Non-missing values of ``column`` must be one of ``allowed``."""
    stage = "check_allowed_values"
    _check_action(action, stage)
    require_column(df, column, stage)
    allowed = list(allowed)

    values = df[column]
    if not case_sensitive:
        allowed = [a.lower() if isinstance(a, str) else a for a in allowed]
        values = values.map(lambda v: v.lower() if isinstance(v, str) else v)

    mask = df[column].notna() & ~values.isin(allowed)
    return _resolve(
        df, mask, stage, action, column,
        f"{column}: {{n}} value(s) outside the allowed set",
        {"allowed": allowed},
    )


# ------------------------------------------------------------------
# Numeric range
# ------------------------------------------------------------------
def check_range(
    df: pd.DataFrame,
    column: str,
    min_value: float | None = None,
    max_value: float | None = None,
    action: str = "flag",
) -> tuple[pd.DataFrame, StageResult]:
    """Values must lie within [min_value, max_value]; either bound may be open."""
    stage = "check_range"
    _check_action(action, stage)
    if min_value is None and max_value is None:
        raise ConfigurationError(f"{stage}: give min_value, max_value or both")
    if min_value is not None and max_value is not None and min_value > max_value:
        raise ConfigurationError(f"{stage}: min_value {min_value} is above max_value {max_value}")
    require_column(df, column, stage)
    require_kind(df, column, ("numeric",), stage)

    mask = pd.Series(False, index=df.index)
    if min_value is not None:
        mask |= (df[column] < min_value).fillna(False).astype(bool)
    if max_value is not None:
        mask |= (df[column] > max_value).fillna(False).astype(bool)
    return _resolve(
        df, mask, stage, action, column,
        f"{column}: {{n}} value(s) outside [{min_value}, {max_value}]",
        {"min_value": min_value, "max_value": max_value},
    )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def _check_action(action: str, stage: str) -> None:
    if action not in INTEGRITY_ACTIONS:
        raise ConfigurationError(
            f"{stage} 'action' must be one of {', '.join(INTEGRITY_ACTIONS)}, got '{action}'"
        )


def _resolve(
    df: pd.DataFrame,
    mask: pd.Series,
    stage: str,
    action: str,
    column: str,
    message: str,
    summary: dict[str, Any],
) -> tuple[pd.DataFrame, StageResult]:
    """Apply the configured action to the rows flagged by ``mask``."""
    mask = mask.astype(bool)
    violations = int(mask.sum())
    rows = row_labels(mask)
    description = message.format(n=violations)

    if violations and action == "raise":
        examples = rows[:MAX_EXAMPLES]
        logger.error("Integrity check failed: %s", description)
        raise IntegrityError(
            f"{description} (rows: {examples}{' ...' if violations > len(examples) else ''})",
            violations=violations,
            stage=stage,
            column=column,
            rows=rows,
        )

    if action == "drop":
        out = df.loc[~mask].copy()
        description += " -> dropped"
    else:
        out = df.copy()

    if violations:
        logger.warning("%s", description)
    else:
        logger.info("%s", description)

    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=description,
        rows_affected=violations,
        values_affected=violations,
        summary={"violations": violations, "action": action, **summary},
        rows=rows,
    )
