"""
Missing Values Module
=====================
Stages that detect, impute and drop missing values.

  - standardize_missing: turn placeholder strings ("", "N/A", "null") into NaN
  - impute_missing:      fill gaps with a statistic, a constant or a neighbour
  - drop_missing:        remove incomplete rows
"""

import logging

import pandas as pd

from cleaning_pipeline.columns import resolve_columns, row_labels, to_python
from cleaning_pipeline.config import IMPUTATION_STRATEGIES, MISSING_MARKERS
from cleaning_pipeline.exceptions import ConfigurationError, EmptyColumnError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Missing Values"


# ------------------------------------------------------------------
# Placeholder standardization
# ------------------------------------------------------------------
def standardize_missing(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    markers: list[str] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """Replace placeholder strings with NaN in text columns."""
    stage = "standardize_missing"
    markers = {str(m).strip().lower() for m in (MISSING_MARKERS if markers is None else markers)}
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("categorical",))

    affected = pd.Series(False, index=out.index)
    per_column: dict[str, int] = {}
    for col in cols:
        series = out[col]
        if isinstance(series.dtype, pd.CategoricalDtype) or pd.api.types.is_bool_dtype(series):
            continue
        is_marker = series.map(
            lambda v: isinstance(v, str) and v.strip().lower() in markers
        ).astype(bool)
        count = int(is_marker.sum())
        if count:
            out[col] = series.mask(is_marker)
            per_column[col] = count
            affected |= is_marker

    values = sum(per_column.values())
    logger.info("Standardized %d missing-value placeholder(s)", values)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"Placeholders -> NaN: {values} value(s) in {len(per_column)} column(s)",
        rows_affected=int(affected.sum()),
        values_affected=values,
        summary=per_column,
        rows=row_labels(affected),
    )


# ------------------------------------------------------------------
# Imputation
# ------------------------------------------------------------------
def impute_missing(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    strategy: str = "mean",
    fill_value=None,
) -> tuple[pd.DataFrame, StageResult]:
    """
    Fill missing values column by column.

    ``mean`` and ``median`` need numeric columns; ``mode``, ``constant``,
    ``ffill`` and ``bfill`` accept any kind. With ``columns=None`` every
    column that has gaps and suits the strategy is imputed; columns with no
    values at all are skipped and listed under ``summary["skipped"]``.
    A named column with no values raises EmptyColumnError.
    """
    stage = "impute_missing"
    if strategy not in IMPUTATION_STRATEGIES:
        raise ConfigurationError(
            f"Unknown imputation strategy '{strategy}' "
            f"(allowed: {', '.join(IMPUTATION_STRATEGIES)})"
        )
    if strategy == "constant" and fill_value is None:
        raise ConfigurationError("Strategy 'constant' requires a fill_value")

    kinds = ("numeric",) if strategy in ("mean", "median") else None
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=kinds)
    if columns is None:
        cols = [col for col in cols if out[col].isna().any()]

    affected = pd.Series(False, index=out.index)
    fills: dict = {}
    skipped: list[str] = []
    values = 0
    for col in cols:
        mask = out[col].isna()
        if not mask.any():
            continue
        if mask.all() and strategy in ("mean", "median", "mode"):
            if columns is not None:
                raise EmptyColumnError(col, stage=stage)
            logger.warning("%s: no values to estimate a %s from, skipping", col, strategy)
            skipped.append(col)
            continue

        if strategy == "ffill":
            out[col] = out[col].ffill()
            fill = None
        elif strategy == "bfill":
            out[col] = out[col].bfill()
            fill = None
        else:
            fill = _estimate(out[col], strategy, fill_value)
            out[col] = _fill(out[col], fill)

        filled = mask & out[col].notna()
        count = int(filled.sum())
        values += count
        affected |= filled
        fills[col] = to_python(fill) if fill is not None else strategy
        logger.debug("%s: %d value(s) filled with %r", col, count, fills[col])

    logger.info("Imputed %d missing value(s) using '%s'", values, strategy)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"Imputed {values} missing value(s) in {len(fills)} column(s) using {strategy}",
        rows_affected=int(affected.sum()),
        values_affected=values,
        summary={"strategy": strategy, "fill_values": fills, "skipped": skipped},
        rows=row_labels(affected),
    )


def _estimate(series: pd.Series, strategy: str, fill_value):
    if strategy == "mean":
        return series.mean()
    if strategy == "median":
        return series.median()
    if strategy == "mode":
        # mode() is sorted, so ties resolve to the smallest value
        return series.mode(dropna=True).iloc[0]
    return fill_value


def _fill(series: pd.Series, value) -> pd.Series:
    if isinstance(series.dtype, pd.CategoricalDtype) and value not in series.cat.categories:
        series = series.cat.add_categories([value])
    elif (pd.api.types.is_integer_dtype(series) and isinstance(value, float)
          and not float(value).is_integer()):
        # Nullable integer columns cannot hold a fractional estimate
        series = series.astype("Float64")
    return series.fillna(value)


# ------------------------------------------------------------------
# Dropping incomplete rows
# ------------------------------------------------------------------
def drop_missing(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    how: str = "any",
) -> tuple[pd.DataFrame, StageResult]:
    """Drop rows that are missing a value in ``columns`` (any or all of them)."""
    stage = "drop_missing"
    if how not in ("any", "all"):
        raise ConfigurationError(f"drop_missing 'how' must be 'any' or 'all', got '{how}'")

    cols = resolve_columns(df, columns, stage)
    if not cols:
        mask = pd.Series(False, index=df.index)
    elif how == "any":
        mask = df[cols].isna().any(axis=1)
    else:
        mask = df[cols].isna().all(axis=1)

    dropped = int(mask.sum())
    out = df.loc[~mask].copy()

    logger.info("Dropped %d incomplete row(s)", dropped)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"Dropped {dropped} row(s) with {how} missing value(s) in {len(cols)} column(s)",
        rows_affected=dropped,
        values_affected=dropped * len(df.columns),
        summary={"how": how, "rows_remaining": len(out)},
        rows=row_labels(mask),
    )
