"""
Outlier Treatment Module
========================
Finds values far from the bulk of a numeric column using the
Interquartile Range or z-score method, then either drops the rows
holding them or clips them to the bounds (winsorizing).

Bounds are computed once per column on the data the stage receives.
Missing values are never treated as outliers.
"""

import logging

import numpy as np
import pandas as pd

from cleaning_pipeline.columns import resolve_columns, row_labels
from cleaning_pipeline.config import IQR_MULTIPLIER, MIN_VALUES_FOR_QUARTILES, ZSCORE_THRESHOLD
from cleaning_pipeline.exceptions import ConfigurationError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Outliers"
ACTIONS = ("drop", "clip")


def iqr_bounds(series: pd.Series, multiplier: float = IQR_MULTIPLIER) -> dict[str, float]:
    """Return Q1, Q3, IQR and the [Q1 - k*IQR, Q3 + k*IQR] fences."""
    values = series.dropna()
    q1 = float(values.quantile(0.25))
    q3 = float(values.quantile(0.75))
    iqr = q3 - q1
    return {
        "q1": q1,
        "q3": q3,
        "iqr": iqr,
        "lower_bound": q1 - multiplier * iqr,
        "upper_bound": q3 + multiplier * iqr,
    }


# ------------------------------------------------------------------
# IQR-based outlier treatment
# ------------------------------------------------------------------
def filter_outliers_iqr(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    multiplier: float = IQR_MULTIPLIER,
    action: str = "drop",
) -> tuple[pd.DataFrame, StageResult]:
    """Drop or clip values outside the IQR fences of each column."""
    stage = "filter_outliers_iqr"
    _check_action(action, stage)
    if multiplier < 0:
        raise ConfigurationError(f"IQR multiplier must be non-negative, got {multiplier}")
    cols = resolve_columns(df, columns, stage, kinds=("numeric",))

    bounds: dict[str, dict] = {}
    for col in cols:
        if df[col].notna().sum() < MIN_VALUES_FOR_QUARTILES:
            logger.warning("%s: fewer than %d values, skipping IQR check", col, MIN_VALUES_FOR_QUARTILES)
            continue
        bounds[col] = iqr_bounds(df[col], multiplier)

    return _apply(df, stage, "IQR", bounds, action)


# ------------------------------------------------------------------
# Z-score outlier treatment
# ------------------------------------------------------------------
def filter_outliers_zscore(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    threshold: float = ZSCORE_THRESHOLD,
    action: str = "drop",
) -> tuple[pd.DataFrame, StageResult]:
    """Drop or clip values whose absolute z-score exceeds ``threshold``."""
    stage = "filter_outliers_zscore"
    _check_action(action, stage)
    if threshold <= 0:
        raise ConfigurationError(f"z-score threshold must be positive, got {threshold}")
    cols = resolve_columns(df, columns, stage, kinds=("numeric",))

    bounds: dict[str, dict] = {}
    for col in cols:
        values = df[col].dropna()
        if len(values) < 2:
            continue
        mean = float(values.mean())
        std = float(values.std())
        if std == 0 or np.isnan(std):
            logger.warning("%s: zero variance, skipping z-score check", col)
            continue
        bounds[col] = {
            "mean": mean,
            "std": std,
            "lower_bound": mean - threshold * std,
            "upper_bound": mean + threshold * std,
        }

    return _apply(df, stage, "z-score", bounds, action)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def _check_action(action: str, stage: str) -> None:
    if action not in ACTIONS:
        raise ConfigurationError(f"{stage} 'action' must be 'drop' or 'clip', got '{action}'")


def _as_float(series: pd.Series) -> pd.Series:
    """Widen integer columns to float so they can hold fractional fences."""
    if not pd.api.types.is_integer_dtype(series):
        return series
    if pd.api.types.is_extension_array_dtype(series):
        return series.astype("Float64")
    return series.astype("float64")


def _apply(
    df: pd.DataFrame,
    stage: str,
    method: str,
    bounds: dict[str, dict],
    action: str,
) -> tuple[pd.DataFrame, StageResult]:
    """Flag every value outside its column's bounds, then drop or clip."""
    out = df.copy()
    flagged = pd.Series(False, index=out.index)
    values = 0
    for col, b in bounds.items():
        col_mask = (out[col] < b["lower_bound"]) | (out[col] > b["upper_bound"])
        col_mask = col_mask.fillna(False).astype(bool)
        b["outlier_count"] = int(col_mask.sum())
        values += b["outlier_count"]
        flagged |= col_mask
        if action == "clip" and b["outlier_count"]:
            out[col] = _as_float(out[col]).clip(lower=b["lower_bound"], upper=b["upper_bound"])

    if action == "drop":
        out = out.loc[~flagged]
        verb = "Dropped"
    else:
        verb = "Clipped"

    rows = int(flagged.sum())
    logger.info("%s outliers: %d value(s) in %d row(s) (%s)", method, values, rows, action)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"{verb} {values} {method} outlier value(s) across {len(bounds)} column(s) ({rows} rows)",
        rows_affected=rows,
        values_affected=values,
        summary=bounds,
        rows=row_labels(flagged),
    )
