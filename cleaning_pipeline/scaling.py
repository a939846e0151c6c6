"""
Scaling Module
==============
Rescales numeric columns so features share a comparable range.

  - min_max_scale: linear map of [min, max] onto a target range (default [0, 1])
  - standardize:   z-score, (x - mean) / std with population std
  - robust_scale:  (x - median) / IQR, insensitive to outliers

Missing values stay missing. Constant columns cannot be stretched: they
map to the lower end of the range (min-max) or to 0 (standardize).
"""

import logging

import pandas as pd

from cleaning_pipeline.columns import resolve_columns
from cleaning_pipeline.exceptions import ConfigurationError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Scaling"


def min_max_scale(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    feature_range: tuple[float, float] | list[float] = (0.0, 1.0),
) -> tuple[pd.DataFrame, StageResult]:
    """Map each column's minimum to ``feature_range[0]`` and maximum to ``feature_range[1]``."""
    stage = "min_max_scale"
    low, high = _check_range(feature_range)
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("numeric",))

    summary: dict[str, dict] = {}
    values = 0
    for col in cols:
        series = out[col].astype("float64")
        col_min, col_max = series.min(), series.max()
        span = col_max - col_min
        if pd.isna(span):
            continue
        if span == 0:
            scaled = series.where(series.isna(), low)
        else:
            scaled = low + (series - col_min) / span * (high - low)
        out[col] = scaled
        values += int(series.notna().sum())
        summary[col] = {"min": float(col_min), "max": float(col_max)}

    return out, _result(stage, f"Min-max scaled {len(summary)} column(s) to [{low}, {high}]",
                        out, values, summary)


def standardize(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """Center each column on its mean and divide by its population std."""
    stage = "standardize"
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("numeric",))

    summary: dict[str, dict] = {}
    values = 0
    for col in cols:
        series = out[col].astype("float64")
        mean = series.mean()
        std = series.std(ddof=0)
        if pd.isna(mean):
            continue
        if std == 0:
            out[col] = series.where(series.isna(), 0.0)
        else:
            out[col] = (series - mean) / std
        values += int(series.notna().sum())
        summary[col] = {"mean": float(mean), "std": float(std)}

    return out, _result(stage, f"Standardized {len(summary)} column(s) to zero mean, unit variance",
                        out, values, summary)


def robust_scale(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    stage = "robust_scale"
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("numeric",))

    summary: dict[str, dict] = {}
    values = 0
    for col in cols:
        series = out[col].astype("float64")
        if series.notna().sum() == 0:
            continue
        median = series.median()
        iqr = series.quantile(0.75) - series.quantile(0.25)
        centered = series - median
        out[col] = centered / iqr if iqr else centered
        values += int(series.notna().sum())
        summary[col] = {"median": float(median), "iqr": float(iqr)}

    return out, _result(stage, f"Robust-scaled {len(summary)} column(s) by median and IQR",
                        out, values, summary)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def _check_range(feature_range) -> tuple[float, float]:
    try:
        low, high = (float(v) for v in feature_range)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"feature_range must be two numbers, got {feature_range!r}") from exc
    if low >= high:
        raise ConfigurationError(f"feature_range lower bound must be below upper bound, got {feature_range!r}")
    return low, high


def _result(stage: str, action: str, out: pd.DataFrame, values: int, summary: dict) -> StageResult:
    logger.info("%s", action)
    return StageResult(
        stage=stage,
        category=CATEGORY,
        action=action,
        rows_affected=len(out) if summary else 0,
        values_affected=values,
        summary=summary,
    )
