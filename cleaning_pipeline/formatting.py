"""
Format Standardization Module
=============================
Normalizes text formatting, canonical spellings, date formats and
column types so that equal values are represented the same way.
"""

import logging
from typing import Any

import pandas as pd

from cleaning_pipeline.columns import column_kind, require_column, resolve_columns, row_labels
from cleaning_pipeline.config import COLUMN_KINDS, DATE_FORMATS
from cleaning_pipeline.exceptions import ConfigurationError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

CATEGORY = "Normalization"
CASES = ("lower", "upper", "title")


# ------------------------------------------------------------------
# Strip whitespace
# ------------------------------------------------------------------
def strip_whitespace(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """Remove leading/trailing whitespace from string cells."""
    stage = "strip_whitespace"
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("categorical",))
    return _map_strings(out, cols, stage, str.strip, "Whitespace stripped")


# ------------------------------------------------------------------
# Case normalization
# ------------------------------------------------------------------
def normalize_case(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    case: str = "lower",
) -> tuple[pd.DataFrame, StageResult]:
    """Apply lower, upper or title case to string cells."""
    stage = "normalize_case"
    if case not in CASES:
        raise ConfigurationError(f"normalize_case 'case' must be one of {', '.join(CASES)}, got '{case}'")
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("categorical",))
    func = {"lower": str.lower, "upper": str.upper, "title": str.title}[case]
    return _map_strings(out, cols, stage, func, f"Applied {case} case")


# ------------------------------------------------------------------
# Canonical spellings
# ------------------------------------------------------------------
def replace_values(
    df: pd.DataFrame,
    column: str,
    mapping: dict[Any, Any],
    case_sensitive: bool = True,
) -> tuple[pd.DataFrame, StageResult]:
    """Replace variant spellings with a canonical value, e.g. {"N.Y.": "NY"}."""
    stage = "replace_values"
    require_column(df, column, stage)
    if not isinstance(mapping, dict):
        raise ConfigurationError(f"replace_values 'mapping' must be a dict, got {type(mapping).__name__}")
    out = df.copy()

    if case_sensitive:
        lookup = mapping

        def key(v):
            return v
    else:
        lookup = {k.lower() if isinstance(k, str) else k: v for k, v in mapping.items()}

        def key(v):
            return v.lower() if isinstance(v, str) else v

    before = out[column]
    if isinstance(before.dtype, pd.CategoricalDtype):
        before = before.astype(object)
    after = before.map(lambda v: v if pd.isna(v) else lookup.get(key(v), v))
    changed = ((after != before) & before.notna()).fillna(False).astype(bool)
    out[column] = after

    count = int(changed.sum())
    logger.info("%s: replaced %d value(s)", column, count)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"Canonical values ({column}): {count} value(s) replaced",
        rows_affected=count,
        values_affected=count,
        summary={str(k): v for k, v in mapping.items()},
        rows=row_labels(changed),
    )


# ------------------------------------------------------------------
# Date normalization
# ------------------------------------------------------------------
def standardize_dates(
    df: pd.DataFrame,
    columns: str | list[str] | None = None,
    formats: list[str] | None = None,
    output_format: str | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """
    Parse date columns written in mixed formats.

    Each format in ``formats`` is tried in order; the first that parses a
    value wins. Values no format understands become missing. The result is
    a datetime column, or strings in ``output_format`` when given.

    With ``columns=None`` only text columns whose every value parses (and
    datetime columns, when ``output_format`` is given) are converted; free
    text is left alone.
    """
    stage = "standardize_dates"
    formats = formats or DATE_FORMATS
    out = df.copy()
    cols = resolve_columns(out, columns, stage, kinds=("categorical", "temporal"))

    affected = pd.Series(False, index=out.index)
    summary: dict[str, dict] = {}
    converted_cols = 0
    values = 0
    for col in cols:
        series = out[col]
        if column_kind(series) == "temporal":
            parsed = series
            invalid = pd.Series(False, index=out.index)
            # Already datetime: only reformatting to text changes a value
            changed = series.notna() if output_format else invalid
        else:
            parsed = parse_dates(series, formats)
            invalid = series.notna() & parsed.isna()
            if columns is None and (invalid.any() or not series.notna().any()):
                logger.debug("%s: not a date column, skipping", col)
                continue
            changed = series.notna()

        out[col] = parsed.dt.strftime(output_format) if output_format else parsed
        converted = int(parsed.notna().sum())
        summary[col] = {"parsed": converted, "invalid": int(invalid.sum())}
        values += int(changed.sum())
        affected |= changed
        converted_cols += int(changed.any())
        if invalid.any():
            logger.warning("%s: %d unparseable date(s) set to missing", col, int(invalid.sum()))

    target = output_format or "datetime"
    action = f"Date format: {converted_cols} column(s) converted to {target}"
    logger.info("%s", action)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=action,
        rows_affected=int(affected.sum()),
        values_affected=values,
        summary=summary,
        rows=row_labels(affected),
    )


def parse_dates(series: pd.Series, formats: list[str]) -> pd.Series:
    """Parse a text column trying each strptime format in turn."""
    text = series.map(lambda v: str(v).strip() if pd.notna(v) else None)
    parsed = pd.Series(pd.NaT, index=series.index, dtype="datetime64[ns]")
    for fmt in formats:
        remaining = parsed.isna() & text.notna()
        if not remaining.any():
            break
        parsed.loc[remaining] = pd.to_datetime(text[remaining], format=fmt, errors="coerce")
    return parsed


# ------------------------------------------------------------------
# Type coercion
# ------------------------------------------------------------------
def coerce_types(
    df: pd.DataFrame,
    types: dict[str, str],
    formats: list[str] | None = None,
) -> tuple[pd.DataFrame, StageResult]:
    """
    Convert columns to a target kind: ``{"age": "numeric", "joined": "temporal"}``.

    Values that cannot be converted become missing and are counted.
    """
    stage = "coerce_types"
    if not isinstance(types, dict) or not types:
        raise ConfigurationError("coerce_types 'types' must be a non-empty {column: kind} dict")
    out = df.copy()

    invalid_rows = pd.Series(False, index=out.index)
    summary: dict[str, dict] = {}
    values = 0
    for col, kind in types.items():
        require_column(out, col, stage)
        if kind not in COLUMN_KINDS:
            raise ConfigurationError(
                f"coerce_types kind for '{col}' must be one of {', '.join(COLUMN_KINDS)}, got '{kind}'"
            )
        series = out[col]
        if column_kind(series) == kind:
            summary[col] = {"kind": kind, "converted": 0, "invalid": 0}
            continue

        if kind == "numeric":
            source = series.map(lambda v: v.strip() if isinstance(v, str) else v)
            converted = pd.to_numeric(source, errors="coerce")
        elif kind == "temporal":
            converted = parse_dates(series, formats or DATE_FORMATS)
        else:
            converted = series.astype("category")

        invalid = series.notna() & converted.isna()
        out[col] = converted
        count = int(converted.notna().sum())
        values += count
        invalid_rows |= invalid
        summary[col] = {"kind": kind, "converted": count, "invalid": int(invalid.sum())}
        if invalid.any():
            logger.warning("%s: %d value(s) could not be converted to %s", col, int(invalid.sum()), kind)

    action = f"Type coercion: {len(types)} column(s), {int(invalid_rows.sum())} row(s) with unconvertible values"
    logger.info("%s", action)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=action,
        rows_affected=int(invalid_rows.sum()),
        values_affected=values,
        summary=summary,
        rows=row_labels(invalid_rows),
    )


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------
def _map_strings(out: pd.DataFrame, cols: list[str], stage: str, func, label: str):
    """Apply ``func`` to every string cell in ``cols`` and count what changed."""
    affected = pd.Series(False, index=out.index)
    per_column: dict[str, int] = {}
    for col in cols:
        series = out[col]
        if isinstance(series.dtype, pd.CategoricalDtype) or pd.api.types.is_bool_dtype(series):
            continue
        after = series.map(lambda v: func(v) if isinstance(v, str) else v)
        changed = ((after != series) & series.notna()).fillna(False).astype(bool)
        if changed.any():
            out[col] = after
            per_column[col] = int(changed.sum())
            affected |= changed

    values = sum(per_column.values())
    logger.info("%s: %d value(s) changed", label, values)
    return out, StageResult(
        stage=stage,
        category=CATEGORY,
        action=f"{label} ({values} values in {len(per_column)} column(s))",
        rows_affected=int(affected.sum()),
        values_affected=values,
        summary=per_column,
        rows=row_labels(affected),
    )
