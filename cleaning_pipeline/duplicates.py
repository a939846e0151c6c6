"""
Duplicate Removal
=================
Drops repeated records, either exact copies or rows sharing a key subset.
"""

import logging

import pandas as pd

from cleaning_pipeline.columns import resolve_columns, row_labels
from cleaning_pipeline.exceptions import ConfigurationError
from cleaning_pipeline.report import StageResult

logger = logging.getLogger(__name__)

KEEP_OPTIONS = ("first", "last", "none")


def drop_duplicates(
    df: pd.DataFrame,
    subset: str | list[str] | None = None,
    keep: str = "first",
) -> tuple[pd.DataFrame, StageResult]:
    """
    Remove duplicate rows.

    ``subset`` limits the comparison to the given columns. ``keep`` chooses
    which copy survives: ``first``, ``last`` or ``none`` (drop every copy).
    Running the stage again on its own output removes nothing.
    """
    stage = "drop_duplicates"
    if keep not in KEEP_OPTIONS:
        raise ConfigurationError(
            f"drop_duplicates 'keep' must be one of {', '.join(KEEP_OPTIONS)}, got '{keep}'"
        )

    cols = resolve_columns(df, subset, stage) if subset is not None else None
    mask = df.duplicated(subset=cols, keep=False if keep == "none" else keep)
    dropped = int(mask.sum())
    out = df.loc[~mask].copy()

    logger.info("Removed %d duplicate row(s)", dropped)
    key = ", ".join(map(str, cols)) if cols else "all columns"
    return out, StageResult(
        stage=stage,
        category="Duplicates",
        action=f"Removed {dropped} duplicate row(s) on {key} (keep={keep})",
        rows_affected=dropped,
        values_affected=dropped * len(df.columns),
        summary={"duplicate_rate_pct": round(dropped / len(df) * 100, 2) if len(df) else 0.0},
        rows=row_labels(mask),
    )
