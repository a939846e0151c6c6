"""
Dataset Profiler
================
Profiles a dataset before and after cleaning: shape, completeness,
duplicate rows and the kind of every column.
"""

import logging
from typing import Any

import pandas as pd

from cleaning_pipeline.columns import column_kind

logger = logging.getLogger(__name__)


class DataProfiler:
    """Profiles a DataFrame for the cleaning report."""

    def __init__(self, df: pd.DataFrame) -> None:
        self.df = df
        self.total_rows = len(df)
        self.completeness: dict[str, dict] = {}
        self.kinds: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Completeness analysis
    # ------------------------------------------------------------------
    def analyze_completeness(self) -> dict[str, dict]:
        """Calculate missing count and completeness percentage for each column."""
        for col in self.df.columns:
            missing = int(self.df[col].isna().sum())
            present = self.total_rows - missing
            pct = round((present / self.total_rows) * 100, 1) if self.total_rows else 100.0
            self.completeness[col] = {
                "present": present,
                "missing": missing,
                "percentage": pct,
            }
        return self.completeness

    # ------------------------------------------------------------------
    # Column kinds
    # ------------------------------------------------------------------
    def analyze_kinds(self) -> dict[str, str]:
        self.kinds = {col: column_kind(self.df[col]) for col in self.df.columns}
        return self.kinds

    # ------------------------------------------------------------------
    # Full profile
    # ------------------------------------------------------------------
    def run_full_profile(self) -> dict[str, Any]:
        """Return the dataset-level profile used in the cleaning report."""
        completeness = self.analyze_completeness()
        kinds = self.analyze_kinds()

        duplicate_rows = int(self.df.duplicated().sum()) if len(self.df.columns) else 0
        profile = {
            "rows": self.total_rows,
            "columns": len(self.df.columns),
            "missing_cells": sum(info["missing"] for info in completeness.values()),
            "duplicate_rows": duplicate_rows,
            "column_profiles": {
                str(col): {"kind": kinds[col], **completeness[col]}
                for col in self.df.columns
            },
        }
        logger.debug(
            "Profile: %d rows, %d columns, %d missing cells, %d duplicate rows",
            profile["rows"], profile["columns"], profile["missing_cells"], duplicate_rows,
        )
        return profile


def profile_dataset(df: pd.DataFrame) -> dict[str, Any]:
    return DataProfiler(df).run_full_profile()
