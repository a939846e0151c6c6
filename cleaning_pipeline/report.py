"""
Cleaning Report
===============
Accumulates the action each stage took (rows/values affected plus a
summary statistic) and renders the cleaning log.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

from cleaning_pipeline.config import CLEANING_LOG

logger = logging.getLogger(__name__)

# Affected-row lists longer than this are truncated in the text log
MAX_ROWS_IN_LOG = 20


class StageResult:
    """Report fragment produced by a single stage invocation."""

    def __init__(
        self,
        stage: str,
        category: str,
        action: str,
        rows_affected: int = 0,
        values_affected: int = 0,
        summary: dict[str, Any] | None = None,
        rows: list | None = None,
    ) -> None:
        self.stage = stage
        self.category = category
        self.action = action
        self.rows_affected = int(rows_affected)
        self.values_affected = int(values_affected)
        self.summary = summary or {}
        self.rows = list(rows or [])
        self.duration_ms: float | None = None

    def __repr__(self) -> str:
        return (
            f"StageResult({self.stage}: {self.rows_affected} rows, "
            f"{self.values_affected} values)"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage,
            "category": self.category,
            "action": self.action,
            "rows_affected": self.rows_affected,
            "values_affected": self.values_affected,
            "summary": self.summary,
            "rows": self.rows,
            "duration_ms": self.duration_ms,
        }


class CleaningReport:
    """Ordered list of stage results for one pipeline run."""

    def __init__(self, pipeline_name: str = "cleaning") -> None:
        self.pipeline_name = pipeline_name
        self.entries: list[StageResult] = []
        self.profile_before: dict[str, Any] = {}
        self.profile_after: dict[str, Any] = {}
        self.generated_at = datetime.now()

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def add(self, result: StageResult) -> None:
        self.entries.append(result)

    @property
    def total_rows_affected(self) -> int:
        return sum(entry.rows_affected for entry in self.entries)

    @property
    def total_values_affected(self) -> int:
        return sum(entry.values_affected for entry in self.entries)

    def for_stage(self, stage: str) -> list[StageResult]:
        """Return every entry recorded under the given stage name."""
        return [entry for entry in self.entries if entry.stage == stage]

    def to_frame(self) -> pd.DataFrame:
        """One row per stage result: stage, category, counts, summary."""
        columns = ["stage", "category", "rows_affected", "values_affected", "summary", "action"]
        records = [
            {key: entry.to_dict()[key] for key in columns}
            for entry in self.entries
        ]
        return pd.DataFrame.from_records(records, columns=columns)

    def to_dict(self) -> dict[str, Any]:
        return {
            "pipeline": self.pipeline_name,
            "generated_at": self.generated_at.isoformat(),
            "profile_before": self.profile_before,
            "profile_after": self.profile_after,
            "total_rows_affected": self.total_rows_affected,
            "total_values_affected": self.total_values_affected,
            "stages": [entry.to_dict() for entry in self.entries],
        }

    # ------------------------------------------------------------------
    # Report generation
    # ------------------------------------------------------------------
    def render(self) -> str:
        """Build the formatted cleaning log text."""
        lines: list[str] = []

        lines.append("DATA CLEANING LOG")
        lines.append("=" * 60)
        lines.append(f"Generated: {self.generated_at.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"Pipeline: {self.pipeline_name}")
        lines.append("")

        if self.profile_before:
            lines.append("INPUT:")
            lines.append("-" * 40)
            lines.extend(_profile_lines(self.profile_before))
            lines.append("")

        lines.append("ACTIONS TAKEN:")
        lines.append("-" * 40)

        # Group by category, keeping first-seen order
        categories: dict[str, list[StageResult]] = {}
        for entry in self.entries:
            categories.setdefault(entry.category, []).append(entry)

        if not categories:
            lines.append("  (no stages run)")

        for cat, cat_entries in categories.items():
            lines.append(f"\n  {cat}:")
            for entry in cat_entries:
                lines.append(f"    - {entry.action}")
                if entry.summary:
                    stats = ", ".join(f"{k}={_fmt(v)}" for k, v in entry.summary.items())
                    lines.append(f"      Summary: {stats}")
                if entry.rows:
                    shown = entry.rows[:MAX_ROWS_IN_LOG]
                    suffix = f" ... (+{len(entry.rows) - len(shown)} more)" if len(entry.rows) > len(shown) else ""
                    lines.append(f"      Affected rows: {shown}{suffix}")

        lines.append("")
        lines.append("TOTALS:")
        lines.append("-" * 40)
        lines.append(f"  - Stages run:      {len(self.entries)}")
        lines.append(f"  - Rows affected:   {self.total_rows_affected}")
        lines.append(f"  - Values affected: {self.total_values_affected}")
        lines.append("")

        if self.profile_after:
            lines.append("OUTPUT:")
            lines.append("-" * 40)
            lines.extend(_profile_lines(self.profile_after))
            lines.append("")

        return "\n".join(lines)

    def generate_report(self, filepath: str | Path | None = None) -> str:
        """Render the cleaning log and save it to disk."""
        filepath = Path(filepath or CLEANING_LOG)
        report_text = self.render()

        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "w", encoding="utf-8") as f:
            f.write(report_text)

        logger.info("Cleaning log saved to %s", filepath)
        return report_text


def _profile_lines(profile: dict[str, Any]) -> list[str]:
    return [
        f"  - Rows: {profile.get('rows', 0)}",
        f"  - Columns: {profile.get('columns', 0)}",
        f"  - Missing cells: {profile.get('missing_cells', 0)}",
        f"  - Duplicate rows: {profile.get('duplicate_rows', 0)}",
    ]


def _fmt(val: Any) -> str:
    if isinstance(val, float):
        return f"{val:,.4g}"
    return str(val)
