"""
Pipeline Executor
=================
Runs an ordered list of named cleaning stages against a dataset and
accumulates a report of what every stage did.

Stage families:
  1. MISSING: standardize placeholders, impute, drop incomplete rows
  2. DUPLICATES: drop repeated records
  3. OUTLIERS: IQR / z-score filtering or clipping
  4. SCALING: min-max, z-score, robust scaling
  5. ENCODING: one-hot and label encoding
  6. FORMATS: whitespace, case, canonical values, dates, types
  7. INTEGRITY: referential, unique, not-null, allowed values, ranges

A stage is a plain function ``stage(df, **params) -> (df, StageResult)``
that never mutates its input. Stages run sequentially; the first failure
stops the run and its exception propagates unchanged.
"""

import inspect
import json
import logging
import time
from pathlib import Path
from typing import Any, Callable

import pandas as pd

from cleaning_pipeline.columns import ensure_dataframe
from cleaning_pipeline.config import DEFAULT_PIPELINE
from cleaning_pipeline.duplicates import drop_duplicates
from cleaning_pipeline.encoding import label_encode, one_hot_encode
from cleaning_pipeline.exceptions import ConfigurationError, StageError, UnknownStageError
from cleaning_pipeline.formatting import (
    coerce_types,
    normalize_case,
    replace_values,
    standardize_dates,
    strip_whitespace,
)
from cleaning_pipeline.integrity import (
    check_allowed_values,
    check_not_null,
    check_range,
    check_referential_integrity,
    check_unique,
)
from cleaning_pipeline.missing import drop_missing, impute_missing, standardize_missing
from cleaning_pipeline.outliers import filter_outliers_iqr, filter_outliers_zscore
from cleaning_pipeline.profiler import profile_dataset
from cleaning_pipeline.report import CleaningReport, StageResult
from cleaning_pipeline.scaling import min_max_scale, robust_scale, standardize

logger = logging.getLogger(__name__)

StageFunc = Callable[..., tuple[pd.DataFrame, StageResult]]

STAGE_REGISTRY: dict[str, StageFunc] = {
    # Missing values
    "standardize_missing": standardize_missing,
    "impute_missing": impute_missing,
    "drop_missing": drop_missing,
    # Duplicates
    "drop_duplicates": drop_duplicates,
    # Outliers
    "filter_outliers_iqr": filter_outliers_iqr,
    "filter_outliers_zscore": filter_outliers_zscore,
    # Scaling
    "min_max_scale": min_max_scale,
    "standardize": standardize,
    "robust_scale": robust_scale,
    # Encoding
    "one_hot_encode": one_hot_encode,
    "label_encode": label_encode,
    # Formats and types
    "strip_whitespace": strip_whitespace,
    "normalize_case": normalize_case,
    "replace_values": replace_values,
    "standardize_dates": standardize_dates,
    "coerce_types": coerce_types,
    # Integrity
    "check_referential_integrity": check_referential_integrity,
    "check_unique": check_unique,
    "check_not_null": check_not_null,
    "check_allowed_values": check_allowed_values,
    "check_range": check_range,
}


def register_stage(name: str, func: StageFunc | None = None, replace: bool = False):
    """
    Add a custom stage to the registry.

    Usable directly, ``register_stage("trim_ids", trim_ids)``, or as a
    decorator, ``@register_stage("trim_ids")``.
    """
    def _register(f: StageFunc) -> StageFunc:
        if not callable(f):
            raise ConfigurationError(f"Stage '{name}' must be callable")
        if name in STAGE_REGISTRY and not replace:
            raise ConfigurationError(f"Stage '{name}' is already registered")
        STAGE_REGISTRY[name] = f
        logger.debug("Registered stage '%s'", name)
        return f

    if func is None:
        return _register
    return _register(func)


def get_stage(name: str) -> StageFunc:
    try:
        return STAGE_REGISTRY[name]
    except KeyError:
        raise UnknownStageError(name, list(STAGE_REGISTRY)) from None


class StageSpec:
    """A configured stage: registered name plus the parameters to call it with."""

    def __init__(self, name: str, params: dict[str, Any] | None = None) -> None:
        self.name = name
        self.params = dict(params or {})
        self.func = get_stage(name)
        self._check_params()

    def __repr__(self) -> str:
        return f"StageSpec({self.name!r}, {self.params!r})"

    def _check_params(self) -> None:
        """Fail at configuration time if the parameters don't fit the stage."""
        try:
            inspect.signature(self.func).bind(None, **self.params)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid parameters for stage '{self.name}': {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        return {"stage": self.name, **self.params}


class PipelineResult:
    """Cleaned dataset plus the report of the run that produced it."""

    def __init__(self, dataset: pd.DataFrame, report: CleaningReport) -> None:
        self.dataset = dataset
        self.report = report

    def __iter__(self):
        # Allows ``df, report = pipeline.run(raw)``
        return iter((self.dataset, self.report))

    def __repr__(self) -> str:
        return f"PipelineResult(rows={len(self.dataset)}, stages={len(self.report)})"


class Pipeline:
    """Ordered sequence of cleaning stages."""

    def __init__(self, stages: list[StageSpec | dict] | None = None, name: str = "cleaning") -> None:
        self.name = name
        self.stages: list[StageSpec] = []
        self.run_log: list[dict] = []
        for stage in stages or []:
            if isinstance(stage, StageSpec):
                self.stages.append(stage)
            else:
                self.stages.append(_spec_from_dict(stage))

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"Pipeline({self.name!r}, stages={[s.name for s in self.stages]})"

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def add_stage(self, name: str, **params: Any) -> "Pipeline":
        """Append a stage; returns the pipeline so calls can be chained."""
        self.stages.append(StageSpec(name, params))
        return self

    @classmethod
    def from_config(cls, config: list[dict] | dict, name: str | None = None) -> "Pipeline":
        """
        Build a pipeline from ``[{"stage": ..., **params}, ...]`` or
        ``{"name": ..., "stages": [...]}``.
        """
        if isinstance(config, dict):
            if "stages" not in config:
                raise ConfigurationError("Pipeline config dict must have a 'stages' key")
            name = name or config.get("name")
            config = config["stages"]
        if not isinstance(config, list):
            raise ConfigurationError(f"Pipeline stages must be a list, got {type(config).__name__}")
        return cls([_spec_from_dict(entry) for entry in config], name=name or "cleaning")

    @classmethod
    def from_json(cls, path: str | Path) -> "Pipeline":
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid pipeline config {path}: {exc}") from exc
        logger.info("Loaded pipeline config from %s", path)
        return cls.from_config(config, name=path.stem if isinstance(config, list) else None)

    @classmethod
    def default(cls) -> "Pipeline":
        return cls.from_config(DEFAULT_PIPELINE, name="default")

    def to_config(self) -> dict[str, Any]:
        return {"name": self.name, "stages": [spec.to_dict() for spec in self.stages]}

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------
    def _log_stage(self, stage: str, status: str, details: list[str], duration_ms: float = 0.0) -> None:
        """Record a stage outcome in the run log."""
        entry = {
            "stage": stage,
            "status": status,
            "details": details,
            "duration_ms": round(duration_ms, 2),
        }
        self.run_log.append(entry)
        symbol = "[OK]" if status == "SUCCESS" else "[XX]"
        log = logger.info if status == "SUCCESS" else logger.error
        log("%s Stage: %s - %s (%.1f ms)", symbol, stage, status, duration_ms)
        for d in details:
            log("  %s", d)

    # ------------------------------------------------------------------
    # Run the pipeline
    # ------------------------------------------------------------------
    def run(self, df: pd.DataFrame) -> PipelineResult:
        """Apply every stage in order and return the cleaned dataset and report."""
        ensure_dataframe(df)
        self.run_log = []
        report = CleaningReport(self.name)
        report.profile_before = profile_dataset(df)

        logger.info("=" * 60)
        logger.info("PIPELINE: %s (%d stages, %d rows, %d columns)",
                    self.name, len(self.stages), len(df), len(df.columns))
        logger.info("=" * 60)

        current = df
        for position, spec in enumerate(self.stages, start=1):
            logger.info("STAGE %d: %s", position, spec.name.upper())
            start = time.perf_counter()
            try:
                output = spec.func(current, **spec.params)
                current, result = _check_output(spec.name, output)
            except Exception as exc:
                self._log_stage(spec.name, "FAILURE", [str(exc)],
                                (time.perf_counter() - start) * 1000)
                raise
            result.duration_ms = (time.perf_counter() - start) * 1000
            report.add(result)
            self._log_stage(spec.name, "SUCCESS", [result.action], result.duration_ms)

        report.profile_after = profile_dataset(current)
        logger.info("Pipeline '%s' complete: %d -> %d rows, %d value(s) affected",
                    self.name, len(df), len(current), report.total_values_affected)
        return PipelineResult(current, report)


def _spec_from_dict(entry: dict) -> StageSpec:
    if not isinstance(entry, dict) or "stage" not in entry:
        raise ConfigurationError(f"Each stage config needs a 'stage' key, got {entry!r}")
    params = {k: v for k, v in entry.items() if k != "stage"}
    return StageSpec(entry["stage"], params)


def _check_output(name: str, output: Any) -> tuple[pd.DataFrame, StageResult]:
    """Custom stages must honour the (DataFrame, StageResult) contract."""
    if (not isinstance(output, tuple) or len(output) != 2
            or not isinstance(output[0], pd.DataFrame)
            or not isinstance(output[1], StageResult)):
        raise StageError("Stage must return a (DataFrame, StageResult) tuple", stage=name)
    return output
