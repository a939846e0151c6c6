"""
Data Cleaning Pipeline
======================
A deterministic, composable pipeline of cleaning stages for tabular data:
missing-value handling, deduplication, outlier treatment, scaling,
categorical encoding, format standardization and integrity checks.
"""

from cleaning_pipeline.exceptions import (
    CleaningError,
    ConfigurationError,
    EmptyColumnError,
    IntegrityError,
    MissingColumnError,
    StageError,
    TypeMismatchError,
    UnknownStageError,
)
from cleaning_pipeline.pipeline import (
    STAGE_REGISTRY,
    Pipeline,
    PipelineResult,
    StageSpec,
    register_stage,
)
from cleaning_pipeline.report import CleaningReport, StageResult

__version__ = "1.0.0"

__all__ = [
    "CleaningError",
    "CleaningReport",
    "ConfigurationError",
    "EmptyColumnError",
    "IntegrityError",
    "MissingColumnError",
    "Pipeline",
    "PipelineResult",
    "STAGE_REGISTRY",
    "StageError",
    "StageResult",
    "StageSpec",
    "TypeMismatchError",
    "UnknownStageError",
    "register_stage",
]
