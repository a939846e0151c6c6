"""
Exceptions
==========
Error types raised by cleaning stages and the pipeline executor.
"""


class CleaningError(Exception):
    """Base class for every error raised by the cleaning pipeline."""
    pass


class ConfigurationError(CleaningError):
    """Raised when a pipeline or stage is configured incorrectly."""
    pass


class UnknownStageError(ConfigurationError):
    """Raised when a stage name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = sorted(available or [])
        message = f"Unknown stage '{name}'"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)


class StageError(CleaningError):
    """Raised when a stage cannot run against the dataset it was given."""

    def __init__(self, message: str, stage: str | None = None,
                 column: str | None = None) -> None:
        self.stage = stage
        self.column = column
        prefix = f"[{stage}] " if stage else ""
        super().__init__(f"{prefix}{message}")


class MissingColumnError(StageError):
    """Raised when a stage names a column the dataset does not have."""

    def __init__(self, column: str, stage: str | None = None,
                 available: list[str] | None = None) -> None:
        self.available = list(available or [])
        message = f"Column '{column}' does not exist"
        if self.available:
            message += f" (columns: {', '.join(map(str, self.available))})"
        super().__init__(message, stage=stage, column=column)


class TypeMismatchError(StageError):
    """Raised when a column is not of the kind a stage requires."""

    def __init__(self, column: str | None, expected: str, actual: str,
                 stage: str | None = None) -> None:
        self.expected = expected
        self.actual = actual
        target = f"Column '{column}'" if column is not None else "Input"
        message = f"{target} must be {expected}, got {actual}"
        super().__init__(message, stage=stage, column=column)


class EmptyColumnError(StageError):
    """Raised when a statistic is requested from a column with no values."""

    def __init__(self, column: str, stage: str | None = None) -> None:
        super().__init__(
            f"Column '{column}' has no non-missing values to estimate from",
            stage=stage,
            column=column,
        )


class IntegrityError(StageError):
    """Raised by an integrity check configured with action='raise'."""

    def __init__(self, message: str, violations: int, stage: str | None = None,
                 column: str | None = None, rows: list | None = None) -> None:
        self.violations = violations
        self.rows = list(rows or [])
        super().__init__(message, stage=stage, column=column)
