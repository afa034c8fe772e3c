"""
Custom exceptions for the superstore analytics package.

Load and validation problems are raised once, before any report runs.
Report computation raises only ``ReportComputationError``.
"""

from pathlib import Path
from typing import Any, List, Optional


class SuperstoreError(Exception):
    """Base exception for all superstore analytics errors."""

    pass


class RecordLoadError(SuperstoreError):
    """Raised when the source extract cannot be read."""

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.file_path = file_path
        self.original_error = original_error

        if file_path:
            message = f"Error loading records from '{file_path}': {message}"

        if original_error:
            message = f"{message} (Original error: {original_error})"

        super().__init__(message)


class RecordValidationError(SuperstoreError):
    """Raised when the record batch fails validation; the whole batch is rejected."""

    def __init__(
        self,
        message: str,
        file_path: Optional[Path] = None,
        row_index: Optional[int] = None,
        column_name: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        validation_errors: Optional[List[str]] = None,
    ):
        self.file_path = file_path
        self.row_index = row_index
        self.column_name = column_name
        self.invalid_value = invalid_value
        self.validation_errors = validation_errors or []

        error_parts = [message]

        if file_path:
            error_parts.append(f"File: {file_path}")

        if row_index is not None:
            error_parts.append(f"Row: {row_index}")

        if column_name:
            error_parts.append(f"Column: {column_name}")

        if invalid_value is not None:
            error_parts.append(f"Value: {invalid_value!r}")

        if validation_errors:
            error_parts.extend(
                [f"Validation error: {error}" for error in validation_errors]
            )

        super().__init__(" | ".join(error_parts))


class ReportComputationError(SuperstoreError):
    """Raised when a report fails on an already validated record set."""

    def __init__(self, report: str, original_error: Optional[Exception] = None):
        self.report = report
        self.original_error = original_error

        message = f"Report '{report}' failed"
        if original_error:
            message = f"{message}: {original_error}"

        super().__init__(message)
