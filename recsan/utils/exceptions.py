"""
Exception hierarchy for recsan.

Errors carry a category, severity, troubleshooting hints and structured
details, and are reported through the structured logger when created.
"""

import time
from enum import Enum
from typing import Any

from .logging import get_logger

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Categories for error classification."""

    USER_ERROR = "user_error"
    CONFIGURATION_ERROR = "configuration_error"
    DATA_ERROR = "data_error"
    SYSTEM_ERROR = "system_error"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class RecsanError(Exception):
    """
    Base exception for all recsan errors.

    Provides error context, categorization, and troubleshooting guidance.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        category: ErrorCategory = ErrorCategory.SYSTEM_ERROR,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        correlation_id: str | None = None,
        user_message: str | None = None,
        troubleshooting_hints: list[str] | None = None,
        **context: Any,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.category = category
        self.severity = severity
        self.correlation_id = correlation_id
        self.user_message = user_message or message
        self.troubleshooting_hints = troubleshooting_hints or []
        self.context = context
        self.timestamp = time.time()

        self._log_error()

    def _log_error(self) -> None:
        """Log error creation with full context."""
        logger.error(
            f"Exception created: {self.__class__.__name__}",
            error_message=self.message,
            category=self.category.value,
            severity=self.severity.value,
            correlation_id=self.correlation_id,
            details=self.details,
            **self.context,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "user_message": self.user_message,
            "category": self.category.value,
            "severity": self.severity.value,
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp,
            "details": self.details,
            "troubleshooting_hints": self.troubleshooting_hints,
            "context": self.context,
        }


class ConfigurationError(RecsanError):
    """Raised when the hosting application has not set recsan up correctly."""

    def __init__(
        self,
        message: str,
        config_key: str | None = None,
        expected_value: str | None = None,
        actual_value: str | None = None,
        **kwargs,
    ):
        hints = [
            "Check your configuration file (.env) for missing or incorrect values",
            "Verify RECSAN_* environment variables are properly set",
            "Run 'recsan config-validate' to inspect the effective settings",
        ]

        if config_key:
            hints.append(f"Ensure '{config_key}' is properly configured")
            kwargs.setdefault("details", {})["config_key"] = config_key

        if expected_value:
            kwargs.setdefault("details", {})["expected_value"] = expected_value

        if actual_value:
            kwargs.setdefault("details", {})["actual_value"] = actual_value

        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION_ERROR,
            severity=ErrorSeverity.HIGH,
            troubleshooting_hints=hints,
            **kwargs,
        )


class ValidationError(RecsanError):
    """Raised when a sanitize options bundle is invalid."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        field_value: Any | None = None,
        validation_rule: str | None = None,
        **kwargs,
    ):
        details = kwargs.setdefault("details", {})
        details.update(
            {
                "field_name": field_name,
                "field_value": field_value,
                "validation_rule": validation_rule,
            }
        )

        hints = [
            "Recognised options are: mask, remove, only, except, deep",
            "Pass field collections as lists or sets, not as a single string",
            "Pass mask as a mapping or as (field, replacement) pairs",
        ]

        if field_name:
            hints.append(f"Check the value provided for option '{field_name}'")

        super().__init__(
            message,
            category=ErrorCategory.USER_ERROR,
            severity=ErrorSeverity.LOW,
            troubleshooting_hints=hints,
            **kwargs,
        )


class InputError(RecsanError):
    """Raised when a document handed to the command line cannot be read."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        expected_format: str | None = "json",
        **kwargs,
    ):
        details = kwargs.setdefault("details", {})
        details.update({"source": source, "expected_format": expected_format})

        hints = [
            "Check that the input is a valid JSON object or array",
            "Use '-' to read the document from standard input",
        ]

        if source and source != "-":
            hints.append(f"Verify that '{source}' exists and is readable")

        super().__init__(
            message,
            category=ErrorCategory.DATA_ERROR,
            troubleshooting_hints=hints,
            **kwargs,
        )
