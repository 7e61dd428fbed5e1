"""
Logging configuration for recsan.

Structured logging with correlation IDs, operation context and timing.
Log output always goes to stderr so sanitized documents written to stdout
stay machine readable.
"""

import contextvars
import logging
import logging.handlers
import sys
import time
import uuid
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

correlation_id: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
operation_context: contextvars.ContextVar[dict[str, Any] | None] = (
    contextvars.ContextVar("operation_context", default=None)
)
operation_start_time: contextvars.ContextVar[float] = contextvars.ContextVar(
    "operation_start_time", default=0.0
)


class CorrelationIDProcessor:
    """Processor to add correlation ID to log records."""

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        correlation_id_value = correlation_id.get("")
        if correlation_id_value:
            event_dict["correlation_id"] = correlation_id_value
        return event_dict


class OperationContextProcessor:
    """Processor to add operation context to log records."""

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        context = operation_context.get()
        if context:
            for key, value in context.items():
                event_dict.setdefault(key, value)
        return event_dict


class PerformanceProcessor:
    """Processor to add elapsed operation time to log records."""

    def __call__(
        self, logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        start_time = operation_start_time.get(0.0)
        if start_time > 0 and "duration_ms" not in event_dict:
            event_dict["elapsed_ms"] = round((time.time() - start_time) * 1000, 2)
        return event_dict


class StructuredLogger:
    """Thin wrapper over a structlog logger with convenience methods.

    Until ``setup_logging`` (or the host application) configures structlog,
    events are handed to the standard library logger of the same name, so
    they never reach stdout.
    """

    def __init__(self, logger_name: str):
        self._logger_name = logger_name

    @property
    def logger(self) -> Any:
        if structlog.is_configured():
            return structlog.get_logger(self._logger_name)
        return structlog.wrap_logger(logging.getLogger(self._logger_name))

    def with_correlation_id(
        self, correlation_id_value: str | None = None
    ) -> "StructuredLogger":
        """Bind a correlation ID to the current context."""
        if correlation_id_value is None:
            correlation_id_value = generate_correlation_id()

        correlation_id.set(correlation_id_value)
        return self

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **kwargs)

    def error(
        self, message: str, error: Exception | None = None, **kwargs: Any
    ) -> None:
        """Log an error message with structured data and exception details."""
        if error is not None:
            kwargs.update(
                {
                    "error": str(error),
                    "error_type": type(error).__name__,
                    "error_module": type(error).__module__,
                }
            )
        self.logger.error(message, **kwargs)

    def audit(self, action: str, **kwargs: Any) -> None:
        """Log audit events."""
        kwargs.update(
            {
                "audit": True,
                "action": action,
                "timestamp": time.time(),
            }
        )
        self.logger.info(f"AUDIT: {action}", **kwargs)


def _resolve_level(level: str | int | None, verbose: bool, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    if verbose:
        return logging.DEBUG
    if isinstance(level, int):
        return level
    if level:
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, int):
            return resolved
    return logging.INFO


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    json_logs: bool = False,
    level: str | int | None = None,
    log_file: str | None = None,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 3,
) -> None:
    """Configure structured logging for the application.

    structlog renders each event and hands the rendered line to the standard
    library logger of the same name, so stderr and the optional log file
    receive the same records.
    """
    log_level = _resolve_level(level, verbose, quiet)

    base_processors = [
        CorrelationIDProcessor(),
        OperationContextProcessor(),
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        PerformanceProcessor(),
    ]

    handlers: list[logging.Handler] = []

    if json_logs:
        processors = [
            *base_processors,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]
        handlers.append(logging.StreamHandler(sys.stderr))
    else:
        processors = [
            *base_processors,
            structlog.processors.format_exc_info,
            structlog.processors.KeyValueRenderer(
                key_order=["event"], sort_keys=True
            ),
        ]
        handlers.append(
            RichHandler(
                console=Console(stderr=True),
                show_path=False,
                markup=False,
                rich_tracebacks=True,
                tracebacks_show_locals=verbose,
            )
        )

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    for handler in handlers:
        handler.setLevel(log_level)

    logging.basicConfig(
        level=log_level, format="%(message)s", handlers=handlers, force=True
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name)


def get_correlation_id() -> str:
    """Get the current correlation ID."""
    return correlation_id.get("")


def set_correlation_id(correlation_id_value: str) -> None:
    """Set the correlation ID for the current context."""
    correlation_id.set(correlation_id_value)


def generate_correlation_id() -> str:
    """Generate a new correlation ID."""
    return str(uuid.uuid4())


def clear_context() -> None:
    """Clear all logging context variables."""
    correlation_id.set("")
    operation_context.set(None)
    operation_start_time.set(0.0)


class LoggingContextManager:
    """Context manager that logs the start, end and failure of an operation."""

    def __init__(
        self,
        logger: StructuredLogger,
        operation: str,
        correlation_id_value: str | None = None,
        **context: Any,
    ):
        self.logger = logger
        self.operation = operation
        self.correlation_id_value = correlation_id_value or generate_correlation_id()
        self.context = context
        self._tokens: list[tuple[contextvars.ContextVar, contextvars.Token]] = []
        self._started = 0.0

    def __enter__(self) -> StructuredLogger:
        self._started = time.time()
        self._tokens = [
            (correlation_id, correlation_id.set(self.correlation_id_value)),
            (
                operation_context,
                operation_context.set({"operation": self.operation, **self.context}),
            ),
            (operation_start_time, operation_start_time.set(self._started)),
        ]

        self.logger.debug(f"Starting operation: {self.operation}")
        return self.logger

    def __exit__(self, exc_type, exc_val, exc_tb):
        duration_ms = round((time.time() - self._started) * 1000, 2)

        if exc_type:
            self.logger.error(
                f"Operation failed: {self.operation}",
                error=exc_val,
                duration_ms=duration_ms,
            )
        else:
            self.logger.debug(
                f"Operation completed: {self.operation}",
                duration_ms=duration_ms,
            )

        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens = []


def operation_logger(
    operation_name: str, correlation_id_value: str | None = None, **context: Any
) -> LoggingContextManager:
    """Create a logging context manager for operations."""
    logger = get_logger(__name__)
    return LoggingContextManager(
        logger, operation_name, correlation_id_value, **context
    )
