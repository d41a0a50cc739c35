"""
Library Platform Structured Logging Utilities using Structlog.

This module provides composable logging utilities built on structlog,
designed for the platform's broker-backed log pipeline.

Key Features:
- Correlation ID binding with contextvars (async-safe)
- Processor that forwards every log event into the broker log producer
- Environment-based output formatting
- Optional file-based logging with rotation
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Protocol

import structlog
from library_core.domain_enums import LogLevel
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.typing import Processor

# Loggers whose events must never re-enter the broker pipeline they report on
NON_FORWARDED_LOGGERS = frozenset({"library.log_producer", "library.kafka_client"})

_LEVEL_BY_METHOD: dict[str, LogLevel] = {
    "debug": LogLevel.DEBUG,
    "info": LogLevel.INFO,
    "warn": LogLevel.WARN,
    "warning": LogLevel.WARN,
    "error": LogLevel.ERROR,
    "exception": LogLevel.ERROR,
    "critical": LogLevel.FATAL,
    "fatal": LogLevel.FATAL,
}

_RESERVED_KEYS = frozenset(
    {
        "event",
        "timestamp",
        "level",
        "logger_name",
        "correlation_id",
        "filename",
        "func_name",
        "lineno",
        "exc_info",
        "stack_info",
        "error",
        "extra",
        "service.name",
        "deployment.environment",
    }
)

_JSON_SAFE = (str, int, float, bool, type(None))


class LogRecordSink(Protocol):
    """Anything that accepts a log record without blocking the caller."""

    def log_message(
        self,
        caller: str,
        correlation_id: str,
        level: LogLevel,
        message: str,
        extra: dict[str, Any] | None = None,
        error: str | None = None,
    ) -> bool: ...


_active_sink: LogRecordSink | None = None


def install_log_sink(sink: LogRecordSink) -> None:
    """Route every subsequent log event of this process into ``sink``."""
    global _active_sink
    _active_sink = sink


def remove_log_sink(sink: LogRecordSink | None = None) -> None:
    global _active_sink
    if sink is None or _active_sink is sink:
        _active_sink = None


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Add service.name and deployment.environment fields to all logs.

    Args:
        logger: The logger instance (unused but required by structlog)
        method_name: The logging method name (unused but required by structlog)
        event_dict: The log event dictionary to enrich

    Returns:
        Enriched event dictionary with service context fields
    """
    event_dict["service.name"] = os.getenv("SERVICE_NAME", "unknown")
    event_dict["deployment.environment"] = os.getenv("ENVIRONMENT", "development")
    return event_dict


def _json_safe(value: Any) -> Any:
    if isinstance(value, _JSON_SAFE):
        return value
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, list | tuple | set):
        return [_json_safe(v) for v in value]
    return str(value)


def _describe_error(event_dict: dict[str, Any]) -> str | None:
    error = event_dict.get("error")
    if error is not None:
        return str(error)

    exc_info = event_dict.get("exc_info")
    if not exc_info:
        return None
    if exc_info is True:
        exc_info = sys.exc_info()
    if isinstance(exc_info, BaseException):
        exc = exc_info
    elif isinstance(exc_info, tuple) and len(exc_info) == 3:
        exc = exc_info[1]
    else:
        return None
    if exc is None:
        return None
    return f"{type(exc).__name__}: {exc}"


def forward_to_log_sink(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """
    Forward the event to the installed log sink as a broker log record.

    The ``broker_level`` key overrides the level derived from the logging
    method (used for ``panic``, which has no stdlib equivalent).
    """
    broker_level = event_dict.pop("broker_level", None)
    sink = _active_sink
    if sink is None or event_dict.get("logger_name") in NON_FORWARDED_LOGGERS:
        return event_dict

    level = LogLevel(broker_level) if broker_level else _LEVEL_BY_METHOD.get(
        method_name, LogLevel.INFO
    )
    filename = event_dict.get("filename")
    caller = f"{filename}:{event_dict.get('lineno')}" if filename else ""

    extra: dict[str, Any] = {}
    explicit_extra = event_dict.get("extra")
    if isinstance(explicit_extra, dict):
        extra.update(explicit_extra)
    for key, value in event_dict.items():
        if key not in _RESERVED_KEYS:
            extra[key] = value
    if "logger_name" in event_dict:
        extra.setdefault("logger", event_dict["logger_name"])

    sink.log_message(
        caller=caller,
        correlation_id=str(event_dict.get("correlation_id", "")),
        level=level,
        message=str(event_dict.get("event", "")),
        extra=_json_safe(extra),
        error=_describe_error(event_dict),
    )
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.stdlib.filter_by_level,
        merge_contextvars,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
        forward_to_log_sink,
    ]


def configure_service_logging(
    service_name: str,
    environment: str | None = None,
    log_level: str = "INFO",
    log_to_file: bool | None = None,
    log_file_path: str | None = None,
) -> None:
    """
    Configure structlog for a platform service.

    Args:
        service_name: Name of the service (e.g., "book_service")
        environment: Environment name (defaults to ENVIRONMENT env var)
        log_level: Logging level (defaults to "INFO")
        log_to_file: Enable file-based logging (defaults to LOG_TO_FILE env var)
        log_file_path: Path to log file (defaults to LOG_FILE_PATH env var
            or /app/logs/{service_name}.log)

    Environment Variables:
        LOG_FORMAT: "json" for JSON, "console" for human-readable (default: console)
        LOG_TO_FILE: Enable file logging (default: false)
        LOG_FILE_PATH: Custom log file path
        LOG_MAX_BYTES: Max bytes per log file before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup log files to keep (default: 5)
    """
    if environment is None:
        environment = os.getenv("ENVIRONMENT", "development")

    os.environ.setdefault("SERVICE_NAME", service_name)
    os.environ.setdefault("ENVIRONMENT", environment)

    if log_to_file is None:
        log_to_file = os.getenv("LOG_TO_FILE", "false").lower() in ("true", "1", "yes")

    log_format = os.getenv("LOG_FORMAT", "").lower()
    use_json = log_format == "json" or (not log_format and environment == "production")

    processors = _shared_processors()
    if use_json:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors += [
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_to_file:
        if log_file_path is None:
            log_file_path = os.getenv("LOG_FILE_PATH", f"/app/logs/{service_name}.log")

        log_file = Path(log_file_path)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        max_bytes = int(os.getenv("LOG_MAX_BYTES", "10485760"))
        backup_count = int(os.getenv("LOG_BACKUP_COUNT", "5"))

        handlers.append(
            RotatingFileHandler(
                filename=str(log_file),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        format="%(message)s",
        handlers=handlers,
        level=getattr(logging, log_level.upper()),
        force=True,
    )

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def create_service_logger(name: str | None = None) -> Any:
    """
    Create a service logger with optional name binding.

    Args:
        name: Optional logger name (e.g., "worker", "api", "processor")

    Returns:
        A configured structlog BoundLogger instance
    """
    logger = structlog.get_logger(name)

    if name:
        logger = logger.bind(logger_name=name)

    return logger


def bind_correlation_id(correlation_id: str) -> None:
    """Bind the request correlation id so every log record of this task carries it."""
    clear_contextvars()
    bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    clear_contextvars()
