"""
Logging utilities for s3publish.

Provides structured logging with entry/exit decorators, JSON formatting,
per-job correlation IDs, and consistent formatting across all transfer
stages.

Features:
    - Structured JSON logging when LOG_FORMAT=json
    - Correlation ID tracking across a transfer job and its worker threads
    - Entry/exit decorators with timing
    - Colorized console output for interactive runs

Example usage:
    >>> from s3publish.utils.logging import get_logger, log_function_call, set_correlation_id
    >>>
    >>> logger = get_logger(__name__)
    >>> set_correlation_id("job-3f2a")
    >>>
    >>> @log_function_call
    >>> def build_manifest(root: str, remote_prefix: str) -> list:
    >>>     logger.info("Walking tree", extra={"root": root})
    >>>     return []
"""

import logging
import functools
import json
import os
import uuid
from typing import Any, Callable, TypeVar, cast, Optional, Dict
from datetime import datetime, timezone
from contextvars import ContextVar, Token

import coloredlogs

# Type variable for generic decorator typing
F = TypeVar("F", bound=Callable[..., Any])

# Context variable for correlation ID (copied into worker threads per job)
_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)

# Global logging configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
JSON_LOG_FORMAT = os.getenv("LOG_FORMAT", "text").lower() == "json"

# LogRecord attributes that are not user-supplied extras
_STANDARD_RECORD_FIELDS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
    ]
)


# ============================================================================
# Correlation ID Management
# ============================================================================

def get_correlation_id() -> str:
    """
    Get current correlation ID or generate new one.

    Returns:
        Current correlation ID (generates UUID if not set)
    """
    corr_id = _correlation_id.get()
    if corr_id is None:
        corr_id = str(uuid.uuid4())
        _correlation_id.set(corr_id)
    return corr_id


def set_correlation_id(corr_id: str) -> Token:
    """
    Set correlation ID for current context.

    Args:
        corr_id: Correlation ID to set (a transfer job sets its job id)

    Returns:
        Token that restores the previous ID when passed to reset_correlation_id
    """
    return _correlation_id.set(corr_id)


def reset_correlation_id(token: Token) -> None:
    """Restore the correlation ID that was current before ``token`` was issued."""
    _correlation_id.reset(token)


def clear_correlation_id() -> None:
    """Clear correlation ID for current context."""
    _correlation_id.set(None)


# ============================================================================
# JSON Formatter
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Example output:
        {
            "timestamp": "2026-10-19T10:30:15.123456Z",
            "level": "INFO",
            "logger": "s3publish.transfer.worker_pool",
            "message": "[3/12] uploading site/app.js text/javascript",
            "correlation_id": "job-3f2a",
            "extra": {"remote_key": "site/app.js", "ordinal": 3}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": get_correlation_id(),
            "source": {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_FIELDS
        }
        if extra_fields:
            log_data["extra"] = extra_fields

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        log_data["environment"] = {
            "hostname": os.getenv("HOSTNAME", "unknown"),
        }

        return json.dumps(log_data, default=str)


def setup_logging(level: str = "INFO", enable_colors: bool = True) -> None:
    """
    Configure global logging settings for the application.

    Sets up structured JSON logging when LOG_FORMAT=json, colorized text
    otherwise.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        enable_colors: Whether to enable colorized console output (default: True)

    Example:
        >>> setup_logging(level="DEBUG", enable_colors=True)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)

    if JSON_LOG_FORMAT:
        console_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(console_handler)
    elif enable_colors:
        coloredlogs.install(
            level=log_level,
            fmt=LOG_FORMAT,
            datefmt=LOG_DATE_FORMAT,
            logger=root_logger,
        )
    else:
        console_handler.setFormatter(
            logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        )
        root_logger.addHandler(console_handler)

    # boto3 is chatty at DEBUG; keep it at WARNING unless asked otherwise
    for noisy in ("boto3", "botocore", "s3transfer", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_function_call(func: F) -> F:
    """
    Decorator that logs function entry and exit with parameters and return values.

    - Logs function entry with all parameter values
    - Logs function exit with return value and execution time
    - Logs exceptions with full traceback, then re-raises them

    Args:
        func: Function to be decorated

    Returns:
        Wrapped function with logging

    Example:
        >>> @log_function_call
        >>> def find_object(bucket, prefix: str, filename: str) -> str:
        >>>     ...
        >>>
        >>> # 2026-10-19 10:30:15 - module - INFO - ENTER find_object(...)
        >>> # 2026-10-19 10:30:16 - module - INFO - EXIT find_object -> 'https://...' (0.41s)
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        correlation_id = get_correlation_id()

        arg_names = func.__code__.co_varnames[: func.__code__.co_argcount]
        args_repr = [f"{name}={value!r}" for name, value in zip(arg_names, args)]
        kwargs_repr = [f"{key}={value!r}" for key, value in kwargs.items()]
        all_args = ", ".join(args_repr + kwargs_repr)

        logger.debug(
            f"ENTER {func.__name__}({all_args})",
            extra={
                "function": func.__name__,
                "correlation_id": correlation_id,
                "event": "function_entry",
            },
        )

        start_time = datetime.now()

        try:
            result = func(*args, **kwargs)
        except Exception as error:
            execution_time = (datetime.now() - start_time).total_seconds()
            logger.error(
                f"ERROR {func.__name__} raised {type(error).__name__}: {error}",
                extra={
                    "function": func.__name__,
                    "duration_seconds": execution_time,
                    "correlation_id": correlation_id,
                    "event": "function_error",
                    "status": "error",
                    "error_type": type(error).__name__,
                },
                exc_info=True,
            )
            raise

        execution_time = (datetime.now() - start_time).total_seconds()
        logger.debug(
            f"EXIT {func.__name__} -> {result!r} ({execution_time:.2f}s)",
            extra={
                "function": func.__name__,
                "duration_seconds": execution_time,
                "correlation_id": correlation_id,
                "event": "function_exit",
                "status": "success",
            },
        )

        return result

    return cast(F, wrapper)
