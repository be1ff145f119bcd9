"""
Centralized logging system for Termin API.

This module provides structured and human-readable log formats. Requests carry
credentials (tokens, passwords, API keys), so the structured formatter redacts
extra fields whose names look sensitive.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from terminapi.config import settings

_RESERVED_RECORD_KEYS = {
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName",
}

SENSITIVE_KEYS = {
    "api_key", "apikey", "key", "token", "password", "secret",
    "authorization", "auth", "credential", "client_secret", "value",
}


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter for structured JSON logging.

    Converts log records to structured JSON format with consistent fields
    and optional sanitization of sensitive data.
    """

    def __init__(self, sanitize: bool = True):
        """
        Initialize the structured formatter.

        Args:
            sanitize: Whether to redact sensitive extra fields
        """
        super().__init__()
        self.sanitize = sanitize

    def format(self, record: logging.LogRecord) -> str:
        """
        Format a log record as structured JSON.

        Args:
            record: The log record to format

        Returns:
            str: JSON-formatted log entry
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }
        if self.sanitize:
            extra = self._sanitize(extra)
        log_entry.update(extra)

        return json.dumps(log_entry, ensure_ascii=False, separators=(',', ':'), default=str)

    def _sanitize(self, obj: Any) -> Any:
        """
        Redact values stored under sensitive keys, recursively.

        Args:
            obj: Extra fields attached to the record

        Returns:
            Any: Copy with sensitive values replaced
        """
        if isinstance(obj, dict):
            return {
                k: "[REDACTED]" if str(k).lower() in SENSITIVE_KEYS else self._sanitize(v)
                for k, v in obj.items()
            }
        if isinstance(obj, (list, tuple)):
            return [self._sanitize(item) for item in obj]
        return obj


class SimpleFormatter(logging.Formatter):
    """Simple, human-readable formatter for terminal use."""

    def __init__(self):
        """Initialize the simple formatter with a readable format."""
        super().__init__(
            fmt="%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )


def _build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "structured":
        return StructuredFormatter(sanitize=settings.sanitize_logs)
    return SimpleFormatter()


def setup_logger(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_format: Optional[str] = None
) -> logging.Logger:
    """
    Set up and configure a logger instance.

    Calling it again for a configured logger updates its level and format,
    which is how the CLI switches to verbose output.

    Args:
        name: Logger name (defaults to 'terminapi')
        level: Log level (defaults to settings.log_level)
        log_format: 'structured' or 'simple' (defaults to settings.log_format)

    Returns:
        logging.Logger: Configured logger instance
    """
    logger_name = name or "terminapi"
    log_level = getattr(logging, (level or settings.log_level).upper())
    format_type = log_format or settings.log_format

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)

    if not logger.handlers:
        # stderr keeps command output on stdout clean
        handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(handler)
        logger.propagate = False

    for handler in logger.handlers:
        handler.setLevel(log_level)
        handler.setFormatter(_build_formatter(format_type))

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger inside the package hierarchy.

    Module loggers are children of the ``terminapi`` logger and share its
    handler, so reconfiguring the package logger reconfigures them all.

    Args:
        name: Logger name (defaults to calling module name)

    Returns:
        logging.Logger: Logger instance
    """
    if name is None:
        import inspect
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "terminapi")
        else:
            name = "terminapi"

    if name != "terminapi" and not name.startswith("terminapi."):
        name = f"terminapi.{name}"
    return logging.getLogger(name)


# Create the package logger
logger = setup_logger()
