"""Logging utilities for rolegraph.

This module provides:
- Logging configuration from PermissionsConfig
- Safe, bounded previews of subjects, objects and role sets
- Structured (JSON) or plain-text formatting with permission context
- A logger adapter that attaches subject/object to every record
"""

from __future__ import annotations

import json
import logging
from collections.abc import Set as AbstractSet
from typing import Any, Optional

from .config import LogLevel, PermissionsConfig


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

    Role collections are rendered sorted by their string form so that log
    lines are stable across runs.

    Args:
        value: The value to preview (any type)
        limit: Maximum length of the preview (default: 240)

    Returns:
        A truncated string representation
    """
    if value is None:
        return ""

    if isinstance(value, str):
        s = value
    elif isinstance(value, AbstractSet):
        s = "{" + ", ".join(sorted(str(item) for item in value)) + "}"
    elif isinstance(value, (dict, list)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    # Normalize whitespace
    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


# Attributes present on every LogRecord; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "subject", "object",
    }
)


class PermissionsFormatter(logging.Formatter):
    """Formatter that renders permission context.

    Records carrying ``subject`` / ``object`` attributes (see
    :class:`PermissionsLoggerAdapter`) get them as dedicated fields.
    Other ``extra`` fields are included as bounded previews.
    """

    def __init__(
        self,
        json_format: bool = True,
        preview_limit: int = 240,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.json_format = json_format
        self.preview_limit = preview_limit

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        subject = getattr(record, "subject", None)
        obj = getattr(record, "object", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if subject is not None:
            log_data["subject"] = safe_preview(subject, limit=self.preview_limit)
        if obj is not None:
            log_data["object"] = safe_preview(obj, limit=self.preview_limit)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = safe_preview(value, limit=self.preview_limit)

        if self.json_format:
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if subject is not None:
            parts.append(f"subject={log_data['subject']}")
        if obj is not None:
            parts.append(f"object={log_data['object']}")
        parts.append(f": {log_data['message']}")
        return " ".join(parts)


class PermissionsLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that moves ``subject=`` / ``obj=`` kwargs into ``extra``.

    Usage:
        logger = get_permissions_logger(__name__)
        logger.debug("Roles added", subject=user, obj=document)
    """

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        subject = kwargs.pop("subject", None)
        obj = kwargs.pop("obj", None)

        extra = kwargs.get("extra", {})
        if subject is not None:
            extra["subject"] = subject
        if obj is not None:
            extra["object"] = obj
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[PermissionsConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger for an application using rolegraph.

    Args:
        config: PermissionsConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    level_map = {
        LogLevel.DEBUG: logging.DEBUG,
        LogLevel.INFO: logging.INFO,
        LogLevel.WARNING: logging.WARNING,
        LogLevel.ERROR: logging.ERROR,
        LogLevel.CRITICAL: logging.CRITICAL,
    }
    log_level = level_map.get(config.log_level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        PermissionsFormatter(json_format=config.log_json if json_format is None else json_format)
    )
    root_logger.addHandler(console_handler)


def get_permissions_logger(name: str) -> PermissionsLoggerAdapter:
    """Get a logger adapter with subject/object support.

    Args:
        name: Logger name (typically __name__)

    Returns:
        PermissionsLoggerAdapter instance
    """
    return PermissionsLoggerAdapter(logging.getLogger(name))


__all__ = [
    "safe_preview",
    "PermissionsFormatter",
    "PermissionsLoggerAdapter",
    "setup_logging",
    "get_permissions_logger",
]
