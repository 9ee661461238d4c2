"""Centralized logging utilities for contextrights.

This module provides:
- Logging configuration from RightsConfig
- Safe preview of arbitrary values (authorization specs, attribute maps)
- Structured logging with authorization-context correlation
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from uuid import UUID

from .config import LogLevel, RightsConfig

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name", "msg", "args", "created", "filename", "funcName",
        "levelname", "levelno", "lineno", "module", "msecs",
        "message", "pathname", "process", "processName", "relativeCreated",
        "thread", "threadName", "exc_info", "exc_text", "stack_info",
        "taskName", "context_id",
    }
)


def safe_preview(value: Any, limit: int = 240) -> str:
    """Create a length-bounded, single-line preview of a value for logging.

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
    elif isinstance(value, (dict, list, tuple)):
        try:
            s = json.dumps(value, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            s = str(value)
    else:
        s = str(value)

    s = " ".join(s.split())

    if len(s) > limit:
        return s[: limit - 1] + "…"

    return s


class RightsFormatter(logging.Formatter):
    """Formatter that includes the authorization context id.

    Outputs JSON (default) or a plain single line. Extra record fields are
    rendered through safe_preview.
    """

    def __init__(
        self,
        include_context_id: bool = True,
        json_format: bool = True,
        *args: Any,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.include_context_id = include_context_id
        self.json_format = json_format

    def format(self, record: logging.LogRecord) -> str:
        context_id = getattr(record, "context_id", None)

        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context_id and context_id:
            log_data["context_id"] = str(context_id) if isinstance(context_id, UUID) else context_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extras = {
            key: safe_preview(value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_KEYS
        }

        if self.json_format:
            log_data.update(extras)
            return json.dumps(log_data, default=str, ensure_ascii=False)

        parts = [
            f"[{log_data['timestamp']}]",
            f"{log_data['level']}",
            f"{log_data['logger']}",
        ]
        if "context_id" in log_data:
            parts.append(f"context_id={log_data['context_id']}")
        parts.append(f": {log_data['message']}")
        parts.extend(f"{key}={value}" for key, value in extras.items())
        line = " ".join(parts)
        if "exception" in log_data:
            line = f"{line}\n{log_data['exception']}"
        return line


class RightsLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that adds context_id to every record.

    Usage:
        logger = get_rights_logger(__name__, context_id=ctx.context_id)
        logger.info("granted %s", names)
    """

    def __init__(
        self,
        logger: logging.Logger,
        context_id: Optional[UUID | str] = None,
    ):
        super().__init__(logger, {})
        self.context_id = context_id

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context_id = kwargs.pop("context_id", self.context_id)

        extra = kwargs.get("extra", {})
        if context_id:
            extra["context_id"] = context_id
        kwargs["extra"] = extra

        return msg, kwargs


def setup_logging(
    config: Optional[RightsConfig] = None,
    json_format: Optional[bool] = None,
) -> None:
    """Configure the root logger.

    Args:
        config: RightsConfig instance (if None, loads from environment)
        json_format: Override ``config.log_json``
    """
    if config is None:
        from .config import load_config_from_env

        config = load_config_from_env()

    log_level = getattr(logging, LogLevel(config.log_level).value, logging.INFO)
    if json_format is None:
        json_format = config.log_json

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(RightsFormatter(include_context_id=True, json_format=json_format))
    root_logger.addHandler(console_handler)

    if config.service_name:
        logging.getLogger(config.service_name).setLevel(log_level)


def get_rights_logger(
    name: str,
    context_id: Optional[UUID | str] = None,
) -> RightsLoggerAdapter:
    """Get a logger adapter bound to an authorization context id.

    Args:
        name: Logger name (typically __name__)
        context_id: Optional id included in all records

    Returns:
        RightsLoggerAdapter instance
    """
    logger = logging.getLogger(name)
    return RightsLoggerAdapter(logger, context_id=context_id)


__all__ = [
    "safe_preview",
    "RightsFormatter",
    "RightsLoggerAdapter",
    "setup_logging",
    "get_rights_logger",
]
