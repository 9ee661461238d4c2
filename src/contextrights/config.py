"""Shared configuration contract for contextrights.

Pydantic-validated settings for logging and the authorization gate. Hosting
services embed RightsConfig in their own settings or build it from the
environment with load_config_from_env().
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class RightsConfig(BaseModel):
    """Configuration for logging and request-scoped authorization.

    Environment variables (see load_config_from_env):
        LOG_LEVEL            — DEBUG | INFO | WARNING | ERROR | CRITICAL
        LOG_JSON             — JSON log format (true/false)
        SERVICE_NAME         — service name for logger identification
        RIGHTS_DEFAULT_NAME  — name checked when a spec names no permission
        RIGHTS_DENY_MESSAGE  — message used when verify_access has no ``deny``
    """

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level for the service",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    service_name: Optional[str] = Field(
        default=None,
        description="Service name for logger identification",
    )

    # Authorization gate
    default_right: str = Field(
        default="default",
        description="Permission name used when authorized_by gets a bare capability",
    )
    deny_message: str = Field(
        default="Access Denied",
        description="Denial message for guards declared without one",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @field_validator("default_right")
    @classmethod
    def validate_default_right(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_right must be a non-empty name")
        return v.strip().lower()

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> RightsConfig:
    """Load configuration from environment variables.

    This is the only place where os.getenv is read. All other code
    takes a RightsConfig.

    Returns:
        RightsConfig instance with values from environment or defaults.
    """
    import os

    return RightsConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        service_name=os.getenv("SERVICE_NAME"),
        default_right=os.getenv("RIGHTS_DEFAULT_NAME", "default"),
        deny_message=os.getenv("RIGHTS_DENY_MESSAGE", "Access Denied"),
    )


__all__ = [
    "LogLevel",
    "RightsConfig",
    "load_config_from_env",
]
