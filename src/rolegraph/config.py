"""Configuration contract for rolegraph.

Pydantic-validated settings shared by the permission engine and its logging
setup. Environment variables are read only by
:func:`load_config_from_env`; everything else receives a config object.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class PermissionsConfig(BaseModel):
    """Settings for a permission store and its logging.

    Attributes:
        log_level: Logging level applied by :func:`rolegraph.logging.setup_logging`.
        log_json: Emit JSON log lines instead of plain text.
        allow_inheritance_cycles: Policy for the default inheritance graphs.
            When False, an edge that would close a cycle is rejected.
        log_mutations: Log every committed mutation at DEBUG level.
    """

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )
    allow_inheritance_cycles: bool = Field(
        default=False,
        description="Accept inheritance edges that close a cycle",
    )
    log_mutations: bool = Field(
        default=False,
        description="Log committed mutations at DEBUG level",
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

    model_config = {
        "extra": "forbid",
    }


_TRUTHY = ("true", "1", "yes", "on")


def load_config_from_env() -> PermissionsConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - ROLEGRAPH_ALLOW_INHERITANCE_CYCLES: Accept cyclic inheritance edges
    - ROLEGRAPH_LOG_MUTATIONS: Log committed mutations at DEBUG level

    Returns:
        PermissionsConfig with values from environment or defaults.

    Raises:
        ConfigurationError: A variable holds a value that fails validation.
    """
    import os

    try:
        return PermissionsConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=os.getenv("LOG_JSON", "false").lower() in _TRUTHY,
            allow_inheritance_cycles=os.getenv("ROLEGRAPH_ALLOW_INHERITANCE_CYCLES", "false").lower() in _TRUTHY,
            log_mutations=os.getenv("ROLEGRAPH_LOG_MUTATIONS", "false").lower() in _TRUTHY,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid rolegraph configuration: {e}", errors=e.errors()) from e


__all__ = [
    "LogLevel",
    "PermissionsConfig",
    "load_config_from_env",
]
