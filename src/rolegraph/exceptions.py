"""Exception hierarchy for rolegraph.

All errors raised by the permission engine inherit from RoleGraphError.
Each error carries a stable code so callers can map failures to their own
protocols without matching on message text.

Usage:
    from rolegraph.exceptions import InvalidArgumentError

    try:
        store.add_role(user, None, "Owner")
    except InvalidArgumentError as e:
        print(e.code, e.details["argument"])  # INVALID_ARGUMENT obj
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "RoleGraphError",
    "InvalidArgumentError",
    "ConfigurationError",
    "require",
]


class RoleGraphError(Exception):
    """Base exception for rolegraph.

    Attributes:
        code: Stable error code string (e.g. "INVALID_ARGUMENT").
        message: Human-readable error description.
        details: Additional context as keyword arguments.
    """

    code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"

    def __init__(self, message: str | None = None, code: str | None = None, **kwargs: Any) -> None:
        self.message = message or self.message
        self.code = code or self.code
        self.details = kwargs
        super().__init__(self.message)


class InvalidArgumentError(RoleGraphError, ValueError):
    """A required subject, object, role or role collection was not supplied."""

    code: str = "INVALID_ARGUMENT"
    message: str = "A required argument is missing"


class ConfigurationError(RoleGraphError):
    """Invalid configuration values."""

    code: str = "CONFIGURATION_ERROR"


def require(value: Any, argument: str) -> None:
    """Raise InvalidArgumentError if ``value`` is None."""
    if value is None:
        raise InvalidArgumentError(f"{argument} is required", argument=argument)
