"""Change notification payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional

from ..exceptions import InvalidArgumentError
from .store import O, R, S


class PermissionChangedAction(str, Enum):
    """What kind of mutation produced a :class:`PermissionChangedEvent`."""

    ADD = "add"  # Roles granted
    REMOVE = "remove"  # Roles revoked
    RESET = "reset"  # Roles replaced, or the whole store cleared


@dataclass(frozen=True)
class PermissionChangedEvent(Generic[S, O, R]):
    """A committed permission change.

    Attributes:
        action: The kind of change.
        subject: Affected subject. None for object-wide removals and ``clear()``.
        obj: Affected object. None for subject-wide removals and ``clear()``.
        old_roles: Roles that were revoked (``REMOVE`` of specific roles).
        new_roles: Roles that were granted (``ADD``) or the full replacement
            set (``RESET`` after ``set_roles``).
        source: The store that emitted the event.
    """

    action: PermissionChangedAction
    subject: Optional[S] = None
    obj: Optional[O] = None
    old_roles: Optional[frozenset[R]] = None
    new_roles: Optional[frozenset[R]] = None
    source: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.action is PermissionChangedAction.ADD:
            if self.subject is None or self.obj is None:
                raise InvalidArgumentError("ADD event requires subject and obj", argument="subject")
            if self.new_roles is None:
                raise InvalidArgumentError("ADD event requires new_roles", argument="new_roles")
        elif self.action is PermissionChangedAction.REMOVE:
            if self.subject is None and self.obj is None:
                raise InvalidArgumentError("REMOVE event requires subject or obj", argument="subject")


__all__ = ["PermissionChangedAction", "PermissionChangedEvent"]
