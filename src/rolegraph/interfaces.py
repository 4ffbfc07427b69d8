"""Collaborator contracts for the permission engine."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Set as AbstractSet
from typing import TYPE_CHECKING, Generic, Hashable, Protocol, TypeVar

if TYPE_CHECKING:
    from .permissions.events import PermissionChangedEvent

N = TypeVar("N", bound=Hashable)


class InheritanceGraph(ABC, Generic[N]):
    """Directed "inheritor depends on origin" relation over one node type.

    The graph owns its cycle and self-loop policy; the permission engine
    only asks it for edges and reachability.
    """

    __slots__ = ()

    @abstractmethod
    def add_dependency(self, inheritor: N, origin: N) -> bool:
        """Add an edge. Returns False if it existed or was rejected."""
        raise NotImplementedError

    @abstractmethod
    def remove_dependency(self, inheritor: N, origin: N) -> bool:
        """Remove an edge. Returns False if it was absent."""
        raise NotImplementedError

    @abstractmethod
    def get_direct_dependencies(self, node: N) -> AbstractSet[N]:
        """Direct origins of ``node``; empty for unknown nodes."""
        raise NotImplementedError

    @abstractmethod
    def is_depends(self, inheritor: N, origin: N) -> bool:
        """True iff a path of one or more edges leads from inheritor to origin.

        A node is never reported as its own ancestor, even inside a cycle.
        """
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class PermissionListener(Protocol):
    """Callback invoked synchronously after a committed mutation."""

    def __call__(self, event: PermissionChangedEvent) -> None: ...


__all__ = ["InheritanceGraph", "PermissionListener"]
