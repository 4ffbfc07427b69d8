"""Read-only role collection returned by permission queries."""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from typing import Hashable, Iterable, Iterator, TypeVar

R = TypeVar("R", bound=Hashable)


class RoleCollection(AbstractSet[R]):
    """Immutable view over a set of roles.

    Compares equal to any ``set``/``frozenset`` with the same members and
    supports the usual set operators (which return plain frozensets).

    Depending on the query, the collection is either a live view of stored
    roles or a snapshot; callers must not rely on either behavior.
    """

    __slots__ = ("_roles",)

    def __init__(self, roles: AbstractSet[R] = frozenset()) -> None:
        self._roles = roles

    @classmethod
    def _from_iterable(cls, it: Iterable[R]) -> frozenset[R]:
        return frozenset(it)

    def __contains__(self, role: object) -> bool:
        return role in self._roles

    def __iter__(self) -> Iterator[R]:
        return iter(self._roles)

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"RoleCollection({set(self._roles)!r})"


EMPTY_ROLES: RoleCollection = RoleCollection()


__all__ = ["EMPTY_ROLES", "RoleCollection"]
