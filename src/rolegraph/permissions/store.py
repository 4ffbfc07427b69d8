"""Direct permission store.

Records which roles a subject holds on an object::

    subject → (object → {role, ...})

Invariant: a (subject, object) entry exists only while its role set is
non-empty, and a subject entry exists only while it holds at least one
(subject, object) entry. Removals prune emptied sets eagerly.

Every mutation comes in two layers:

- a public method (``add_roles``, ``remove_role``, ...) that validates its
  arguments and raises :class:`~rolegraph.exceptions.InvalidArgumentError`
  before touching state;
- a trusted ``apply_*`` primitive that skips validation, mutates the table
  and returns what actually changed.

Wrappers such as :class:`~rolegraph.permissions.observable.ObservablePermissionStore`
validate once and drive the ``apply_*`` layer directly.
"""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from typing import Generic, Hashable, Iterable, Optional, TypeVar

from ..config import PermissionsConfig
from ..exceptions import InvalidArgumentError, require
from ..logging import get_permissions_logger, safe_preview
from .roles import EMPTY_ROLES, RoleCollection

logger = get_permissions_logger(__name__)

S = TypeVar("S", bound=Hashable)
O = TypeVar("O", bound=Hashable)
R = TypeVar("R", bound=Hashable)

_NO_ROLES: frozenset = frozenset()


def role_set(roles: Optional[Iterable[R]], argument: str = "roles") -> set[R]:
    """Materialize a role collection argument, rejecting missing values.

    Raises:
        InvalidArgumentError: ``roles`` is None or contains None.
    """
    require(roles, argument)
    result = set(roles)
    if None in result:
        raise InvalidArgumentError(f"{argument} must not contain None", argument=argument)
    return result


class PermissionStore(Generic[S, O, R]):
    """In-memory store of directly granted roles.

    Subjects, objects and roles may be any hashable values; the store
    relies on their ``__eq__``/``__hash__`` for lookup. A key must not
    change its hash while it is stored.

    Args:
        config: Store settings. Defaults to ``PermissionsConfig()``.

    Example::

        store = PermissionStore()
        store.add_roles("alice", "doc-1", {"Owner", "Editor"})   # True
        store.add_role("alice", "doc-1", "Owner")                # False
        store.has_role("alice", "doc-1", "Editor")               # True
        store["alice", "doc-1"] == {"Owner", "Editor"}           # True
    """

    def __init__(self, config: Optional[PermissionsConfig] = None) -> None:
        self.config = config or PermissionsConfig()
        self._storage: dict[S, dict[O, set[R]]] = {}

    # ── Queries ─────────────────────────────────────────

    def get_roles(self, subject: S, obj: O) -> RoleCollection[R]:
        """Roles ``subject`` holds on ``obj``. Never None; do not mutate."""
        require(subject, "subject")
        require(obj, "obj")

        roles = self._resolve_roles(subject, obj)
        return RoleCollection(roles) if roles else EMPTY_ROLES

    def has_role(self, subject: S, obj: O, role: R) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        require(role, "role")

        return role in self._resolve_roles(subject, obj)

    def has_all_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        """True if ``subject`` holds every role in ``roles`` (vacuously true if empty)."""
        require(subject, "subject")
        require(obj, "obj")
        require(roles, "roles")

        return self._resolve_roles(subject, obj) >= set(roles)

    def has_any_role(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        require(roles, "roles")

        return not self._resolve_roles(subject, obj).isdisjoint(roles)

    def __getitem__(self, key: tuple[S, O]) -> RoleCollection[R]:
        subject, obj = key
        return self.get_roles(subject, obj)

    def __setitem__(self, key: tuple[S, O], roles: Iterable[R]) -> None:
        subject, obj = key
        self.set_roles(subject, obj, roles)

    # ── Mutations ───────────────────────────────────────

    def set_roles(self, subject: S, obj: O, roles: Iterable[R]) -> None:
        """Replace the direct roles of a pair. An empty ``roles`` deletes the entry."""
        require(subject, "subject")
        require(obj, "obj")
        self.apply_set_roles(subject, obj, role_set(roles))

    def add_role(self, subject: S, obj: O, role: R) -> bool:
        """Grant one role. Returns False if it was already granted."""
        require(subject, "subject")
        require(obj, "obj")
        require(role, "role")
        return bool(self.apply_add_roles(subject, obj, {role}))

    def add_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        """Grant several roles. Returns True if at least one was new."""
        require(subject, "subject")
        require(obj, "obj")
        return bool(self.apply_add_roles(subject, obj, role_set(roles)))

    def remove_role(self, subject: S, obj: O, role: R) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        require(role, "role")
        return bool(self.apply_remove_roles(subject, obj, {role}))

    def remove_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        """Revoke several roles. Returns True if at least one was held."""
        require(subject, "subject")
        require(obj, "obj")
        return bool(self.apply_remove_roles(subject, obj, role_set(roles)))

    def remove_all_subject_roles(self, subject: S) -> bool:
        require(subject, "subject")
        return self.apply_remove_all_subject_roles(subject)

    def remove_all_object_roles(self, obj: O) -> bool:
        """Revoke every role held on ``obj`` by any subject.

        Scans all subjects; there is no object → subject index.
        """
        require(obj, "obj")
        return self.apply_remove_all_object_roles(obj)

    def remove_all_roles(self, subject: S, obj: O) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        return bool(self.apply_remove_all_roles(subject, obj))

    def clear(self) -> None:
        self.apply_clear()

    # ── Trusted primitives (arguments already validated) ──

    def apply_set_roles(self, subject: S, obj: O, roles: AbstractSet[R]) -> None:
        if roles:
            self._storage.setdefault(subject, {})[obj] = set(roles)
        else:
            self._discard_entry(subject, obj)
        self._log_mutation("set", subject, obj, roles)

    def apply_add_roles(self, subject: S, obj: O, roles: AbstractSet[R]) -> frozenset[R]:
        """Add ``roles`` and return the ones that were not already granted."""
        if not roles:
            return _NO_ROLES

        subject_roles = self._storage.get(subject)
        existing = subject_roles.get(obj) if subject_roles is not None else None
        added = frozenset(roles) if existing is None else frozenset(roles - existing)
        if not added:
            return _NO_ROLES

        if existing is None:
            self._storage.setdefault(subject, {})[obj] = set(added)
        else:
            existing |= added
        self._log_mutation("add", subject, obj, added)
        return added

    def apply_remove_roles(self, subject: S, obj: O, roles: AbstractSet[R]) -> frozenset[R]:
        """Remove ``roles`` and return the ones that were actually granted."""
        subject_roles = self._storage.get(subject)
        if subject_roles is None:
            return _NO_ROLES
        existing = subject_roles.get(obj)
        if existing is None:
            return _NO_ROLES

        removed = frozenset(existing & roles)
        if not removed:
            return _NO_ROLES

        existing -= removed
        if not existing:
            self._discard_entry(subject, obj)
        self._log_mutation("remove", subject, obj, removed)
        return removed

    def apply_remove_all_subject_roles(self, subject: S) -> bool:
        if self._storage.pop(subject, None) is None:
            return False
        self._log_mutation("remove_subject", subject, None, None)
        return True

    def apply_remove_all_object_roles(self, obj: O) -> bool:
        emptied: list[S] = []
        removed = False
        for subject, subject_roles in self._storage.items():
            if subject_roles.pop(obj, None) is not None:
                removed = True
                if not subject_roles:
                    emptied.append(subject)
        for subject in emptied:
            del self._storage[subject]

        if removed:
            self._log_mutation("remove_object", None, obj, None)
        return removed

    def apply_remove_all_roles(self, subject: S, obj: O) -> frozenset[R]:
        """Drop the (subject, obj) entry and return the roles it held."""
        subject_roles = self._storage.get(subject)
        if subject_roles is None or obj not in subject_roles:
            return _NO_ROLES

        removed = frozenset(subject_roles[obj])
        self._discard_entry(subject, obj)
        self._log_mutation("remove_all", subject, obj, removed)
        return removed

    def apply_clear(self) -> None:
        self._storage.clear()
        self._log_mutation("clear", None, None, None)

    # ── Internals ───────────────────────────────────────

    def _direct_roles(self, subject: S, obj: O) -> AbstractSet[R]:
        """Stored roles for the pair, or an empty set. Do not mutate."""
        subject_roles = self._storage.get(subject)
        if subject_roles is None:
            return _NO_ROLES
        return subject_roles.get(obj, _NO_ROLES)

    def _resolve_roles(self, subject: S, obj: O) -> AbstractSet[R]:
        """Roles used by every query. Subclasses extend this read path."""
        return self._direct_roles(subject, obj)

    def _discard_entry(self, subject: S, obj: O) -> None:
        subject_roles = self._storage.get(subject)
        if subject_roles is None:
            return
        subject_roles.pop(obj, None)
        if not subject_roles:
            del self._storage[subject]

    def _log_mutation(
        self,
        action: str,
        subject: Optional[S],
        obj: Optional[O],
        roles: Optional[AbstractSet[R]],
    ) -> None:
        if self.config.log_mutations:
            logger.debug(
                "permissions %s roles=%s",
                action,
                safe_preview(roles),
                subject=subject,
                obj=obj,
            )

    def __len__(self) -> int:
        """Number of (subject, object) entries with at least one role."""
        return sum(len(subject_roles) for subject_roles in self._storage.values())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entries={len(self)})"


__all__ = ["PermissionStore", "role_set"]
