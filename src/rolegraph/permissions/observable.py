"""Permission store that notifies listeners about committed changes.

``ObservablePermissionStore`` wraps another store instead of subclassing it.
It validates arguments once, runs the inner store's trusted ``apply_*``
primitive, and publishes a :class:`PermissionChangedEvent` built from what
actually changed:

==========================  ========  =====================================
Mutation                    Action    Payload
==========================  ========  =====================================
add_role / add_roles        ADD       subject, obj, new_roles (added only)
remove_role / remove_roles  REMOVE    subject, obj, old_roles (removed only)
remove_all_roles            REMOVE    subject, obj, old_roles
remove_all_subject_roles    REMOVE    subject
remove_all_object_roles     REMOVE    obj
set_roles                   RESET     subject, obj, new_roles (replacement)
clear                       RESET     nothing
==========================  ========  =====================================

No-op mutations publish nothing, except ``set_roles`` and ``clear`` which
always publish. Listeners are called synchronously in registration order;
an exception raised by a listener propagates to the caller after the
mutation has been committed.

Anything not defined here (inheritance operations, ``get_direct_roles``)
is forwarded to the inner store. The trusted ``apply_*`` primitives and
private attributes are not forwarded; use :attr:`ObservablePermissionStore.store`
for unnotified access.
"""

from __future__ import annotations

from typing import Any, Generic, Iterable, Optional

from ..exceptions import require
from ..interfaces import PermissionListener
from .events import PermissionChangedAction, PermissionChangedEvent
from .roles import RoleCollection
from .store import O, PermissionStore, R, S, role_set


class ObservablePermissionStore(Generic[S, O, R]):
    """Notifying wrapper around a :class:`PermissionStore`.

    Args:
        store: The store to wrap. Defaults to a new ``PermissionStore``.
            Pass an ``InheritablePermissionStore`` to get notifications and
            inheritance together.

    Example::

        store = ObservablePermissionStore(InheritablePermissionStore())
        store.subscribe(lambda event: print(event.action.value, set(event.new_roles)))
        store.add_roles("alice", "doc", {"Owner"})   # prints: add {'Owner'}
        store.add_subject_inheritance("bob", "alice")
    """

    def __init__(self, store: Optional[PermissionStore[S, O, R]] = None) -> None:
        self._store: PermissionStore[S, O, R] = store if store is not None else PermissionStore()
        self._listeners: list[PermissionListener] = []

    @property
    def store(self) -> PermissionStore[S, O, R]:
        """The wrapped store. Mutating it directly bypasses notification."""
        return self._store

    # ── Subscription ────────────────────────────────────

    def subscribe(self, listener: PermissionListener) -> None:
        require(listener, "listener")
        self._listeners.append(listener)

    def unsubscribe(self, listener: PermissionListener) -> bool:
        """Remove a listener. Returns False if it was not subscribed."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def _publish(self, action: PermissionChangedAction, **payload: Any) -> None:
        event = PermissionChangedEvent(action, source=self, **payload)
        for listener in list(self._listeners):
            listener(event)

    # ── Queries ─────────────────────────────────────────

    def get_roles(self, subject: S, obj: O) -> RoleCollection[R]:
        return self._store.get_roles(subject, obj)

    def has_role(self, subject: S, obj: O, role: R) -> bool:
        return self._store.has_role(subject, obj, role)

    def has_all_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        return self._store.has_all_roles(subject, obj, roles)

    def has_any_role(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        return self._store.has_any_role(subject, obj, roles)

    def __getitem__(self, key: tuple[S, O]) -> RoleCollection[R]:
        subject, obj = key
        return self.get_roles(subject, obj)

    def __setitem__(self, key: tuple[S, O], roles: Iterable[R]) -> None:
        subject, obj = key
        self.set_roles(subject, obj, roles)

    def __getattr__(self, name: str) -> Any:
        # Trusted primitives and internals stay reachable only through ``store``
        if name.startswith(("_", "apply_")):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return getattr(self._store, name)

    # ── Mutations ───────────────────────────────────────

    def set_roles(self, subject: S, obj: O, roles: Iterable[R]) -> None:
        require(subject, "subject")
        require(obj, "obj")
        new_roles = role_set(roles)

        self._store.apply_set_roles(subject, obj, new_roles)
        self._publish(PermissionChangedAction.RESET, subject=subject, obj=obj, new_roles=frozenset(new_roles))

    def add_role(self, subject: S, obj: O, role: R) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        require(role, "role")
        return self._add(subject, obj, {role})

    def add_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        return self._add(subject, obj, role_set(roles))

    def remove_role(self, subject: S, obj: O, role: R) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        require(role, "role")
        return self._remove(subject, obj, {role})

    def remove_roles(self, subject: S, obj: O, roles: Iterable[R]) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        return self._remove(subject, obj, role_set(roles))

    def remove_all_subject_roles(self, subject: S) -> bool:
        require(subject, "subject")
        if not self._store.apply_remove_all_subject_roles(subject):
            return False
        self._publish(PermissionChangedAction.REMOVE, subject=subject)
        return True

    def remove_all_object_roles(self, obj: O) -> bool:
        require(obj, "obj")
        if not self._store.apply_remove_all_object_roles(obj):
            return False
        self._publish(PermissionChangedAction.REMOVE, obj=obj)
        return True

    def remove_all_roles(self, subject: S, obj: O) -> bool:
        require(subject, "subject")
        require(obj, "obj")
        removed = self._store.apply_remove_all_roles(subject, obj)
        if not removed:
            return False
        self._publish(PermissionChangedAction.REMOVE, subject=subject, obj=obj, old_roles=removed)
        return True

    def clear(self) -> None:
        self._store.apply_clear()
        self._publish(PermissionChangedAction.RESET)

    def _add(self, subject: S, obj: O, roles: set[R]) -> bool:
        added = self._store.apply_add_roles(subject, obj, roles)
        if not added:
            return False
        self._publish(PermissionChangedAction.ADD, subject=subject, obj=obj, new_roles=added)
        return True

    def _remove(self, subject: S, obj: O, roles: set[R]) -> bool:
        removed = self._store.apply_remove_roles(subject, obj, roles)
        if not removed:
            return False
        self._publish(PermissionChangedAction.REMOVE, subject=subject, obj=obj, old_roles=removed)
        return True

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"ObservablePermissionStore({self._store!r}, listeners={len(self._listeners)})"


__all__ = ["ObservablePermissionStore"]
