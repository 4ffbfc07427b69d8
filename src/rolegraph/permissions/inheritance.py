"""Inheritance resolution on top of the direct permission store.

Two independent graphs extend the read path:

- subject inheritance (``alice`` inherits from ``editors``): every role
  ``editors`` holds on an object, ``alice`` holds on that object too;
- object inheritance (``page-7`` inherits from ``site``): every role a
  subject holds on ``site``, it holds on ``page-7`` too.

Effective roles for (subject, obj) are the direct roles, plus the direct
roles of every ancestor subject on ``obj``, plus the direct roles of
``subject`` on every ancestor object. The two walks never combine: an
ancestor subject's roles on an ancestor object are not included.

Inheritance never creates or changes direct grants. All mutations inherited
from :class:`PermissionStore` act on direct grants only.
"""

from __future__ import annotations

from collections.abc import Set as AbstractSet
from typing import Callable, Hashable, Optional, TypeVar

from ..config import PermissionsConfig
from ..exceptions import require
from ..graph import DependencyGraph
from ..interfaces import InheritanceGraph
from .roles import EMPTY_ROLES, RoleCollection
from .store import O, PermissionStore, R, S

N = TypeVar("N", bound=Hashable)


class InheritablePermissionStore(PermissionStore[S, O, R]):
    """Permission store with subject and object inheritance.

    Args:
        config: Store settings. ``allow_inheritance_cycles`` selects the
            policy of the default graphs.
        subject_graph: Graph over subjects. Defaults to a new
            :class:`~rolegraph.graph.DependencyGraph`.
        object_graph: Graph over objects. Defaults to a new
            :class:`~rolegraph.graph.DependencyGraph`.

    Example::

        store = InheritablePermissionStore()
        store.add_roles("alice", "doc", {"Manager", "Owner"})
        store.add_role("editors", "doc", "Editor")
        store.add_subject_inheritance("alice", "editors")
        store.get_roles("alice", "doc")         # {"Manager", "Owner", "Editor"}
        store.get_direct_roles("alice", "doc")  # {"Manager", "Owner"}
    """

    def __init__(
        self,
        config: Optional[PermissionsConfig] = None,
        *,
        subject_graph: Optional[InheritanceGraph[S]] = None,
        object_graph: Optional[InheritanceGraph[O]] = None,
    ) -> None:
        super().__init__(config)
        allow_cycles = self.config.allow_inheritance_cycles
        self._subject_inheritance: InheritanceGraph[S] = (
            subject_graph if subject_graph is not None else DependencyGraph(allow_cycles=allow_cycles)
        )
        self._object_inheritance: InheritanceGraph[O] = (
            object_graph if object_graph is not None else DependencyGraph(allow_cycles=allow_cycles)
        )

    # ── Inheritance edges ───────────────────────────────

    def add_subject_inheritance(self, inheritor: S, origin: S) -> bool:
        """Make ``inheritor`` inherit the roles of ``origin``.

        Returns whatever the subject graph reports: False if the edge
        already exists or was rejected (self-loop, cycle).
        """
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._subject_inheritance.add_dependency(inheritor, origin)

    def remove_subject_inheritance(self, inheritor: S, origin: S) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._subject_inheritance.remove_dependency(inheritor, origin)

    def add_object_inheritance(self, inheritor: O, origin: O) -> bool:
        """Make roles held on ``origin`` apply to ``inheritor`` as well."""
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._object_inheritance.add_dependency(inheritor, origin)

    def remove_object_inheritance(self, inheritor: O, origin: O) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._object_inheritance.remove_dependency(inheritor, origin)

    def is_subject_inherits(self, inheritor: S, origin: S) -> bool:
        """True if a chain of one or more edges leads from inheritor to origin."""
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._subject_inheritance.is_depends(inheritor, origin)

    def is_object_inherits(self, inheritor: O, origin: O) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")
        return self._object_inheritance.is_depends(inheritor, origin)

    # ── Queries ─────────────────────────────────────────

    def get_direct_roles(self, subject: S, obj: O) -> RoleCollection[R]:
        """Roles granted to ``subject`` on ``obj`` explicitly, ignoring inheritance."""
        require(subject, "subject")
        require(obj, "obj")

        roles = self._direct_roles(subject, obj)
        return RoleCollection(roles) if roles else EMPTY_ROLES

    def _resolve_roles(self, subject: S, obj: O) -> AbstractSet[R]:
        roles = self._direct_roles(subject, obj)

        origin_subjects = self._subject_inheritance.get_direct_dependencies(subject)
        origin_objects = self._object_inheritance.get_direct_dependencies(obj)
        if not origin_subjects and not origin_objects:
            return roles

        # Never union into the stored set
        resolved = set(roles)
        if origin_subjects:
            _fold_inherited(
                resolved,
                subject,
                origin_subjects,
                self._subject_inheritance,
                lambda origin: self._direct_roles(origin, obj),
            )
        if origin_objects:
            _fold_inherited(
                resolved,
                obj,
                origin_objects,
                self._object_inheritance,
                lambda origin: self._direct_roles(subject, origin),
            )
        return resolved

    # ── Mutations ───────────────────────────────────────

    def apply_clear(self) -> None:
        """Drop all grants and both inheritance graphs."""
        super().apply_clear()
        self._subject_inheritance.clear()
        self._object_inheritance.clear()


def _fold_inherited(
    roles: set[R],
    start: N,
    origins: AbstractSet[N],
    graph: InheritanceGraph[N],
    direct_roles: Callable[[N], AbstractSet[R]],
) -> None:
    """Union the direct roles of every ancestor of ``start`` into ``roles``.

    Depth-first over ``graph`` with an explicit stack. ``start`` is seeded as
    visited, so each ancestor is processed once and cycles terminate.
    """
    visited = {start}
    stack = list(origins)
    while stack:
        origin = stack.pop()
        if origin in visited:
            continue
        visited.add(origin)
        roles |= direct_roles(origin)
        stack.extend(graph.get_direct_dependencies(origin))


__all__ = ["InheritablePermissionStore"]
