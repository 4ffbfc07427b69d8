"""Default inheritance graph.

``DependencyGraph`` keeps forward (inheritor → origins) and reverse
(origin → inheritors) adjacency maps. Reachability is resolved with the same
worklist walk used for role resolution: an explicit stack plus a visited set.

Cycle policy:
- Self-loops are always rejected.
- An edge whose origin already (transitively) depends on the inheritor would
  close a cycle and is rejected, unless the graph is built with
  ``allow_cycles=True``.
- A node never depends on itself: ``is_depends(a, a)`` is False under either
  policy.
"""

from __future__ import annotations

import logging
from collections.abc import Set as AbstractSet
from typing import Hashable, Iterator, TypeVar

from .exceptions import require
from .interfaces import InheritanceGraph

logger = logging.getLogger(__name__)

N = TypeVar("N", bound=Hashable)

_NO_NODES: frozenset = frozenset()


class DependencyGraph(InheritanceGraph[N]):
    """In-memory directed dependency graph.

    Args:
        allow_cycles: Accept edges that close a cycle. Self-loops are
            rejected either way.

    Example::

        graph = DependencyGraph()
        graph.add_dependency("editors", "viewers")   # True
        graph.add_dependency("admins", "editors")    # True
        graph.is_depends("admins", "viewers")        # True
        graph.add_dependency("viewers", "admins")    # False (cycle)
    """

    __slots__ = ("allow_cycles", "_origins", "_inheritors")

    def __init__(self, *, allow_cycles: bool = False) -> None:
        self.allow_cycles = allow_cycles
        self._origins: dict[N, set[N]] = {}
        self._inheritors: dict[N, set[N]] = {}

    def add_dependency(self, inheritor: N, origin: N) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")

        if inheritor == origin:
            logger.debug("Rejected self-dependency for %r", inheritor)
            return False

        origins = self._origins.get(inheritor)
        if origins is not None and origin in origins:
            return False

        if not self.allow_cycles and self.is_depends(origin, inheritor):
            logger.debug("Rejected dependency %r -> %r: would create a cycle", inheritor, origin)
            return False

        self._origins.setdefault(inheritor, set()).add(origin)
        self._inheritors.setdefault(origin, set()).add(inheritor)
        return True

    def remove_dependency(self, inheritor: N, origin: N) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")

        origins = self._origins.get(inheritor)
        if origins is None or origin not in origins:
            return False

        origins.discard(origin)
        if not origins:
            del self._origins[inheritor]

        inheritors = self._inheritors[origin]
        inheritors.discard(inheritor)
        if not inheritors:
            del self._inheritors[origin]
        return True

    def get_direct_dependencies(self, node: N) -> AbstractSet[N]:
        """Direct origins of ``node``.

        The returned set is the live internal set; do not modify it.
        """
        return self._origins.get(node, _NO_NODES)

    def get_direct_dependents(self, node: N) -> AbstractSet[N]:
        """Nodes that directly depend on ``node``. Do not modify the result."""
        return self._inheritors.get(node, _NO_NODES)

    def is_depends(self, inheritor: N, origin: N) -> bool:
        require(inheritor, "inheritor")
        require(origin, "origin")

        if inheritor == origin:
            return False

        visited = {inheritor}
        stack = list(self._origins.get(inheritor, ()))
        while stack:
            node = stack.pop()
            if node == origin:
                return True
            if node in visited:
                continue
            visited.add(node)
            stack.extend(self._origins.get(node, ()))
        return False

    def nodes(self) -> Iterator[N]:
        """Iterate over every node that takes part in at least one edge."""
        yield from self._origins
        for node in self._inheritors:
            if node not in self._origins:
                yield node

    def clear(self) -> None:
        self._origins.clear()
        self._inheritors.clear()

    def __contains__(self, node: object) -> bool:
        return node in self._origins or node in self._inheritors

    def __len__(self) -> int:
        return sum(1 for _ in self.nodes())

    def __repr__(self) -> str:
        edges = sum(len(origins) for origins in self._origins.values())
        return f"DependencyGraph(nodes={len(self)}, edges={edges}, allow_cycles={self.allow_cycles!r})"


__all__ = ["DependencyGraph"]
