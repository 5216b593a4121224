"""Graph queries over a built DependencyIndex.

All traversals keep a visited set keyed by identity, so they terminate on
cyclic graphs. Identities absent from the index produce empty results.
"""

from __future__ import annotations

from collections import Counter, deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from codegraft.graph.index import Dependency, DependencyIndex


@dataclass
class GraphStatistics:
    """Summary counts for ``graft status`` and ``graft query stats``."""

    nodes: int
    edges: int
    edges_by_kind: dict[str, int] = field(default_factory=dict)
    max_out_degree: int = 0
    max_in_degree: int = 0
    cycles: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": self.nodes,
            "edges": self.edges,
            "edges_by_kind": dict(sorted(self.edges_by_kind.items())),
            "max_out_degree": self.max_out_degree,
            "max_in_degree": self.max_in_degree,
            "cycles": self.cycles,
        }


class GraphQueryEngine:
    """Forward/reverse lookups, blast radius and closure over one index."""

    def __init__(self, index: DependencyIndex) -> None:
        self._index = index

    @property
    def index(self) -> DependencyIndex:
        return self._index

    def forward_dependencies(self, identity: str) -> list[Dependency]:
        """Exact one-hop out-edges of ``identity``."""
        return list(self._index.forward.get(identity, ()))

    def reverse_dependencies(self, identity: str) -> list[Dependency]:
        """Exact one-hop in-edges of ``identity``."""
        return list(self._index.reverse.get(identity, ()))

    def blast_radius(self, identity: str, max_hops: int | None) -> dict[str, int]:
        """Entities reachable over forward edges within ``max_hops``.

        Returns ``{identity: hop_distance}`` with the minimum distance for
        each reached entity, excluding the origin. ``max_hops=0`` yields an
        empty mapping; ``None`` means no limit.
        """
        return _bfs(identity, max_hops, self._index.successors)

    def reverse_blast_radius(self, identity: str, max_hops: int | None) -> dict[str, int]:
        """Entities that reach ``identity`` within ``max_hops`` (who is affected)."""
        return _bfs(identity, max_hops, self._index.predecessors)

    def transitive_closure(self, identity: str) -> set[str]:
        """Every entity reachable by a finite forward path, origin excluded.

        On a cycle back to the origin the origin is still excluded.
        """
        return set(_bfs(identity, None, self._index.successors))

    def find_cycles(self) -> list[list[str]]:
        """Strongly connected components that form a cycle.

        A component counts when it has more than one node, or one node with
        a self loop. Each cycle is sorted; the list is sorted by first member.
        """
        cycles: list[list[str]] = []
        for component in _strongly_connected_components(self._index):
            if len(component) > 1:
                cycles.append(sorted(component))
            else:
                (only,) = component
                if only in self._index.successors(only):
                    cycles.append([only])
        cycles.sort(key=lambda c: c[0])
        return cycles

    def statistics(self) -> GraphStatistics:
        kinds: Counter[str] = Counter()
        for deps in self._index.forward.values():
            kinds.update(d.edge_kind for d in deps)
        out_degrees = [len(v) for v in self._index.forward.values()]
        in_degrees = [len(v) for v in self._index.reverse.values()]
        return GraphStatistics(
            nodes=len(self._index.nodes()),
            edges=self._index.edge_count,
            edges_by_kind=dict(kinds),
            max_out_degree=max(out_degrees, default=0),
            max_in_degree=max(in_degrees, default=0),
            cycles=len(self.find_cycles()),
        )


def _bfs(
    origin: str, max_hops: int | None, neighbours: Callable[[str], list[str]]
) -> dict[str, int]:
    if max_hops is not None and max_hops <= 0:
        return {}

    distances: dict[str, int] = {}
    visited: set[str] = {origin}
    queue: deque[tuple[str, int]] = deque([(origin, 0)])

    while queue:
        current, depth = queue.popleft()
        if max_hops is not None and depth >= max_hops:
            continue
        for nxt in neighbours(current):
            if nxt in visited:
                continue
            visited.add(nxt)
            distances[nxt] = depth + 1
            queue.append((nxt, depth + 1))

    return distances


def _strongly_connected_components(index: DependencyIndex) -> list[set[str]]:
    """Iterative Tarjan; recursion depth would limit large graphs."""
    counter = 0
    indices: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[set[str]] = []

    for root in sorted(index.nodes()):
        if root in indices:
            continue
        work: list[tuple[str, int]] = [(root, 0)]
        while work:
            node, child_pos = work[-1]
            if child_pos == 0:
                indices[node] = lowlink[node] = counter
                counter += 1
                stack.append(node)
                on_stack.add(node)

            children = index.successors(node)
            if child_pos < len(children):
                work[-1] = (node, child_pos + 1)
                child = children[child_pos]
                if child not in indices:
                    work.append((child, 0))
                elif child in on_stack:
                    lowlink[node] = min(lowlink[node], indices[child])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])
            if lowlink[node] == indices[node]:
                component: set[str] = set()
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.add(member)
                    if member == node:
                        break
                components.append(component)

    return components
