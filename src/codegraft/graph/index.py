"""Dependency graph index: forward and reverse adjacency over identities.

The index is a derived view. It is rebuilt from the store's relationship
rows, never patched, and remembers the store revision it was built at so a
caller can tell when it has gone stale.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from codegraft.graph.models import DependencyEdge

if TYPE_CHECKING:
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Dependency:
    """One end of an edge as seen from the other end."""

    identity: str
    edge_kind: str
    source_location: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "identity": self.identity,
            "edge_kind": self.edge_kind,
            "source_location": self.source_location,
        }


@dataclass
class DependencyIndex:
    """Adjacency maps keyed by ``from_identity`` (forward) and ``to_identity`` (reverse)."""

    forward: dict[str, list[Dependency]] = field(default_factory=dict)
    reverse: dict[str, list[Dependency]] = field(default_factory=dict)
    edge_count: int = 0
    revision: int | None = None

    @classmethod
    def build(
        cls, edges: Iterable[DependencyEdge], *, revision: int | None = None
    ) -> DependencyIndex:
        """Ingest every edge. Exact duplicate facts are kept once."""
        forward: dict[str, list[Dependency]] = defaultdict(list)
        reverse: dict[str, list[Dependency]] = defaultdict(list)
        seen: set[DependencyEdge] = set()

        for edge in edges:
            if edge in seen:
                continue
            seen.add(edge)
            forward[edge.from_identity].append(
                Dependency(edge.to_identity, edge.edge_kind, edge.source_location)
            )
            reverse[edge.to_identity].append(
                Dependency(edge.from_identity, edge.edge_kind, edge.source_location)
            )

        index = cls(
            forward=dict(forward),
            reverse=dict(reverse),
            edge_count=len(seen),
            revision=revision,
        )
        log.debug("dependency_index_built", edges=index.edge_count, revision=revision)
        return index

    @classmethod
    def from_store(cls, store: CodeGraphStore) -> DependencyIndex:
        revision = store.revision()
        return cls.build(store.iter_edges(), revision=revision)

    def is_stale(self, store: CodeGraphStore) -> bool:
        return self.revision is None or self.revision != store.revision()

    def nodes(self) -> set[str]:
        return set(self.forward) | set(self.reverse)

    def successors(self, identity: str) -> list[str]:
        return [d.identity for d in self.forward.get(identity, ())]

    def predecessors(self, identity: str) -> list[str]:
        return [d.identity for d in self.reverse.get(identity, ())]
