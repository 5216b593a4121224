"""Entity identity, domain types and the dependency graph."""

from codegraft.graph.index import Dependency, DependencyIndex
from codegraft.graph.models import (
    DependencyEdge,
    EdgeKind,
    Entity,
    EntityClass,
    InterfaceSignature,
    LineRange,
    PendingAction,
    TemporalState,
)
from codegraft.graph.queries import GraphQueryEngine, GraphStatistics

__all__ = [
    "Dependency",
    "DependencyEdge",
    "DependencyIndex",
    "EdgeKind",
    "Entity",
    "EntityClass",
    "GraphQueryEngine",
    "GraphStatistics",
    "InterfaceSignature",
    "LineRange",
    "PendingAction",
    "TemporalState",
]
