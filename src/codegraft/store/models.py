"""SQLModel table definitions for the code graph store.

Single source of truth for the persisted layout:

- ``code_graph``: one row per entity, keyed by identity
- ``dependency_edges``: relationship facts between identities
- ``store_state``: singleton row carrying the revision counter that tells
  readers whether a derived index is stale
"""

from sqlmodel import Field, SQLModel


class CodeGraphRecord(SQLModel, table=True):
    """Persisted entity row. Temporal flags are stored as the legal triple."""

    __tablename__ = "code_graph"

    identity: str = Field(primary_key=True)
    current_code: str | None = None
    future_code: str | None = None
    interface_signature: str  # JSON object
    classification: str = Field(index=True)
    current_present: bool = Field(index=True)
    future_present: bool
    pending_action: str | None = Field(default=None, index=True)
    file_path: str | None = Field(default=None, index=True)
    language: str | None = None
    entity_kind: str | None = None
    line_start: int | None = None
    line_end: int | None = None
    updated_at: float | None = None


class DependencyEdgeRecord(SQLModel, table=True):
    """Directed relationship fact between two identities."""

    __tablename__ = "dependency_edges"

    id: int | None = Field(default=None, primary_key=True)
    from_identity: str = Field(index=True)
    to_identity: str = Field(index=True)
    edge_kind: str = Field(index=True)
    source_location: str | None = None


class StoreState(SQLModel, table=True):
    """Store bookkeeping (singleton row, id=1)."""

    __tablename__ = "store_state"

    id: int = Field(default=1, primary_key=True)
    revision: int = Field(default=0)
    project_root: str | None = None
    created_at: float | None = None
    last_reset_at: float | None = None
