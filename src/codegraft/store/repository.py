"""Code graph store: durable entity table keyed by identity.

Every write validates the temporal invariants before touching the row, so a
rejected write leaves the store exactly as it was. A write that changes an
entity's pending action bumps ``store_state.revision``; derived views such
as the dependency index record the revision they were built at.
"""

from __future__ import annotations

import json
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import func
from sqlmodel import col, select

from codegraft.core.errors import StoreError
from codegraft.graph.models import (
    DependencyEdge,
    Entity,
    EntityClass,
    InterfaceSignature,
    LineRange,
    TemporalState,
)
from codegraft.store.database import Database
from codegraft.store.models import CodeGraphRecord, DependencyEdgeRecord, StoreState

if TYPE_CHECKING:
    from sqlmodel import Session
    from sqlmodel.sql.expression import SelectOfScalar

    from codegraft.config.models import DatabaseConfig

log = structlog.get_logger(__name__)

_SCAN_BATCH_SIZE = 500


class EntityFilter(str, Enum):
    """Predefined scan predicates."""

    ALL = "all"
    CHANGED_ONLY = "changed"  # pending_action is set
    CURRENT_ONLY = "current"  # exists on disk today

    def apply(self, stmt: SelectOfScalar[CodeGraphRecord]) -> SelectOfScalar[CodeGraphRecord]:
        if self is EntityFilter.CHANGED_ONLY:
            return stmt.where(col(CodeGraphRecord.pending_action).is_not(None))
        if self is EntityFilter.CURRENT_ONLY:
            return stmt.where(col(CodeGraphRecord.current_present).is_(True))
        return stmt


@dataclass(frozen=True, slots=True)
class StoreInfo:
    """Snapshot of the store_state row plus counts."""

    revision: int
    project_root: str | None
    created_at: float | None
    last_reset_at: float | None
    entity_count: int
    edge_count: int


def entity_to_row(entity: Entity) -> dict[str, Any]:
    """Column mapping for one entity."""
    current, future, action = entity.state.flags
    return {
        "identity": entity.identity,
        "current_code": entity.current_code,
        "future_code": entity.future_code or None,
        "interface_signature": json.dumps(entity.signature.to_dict(), sort_keys=True),
        "classification": entity.classification.value,
        "current_present": current,
        "future_present": future,
        "pending_action": action.value if action is not None else None,
        "file_path": entity.file_path,
        "language": entity.language,
        "entity_kind": entity.entity_kind,
        "line_start": entity.line_range.start if entity.line_range else None,
        "line_end": entity.line_range.end if entity.line_range else None,
    }


def row_to_entity(record: CodeGraphRecord) -> Entity:
    """Rebuild an entity, re-checking the stored flag triple."""
    state = TemporalState.from_flags(
        record.current_present,
        record.future_present,
        record.pending_action,
        identity=record.identity,
    )
    line_range = None
    if record.line_start is not None and record.line_end is not None:
        line_range = LineRange(record.line_start, record.line_end)
    return Entity(
        identity=record.identity,
        signature=InterfaceSignature.from_dict(json.loads(record.interface_signature)),
        state=state,
        current_code=record.current_code,
        future_code=record.future_code,
        classification=EntityClass(record.classification),
        file_path=record.file_path,
        language=record.language,
        entity_kind=record.entity_kind,
        line_range=line_range,
    )


class CodeGraphStore:
    """Entity and relationship persistence over one SQLite database."""

    def __init__(self, db: Database) -> None:
        self.db = db

    @classmethod
    def open(
        cls,
        db_path: Path,
        *,
        config: DatabaseConfig | None = None,
        create: bool = False,
        project_root: Path | None = None,
    ) -> CodeGraphStore:
        """Open the store at ``db_path``.

        Args:
            db_path: SQLite database file.
            config: Retry and busy-timeout settings.
            create: Create the database and schema if missing.
            project_root: Recorded in store_state on creation.

        Raises:
            StoreError: If the database does not exist and ``create`` is False.
        """
        if not create and not db_path.exists():
            raise StoreError.not_initialized(str(db_path))
        db_path.parent.mkdir(parents=True, exist_ok=True)

        kwargs: dict[str, Any] = {}
        if config is not None:
            kwargs = {
                "max_retries": config.max_retries,
                "retry_base_delay": config.retry_base_delay_sec,
                "busy_timeout_ms": config.busy_timeout_ms,
            }
        store = cls(Database(db_path, **kwargs))
        store.initialize(project_root)
        return store

    def initialize(self, project_root: Path | None = None) -> None:
        """Create tables and the store_state row if absent."""
        self.db.create_all()
        with self.db.immediate_transaction() as session:
            state = session.get(StoreState, 1)
            if state is None:
                session.add(
                    StoreState(
                        id=1,
                        revision=0,
                        project_root=str(project_root) if project_root else None,
                        created_at=time.time(),
                    )
                )
            elif project_root is not None and state.project_root is None:
                state.project_root = str(project_root)
                session.add(state)

    def close(self) -> None:
        self.db.dispose()

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def upsert(self, entity: Entity) -> None:
        """Insert or replace one entity.

        Raises:
            InvalidTemporalStateError: If the entity's code contradicts its
                state. The stored row is left unchanged.
        """
        entity.validate()
        row = entity_to_row(entity)
        row["updated_at"] = time.time()

        with self.db.immediate_transaction() as session:
            existing = session.get(CodeGraphRecord, entity.identity)
            previous_action = existing.pending_action if existing is not None else None
            if existing is None:
                session.add(CodeGraphRecord(**row))
            else:
                for key, value in row.items():
                    setattr(existing, key, value)
                session.add(existing)

            changed = existing is None or previous_action != row["pending_action"]
            if changed:
                self._bump_revision(session)

        log.debug(
            "entity_upserted",
            identity=entity.identity,
            state=entity.state.value,
            revision_bumped=changed,
        )

    def get(self, identity: str) -> Entity | None:
        with self.db.session() as session:
            record = session.get(CodeGraphRecord, identity)
            return row_to_entity(record) if record is not None else None

    def scan(self, predicate: EntityFilter = EntityFilter.ALL) -> Iterator[Entity]:
        """Lazily iterate entities matching ``predicate`` in identity order.

        Rows are read in keyset-paginated batches, each in its own short
        session, so callers may write between items. Calling ``scan`` again
        starts a fresh pass.
        """
        after: str | None = None
        while True:
            stmt = predicate.apply(select(CodeGraphRecord))
            if after is not None:
                stmt = stmt.where(col(CodeGraphRecord.identity) > after)
            stmt = stmt.order_by(col(CodeGraphRecord.identity)).limit(_SCAN_BATCH_SIZE)

            with self.db.session() as session:
                batch = [row_to_entity(r) for r in session.exec(stmt)]
            if not batch:
                return
            yield from batch
            if len(batch) < _SCAN_BATCH_SIZE:
                return
            after = batch[-1].identity

    def count(self, predicate: EntityFilter = EntityFilter.ALL) -> int:
        stmt = predicate.apply(select(CodeGraphRecord))
        count_stmt = select(func.count()).select_from(stmt.subquery())
        with self.db.session() as session:
            return int(session.exec(count_stmt).one())

    def file_paths(self) -> list[str]:
        """Distinct on-disk file paths known to the store."""
        stmt = (
            select(CodeGraphRecord.file_path)
            .where(col(CodeGraphRecord.file_path).is_not(None))
            .distinct()
            .order_by(col(CodeGraphRecord.file_path))
        )
        with self.db.session() as session:
            return [p for p in session.exec(stmt) if p]

    # ------------------------------------------------------------------
    # Relationships
    # ------------------------------------------------------------------

    def insert_edges(self, edges: Iterable[DependencyEdge]) -> int:
        records = [edge.to_dict() for edge in edges]
        with self.db.bulk_writer() as writer:
            inserted = writer.insert_many(DependencyEdgeRecord, records)
            if inserted:
                writer.execute("UPDATE store_state SET revision = revision + 1 WHERE id = 1")
        return inserted

    def iter_edges(self) -> Iterator[DependencyEdge]:
        stmt = select(DependencyEdgeRecord).order_by(col(DependencyEdgeRecord.id))
        with self.db.session() as session:
            records = list(session.exec(stmt))
        for r in records:
            yield DependencyEdge(
                from_identity=r.from_identity,
                to_identity=r.to_identity,
                edge_kind=r.edge_kind,
                source_location=r.source_location,
            )

    def edge_count(self) -> int:
        with self.db.session() as session:
            return int(session.exec(select(func.count()).select_from(DependencyEdgeRecord)).one())

    # ------------------------------------------------------------------
    # Whole-store operations (reset only)
    # ------------------------------------------------------------------

    def delete_all(self) -> int:
        """Remove every entity and edge. Returns the number of entities removed."""
        with self.db.bulk_writer() as writer:
            deleted = writer.delete_all(CodeGraphRecord)
            writer.delete_all(DependencyEdgeRecord)
            writer.execute("UPDATE store_state SET revision = revision + 1 WHERE id = 1")
        log.info("store_cleared", entities_deleted=deleted)
        return deleted

    def replace_all(
        self,
        entities: Iterable[Entity],
        edges: Iterable[DependencyEdge],
        *,
        project_root: Path | None = None,
    ) -> tuple[int, int, int]:
        """Swap the whole graph in one transaction.

        Returns:
            (entities deleted, entities inserted, edges inserted)

        Raises:
            InvalidTemporalStateError: If any entity is invalid; nothing is
                written in that case.
        """
        rows: list[dict[str, Any]] = []
        now = time.time()
        for entity in entities:
            entity.validate()
            row = entity_to_row(entity)
            row["updated_at"] = now
            rows.append(row)
        edge_rows = [edge.to_dict() for edge in edges]

        with self.db.bulk_writer() as writer:
            deleted = writer.delete_all(CodeGraphRecord)
            writer.delete_all(DependencyEdgeRecord)
            writer.insert_many(CodeGraphRecord, rows)
            writer.insert_many(DependencyEdgeRecord, edge_rows)
            writer.execute(
                "UPDATE store_state SET revision = revision + 1, last_reset_at = :ts, "
                "project_root = COALESCE(:root, project_root) WHERE id = 1",
                {"ts": now, "root": str(project_root) if project_root else None},
            )
        return deleted, len(rows), len(edge_rows)

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def revision(self) -> int:
        with self.db.session() as session:
            state = session.get(StoreState, 1)
            return state.revision if state is not None else 0

    def info(self) -> StoreInfo:
        with self.db.session() as session:
            state = session.get(StoreState, 1)
        return StoreInfo(
            revision=state.revision if state else 0,
            project_root=state.project_root if state else None,
            created_at=state.created_at if state else None,
            last_reset_at=state.last_reset_at if state else None,
            entity_count=self.count(),
            edge_count=self.edge_count(),
        )

    @staticmethod
    def _bump_revision(session: Session) -> None:
        state = session.get(StoreState, 1)
        if state is None:
            state = StoreState(id=1, revision=0, created_at=time.time())
        state.revision += 1
        session.add(state)
