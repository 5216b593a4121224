"""Reset controller: discard all pending state and re-extract from disk.

Called after an external writer has applied a change set. The whole graph is
swapped in one transaction, so a reader sees either the old graph or the new
one, never a mix.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import structlog

from codegraft.extraction.ops import ExtractionFailure, Extractor

if TYPE_CHECKING:
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)


@dataclass
class ResetResult:
    """Counts and per-file failures of one reset."""

    entities_deleted: int = 0
    entities_inserted: int = 0
    edges_inserted: int = 0
    files_scanned: int = 0
    failures: list[ExtractionFailure] = field(default_factory=list)
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entities_deleted": self.entities_deleted,
            "entities_inserted": self.entities_inserted,
            "edges_inserted": self.edges_inserted,
            "files_scanned": self.files_scanned,
            "failures": [f.to_dict() for f in self.failures],
            "duration_ms": self.duration_ms,
        }


class ResetController:
    """Rebuilds the store from the files on disk."""

    def __init__(self, store: CodeGraphStore, extractor: Extractor | None = None) -> None:
        self._store = store
        self._extractor = extractor if extractor is not None else Extractor()

    def reset(self, project_root: Path) -> ResetResult:
        """Drop every entity and edge, then repopulate at UNCHANGED.

        Extraction runs before the store is touched; if it raises, the store
        keeps its previous contents.
        """
        start = time.monotonic()
        extraction = self._extractor.extract(project_root)
        deleted, inserted, edges = self._store.replace_all(
            extraction.entities, extraction.edges, project_root=project_root
        )
        result = ResetResult(
            entities_deleted=deleted,
            entities_inserted=inserted,
            edges_inserted=edges,
            files_scanned=extraction.files_scanned,
            failures=extraction.failures,
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        log.info(
            "reset_completed",
            deleted=deleted,
            inserted=inserted,
            edges=edges,
            failures=len(result.failures),
            duration_ms=result.duration_ms,
        )
        return result

    def index(self, project_root: Path) -> ResetResult:
        """First population of an empty store. Same path as ``reset``."""
        return self.reset(project_root)
