"""Diff generator: pending entities to a structured change set.

Pure reader over the store. Line-based identities give the target region;
hash-based identities (proposed entities) carry only the target file, and
the external writer decides where the new text goes.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from codegraft.core.errors import ConflictingChangeError, InternalError
from codegraft.diff.models import ChangeRecord, ChangeSet, Conflict, Operation
from codegraft.graph.identity import desanitize_path, parse_hash_key, parse_line_key
from codegraft.graph.models import Entity, LineRange, TemporalState
from codegraft.store.repository import EntityFilter

if TYPE_CHECKING:
    from codegraft.store.repository import CodeGraphStore

log = structlog.get_logger(__name__)


class DiffGenerator:
    """Builds change sets from entities with a pending action."""

    def __init__(self, store: CodeGraphStore) -> None:
        self._store = store

    def generate(self, *, strict: bool = True) -> ChangeSet:
        """Build the change set.

        Args:
            strict: Raise on the first overlap. When False, overlaps are
                collected in ``ChangeSet.conflicts`` instead.

        Raises:
            MalformedIdentityError: If an on-disk entity's identity has no
                parseable line range.
            ConflictingChangeError: In strict mode, if two changes overlap.
        """
        known_paths = self._store.file_paths()
        changes = [
            self._to_change(entity, known_paths)
            for entity in self._store.scan(EntityFilter.CHANGED_ONLY)
        ]
        changes.sort(key=_change_order)

        conflicts = find_conflicts(changes)
        if conflicts and strict:
            first = conflicts[0]
            raise ConflictingChangeError.overlap(
                first.file_path,
                first.first,
                first.second,
                str(first.first_range),
                str(first.second_range),
            )

        change_set = ChangeSet(changes=changes, generated_at=datetime.now(UTC), conflicts=conflicts)
        log.info(
            "changeset_generated",
            total=change_set.total_changes,
            creates=change_set.count(Operation.CREATE),
            edits=change_set.count(Operation.EDIT),
            deletes=change_set.count(Operation.DELETE),
            conflicts=len(conflicts),
        )
        return change_set

    @staticmethod
    def _to_change(entity: Entity, known_paths: list[str]) -> ChangeRecord:
        action = entity.pending_action
        if action is None:
            raise InternalError.unexpected(
                "changed entity has no pending action", identity=entity.identity
            )

        if entity.state is TemporalState.CREATE:
            line_range = None
            if entity.file_path:
                file_path = entity.file_path
            else:
                file_path = desanitize_path(parse_hash_key(entity.identity).path_token, known_paths)
        else:
            key = parse_line_key(entity.identity)
            line_range = key.line_range
            file_path = entity.file_path or desanitize_path(key.path_token, known_paths)

        return ChangeRecord(
            identity=entity.identity,
            operation=Operation.from_action(action),
            file_path=file_path,
            line_range=line_range,
            current_code=entity.current_code,
            future_code=entity.future_code,
            interface_signature=entity.signature,
        )


def _change_order(change: ChangeRecord) -> tuple[str, int, str]:
    start = change.line_range.start if change.line_range else 0
    return (change.file_path, start, change.identity)


def find_conflicts(changes: list[ChangeRecord]) -> list[Conflict]:
    """Pairs of changes whose line ranges overlap within one file."""
    by_file: dict[str, list[tuple[LineRange, str]]] = defaultdict(list)
    for change in changes:
        if change.line_range is not None:
            by_file[change.file_path].append((change.line_range, change.identity))

    conflicts: list[Conflict] = []
    for file_path in sorted(by_file):
        ranged = sorted(by_file[file_path], key=lambda item: (item[0].start, item[1]))
        for i, (first_range, first) in enumerate(ranged):
            for second_range, second in ranged[i + 1 :]:
                if second_range.start > first_range.end:
                    break
                conflicts.append(
                    Conflict(
                        file_path=file_path,
                        first=first,
                        second=second,
                        first_range=first_range,
                        second_range=second_range,
                    )
                )
    return conflicts
