"""Change-set exchange types produced by the diff generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from codegraft.graph.models import InterfaceSignature, LineRange, PendingAction


class Operation(str, Enum):
    """Change operation as serialised in change sets."""

    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE = "DELETE"

    @classmethod
    def from_action(cls, action: PendingAction) -> Operation:
        return _FROM_ACTION[action]


_FROM_ACTION = {
    PendingAction.CREATE: Operation.CREATE,
    PendingAction.EDIT: Operation.EDIT,
    PendingAction.DELETE: Operation.DELETE,
}


@dataclass(frozen=True)
class ChangeRecord:
    """One pending change, addressed by file and (for on-disk entities) lines."""

    identity: str
    operation: Operation
    file_path: str
    line_range: LineRange | None
    current_code: str | None
    future_code: str | None
    interface_signature: InterfaceSignature

    def to_dict(self) -> dict[str, Any]:
        return {
            "identity": self.identity,
            "operation": self.operation.value,
            "file_path": self.file_path,
            "line_range": self.line_range.to_dict() if self.line_range else None,
            "current_code": self.current_code,
            "future_code": self.future_code,
            "interface_signature": self.interface_signature.to_dict(),
        }


@dataclass(frozen=True)
class Conflict:
    """Two changes whose line ranges overlap in the same file."""

    file_path: str
    first: str
    second: str
    first_range: LineRange
    second_range: LineRange

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "identities": [self.first, self.second],
            "ranges": [self.first_range.to_dict(), self.second_range.to_dict()],
        }


@dataclass
class ChangeSet:
    """All pending changes, with per-operation counts."""

    changes: list[ChangeRecord]
    generated_at: datetime
    conflicts: list[Conflict] = field(default_factory=list)

    def count(self, operation: Operation) -> int:
        return sum(1 for c in self.changes if c.operation is operation)

    @property
    def total_changes(self) -> int:
        return len(self.changes)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "changes": [c.to_dict() for c in self.changes],
            "conflicts": [c.to_dict() for c in self.conflicts],
            "metadata": {
                "total_changes": self.total_changes,
                "create_count": self.count(Operation.CREATE),
                "edit_count": self.count(Operation.EDIT),
                "delete_count": self.count(Operation.DELETE),
                "generated_at": self.generated_at.isoformat(),
            },
        }
