"""Domain types for the temporal code graph.

An entity's temporal flags ``(current_present, future_present, pending_action)``
are never stored as three independent values: ``TemporalState`` is a closed
enum of the four legal combinations and the flags are derived from it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

from codegraft.core.errors import InvalidTemporalStateError


class PendingAction(str, Enum):
    """Proposed operation on an entity. ``None`` means nothing is pending."""

    CREATE = "Create"
    EDIT = "Edit"
    DELETE = "Delete"


class TemporalState(str, Enum):
    """The four reachable entity states.

    | member    | current | future | action |
    |-----------|---------|--------|--------|
    | UNCHANGED | true    | true   | None   |
    | EDIT      | true    | true   | Edit   |
    | DELETE    | true    | false  | Delete |
    | CREATE    | false   | true   | Create |
    """

    UNCHANGED = "unchanged"
    EDIT = "edit"
    DELETE = "delete"
    CREATE = "create"

    @property
    def current_present(self) -> bool:
        return _FLAGS[self][0]

    @property
    def future_present(self) -> bool:
        return _FLAGS[self][1]

    @property
    def pending_action(self) -> PendingAction | None:
        return _FLAGS[self][2]

    @property
    def flags(self) -> tuple[bool, bool, PendingAction | None]:
        return _FLAGS[self]

    @classmethod
    def from_flags(
        cls,
        current_present: bool,
        future_present: bool,
        pending_action: PendingAction | str | None,
        *,
        identity: str = "<unknown>",
    ) -> TemporalState:
        """Map a flag triple to its state.

        Raises:
            InvalidTemporalStateError: For any of the four illegal-in-practice
                combinations (and for unknown action names).
        """
        action: PendingAction | None
        if pending_action is None or isinstance(pending_action, PendingAction):
            action = pending_action
        else:
            try:
                action = PendingAction(pending_action)
            except ValueError:
                raise InvalidTemporalStateError.combination(
                    identity, current_present, future_present, str(pending_action)
                ) from None

        state = _BY_FLAGS.get((bool(current_present), bool(future_present), action))
        if state is None:
            raise InvalidTemporalStateError.combination(
                identity,
                current_present,
                future_present,
                action.value if action is not None else None,
            )
        return state


_FLAGS: dict[TemporalState, tuple[bool, bool, PendingAction | None]] = {
    TemporalState.UNCHANGED: (True, True, None),
    TemporalState.EDIT: (True, True, PendingAction.EDIT),
    TemporalState.DELETE: (True, False, PendingAction.DELETE),
    TemporalState.CREATE: (False, True, PendingAction.CREATE),
}
_BY_FLAGS = {flags: state for state, flags in _FLAGS.items()}


class EntityClass(str, Enum):
    """Test vs production code; biases context projection."""

    TEST_IMPLEMENTATION = "TEST_IMPLEMENTATION"
    CODE_IMPLEMENTATION = "CODE_IMPLEMENTATION"


class EdgeKind:
    """Well-known relationship kinds. The set is open; any string is accepted."""

    CALLS = "Calls"
    USES = "Uses"
    IMPLEMENTS = "Implements"


@dataclass(frozen=True, slots=True)
class LineRange:
    """1-based inclusive line span of an on-disk entity."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"Invalid line range {self.start}-{self.end}")

    def overlaps(self, other: LineRange) -> bool:
        return self.start <= other.end and other.start <= self.end

    def to_dict(self) -> dict[str, int]:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"{self.start}-{self.end}"


@dataclass(frozen=True, slots=True)
class InterfaceSignature:
    """Declared shape of an entity, derived from parsing only."""

    name: str
    kind: str
    visibility: str = "private"
    parameters: str | None = None
    return_type: str | None = None
    module_path: str | None = None
    documentation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InterfaceSignature:
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


@dataclass(frozen=True, slots=True)
class DependencyEdge:
    """Directed relationship fact between two entity identities."""

    from_identity: str
    to_identity: str
    edge_kind: str
    source_location: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Entity:
    """One structural code unit tracked by the graph.

    Instances are immutable; the temporal manager writes replacements built
    with ``dataclasses.replace``.
    """

    identity: str
    signature: InterfaceSignature
    state: TemporalState = TemporalState.UNCHANGED
    current_code: str | None = None
    future_code: str | None = None
    classification: EntityClass = EntityClass.CODE_IMPLEMENTATION
    file_path: str | None = None
    language: str | None = None
    entity_kind: str | None = None
    line_range: LineRange | None = None

    @property
    def current_present(self) -> bool:
        return self.state.current_present

    @property
    def future_present(self) -> bool:
        return self.state.future_present

    @property
    def pending_action(self) -> PendingAction | None:
        return self.state.pending_action

    def validate(self) -> None:
        """Check the code invariants that go with the entity's state.

        Raises:
            InvalidTemporalStateError: If the code fields contradict the state.
        """
        state = self.state
        if state in (TemporalState.UNCHANGED, TemporalState.DELETE) and self.future_code:
            raise InvalidTemporalStateError.code_mismatch(
                self.identity, state.name, "future_code must be empty when nothing is proposed"
            )
        if state in (TemporalState.CREATE, TemporalState.EDIT) and not self.future_code:
            raise InvalidTemporalStateError.code_mismatch(
                self.identity, state.name, "future_code is required for create and edit"
            )
        if state is TemporalState.CREATE and self.current_code is not None:
            raise InvalidTemporalStateError.code_mismatch(
                self.identity, state.name, "a not-yet-created entity has no current_code"
            )
