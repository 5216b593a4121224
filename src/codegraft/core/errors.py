"""codegraft error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Store
- 4xxx: Temporal transitions
- 5xxx: Diff generation
- 6xxx: Extraction
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Store (3xxx)
    INVALID_TEMPORAL_STATE = 3001
    UNKNOWN_IDENTITY = 3002
    STORE_NOT_INITIALIZED = 3003

    # Temporal (4xxx)
    ILLEGAL_TRANSITION = 4001

    # Diff (5xxx)
    MALFORMED_IDENTITY = 5001
    CONFLICTING_CHANGE = 5002

    # Extraction (6xxx)
    EXTRACTION_FAILURE = 6001
    UNSUPPORTED_LANGUAGE = 6002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class CodeGraftError(Exception):
    """Base error with structured context for CLI and JSON responses."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'ILLEGAL_TRANSITION')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON responses."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CodeGraftError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class InvalidTemporalStateError(CodeGraftError):
    """A write would leave an entity outside the four legal temporal states."""

    @classmethod
    def combination(
        cls,
        identity: str,
        current_present: bool,
        future_present: bool,
        pending_action: str | None,
    ) -> "InvalidTemporalStateError":
        return cls(
            code=ErrorCode.INVALID_TEMPORAL_STATE,
            message=(
                f"Illegal temporal state for {identity}: current={current_present}, "
                f"future={future_present}, action={pending_action}"
            ),
            details={
                "identity": identity,
                "current_present": current_present,
                "future_present": future_present,
                "pending_action": pending_action,
            },
        )

    @classmethod
    def code_mismatch(cls, identity: str, state: str, reason: str) -> "InvalidTemporalStateError":
        return cls(
            code=ErrorCode.INVALID_TEMPORAL_STATE,
            message=f"Inconsistent code for {identity} in state {state}: {reason}",
            details={"identity": identity, "state": state, "reason": reason},
        )


class UnknownIdentityError(CodeGraftError):
    """An operation referenced an identity the store has never seen."""

    @classmethod
    def not_found(cls, identity: str) -> "UnknownIdentityError":
        return cls(
            code=ErrorCode.UNKNOWN_IDENTITY,
            message=f"Unknown entity identity: {identity}",
            details={"identity": identity},
        )


class StoreError(CodeGraftError):
    """Store lifecycle errors."""

    @classmethod
    def not_initialized(cls, path: str) -> "StoreError":
        return cls(
            code=ErrorCode.STORE_NOT_INITIALIZED,
            message=f"No code graph store at {path}. Run 'graft init' first.",
            details={"path": path},
        )


class IllegalTransitionError(CodeGraftError):
    """A state-machine operation's precondition does not hold."""

    @classmethod
    def rejected(
        cls, identity: str, operation: str, current_state: str, reason: str
    ) -> "IllegalTransitionError":
        return cls(
            code=ErrorCode.ILLEGAL_TRANSITION,
            message=f"Cannot {operation} {identity} in state {current_state}: {reason}",
            details={
                "identity": identity,
                "operation": operation,
                "current_state": current_state,
                "reason": reason,
            },
        )


class MalformedIdentityError(CodeGraftError):
    """An identity does not follow the line-based or hash-based format."""

    @classmethod
    def unparseable(cls, identity: str, reason: str) -> "MalformedIdentityError":
        return cls(
            code=ErrorCode.MALFORMED_IDENTITY,
            message=f"Malformed identity {identity!r}: {reason}",
            details={"identity": identity, "reason": reason},
        )


class ConflictingChangeError(CodeGraftError):
    """Two pending changes touch overlapping line ranges in one file."""

    @classmethod
    def overlap(
        cls, file_path: str, first: str, second: str, first_range: str, second_range: str
    ) -> "ConflictingChangeError":
        return cls(
            code=ErrorCode.CONFLICTING_CHANGE,
            message=(
                f"Conflicting changes in {file_path}: {first} ({first_range}) "
                f"overlaps {second} ({second_range})"
            ),
            details={
                "file_path": file_path,
                "identities": [first, second],
                "ranges": [first_range, second_range],
            },
        )


class ExtractionError(CodeGraftError):
    """The structural parser failed on a file."""

    @classmethod
    def parse_failed(cls, path: str, reason: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.EXTRACTION_FAILURE,
            message=f"Failed to extract {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def unsupported_language(cls, path: str) -> "ExtractionError":
        return cls(
            code=ErrorCode.UNSUPPORTED_LANGUAGE,
            message=f"No structural parser available for {path}",
            details={"path": path},
        )


class InternalError(CodeGraftError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
