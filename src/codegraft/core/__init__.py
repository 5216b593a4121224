"""Core module exports."""

from codegraft.core.errors import (
    CodeGraftError,
    ConfigError,
    ConflictingChangeError,
    ErrorCode,
    ExtractionError,
    IllegalTransitionError,
    InternalError,
    InvalidTemporalStateError,
    MalformedIdentityError,
    StoreError,
    UnknownIdentityError,
)
from codegraft.core.logging import (
    clear_invocation_id,
    configure_logging,
    get_invocation_id,
    get_logger,
    set_invocation_id,
)
from codegraft.core.progress import pluralize, spinner, status

__all__ = [
    # Errors
    "CodeGraftError",
    "ConfigError",
    "ConflictingChangeError",
    "ErrorCode",
    "ExtractionError",
    "IllegalTransitionError",
    "InternalError",
    "InvalidTemporalStateError",
    "MalformedIdentityError",
    "StoreError",
    "UnknownIdentityError",
    # Logging
    "clear_invocation_id",
    "configure_logging",
    "get_invocation_id",
    "get_logger",
    "set_invocation_id",
    # Progress
    "pluralize",
    "spinner",
    "status",
]
