"""Tests for error types and codes."""

import pytest

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
    UnknownIdentityError,
)


class TestErrorCode:
    """Error code value tests."""

    @pytest.mark.parametrize(
        ("code", "expected_range"),
        [
            (ErrorCode.CONFIG_PARSE_ERROR, 2000),
            (ErrorCode.INVALID_TEMPORAL_STATE, 3000),
            (ErrorCode.UNKNOWN_IDENTITY, 3000),
            (ErrorCode.ILLEGAL_TRANSITION, 4000),
            (ErrorCode.MALFORMED_IDENTITY, 5000),
            (ErrorCode.CONFLICTING_CHANGE, 5000),
            (ErrorCode.EXTRACTION_FAILURE, 6000),
            (ErrorCode.INTERNAL_ERROR, 9000),
        ],
    )
    def test_given_error_code_when_checked_then_in_correct_range(
        self, code: ErrorCode, expected_range: int
    ) -> None:
        """Error codes fall within their designated numeric range."""
        # When
        value = code.value

        # Then
        assert expected_range <= value < expected_range + 1000


class TestCodeGraftError:
    """Base error behavior tests."""

    def test_given_error_when_to_dict_then_serializes_all_fields(self) -> None:
        """Error serializes to dict with all required fields."""
        # Given
        error = CodeGraftError(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message="Test message",
            retryable=True,
            details={"key": "value"},
        )

        # When
        result = error.to_dict()

        # Then
        assert result == {
            "code": 2001,
            "error": "CONFIG_PARSE_ERROR",
            "message": "Test message",
            "retryable": True,
            "details": {"key": "value"},
        }

    def test_given_error_when_str_then_human_readable(self) -> None:
        """Error string representation is human readable."""
        # Given
        error = InternalError.unexpected("Something broke")

        # When
        result = str(error)

        # Then
        assert result == "[9001] INTERNAL_ERROR: Internal error: Something broke"

    def test_given_error_when_raised_then_catchable_as_base(self) -> None:
        """Every factory builds a CodeGraftError subclass."""
        with pytest.raises(CodeGraftError):
            raise UnknownIdentityError.not_found("rust:fn:x:a_rs:1-2")


class TestFactories:
    """Factory methods carry the identifying details."""

    def test_given_rejected_transition_when_built_then_names_operation_and_state(self) -> None:
        # When
        error = IllegalTransitionError.rejected("id-1", "edit", "CREATE", "not on disk")

        # Then
        assert error.code is ErrorCode.ILLEGAL_TRANSITION
        assert error.details["operation"] == "edit"
        assert error.details["current_state"] == "CREATE"
        assert "edit" in error.message
        assert "CREATE" in error.message

    def test_given_invalid_combination_when_built_then_details_hold_flags(self) -> None:
        # When
        error = InvalidTemporalStateError.combination("x", False, False, None)

        # Then
        assert error.code is ErrorCode.INVALID_TEMPORAL_STATE
        assert error.details["current_present"] is False
        assert error.details["future_present"] is False

    def test_given_overlap_when_built_then_names_file_and_both_identities(self) -> None:
        # When
        error = ConflictingChangeError.overlap("src/lib.rs", "a", "b", "2-4", "3-5")

        # Then
        assert error.code is ErrorCode.CONFLICTING_CHANGE
        assert error.details["file_path"] == "src/lib.rs"
        assert error.details["identities"] == ["a", "b"]

    def test_given_factories_when_built_then_codes_match(self) -> None:
        assert MalformedIdentityError.unparseable("x", "bad").code is ErrorCode.MALFORMED_IDENTITY
        assert ExtractionError.parse_failed("a.rs", "boom").code is ErrorCode.EXTRACTION_FAILURE
        assert (
            ExtractionError.unsupported_language("a.zz").code is ErrorCode.UNSUPPORTED_LANGUAGE
        )
        assert ConfigError.parse_error("c.yaml", "bad").code is ErrorCode.CONFIG_PARSE_ERROR
