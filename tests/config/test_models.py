"""Tests for config models and constants."""

import pytest
from pydantic import ValidationError

from codegraft.config.constants import MAX_HOPS_LIMIT, MIN_TOKEN_BUDGET
from codegraft.config.models import (
    CodeGraftConfig,
    ContextConfig,
    GraphConfig,
    LogOutputConfig,
)


class TestContextConfig:
    def test_given_budget_below_minimum_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContextConfig(token_budget=MIN_TOKEN_BUDGET - 1)

    def test_given_zero_chars_per_token_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContextConfig(chars_per_token=0)


class TestGraphConfig:
    @pytest.mark.parametrize("hops", [0, 2, MAX_HOPS_LIMIT])
    def test_given_hops_in_range_when_validated_then_accepted(self, hops: int) -> None:
        assert GraphConfig(default_max_hops=hops).default_max_hops == hops

    @pytest.mark.parametrize("hops", [-1, MAX_HOPS_LIMIT + 1])
    def test_given_hops_out_of_range_when_validated_then_rejected(self, hops: int) -> None:
        with pytest.raises(ValidationError):
            GraphConfig(default_max_hops=hops)


class TestLogOutputConfig:
    def test_given_relative_file_destination_when_validated_then_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/graft.log")

    def test_given_stream_destination_when_validated_then_kept(self) -> None:
        assert LogOutputConfig(destination="stdout").destination == "stdout"


class TestRootConfig:
    def test_given_defaults_when_built_then_all_sections_present(self) -> None:
        config = CodeGraftConfig()

        assert config.store.path is None
        assert config.extraction.max_file_size_kb == 1024
        assert config.extraction.languages is None
        assert config.database.max_retries == 3
