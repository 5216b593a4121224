"""Tests for discovery exclude tiers."""

from codegraft.core.excludes import (
    DEFAULT_PRUNABLE_DIRS,
    HARDCODED_DIRS,
    is_prunable,
)


class TestExcludeTiers:
    def test_given_hardcoded_dirs_when_checked_then_prunable(self) -> None:
        assert ".codegraft" in HARDCODED_DIRS
        assert is_prunable(".git")
        assert is_prunable(".codegraft")

    def test_given_tiers_when_compared_then_disjoint(self) -> None:
        assert not HARDCODED_DIRS & DEFAULT_PRUNABLE_DIRS

    def test_given_build_dirs_when_checked_then_prunable(self) -> None:
        assert is_prunable("target")
        assert is_prunable("node_modules")
        assert not is_prunable("src")

    def test_given_extra_dirs_when_checked_then_also_prunable(self) -> None:
        assert is_prunable("generated", frozenset({"generated"}))
        assert not is_prunable("generated")
