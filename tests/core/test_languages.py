"""Tests for canonical language definitions."""

import pytest

from codegraft.core.languages import is_test_file


class TestIsTestFile:
    @pytest.mark.parametrize(
        "path",
        [
            "tests/integration.rs",
            "crates/core/tests/api.rs",
            "src/parser_test.rs",
            "pkg/test_models.py",
            "conftest.py",
            "web/app.test.ts",
            "cmd/main_test.go",
        ],
    )
    def test_given_test_path_when_checked_then_true(self, path: str) -> None:
        assert is_test_file(path)

    @pytest.mark.parametrize("path", ["src/lib.rs", "pkg/models.py", "web/app.ts", "main.go"])
    def test_given_production_path_when_checked_then_false(self, path: str) -> None:
        assert not is_test_file(path)
