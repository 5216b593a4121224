"""Tests for CLI utilities."""

from pathlib import Path

import click
import pytest

from codegraft.cli.utils import find_project_root, handle_errors, write_json
from codegraft.core.errors import UnknownIdentityError


class TestFindProjectRoot:
    def test_given_nested_dir_when_searched_then_nearest_root(self, tmp_path: Path) -> None:
        (tmp_path / ".codegraft").mkdir()
        nested = tmp_path / "src" / "deep"
        nested.mkdir(parents=True)

        assert find_project_root(nested) == tmp_path.resolve()

    def test_given_no_data_dir_when_searched_then_click_exception(self, tmp_path: Path) -> None:
        with pytest.raises(click.ClickException, match="graft init"):
            find_project_root(tmp_path)


class TestHandleErrors:
    def test_given_codegraft_error_when_raised_then_click_exception(self) -> None:
        @handle_errors
        def boom() -> None:
            raise UnknownIdentityError.not_found("x")

        with pytest.raises(click.ClickException) as exc_info:
            boom()

        assert exc_info.value.message.startswith("[3002] UNKNOWN_IDENTITY")

    def test_given_other_error_when_raised_then_propagates(self) -> None:
        @handle_errors
        def boom() -> None:
            raise KeyError("k")

        with pytest.raises(KeyError):
            boom()


class TestWriteJson:
    def test_given_output_path_when_written_then_parent_created(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b.json"

        write_json({"k": 1}, target)

        assert target.read_text() == '{\n  "k": 1\n}\n'
