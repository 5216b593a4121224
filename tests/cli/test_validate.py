"""Tests for graft validate command."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from codegraft.cli.main import cli

ADD = "rust:fn:add:src_lib_rs:2-4"

pytest.importorskip("tree_sitter_rust")


class TestValidateCommand:
    def test_given_valid_edit_when_validate_then_exit_zero(
        self, project: Path, runner: CliRunner
    ) -> None:
        runner.invoke(cli, ["write", "edit", ADD, "--code", "fn add() {}", "--root", str(project)])

        result = runner.invoke(cli, ["validate", "--root", str(project), "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["checked"] == 1

    def test_given_broken_edit_when_validate_then_exit_one_with_location(
        self, project: Path, runner: CliRunner
    ) -> None:
        runner.invoke(cli, ["write", "edit", ADD, "--code", "fn add( {", "--root", str(project)])

        result = runner.invoke(cli, ["validate", "--root", str(project)])

        assert result.exit_code == 1
        assert result.stdout.startswith(f"{ADD}:")
