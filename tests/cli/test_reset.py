"""Tests for graft reset and graft index commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from codegraft.cli.main import cli

pytest.importorskip("tree_sitter_rust")


class TestResetCommand:
    def test_given_pending_edit_when_reset_then_discarded(
        self, rust_project: Path, runner: CliRunner
    ) -> None:
        root = str(rust_project)
        runner.invoke(cli, ["init", root])
        add = "rust:fn:add:src_lib_rs:2-4"
        runner.invoke(cli, ["write", "edit", add, "--code", "pub fn add() {}", "--root", root])

        result = runner.invoke(cli, ["reset", "--root", root, "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["entities_deleted"] == data["entities_inserted"]
        status = json.loads(runner.invoke(cli, ["status", "--root", root, "--json"]).stdout)
        assert status["pending"] == {"create": 0, "edit": 0, "delete": 0}

    def test_given_applied_create_when_reset_then_entity_on_disk(
        self, rust_project: Path, runner: CliRunner
    ) -> None:
        # Given: a proposed function, written to disk by hand
        root = str(rust_project)
        runner.invoke(cli, ["init", root])
        runner.invoke(
            cli,
            [
                "write",
                "create",
                "src/lib.rs",
                "triple",
                "function",
                "--code",
                "fn triple(a: i32) -> i32 { a * 3 }",
                "--root",
                root,
            ],
        )
        with (rust_project / "src" / "lib.rs").open("a") as f:
            f.write("\nfn triple(a: i32) -> i32 { a * 3 }\n")

        # When
        result = runner.invoke(cli, ["reset", "--root", root])

        # Then
        assert result.exit_code == 0, result.output
        context = json.loads(runner.invoke(cli, ["context", "--root", root]).stdout)
        names = {e["interface_signature"]["name"] for e in context["entities"]}
        assert "triple" in names
        assert all(e["pending_action"] is None for e in context["entities"])

    def test_given_empty_store_when_index_then_populated(
        self, rust_project: Path, runner: CliRunner
    ) -> None:
        root = str(rust_project)
        runner.invoke(cli, ["init", root, "--no-index"])

        result = runner.invoke(cli, ["index", "--root", root, "--json"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["entities_inserted"] >= 4
