"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from codegraft.cli.main import cli
from codegraft.config.constants import DATA_DIR_NAME, DB_FILE_NAME
from codegraft.graph.models import DependencyEdge, EdgeKind
from codegraft.store import CodeGraphStore


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path: Path, runner: CliRunner, entity_factory) -> Path:
    """An initialized project whose store holds add() -> helper()."""
    root = tmp_path / "proj"
    root.mkdir()
    result = runner.invoke(cli, ["init", str(root), "--no-index"])
    assert result.exit_code == 0, result.output

    store = CodeGraphStore.open(root / DATA_DIR_NAME / DB_FILE_NAME)
    add = entity_factory("add", start=2, end=4)
    helper = entity_factory("helper", start=6, end=8)
    store.replace_all(
        [add, helper],
        [DependencyEdge(add.identity, helper.identity, EdgeKind.CALLS, "src/lib.rs:3")],
    )
    store.close()
    return root
