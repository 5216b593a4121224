"""graft reset / graft index commands - rebuild the store from disk."""

from pathlib import Path

import click

from codegraft.cli.utils import (
    echo_json,
    handle_errors,
    json_option,
    load_project,
    open_store,
    root_option,
)
from codegraft.core.progress import pluralize, spinner, status
from codegraft.extraction import Extractor
from codegraft.reset import ResetController, ResetResult


def print_reset_summary(result: ResetResult) -> None:
    status(
        f"{pluralize(result.entities_inserted, 'entity', 'entities')}, "
        f"{pluralize(result.edges_inserted, 'relationship')} "
        f"from {pluralize(result.files_scanned, 'file')} ({result.duration_ms} ms)",
        style="success",
        indent=2,
    )
    if result.entities_deleted:
        discarded = pluralize(result.entities_deleted, "previous entity", "previous entities")
        status(f"Discarded {discarded}", indent=2)
    if result.failures:
        failed = pluralize(len(result.failures), "file")
        status(f"{failed} could not be extracted", style="warning", indent=2)
        for failure in result.failures:
            status(f"{failure.path}: {failure.reason}", indent=4)


def _run(ctx: click.Context, root: Path | None, as_json: bool, *, first: bool) -> None:
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        controller = ResetController(store, Extractor(config=config.extraction))
        with spinner("Extracting entities"):
            result = controller.index(project_root) if first else controller.reset(project_root)
    if as_json:
        echo_json(result.to_dict())
    else:
        print_reset_summary(result)


@click.command()
@root_option
@json_option
@click.pass_context
@handle_errors
def reset_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Discard all pending changes and re-extract from disk.

    Run this after the change set from 'graft diff' has been applied.
    """
    _run(ctx, root, as_json, first=False)


@click.command()
@root_option
@json_option
@click.pass_context
@handle_errors
def index_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Populate the store from the files on disk."""
    _run(ctx, root, as_json, first=True)
