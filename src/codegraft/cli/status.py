"""graft status command - summarize the store."""

from datetime import UTC, datetime
from pathlib import Path

import click
from rich.table import Table

from codegraft.cli.utils import (
    echo_json,
    handle_errors,
    json_option,
    load_project,
    open_store,
    root_option,
)
from codegraft.config.constants import TOKENS_PER_ENTITY_ESTIMATE
from codegraft.core.progress import get_console
from codegraft.diff import DiffGenerator, Operation
from codegraft.graph import DependencyIndex, GraphQueryEngine


def _format_ts(ts: float | None) -> str:
    if ts is None:
        return "never"
    return datetime.fromtimestamp(ts, UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


@click.command()
@root_option
@json_option
@click.pass_context
@handle_errors
def status_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Show store revision, entity counts and pending changes."""
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        info = store.info()
        change_set = DiffGenerator(store).generate(strict=False)
        stats = GraphQueryEngine(DependencyIndex.from_store(store)).statistics()

    pending = {
        "create": change_set.count(Operation.CREATE),
        "edit": change_set.count(Operation.EDIT),
        "delete": change_set.count(Operation.DELETE),
    }

    if as_json:
        echo_json(
            {
                "project_root": str(project_root),
                "revision": info.revision,
                "entities": info.entity_count,
                "relationships": info.edge_count,
                "pending": pending,
                "conflicts": [c.to_dict() for c in change_set.conflicts],
                "cycles": stats.cycles,
                "last_reset_at": info.last_reset_at,
            }
        )
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("key", style="bold")
    table.add_column("value")
    table.add_row("Project", str(project_root))
    table.add_row("Revision", str(info.revision))
    approx_tokens = info.entity_count * TOKENS_PER_ENTITY_ESTIMATE
    table.add_row("Entities", f"{info.entity_count} (~{approx_tokens} tokens without code)")
    table.add_row("Relationships", str(info.edge_count))
    table.add_row("Cycles", str(stats.cycles))
    table.add_row(
        "Pending",
        f"{pending['create']} create, {pending['edit']} edit, {pending['delete']} delete",
    )
    table.add_row("Conflicts", str(len(change_set.conflicts)))
    table.add_row("Last reset", _format_ts(info.last_reset_at))
    get_console().print(table)
