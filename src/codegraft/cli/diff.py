"""graft diff command - emit the pending change set."""

from pathlib import Path

import click

from codegraft.cli.utils import handle_errors, load_project, open_store, root_option, write_json
from codegraft.core.progress import pluralize, status
from codegraft.diff import DiffGenerator


@click.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the change set here instead of stdout",
)
@click.option(
    "--no-strict",
    "lenient",
    is_flag=True,
    help="Report overlapping changes in 'conflicts' instead of failing",
)
@root_option
@click.pass_context
@handle_errors
def diff_command(ctx: click.Context, output: Path | None, lenient: bool, root: Path | None) -> None:
    """Emit every pending create, edit and delete as a JSON change set.

    Nothing is written to source files; apply the change set externally,
    then run 'graft reset'.
    """
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        change_set = DiffGenerator(store).generate(strict=not lenient)
    write_json(change_set.to_dict(), output)
    if output is not None:
        written = pluralize(change_set.total_changes, "change")
        status(f"Wrote {written} to {output}", style="success")
    if change_set.has_conflicts:
        status(f"{pluralize(len(change_set.conflicts), 'conflict')} found", style="warning")
