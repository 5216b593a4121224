"""graft context command - token-budgeted projection of the store."""

from pathlib import Path

import click

from codegraft.cli.utils import handle_errors, load_project, open_store, root_option, write_json
from codegraft.context import ContextProjector
from codegraft.core.progress import status
from codegraft.store import EntityFilter


@click.command()
@click.option(
    "--filter",
    "filter_name",
    type=click.Choice([f.value for f in EntityFilter]),
    default=EntityFilter.ALL.value,
    show_default=True,
)
@click.option("--include-code", is_flag=True, help="Include current and proposed source text")
@click.option(
    "--token-budget", type=click.IntRange(min=1), default=None, help="Default: from config"
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the JSON document here instead of stdout",
)
@root_option
@click.pass_context
@handle_errors
def context_command(
    ctx: click.Context,
    filter_name: str,
    include_code: bool,
    token_budget: int | None,
    output: Path | None,
    root: Path | None,
) -> None:
    """Emit a JSON view of the code graph sized for a reasoning client."""
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        projection = ContextProjector.from_config(store, config.context).project(
            EntityFilter(filter_name),
            include_code=include_code,
            token_budget=token_budget,
        )
    write_json(projection.to_dict(), output)
    if projection.truncated:
        status(
            f"Truncated to {projection.included_entities} of {projection.total_entities} "
            f"entities (~{projection.estimated_tokens} tokens)",
            style="warning",
        )
