"""codegraft CLI - graft command."""

import click

from codegraft import __version__
from codegraft.cli.context import context_command
from codegraft.cli.diff import diff_command
from codegraft.cli.init import init_command
from codegraft.cli.query import query_group
from codegraft.cli.reset import index_command, reset_command
from codegraft.cli.status import status_command
from codegraft.cli.validate import validate_command
from codegraft.cli.write import write_group
from codegraft.core.logging import configure_logging, set_invocation_id


@click.group()
@click.version_option(version=__version__, prog_name="graft")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """codegraft - temporal code graph for planning structural edits."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    set_invocation_id()
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(init_command, name="init")
cli.add_command(index_command, name="index")
cli.add_command(write_group, name="write")
cli.add_command(query_group, name="query")
cli.add_command(context_command, name="context")
cli.add_command(validate_command, name="validate")
cli.add_command(diff_command, name="diff")
cli.add_command(reset_command, name="reset")
cli.add_command(status_command, name="status")


if __name__ == "__main__":
    cli()
