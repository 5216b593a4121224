"""graft validate command - syntax preflight for pending proposals."""

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
from codegraft.core.progress import pluralize, status
from codegraft.validation import SyntaxValidator


@click.command()
@root_option
@json_option
@click.pass_context
@handle_errors
def validate_command(ctx: click.Context, root: Path | None, as_json: bool) -> None:
    """Parse every proposed create and edit and report syntax errors.

    Exits with status 1 when any proposal fails to parse.
    """
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        report = SyntaxValidator(store).validate()

    if as_json:
        echo_json(report.to_dict())
    else:
        for issue in report.issues:
            click.echo(f"{issue.identity}:{issue.line}:{issue.column}: {issue.message}")
        for identity, reason in sorted(report.skipped.items()):
            status(f"Skipped {identity}: {reason}", style="warning")
        if report.ok:
            status(f"{pluralize(report.checked, 'proposal')} parsed cleanly", style="success")
        else:
            status(
                f"{pluralize(len(report.failing_identities), 'proposal')} with syntax errors",
                style="error",
            )

    if not report.ok:
        ctx.exit(1)
