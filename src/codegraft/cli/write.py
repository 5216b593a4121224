"""graft write commands - record create/edit/delete/clear intents."""

from datetime import UTC, datetime
from pathlib import Path
from typing import IO

import click

from codegraft.cli.utils import (
    echo_json,
    handle_errors,
    json_option,
    load_project,
    open_store,
    root_option,
)
from codegraft.core.progress import status
from codegraft.extraction.packs import get_pack_for_path
from codegraft.graph.identity import new_entity_key
from codegraft.graph.models import Entity, EntityClass, InterfaceSignature
from codegraft.temporal import TemporalStateManager

code_option = click.option("--code", "code", default=None, help="Proposed source text")
code_file_option = click.option(
    "--code-file",
    "code_file",
    type=click.File("r"),
    default=None,
    help="Read proposed source text from a file ('-' for stdin)",
)


def _read_code(code: str | None, code_file: IO[str] | None) -> str:
    if (code is None) == (code_file is None):
        raise click.UsageError("Pass exactly one of --code or --code-file")
    text = code if code is not None else code_file.read()  # type: ignore[union-attr]
    if not text.strip():
        raise click.UsageError("Proposed code is empty")
    return text


def _report(entity: Entity, as_json: bool, verb: str) -> None:
    if as_json:
        echo_json(
            {
                "identity": entity.identity,
                "state": entity.state.value,
                "pending_action": entity.pending_action.value if entity.pending_action else None,
            }
        )
    else:
        click.echo(entity.identity)
        status(f"{verb} ({entity.state.value})", style="success")


@click.group()
def write_group() -> None:
    """Record proposed changes against the code graph."""


@write_group.command("create")
@click.argument("file_path")
@click.argument("name")
@click.argument("kind")
@code_option
@code_file_option
@click.option("--visibility", default="private", show_default=True)
@click.option("--parameters", default=None, help="Parameter list text, e.g. '(a: i32)'")
@click.option("--return-type", default=None)
@click.option("--doc", "documentation", default=None, help="One-line documentation")
@click.option("--language", default=None, help="Language name. Default: from the file extension")
@click.option("--test", "is_test", is_flag=True, help="Classify as test code")
@click.option(
    "--timestamp",
    type=click.DateTime(formats=["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S.%f"]),
    default=None,
    help="Timestamp mixed into the identity hash (UTC). Default: now",
)
@root_option
@json_option
@click.pass_context
@handle_errors
def create_command(
    ctx: click.Context,
    file_path: str,
    name: str,
    kind: str,
    code: str | None,
    code_file: IO[str] | None,
    visibility: str,
    parameters: str | None,
    return_type: str | None,
    documentation: str | None,
    language: str | None,
    is_test: bool,
    timestamp: datetime | None,
    root: Path | None,
    as_json: bool,
) -> None:
    """Propose a new entity NAME of KIND in FILE_PATH.

    Prints the new entity's identity.
    """
    future_code = _read_code(code, code_file)
    project_root, config = load_project(ctx, root)

    ts = timestamp.replace(tzinfo=UTC) if timestamp is not None else datetime.now(UTC)
    identity = new_entity_key(file_path, name, kind, ts)
    if language is None:
        pack = get_pack_for_path(file_path)
        language = pack.name if pack is not None else None

    signature = InterfaceSignature(
        name=name,
        kind=kind,
        visibility=visibility,
        parameters=parameters,
        return_type=return_type,
        documentation=documentation,
    )
    with open_store(project_root, config) as store:
        entity = TemporalStateManager(store).create(
            identity,
            future_code,
            signature,
            file_path=file_path,
            language=language,
            entity_kind=kind,
            classification=(
                EntityClass.TEST_IMPLEMENTATION if is_test else EntityClass.CODE_IMPLEMENTATION
            ),
        )
    _report(entity, as_json, "Proposed")


@write_group.command("edit")
@click.argument("identity")
@code_option
@code_file_option
@root_option
@json_option
@click.pass_context
@handle_errors
def edit_command(
    ctx: click.Context,
    identity: str,
    code: str | None,
    code_file: IO[str] | None,
    root: Path | None,
    as_json: bool,
) -> None:
    """Propose new text for an existing entity."""
    future_code = _read_code(code, code_file)
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        entity = TemporalStateManager(store).edit(identity, future_code)
    _report(entity, as_json, "Edited")


@write_group.command("delete")
@click.argument("identity")
@root_option
@json_option
@click.pass_context
@handle_errors
def delete_command(ctx: click.Context, identity: str, root: Path | None, as_json: bool) -> None:
    """Mark an existing entity for deletion."""
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        entity = TemporalStateManager(store).delete(identity)
    _report(entity, as_json, "Marked for deletion")


@write_group.command("clear")
@click.argument("identity")
@root_option
@json_option
@click.pass_context
@handle_errors
def clear_command(ctx: click.Context, identity: str, root: Path | None, as_json: bool) -> None:
    """Abandon a pending edit or delete."""
    project_root, config = load_project(ctx, root)
    with open_store(project_root, config) as store:
        entity = TemporalStateManager(store).clear(identity)
    _report(entity, as_json, "Cleared")
