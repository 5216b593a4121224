"""CLI utilities."""

from __future__ import annotations

import functools
import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

import click

from codegraft.config import CodeGraftConfig, get_store_path, load_config
from codegraft.config.constants import DATA_DIR_NAME
from codegraft.core.errors import CodeGraftError
from codegraft.core.logging import configure_logging
from codegraft.store import CodeGraphStore

F = TypeVar("F", bound=Callable[..., Any])

root_option = click.option(
    "--root",
    "root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root. Default: nearest parent directory containing .codegraft/",
)

json_option = click.option("--json", "as_json", is_flag=True, help="Output as JSON")


def find_project_root(start_path: Path | None = None) -> Path:
    """Find the project root from the given path.

    Walks up the directory tree looking for a .codegraft directory.
    If start_path is None, uses the current working directory.

    Raises:
        click.ClickException: If no initialized project is found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = start_path.resolve()
    while True:
        if (current / DATA_DIR_NAME).is_dir():
            return current
        if current == current.parent:
            break
        current = current.parent

    raise click.ClickException(
        f"No codegraft project found at or above {start_path}\n"
        "Run 'graft init' in the project root first."
    )


def load_project(ctx: click.Context, root: Path | None) -> tuple[Path, CodeGraftConfig]:
    """Resolve the project root, load its config and apply its logging settings."""
    project_root = find_project_root(root)
    config = load_config(project_root)

    logging_config = config.logging
    if ctx.find_root().obj and ctx.find_root().obj.get("verbose"):
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    configure_logging(config=logging_config)
    return project_root, config


@contextmanager
def open_store(
    project_root: Path, config: CodeGraftConfig, *, create: bool = False
) -> Iterator[CodeGraphStore]:
    """Open the project store for the duration of one command."""
    store = CodeGraphStore.open(
        get_store_path(project_root, config),
        config=config.database,
        create=create,
        project_root=project_root,
    )
    try:
        yield store
    finally:
        store.close()


def handle_errors(fn: F) -> F:
    """Report CodeGraftError as a ClickException (exit status 1)."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except CodeGraftError as e:
            raise click.ClickException(str(e)) from e

    return wrapper  # type: ignore[return-value]


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


def write_json(data: Any, output: Path | None) -> None:
    """Write a JSON document to ``output``, or stdout when None."""
    if output is None:
        echo_json(data)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(json.dumps(data, indent=2) + "\n")
