"""graft init command - initialize a project for codegraft."""

import shutil
from pathlib import Path

import click

from codegraft.cli.reset import print_reset_summary
from codegraft.cli.utils import handle_errors, open_store
from codegraft.config import load_config
from codegraft.config.constants import CONFIG_FILE_NAME, DATA_DIR_NAME
from codegraft.config.user_config import UserConfig, write_user_config
from codegraft.core.progress import get_console, spinner, status
from codegraft.extraction import Extractor
from codegraft.reset import ResetController


def initialize_project(project_root: Path, *, force: bool = False, index: bool = True) -> bool:
    """Create .codegraft/, its config and store, returning True on success.

    Args:
        project_root: Directory whose sources will be tracked
        force: Remove an existing .codegraft directory first
        index: Populate the store from the files on disk
    """
    data_dir = project_root / DATA_DIR_NAME

    if data_dir.exists() and not force:
        status(f"Already initialized: {data_dir}", style="info")
        status("Use --force to reinitialize", style="info")
        return False

    get_console().print()
    status(f"Initializing codegraft in {project_root}", style="none")

    if force and data_dir.exists():
        shutil.rmtree(data_dir)
    data_dir.mkdir()

    write_user_config(data_dir / CONFIG_FILE_NAME, UserConfig())

    gitignore_path = data_dir / ".gitignore"
    gitignore_path.write_text(
        "# Ignore everything except user config files\n*\n!.gitignore\n!config.yaml\n"
    )

    config = load_config(project_root)

    with open_store(project_root, config, create=True) as store:
        status("Store created", style="success", indent=2)
        if not index:
            return True

        controller = ResetController(store, Extractor(config=config.extraction))
        with spinner("Extracting entities", indent=2):
            result = controller.index(project_root)
        print_reset_summary(result)

    return True


@click.command()
@click.argument("path", default=".", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--force", "-f", is_flag=True, help="Reinitialize, discarding the existing store")
@click.option("--no-index", is_flag=True, help="Create the store without extracting")
@handle_errors
def init_command(path: Path, force: bool, no_index: bool) -> None:
    """Initialize codegraft in a project.

    PATH is the project root (default: current directory).
    """
    project_root = path.resolve()
    if not initialize_project(project_root, force=force, index=not no_index):
        return
    status("Ready. Run 'graft status' to inspect the store.", style="none")
