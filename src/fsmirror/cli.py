"""CLI for fsmirror."""

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import __version__
from .builder import build_tree
from .config import FSMirrorConfig, load_config
from .errors import TreeError
from .mirror import MirrorMode, mirror
from .node import Node
from .snapshot import create_snapshot_document, save_snapshot

console = Console()
error_console = Console(stderr=True)


def get_project_root() -> Path:
    """Get the project root directory (current working directory)."""
    return Path.cwd()


def configure_logging(level: str) -> None:
    """Route fsmirror logging through rich on stderr."""
    logger = logging.getLogger("fsmirror")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    logger.addHandler(RichHandler(console=error_console, show_path=False))
    logger.setLevel(level)
    logger.propagate = False


def fail(error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    error_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(1)


def load_tree(path: str, config: FSMirrorConfig) -> Node:
    """Build the tree at ``path``, exiting on failure."""
    try:
        return build_tree(path, sort_entries=config.sort_entries)
    except TreeError as e:
        fail(e)


@click.group()
@click.version_option(version=__version__, prog_name="fsm")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """fsmirror - Checksummed directory trees and directory mirroring."""
    config = load_config(get_project_root())
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@main.command()
@click.argument("path", type=click.Path())
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"]),
    default=None,
    help="Output format (default from config)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Save a snapshot document to this file instead of printing",
)
@click.pass_obj
def show(config: FSMirrorConfig, path: str, output_format: str | None, output: Path | None) -> None:
    """Print the checksummed tree of PATH."""
    root = load_tree(path, config)

    if output is not None:
        save_snapshot(create_snapshot_document(root), output)
        console.print(f"[green]Saved snapshot to[/green] {escape(str(output))}")
        return

    if (output_format or config.output_format) == "yaml":
        click.echo(root.to_yaml(), nl=False)
    else:
        click.echo(root.to_json(indent=config.json_indent))


@main.command()
@click.argument("path", type=click.Path())
@click.pass_obj
def status(config: FSMirrorConfig, path: str) -> None:
    """Show build statistics for the tree of PATH."""
    root = load_tree(path, config)
    stats = root.tree.stats

    table = Table(title="Tree Status")
    table.add_column("Property", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right")

    table.add_row("Root", root.uri())
    table.add_row("Entries scanned", str(stats.total_entries))
    table.add_row("Indexed entries", str(len(root.map())))
    table.add_row("Files hashed", str(stats.files_hashed))
    table.add_row("Directories scanned", str(stats.directories_scanned))
    table.add_row("Symbolic links", str(stats.symlinks))
    table.add_row("Warnings", str(len(stats.warnings)))

    console.print(table)

    for warning in stats.warnings:
        console.print(
            f"[yellow]Warning:[/yellow] {escape(warning.path)}: {escape(warning.error)}"
        )


@main.command(name="copy")
@click.argument("source", type=click.Path())
@click.argument("destination", type=click.Path(path_type=Path))
@click.option("--recursive", "-r", is_flag=True, help="Mirror every directory in the subtree")
@click.pass_obj
def copy_command(config: FSMirrorConfig, source: str, destination: Path, recursive: bool) -> None:
    """Copy SOURCE into DESTINATION, keeping existing files."""
    _run_mirror(config, source, destination, MirrorMode.COPY, recursive)


@main.command(name="replicate")
@click.argument("source", type=click.Path())
@click.argument("destination", type=click.Path(path_type=Path))
@click.option("--recursive", "-r", is_flag=True, help="Mirror every directory in the subtree")
@click.pass_obj
def replicate_command(
    config: FSMirrorConfig, source: str, destination: Path, recursive: bool
) -> None:
    """Copy SOURCE into DESTINATION, overwriting existing files."""
    _run_mirror(config, source, destination, MirrorMode.REPLICATE, recursive)


@main.command(name="replace")
@click.argument("source", type=click.Path())
@click.argument("destination", type=click.Path(path_type=Path))
@click.option("--recursive", "-r", is_flag=True, help="Mirror every directory in the subtree")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@click.pass_obj
def replace_command(
    config: FSMirrorConfig, source: str, destination: Path, recursive: bool, force: bool
) -> None:
    """Delete DESTINATION, then copy SOURCE into it."""
    if not force:
        if not click.confirm(f"Remove {destination} and replace its contents?"):
            console.print("[dim]Cancelled.[/dim]")
            return

    _run_mirror(config, source, destination, MirrorMode.REPLACE, recursive)


def _run_mirror(
    config: FSMirrorConfig, source: str, destination: Path, mode: MirrorMode, recursive: bool
) -> None:
    """Build the source tree, mirror it and print a summary."""
    root = load_tree(source, config)

    try:
        stats = mirror(root, destination, mode, recursive=recursive or config.recursive)
    except TreeError as e:
        fail(e)

    table = Table(title=f"{mode.value.capitalize()} Complete")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right")

    table.add_row("Directories created", str(stats.directories_created))
    table.add_row("Files written", str(stats.files_written))
    table.add_row("Files kept", str(stats.files_skipped))

    console.print(table)


if __name__ == "__main__":
    main()
