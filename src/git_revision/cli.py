"""CLI for git-revision."""

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler

from .build import stamp, watch_paths
from .config import RevisionConfig, load_config
from .context import PackageContext
from .errors import RevisionError
from .resolver import resolve_revision


app = typer.Typer(help="""\
Resolve the git revision of a package at build time, from a live checkout
or from the .vcs_info.json snapshot of a published archive, and expose it
as GIT_REVISION.""")

console = Console()
err_console = Console(stderr=True)


def _fail(e: RevisionError) -> None:
    """Report a resolution failure and abort with status 1."""
    err_console.print(f"[red]✗ {e.kind}:[/red] ", end="")
    err_console.print(str(e), markup=False, highlight=False, soft_wrap=True)
    raise typer.Exit(1)


def require_package_context(path: Optional[Path]) -> Tuple[PackageContext, RevisionConfig]:
    """Load configuration and context for a package directory.

    Raises:
        typer.Exit: If the path is not a directory or the config is invalid
    """
    root = Path(path or Path.cwd()).resolve()
    try:
        config = load_config(root)
        ctx = PackageContext(root, max_ascent=config.max_ascent)
    except NotADirectoryError as e:
        err_console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    except RevisionError as e:
        _fail(e)
    return ctx, config


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for all commands."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=err_console, show_path=False)],
            force=True,
        )


@app.command()
def show(
    path: Optional[Path] = typer.Argument(None, help="Package root (default: current directory)"),
    as_json: bool = typer.Option(False, "--json", help="Print commit, dirty flag and source as JSON"),
):
    """Print the resolved revision.

    Example:
        git-revision show src/mypkg
    """
    ctx, config = require_package_context(path)
    try:
        revision = resolve_revision(ctx.root, config=config)
    except RevisionError as e:
        _fail(e)

    if as_json:
        typer.echo(json.dumps({
            "revision": revision.format(),
            "commit_hash": revision.commit_hash,
            "dirty": revision.dirty,
            "source": revision.source.value,
        }))
    else:
        typer.echo(revision.format())


@app.command()
def write(
    path: Optional[Path] = typer.Argument(None, help="Package root (default: current directory)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Module to write (default: <path>/_revision.py)"),
):
    """Write a module defining GIT_REVISION into the package.

    Example:
        git-revision write src/mypkg
    """
    ctx, config = require_package_context(path)
    try:
        result = stamp(ctx.root, target=output.resolve() if output else None, config=config)
    except RevisionError as e:
        _fail(e)

    console.print(f"[green]✓[/green] GIT_REVISION = {result.revision.format()}", highlight=False)
    console.print(f"[dim]Wrote {result.module_path}[/dim]", highlight=False, soft_wrap=True)


@app.command()
def watch(
    path: Optional[Path] = typer.Argument(None, help="Package root (default: current directory)"),
):
    """Print files whose change can alter the revision, one per line."""
    ctx, config = require_package_context(path)
    for p in watch_paths(ctx, config):
        typer.echo(str(p))


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
