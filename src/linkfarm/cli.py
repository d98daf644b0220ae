"""Command-line interface for linkfarm."""

import logging
import sys
from pathlib import Path
from typing import Annotated
from typing import NoReturn

import click
import typer
from typer.core import TyperGroup

from linkfarm import __version__
from linkfarm.config import Settings
from linkfarm.exceptions import LinkFarmError
from linkfarm.models import Mode
from linkfarm.operations import Dispatcher
from linkfarm.operations import exit_code
from linkfarm.output import print_progress
from linkfarm.output import print_report
from linkfarm.output import print_summary
from linkfarm.registry import ALL
from linkfarm.registry import Registry

COMMANDS = """\
Commands:
  install, i    Install/link packages (default: all)
  remove, r     Remove/unlink packages (name or 'all' required)
  restow, re    Restow (remove and install) packages (default: all)
  list, l       List available packages
"""


class UsageError(click.UsageError):
    """Usage error that exits with status 1."""

    exit_code = 1


class CommandGroup(TyperGroup):
    """Command group whose usage errors all exit with status 1.

    Covers the group's own options as well as unknown commands and the
    options and arguments of each subcommand.
    """

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            e.exit_code = UsageError.exit_code
            raise

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except click.UsageError as e:
            e.exit_code = UsageError.exit_code
            raise


app = typer.Typer(
    cls=CommandGroup, help="Symlink farm manager for dotfiles", add_completion=False
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"linkfarm {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    stow_dir: Annotated[
        Path | None,
        typer.Option(
            "--dir",
            "-d",
            envvar="LINKFARM_DIR",
            help="Stow directory holding one subdirectory per package "
            "(default: ~/.dotfiles)",
        ),
    ] = None,
    target: Annotated[
        Path | None,
        typer.Option(
            "--target",
            "-t",
            envvar="LINKFARM_TARGET",
            help="Target directory for symlinks (default: $HOME)",
        ),
    ] = None,
    config: Annotated[
        Path | None, typer.Option("--config", help="Config file to read")
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Log more (repeatable)")
    ] = 0,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version", callback=version_callback, is_eager=True, help="Show version"
        ),
    ] = None,
) -> None:
    """Symlink farm manager for dotfiles."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_usage(), err=True)
        typer.echo(f"\n{COMMANDS}", err=True, nl=False)
        raise typer.Exit(1)

    _configure_logging(verbose)
    try:
        ctx.obj = Settings.load(config).override(stow_dir=stow_dir, target=target)
    except LinkFarmError as e:
        _fail(e)


@app.command()
def install(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Argument(help="Packages to install, or 'all' (default: all)"),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Show what would be done")
    ] = False,
) -> None:
    """Install packages by linking them into the target directory."""
    _run(ctx, Mode.INSTALL, packages or [ALL], dry_run)


@app.command()
def remove(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Argument(help="Packages to remove, or 'all'"),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Show what would be done")
    ] = False,
) -> None:
    """Remove packages' links from the target directory."""
    if not packages:
        raise UsageError("Missing package name (use 'all' to remove everything)", ctx)
    _run(ctx, Mode.REMOVE, packages, dry_run)


@app.command()
def restow(
    ctx: typer.Context,
    packages: Annotated[
        list[str] | None,
        typer.Argument(help="Packages to restow, or 'all' (default: all)"),
    ] = None,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", "-n", help="Show what would be done")
    ] = False,
) -> None:
    """Remove and reinstall packages."""
    _run(ctx, Mode.RESTOW, packages or [ALL], dry_run)


@app.command("list")
def list_packages(ctx: typer.Context) -> None:
    """List available packages, one per line."""
    settings: Settings = ctx.obj
    try:
        packages = Registry(settings.stow_path).list()
    except LinkFarmError as e:
        _fail(e)

    for package in packages:
        typer.echo(package.name)


app.command("i", hidden=True)(install)
app.command("r", hidden=True)(remove)
app.command("re", hidden=True)(restow)
app.command("l", hidden=True)(list_packages)


def _run(ctx: typer.Context, mode: Mode, names: list[str], dry_run: bool) -> None:
    if ALL in names and len(names) > 1:
        raise UsageError("'all' cannot be combined with package names", ctx)

    settings: Settings = ctx.obj
    try:
        dispatcher = Dispatcher(
            settings.stow_path, settings.target_path, settings.ignore, dry_run=dry_run
        )
        packages = dispatcher.resolve(names)
    except LinkFarmError as e:
        _fail(e)

    reports = []
    for package in packages:
        print_progress(mode, package.name, dry_run=dry_run)
        report = dispatcher.run(mode, package)
        print_report(report, dry_run=dry_run)
        reports.append(report)

    print_summary(reports)
    raise typer.Exit(exit_code(reports))


def _fail(error: LinkFarmError) -> NoReturn:
    typer.echo(f"error: {error}", err=True)
    raise typer.Exit(1)


def _configure_logging(verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level, format="%(levelname)s: %(message)s", stream=sys.stderr, force=True
    )


def main() -> None:
    """Main entry point for the linkfarm CLI."""
    app()


if __name__ == "__main__":
    main()
