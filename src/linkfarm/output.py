"""Output formatting for linkfarm operations."""

from collections.abc import Sequence
from pathlib import Path

import typer

from linkfarm.models import ActionResult
from linkfarm.models import CreateLink
from linkfarm.models import Descend
from linkfarm.models import Fold
from linkfarm.models import Mode
from linkfarm.models import Outcome
from linkfarm.models import RemoveDir
from linkfarm.models import RemoveLink
from linkfarm.models import Report
from linkfarm.models import SkipConflict
from linkfarm.models import Unfold

PROGRESS = {
    Mode.INSTALL: "Installing",
    Mode.REMOVE: "Removing",
    Mode.RESTOW: "Restowing",
}

DONE = {
    Mode.INSTALL: "Installed",
    Mode.REMOVE: "Removed",
    Mode.RESTOW: "Restowed",
}


def print_progress(mode: Mode, package_name: str, dry_run: bool = False) -> None:
    """Print the line announcing work on a package."""
    suffix = " (dry run)" if dry_run else ""
    typer.echo(f"{PROGRESS[mode]} {package_name}...{suffix}")


def print_report(report: Report, dry_run: bool = False) -> None:
    """Print what happened (or would happen) to one package.

    Args:
        report: Report to print
        dry_run: If True, use "Would" language instead of past tense
    """
    for result in report.results:
        line = _describe(result, dry_run)
        if line is not None:
            typer.echo(f"  {line}")

    if report.error is not None:
        typer.echo(f"  error: {report.error}", err=True)

    applied = report.count(Outcome.PLANNED if dry_run else Outcome.APPLIED)
    parts = [f"{applied} change{'s' if applied != 1 else ''}"]
    already = report.count(Outcome.ALREADY_SATISFIED)
    if already:
        parts.append(f"{already} already satisfied")
    if report.conflicts:
        num = len(report.conflicts)
        parts.append(f"{num} conflict{'s' if num != 1 else ''}")
    if report.failures:
        num = len(report.failures)
        parts.append(f"{num} failed")

    verb = f"Would {report.mode.value}" if dry_run else DONE[report.mode]
    mark = "✓" if report.ok else "✗"
    typer.echo(f"{mark} {verb} {report.package_name} ({', '.join(parts)})")


def print_summary(reports: Sequence[Report]) -> None:
    """Print every skipped or failed path to stderr."""
    problems = [r for r in reports if not r.ok]
    if not problems:
        return

    typer.echo("\nNot fully applied:", err=True)
    for report in problems:
        if report.error is not None:
            typer.echo(f"  {report.package_name}: {report.error}", err=True)
        for result in report.conflicts:
            typer.echo(
                f"  {report.package_name}: {_display_path(result.action.target)}"
                f" skipped ({result.action.reason})",
                err=True,
            )
        for result in report.failures:
            typer.echo(
                f"  {report.package_name}: {_display_path(result.action.target)}"
                f" failed ({result.error})",
                err=True,
            )


def _describe(result: ActionResult, dry_run: bool) -> str | None:
    """One line for an action, or None if it is not worth showing."""
    action = result.action
    target = _display_path(action.target)

    if isinstance(action, SkipConflict):
        return f"skip   {target} ({action.reason})"
    if result.outcome == Outcome.FAILED:
        return f"FAILED {target}: {result.error}"
    if result.outcome == Outcome.ALREADY_SATISFIED:
        return None

    prefix = "would " if dry_run else ""
    match action:
        case CreateLink(source=source):
            return f"{prefix}link   {target} -> {_display_path(source)}"
        case RemoveLink():
            return f"{prefix}unlink {target}"
        case Descend():
            return f"{prefix}mkdir  {target}"
        case Unfold():
            return f"{prefix}unfold {target}"
        case Fold(source=source):
            return f"{prefix}fold   {target} -> {_display_path(source)}"
        case RemoveDir():
            return f"{prefix}rmdir  {target}"
    return None


def _display_path(path: Path) -> str:
    """Format path for display, using ~ for home directory.

    Args:
        path: Path to format

    Returns:
        String representation with ~ substitution if applicable
    """
    try:
        # Try to make it relative to home
        home = Path.home()
        rel_path = path.relative_to(home)
        return f"~/{rel_path}"
    except ValueError:
        # Not under home, return as-is
        return str(path)
