"""Removal planning."""

import logging
from collections.abc import Sequence
from pathlib import Path

from linkfarm.exceptions import PlanningError
from linkfarm.files.discover import is_ignored
from linkfarm.files.discover import walk
from linkfarm.models import ABSENT
from linkfarm.models import Fold
from linkfarm.models import LinkState
from linkfarm.models import Mode
from linkfarm.models import Package
from linkfarm.models import Plan
from linkfarm.models import RemoveDir
from linkfarm.models import RemoveLink
from linkfarm.models import StateKind
from linkfarm.operations.transitions import Decision
from linkfarm.operations.transitions import remove_transition
from linkfarm.operations.view import TargetView

logger = logging.getLogger(__name__)


def plan_remove(
    package: Package, view: TargetView, ignore: Sequence[str] = ()
) -> Plan:
    """Plan a removal operation.

    Removes every link owned by the package. A directory whose contents were
    touched is then tidied up: if nothing is left it is removed, and if
    what is left is exactly another package's directory it is folded back
    into a single link to that directory.

    Args:
        package: Package to remove
        view: Target tree to plan against; updated with the planned state
        ignore: Glob patterns for entry names to leave out

    Raises:
        PlanningError: If the package tree cannot be read
    """
    plan = Plan(package=package, mode=Mode.REMOVE, target_dir=view.target_dir)
    try:
        _plan_tree(plan, view, package, ignore)
    except OSError as e:
        raise PlanningError(package.name, e) from e
    return plan


def _plan_tree(
    plan: Plan, view: TargetView, package: Package, ignore: Sequence[str]
) -> None:
    # Directories descended into, with the number of actions planned before
    descended: list[tuple[Path, int]] = []
    pruned: Path | None = None

    for entry in walk(package, ignore=ignore):
        if pruned is not None and entry.relative_path.is_relative_to(pruned):
            continue
        pruned = None

        target = view.target_dir / entry.relative_path
        while descended and not target.is_relative_to(descended[-1][0]):
            _finish_directory(plan, view, package, *descended.pop(), ignore)

        state = view.state(target)
        transition = remove_transition(state, entry.is_dir, package)
        logger.debug("%s: %s", target, transition.decision.name)

        match transition.decision:
            case Decision.REMOVE:
                plan.actions.append(RemoveLink(target, package.root))
                view.record(target, ABSENT)
            case Decision.DESCEND:
                # An empty package directory is tidied up like one we emptied
                before = -1 if entry.is_empty() else len(plan.actions)
                descended.append((target, before))
                continue

        if entry.is_dir:
            pruned = entry.relative_path

    while descended:
        _finish_directory(plan, view, package, *descended.pop(), ignore)
    _remove_stale_links(plan, view, package, view.target_dir)


def _remove_stale_links(
    plan: Plan, view: TargetView, package: Package, directory: Path
) -> None:
    """Remove links into the package whose destination no longer exists."""
    for child in view.children(directory):
        state = view.state(child)
        if not state.is_link or state.owner != package:
            continue
        if state.destination.exists() or state.destination.is_symlink():
            continue
        logger.debug("%s: stale link into %s", child, package.name)
        plan.actions.append(RemoveLink(child, package.root))
        view.record(child, ABSENT)


def _finish_directory(
    plan: Plan,
    view: TargetView,
    package: Package,
    directory: Path,
    actions_before: int,
    ignore: Sequence[str],
) -> None:
    """Remove or fold a directory once its children have been planned."""
    _remove_stale_links(plan, view, package, directory)
    if len(plan.actions) == actions_before:
        # Nothing of ours was in here
        return

    children = view.children(directory)
    if not children:
        plan.actions.append(RemoveDir(directory))
        view.record(directory, ABSENT)
        return

    fold = _fold_source(view, directory, children, package, ignore)
    if fold is None:
        return

    owner, source = fold
    logger.debug("%s: folding into %s", directory, source)
    for child in children:
        plan.actions.append(RemoveLink(child, owner.root))
        view.record(child, ABSENT)
    plan.actions.append(Fold(directory, source))
    view.record(
        directory,
        LinkState(StateKind.LINK, owner=owner, destination=source, points_to_dir=True),
    )


def _fold_source(
    view: TargetView,
    directory: Path,
    children: list[Path],
    package: Package,
    ignore: Sequence[str],
) -> tuple[Package, Path] | None:
    """Find the one package directory that directory now mirrors exactly.

    Every remaining child must be a link owned by the same other package,
    pointing at the same-named entry of that package's matching directory,
    and every entry of that directory must be linked.
    """
    states = [view.state(child) for child in children]
    owners = {s.owner for s in states}
    if len(owners) != 1 or not all(s.is_link for s in states):
        return None

    owner = owners.pop()
    if owner is None or owner == package:
        return None

    source = owner.root / directory.relative_to(view.target_dir)
    if not source.is_dir() or source.is_symlink():
        return None

    for child, state in zip(children, states):
        if state.destination != source / child.name:
            return None

    expected = {p.name for p in source.iterdir() if not is_ignored(p.name, ignore)}
    if expected != {child.name for child in children}:
        return None

    return owner, source
