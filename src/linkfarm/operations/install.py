"""Install planning."""

import logging
from collections.abc import Sequence
from pathlib import Path

from linkfarm.exceptions import PlanningError
from linkfarm.files.discover import walk
from linkfarm.models import EMPTY_DIRECTORY
from linkfarm.models import CreateLink
from linkfarm.models import Descend
from linkfarm.models import LinkState
from linkfarm.models import Mode
from linkfarm.models import Package
from linkfarm.models import Plan
from linkfarm.models import SkipConflict
from linkfarm.models import StateKind
from linkfarm.models import Unfold
from linkfarm.operations.transitions import Decision
from linkfarm.operations.transitions import install_transition
from linkfarm.operations.view import TargetView

logger = logging.getLogger(__name__)


def plan_install(
    package: Package, view: TargetView, ignore: Sequence[str] = ()
) -> Plan:
    """Plan an install operation.

    Directories are unfolded: a directory entry becomes a real directory in
    the target and its children are linked one by one, so several packages
    can share it. Only empty directories are linked as a whole.

    Args:
        package: Package to install
        view: Target tree to plan against; updated with the planned state
        ignore: Glob patterns for entry names to leave out

    Returns:
        Plan whose actions, applied in order, install the package

    Raises:
        PlanningError: If the package tree cannot be read
    """
    plan = Plan(package=package, mode=Mode.INSTALL, target_dir=view.target_dir)
    try:
        _plan_tree(plan, view, package, Path(), view.target_dir, ignore)
    except OSError as e:
        raise PlanningError(package.name, e) from e
    return plan


def _plan_tree(
    plan: Plan,
    view: TargetView,
    package: Package,
    subpath: Path,
    target_base: Path,
    ignore: Sequence[str],
) -> None:
    """Plan every entry of package below subpath, mapped onto target_base."""
    pruned: Path | None = None

    for entry in walk(package, subpath, ignore):
        if pruned is not None and entry.relative_path.is_relative_to(pruned):
            continue
        pruned = None

        target = target_base / entry.relative_path.relative_to(subpath)
        state = view.state(target)
        transition = install_transition(
            state, entry.is_dir, entry.is_empty(), package
        )
        logger.debug("%s: %s", target, transition.decision.name)

        match transition.decision:
            case Decision.DESCEND:
                plan.actions.append(Descend(target))
                if state.kind == StateKind.ABSENT:
                    view.record(target, EMPTY_DIRECTORY)
                continue

            case Decision.UNFOLD:
                # Relink what the other package had under this directory
                owner = state.owner
                plan.actions.append(Unfold(target, state.destination))
                view.record(target, EMPTY_DIRECTORY)
                _plan_tree(
                    plan,
                    view,
                    owner,
                    state.destination.relative_to(owner.root),
                    target,
                    ignore,
                )
                continue

            case Decision.LINK:
                plan.actions.append(CreateLink(target, entry.source_path))
                view.record(
                    target,
                    LinkState(
                        StateKind.LINK,
                        owner=package,
                        destination=entry.source_path,
                        points_to_dir=entry.is_dir,
                    ),
                )

            case Decision.CONFLICT:
                plan.actions.append(
                    SkipConflict(target, transition.reason, transition.conflict)
                )

        if entry.is_dir:
            pruned = entry.relative_path
