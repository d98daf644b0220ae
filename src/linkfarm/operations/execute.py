"""Plan execution."""

import logging
from pathlib import Path

from linkfarm.files.symlinks import create_symlink
from linkfarm.files.symlinks import fold_directory
from linkfarm.files.symlinks import make_directory
from linkfarm.files.symlinks import remove_directory
from linkfarm.files.symlinks import remove_symlink
from linkfarm.files.symlinks import unfold_directory
from linkfarm.models import Action
from linkfarm.models import ActionResult
from linkfarm.models import CreateLink
from linkfarm.models import Descend
from linkfarm.models import Fold
from linkfarm.models import Outcome
from linkfarm.models import Plan
from linkfarm.models import RemoveDir
from linkfarm.models import RemoveLink
from linkfarm.models import Report
from linkfarm.models import SkipConflict
from linkfarm.models import Symlink
from linkfarm.models import Unfold

logger = logging.getLogger(__name__)


def apply_plan(plan: Plan) -> Report:
    """Apply every action of a plan, in order.

    Best effort: a failing action is recorded and the next one is still
    attempted. Applying the same plan again reports every action as
    already satisfied.
    """
    report = Report(package_name=plan.package.name, mode=plan.mode)
    for action in plan.actions:
        report.results.append(apply_action(action))
    return report


def preview_plan(plan: Plan) -> Report:
    """Report what apply_plan would attempt, without touching anything."""
    report = Report(package_name=plan.package.name, mode=plan.mode)
    for action in plan.actions:
        if isinstance(action, SkipConflict):
            outcome = Outcome.SKIPPED_CONFLICT
        elif isinstance(action, Descend) and _is_real_dir(action.target):
            outcome = Outcome.ALREADY_SATISFIED
        else:
            outcome = Outcome.PLANNED
        report.results.append(ActionResult(action, outcome))
    return report


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def apply_action(action: Action) -> ActionResult:
    """Apply a single action, capturing filesystem errors."""
    if isinstance(action, SkipConflict):
        logger.debug("Skipping %s: %s", action.target, action.reason)
        return ActionResult(action, Outcome.SKIPPED_CONFLICT)

    try:
        changed = _mutate(action)
    except (OSError, ValueError) as e:
        logger.warning("%s %s failed: %s", type(action).__name__, action.target, e)
        return ActionResult(action, Outcome.FAILED, error=str(e))

    return ActionResult(
        action, Outcome.APPLIED if changed else Outcome.ALREADY_SATISFIED
    )


def _mutate(action: Action) -> bool:
    match action:
        case CreateLink(target=target, source=source):
            return create_symlink(Symlink(link_path=target, source_path=source))
        case RemoveLink(target=target, package_root=package_root):
            return remove_symlink(target, package_root)
        case Descend(target=target):
            return make_directory(target)
        case Unfold(target=target, source=source):
            return unfold_directory(target, source)
        case Fold(target=target, source=source):
            return fold_directory(target, source)
        case RemoveDir(target=target):
            return remove_directory(target)
    raise TypeError(f"Unknown action: {action!r}")
