"""Transition table for a single target path.

Pure functions of (current link state, incoming entry, package) so the
whole conflict matrix can be tested without touching the filesystem.
"""

from dataclasses import dataclass
from enum import Enum
from enum import auto

from linkfarm.models import ConflictType
from linkfarm.models import LinkState
from linkfarm.models import Package
from linkfarm.models import StateKind

PRE_EXISTING = "pre-existing, not stow-managed"
TYPE_MISMATCH = "type mismatch"


class Decision(Enum):
    """What the planner should do with a target path."""

    LINK = auto()  # Create a symlink to the entry
    DESCEND = auto()  # Use (or create) a real directory and plan children
    UNFOLD = auto()  # Split another package's directory link, then descend
    SATISFIED = auto()  # Already linked by this package
    CONFLICT = auto()  # Leave alone and report
    REMOVE = auto()  # Remove this package's link
    IGNORE = auto()  # Not ours; leave alone silently


@dataclass(frozen=True)
class Transition:
    decision: Decision
    conflict: ConflictType | None = None
    reason: str | None = None


def _conflict(conflict: ConflictType, reason: str) -> Transition:
    return Transition(Decision.CONFLICT, conflict, reason)


def install_transition(
    state: LinkState, entry_is_dir: bool, entry_is_empty: bool, package: Package
) -> Transition:
    """Decide how to install one entry of package given the target's state.

    Args:
        state: What lives at the target path now (or will, once planned
            actions are applied)
        entry_is_dir: Whether the package entry is a real directory
        entry_is_empty: Whether that directory has no children
        package: Package being installed
    """
    match state.kind:
        case StateKind.ABSENT:
            if entry_is_dir and not entry_is_empty:
                return Transition(Decision.DESCEND)
            return Transition(Decision.LINK)

        case StateKind.DIRECTORY:
            if entry_is_dir:
                return Transition(Decision.DESCEND)
            return _conflict(ConflictType.TYPE_MISMATCH, TYPE_MISMATCH)

        case StateKind.FILE:
            if entry_is_dir:
                return _conflict(ConflictType.TYPE_MISMATCH, TYPE_MISMATCH)
            return _conflict(ConflictType.PRE_EXISTING, PRE_EXISTING)

    # Symlink
    if state.owner == package:
        return Transition(Decision.SATISFIED)
    if state.owner is None:
        # Directory links outside every package are the user's, never unfolded
        return _conflict(ConflictType.PRE_EXISTING, PRE_EXISTING)
    if entry_is_dir and state.points_to_dir:
        return Transition(Decision.UNFOLD)
    if entry_is_dir or state.points_to_dir:
        return _conflict(ConflictType.TYPE_MISMATCH, TYPE_MISMATCH)
    return _conflict(
        ConflictType.OWNED_BY_PACKAGE, f"owned by package {state.owner.name}"
    )


def remove_transition(
    state: LinkState, entry_is_dir: bool, package: Package
) -> Transition:
    """Decide how to remove one entry of package given the target's state.

    Anything this package does not own is left alone.
    """
    if state.is_link:
        if state.owner == package:
            return Transition(Decision.REMOVE)
        return Transition(Decision.IGNORE)
    if state.kind == StateKind.DIRECTORY and entry_is_dir:
        return Transition(Decision.DESCEND)
    return Transition(Decision.IGNORE)
