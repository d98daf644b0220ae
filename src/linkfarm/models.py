"""Data models for linkfarm."""

from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from enum import auto
from pathlib import Path


@dataclass(frozen=True)
class Package:
    """A named directory tree mirroring a subset of the target root."""

    name: str
    root: Path  # Absolute, resolved


class EntryKind(Enum):
    """Type of a node inside a package."""

    FILE = auto()
    DIRECTORY = auto()
    SYMLINK = auto()  # Opaque, never followed


@dataclass(frozen=True)
class StowEntry:
    """A node of a package tree, addressed relative to the package root."""

    package: Package
    relative_path: Path
    kind: EntryKind
    link_target: Path | None = None  # Recorded target (only for SYMLINK)

    @property
    def source_path(self) -> Path:
        """Absolute path of the entry inside its package."""
        return self.package.root / self.relative_path

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    def is_empty(self) -> bool:
        """Check if the entry is a directory without children."""
        if not self.is_dir:
            return False
        return next(self.source_path.iterdir(), None) is None


@dataclass
class Symlink:
    """A symlink to create or manage."""

    link_path: Path  # Where the symlink will be created (absolute)
    source_path: Path  # What the symlink points to (absolute)

    @property
    def relative_source_path(self) -> Path:
        """Get source_path as relative to link_path's parent."""
        return self.source_path.relative_to(self.link_path.parent, walk_up=True)

    def points_to(self, target: Path) -> bool:
        """Check if target points to the same location as source_path.

        Args:
            target: Path to compare (can be relative or absolute)

        Returns:
            True if target and source_path resolve to the same location
        """
        target_resolved = (self.link_path.parent / target).resolve()
        return target_resolved == self.source_path.resolve()

    def exists(self) -> bool:
        """Check if link_path exists as a symlink pointing to source_path."""
        if not self.link_path.is_symlink():
            return False
        return self.points_to(self.link_path.readlink())


class StateKind(Enum):
    """What currently lives at a target path."""

    ABSENT = auto()
    LINK = auto()
    FILE = auto()
    DIRECTORY = auto()


@dataclass(frozen=True)
class LinkState:
    """Live (or simulated) filesystem object at a target path.

    For LINK, owner is the known package containing the link's destination,
    or None when the link points elsewhere. points_to_dir is only set when
    the destination is a real directory, not a symlink to one.
    """

    kind: StateKind
    owner: Package | None = None
    destination: Path | None = None
    points_to_dir: bool = False

    @property
    def is_link(self) -> bool:
        return self.kind == StateKind.LINK


ABSENT = LinkState(StateKind.ABSENT)
EMPTY_DIRECTORY = LinkState(StateKind.DIRECTORY)


class ConflictType(Enum):
    """Why a target path was skipped."""

    OWNED_BY_PACKAGE = auto()
    PRE_EXISTING = auto()
    TYPE_MISMATCH = auto()


class Mode(str, Enum):
    """Operation a plan was computed for."""

    INSTALL = "install"
    REMOVE = "remove"
    RESTOW = "restow"


@dataclass(frozen=True)
class Action:
    """Base class for a single planned filesystem action."""

    target: Path


@dataclass(frozen=True)
class CreateLink(Action):
    """Create a symlink at target pointing to source."""

    source: Path


@dataclass(frozen=True)
class RemoveLink(Action):
    """Remove the symlink at target if it points into package_root."""

    package_root: Path


@dataclass(frozen=True)
class Descend(Action):
    """Make sure target is a real directory so children can be linked into it."""


@dataclass(frozen=True)
class Unfold(Action):
    """Replace a directory symlink (to source) with a real directory."""

    source: Path


@dataclass(frozen=True)
class Fold(Action):
    """Replace an empty real directory with a symlink to source."""

    source: Path


@dataclass(frozen=True)
class RemoveDir(Action):
    """Remove an empty real directory left behind by a removal."""


@dataclass(frozen=True)
class SkipConflict(Action):
    """Leave target untouched and report why."""

    reason: str
    type: ConflictType = ConflictType.PRE_EXISTING


@dataclass
class Plan:
    """Ordered, side-effect-free list of actions for one package."""

    package: Package
    mode: Mode
    target_dir: Path
    actions: list[Action] = field(default_factory=list)

    @property
    def conflicts(self) -> list[SkipConflict]:
        return [a for a in self.actions if isinstance(a, SkipConflict)]


class Outcome(Enum):
    """Result of applying one action."""

    APPLIED = "applied"
    ALREADY_SATISFIED = "already-satisfied"
    SKIPPED_CONFLICT = "skipped-conflict"
    FAILED = "failed"
    PLANNED = "planned"  # Dry run: would be attempted


@dataclass(frozen=True)
class ActionResult:
    """Outcome of one action, with the error text for failures."""

    action: Action
    outcome: Outcome
    error: str | None = None


@dataclass
class Report:
    """Per-action outcomes of applying (or previewing) one package's plan."""

    package_name: str
    mode: Mode
    results: list[ActionResult] = field(default_factory=list)
    error: str | None = None  # Set when the package could not be planned

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def conflicts(self) -> list[ActionResult]:
        return [r for r in self.results if r.outcome == Outcome.SKIPPED_CONFLICT]

    @property
    def failures(self) -> list[ActionResult]:
        return [r for r in self.results if r.outcome == Outcome.FAILED]

    @property
    def ok(self) -> bool:
        """True if every action was applied or already satisfied."""
        return self.error is None and not self.conflicts and not self.failures

    def extend(self, other: "Report") -> None:
        """Append another report's results (restow joins remove + install)."""
        self.results.extend(other.results)
        if other.error is not None and self.error is None:
            self.error = other.error
