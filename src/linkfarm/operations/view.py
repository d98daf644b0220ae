"""Simulated view of the target tree used while planning."""

from pathlib import Path

from linkfarm.files.symlinks import OwnershipOracle
from linkfarm.files.symlinks import probe
from linkfarm.models import ABSENT
from linkfarm.models import LinkState
from linkfarm.models import StateKind


class TargetView:
    """The target tree as it will look once planned actions are applied.

    Planned states shadow the live filesystem. A path with a planned
    ancestor is never read from disk: a planned directory is freshly
    created (or unfolded), so its only children are planned ones.
    """

    def __init__(self, target_dir: Path, oracle: OwnershipOracle):
        self.target_dir = target_dir
        self.oracle = oracle
        self._planned: dict[Path, LinkState] = {}

    def record(self, path: Path, state: LinkState) -> None:
        self._planned[path] = state

    def state(self, path: Path) -> LinkState:
        if path in self._planned:
            return self._planned[path]
        if self._shadowed(path):
            return ABSENT
        return probe(path, self.oracle)

    def children(self, directory: Path) -> list[Path]:
        """Non-absent children of a (real or planned) directory, sorted."""
        paths = {p for p in self._planned if p.parent == directory}
        if directory not in self._planned and not self._shadowed(directory):
            if directory.is_dir() and not directory.is_symlink():
                paths.update(directory.iterdir())
        return sorted(p for p in paths if self.state(p).kind != StateKind.ABSENT)

    def _shadowed(self, path: Path) -> bool:
        for ancestor in path.parents:
            if ancestor in self._planned:
                return True
            if ancestor == self.target_dir:
                break
        return False
