"""Shared fixtures for linkfarm tests."""

from pathlib import Path

import pytest

from linkfarm.files.symlinks import OwnershipOracle
from linkfarm.models import Package
from linkfarm.operations.view import TargetView


@pytest.fixture
def stow_dir(tmp_path):
    """Empty stow directory."""
    path = tmp_path.resolve() / "dotfiles"
    path.mkdir()
    return path


@pytest.fixture
def target_dir(tmp_path):
    """Empty target directory standing in for $HOME."""
    path = tmp_path.resolve() / "home"
    path.mkdir()
    return path


@pytest.fixture
def make_package(stow_dir):
    """Create a package from relative paths.

    Paths ending in "/" become (possibly empty) directories, anything else
    becomes a file whose content names the package and path.
    """

    def _make(name: str, *paths: str) -> Package:
        root = stow_dir / name
        root.mkdir(exist_ok=True)
        for rel in paths:
            if rel.endswith("/"):
                (root / rel).mkdir(parents=True, exist_ok=True)
            else:
                (root / rel).parent.mkdir(parents=True, exist_ok=True)
                (root / rel).write_text(f"{name}:{rel}")
        return Package(name=name, root=root.resolve())

    return _make


@pytest.fixture
def make_view(target_dir):
    """Build a fresh TargetView knowing the given packages."""

    def _make(*packages: Package) -> TargetView:
        return TargetView(target_dir, OwnershipOracle(packages))

    return _make


def snapshot_tree(root: Path) -> dict[Path, str]:
    state = {}
    for dirpath, dirnames, filenames in root.walk():
        for name in dirnames:
            state[(dirpath / name).relative_to(root)] = "dir"
        for name in filenames:
            path = dirpath / name
            if path.is_symlink():
                state[path.relative_to(root)] = f"link:{path.readlink()}"
            else:
                state[path.relative_to(root)] = f"file:{path.read_text()}"
    return state


@pytest.fixture
def snapshot():
    """Describe every node below a directory, without following links."""
    return snapshot_tree
