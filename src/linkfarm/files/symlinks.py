"""Symlink inspection and filesystem primitives.

Every mutation here is idempotent: it returns False when the filesystem is
already in the requested shape, True when it changed something, and raises
OSError (or ValueError for a link it does not recognise) when it cannot
reach the requested shape.
"""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from linkfarm.models import ABSENT
from linkfarm.models import LinkState
from linkfarm.models import Package
from linkfarm.models import StateKind
from linkfarm.models import Symlink

logger = logging.getLogger(__name__)


def link_destination(path: Path) -> Path:
    """Absolute destination of the symlink at path, one level deep.

    The final component is not resolved, so a link to an opaque symlink
    inside a package (or a dangling link) still reports the package path.
    """
    dest = Path(os.path.normpath(path.parent.resolve() / path.readlink()))
    return dest.parent.resolve() / dest.name


class OwnershipOracle:
    """Decide which known package, if any, owns a target path.

    A path is owned by a package when it is a symlink whose destination
    lies inside that package's root.
    """

    def __init__(self, packages: Sequence[Package]):
        self.packages = list(packages)

    def owner_of(self, path: Path) -> Package | None:
        if not path.is_symlink():
            return None
        return self.owner_of_destination(link_destination(path))

    def owner_of_destination(self, destination: Path) -> Package | None:
        for package in self.packages:
            if destination.is_relative_to(package.root):
                return package
        return None


def probe(path: Path, oracle: OwnershipOracle) -> LinkState:
    """Classify the live filesystem object at path."""
    if path.is_symlink():
        destination = link_destination(path)
        return LinkState(
            StateKind.LINK,
            owner=oracle.owner_of_destination(destination),
            destination=destination,
            points_to_dir=_is_real_dir(destination),
        )
    if not path.exists():
        return ABSENT
    if path.is_dir():
        return LinkState(StateKind.DIRECTORY)
    return LinkState(StateKind.FILE)


def _is_real_dir(path: Path) -> bool:
    return path.is_dir() and not path.is_symlink()


def _require_real_parents(path: Path) -> None:
    """Refuse paths reached through a symlinked directory.

    Paths are built on the resolved target directory, so an existing
    ancestor that does not resolve to itself passes through a symlink.
    Writing there would land inside whatever the symlink points at.

    Raises:
        NotADirectoryError: If an ancestor of path is a symlink
    """
    ancestor = path.parent
    while not ancestor.exists() and not ancestor.is_symlink():
        ancestor = ancestor.parent
    if ancestor.resolve() != ancestor:
        raise NotADirectoryError(f"{path} is reached through a symlink: {ancestor}")


def create_symlink(symlink: Symlink) -> bool:
    """Create a relative symlink.

    Raises:
        FileExistsError: If something else exists at link_path
        NotADirectoryError: If link_path is reached through a symlink
    """
    if symlink.exists():
        return False

    _require_real_parents(symlink.link_path)
    symlink.link_path.parent.mkdir(parents=True, exist_ok=True)
    symlink.link_path.symlink_to(symlink.relative_source_path)
    logger.info("Linked %s -> %s", symlink.link_path, symlink.relative_source_path)
    return True


def remove_symlink(link_path: Path, package_root: Path) -> bool:
    """Remove a symlink if its destination lies inside package_root.

    Raises:
        ValueError: If link_path is not a symlink into package_root
    """
    if not link_path.is_symlink():
        # Reached through a folded parent: the link itself is already gone
        if link_path.exists() and link_path.parent.resolve() == link_path.parent:
            raise ValueError(f"Not a symlink: {link_path}")
        return False

    destination = link_destination(link_path)
    if not destination.is_relative_to(package_root):
        raise ValueError(f"Symlink points to {destination}, expected {package_root}")

    link_path.unlink()
    logger.info("Removed link %s", link_path)
    return True


def make_directory(path: Path) -> bool:
    """Make sure path is a real directory.

    Raises:
        FileExistsError: If a file or symlink is in the way
        NotADirectoryError: If path is reached through a symlink
    """
    _require_real_parents(path)
    if path.is_dir() and not path.is_symlink():
        return False
    path.mkdir(parents=True)
    logger.info("Created directory %s", path)
    return True


def unfold_directory(path: Path, source: Path) -> bool:
    """Replace a symlink to the source directory with an empty real directory.

    Raises:
        ValueError: If path is a symlink to somewhere else
        FileExistsError: If a file is in the way
    """
    if path.is_dir() and not path.is_symlink():
        return False

    if path.is_symlink():
        if not Symlink(path, source).exists():
            raise ValueError(f"Refusing to unfold {path}: not a link to {source}")
        path.unlink()
    path.mkdir()
    logger.info("Unfolded %s", path)
    return True


def fold_directory(path: Path, source: Path) -> bool:
    """Replace an empty real directory with a symlink to source.

    Raises:
        OSError: If the directory is not empty
    """
    symlink = Symlink(path, source)
    if symlink.exists():
        return False

    if path.is_dir() and not path.is_symlink():
        path.rmdir()
    path.symlink_to(symlink.relative_source_path)
    logger.info("Folded %s -> %s", path, symlink.relative_source_path)
    return True


def remove_directory(path: Path) -> bool:
    """Remove an empty real directory.

    Raises:
        OSError: If the directory is not empty or is not a directory
    """
    if not path.exists() and not path.is_symlink():
        return False
    if path.is_symlink():
        raise NotADirectoryError(f"Not a directory: {path}")
    path.rmdir()
    logger.info("Removed directory %s", path)
    return True
