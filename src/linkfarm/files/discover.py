"""Package tree traversal."""

from collections.abc import Iterator
from collections.abc import Sequence
from fnmatch import fnmatch
from pathlib import Path

from linkfarm.models import EntryKind
from linkfarm.models import Package
from linkfarm.models import StowEntry


def walk(
    package: Package,
    subpath: Path | None = None,
    ignore: Sequence[str] = (),
) -> Iterator[StowEntry]:
    """Walk a package tree depth-first, yielding directories before children.

    Children are visited in lexicographic order so plans are reproducible.
    Symlinks inside the package are yielded as opaque entries and never
    followed. Every call re-reads the filesystem.

    Args:
        package: Package to walk
        subpath: Only walk below this path (relative to the package root).
            The subpath itself is not yielded.
        ignore: Glob patterns matched against entry names; matches are
            skipped along with everything below them

    Raises:
        OSError: If a directory of the package cannot be read
    """
    start = Path() if subpath is None else subpath
    yield from _walk_dir(package, start, ignore)


def is_ignored(name: str, ignore: Sequence[str]) -> bool:
    return any(fnmatch(name, pattern) for pattern in ignore)


def _walk_dir(
    package: Package, rel_dir: Path, ignore: Sequence[str]
) -> Iterator[StowEntry]:
    directory = package.root / rel_dir
    for child in sorted(directory.iterdir(), key=lambda p: p.name):
        if is_ignored(child.name, ignore):
            continue

        rel_path = rel_dir / child.name
        if child.is_symlink():
            yield StowEntry(
                package, rel_path, EntryKind.SYMLINK, link_target=child.readlink()
            )
        elif child.is_dir():
            yield StowEntry(package, rel_path, EntryKind.DIRECTORY)
            yield from _walk_dir(package, rel_path, ignore)
        else:
            yield StowEntry(package, rel_path, EntryKind.FILE)
