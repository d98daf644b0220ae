"""Package registry: the packages available in a stow directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from linkfarm.exceptions import InvalidPackageError
from linkfarm.exceptions import PackageNotFoundError
from linkfarm.models import Package

logger = logging.getLogger(__name__)

ALL = "all"


class Registry:
    """Registry of packages: every visible subdirectory of the stow directory.

    Nothing is cached; each call re-reads the stow directory.
    """

    def __init__(self, stow_dir: Path):
        self.stow_dir = stow_dir.expanduser().resolve()

    def list(self) -> list[Package]:
        """Enumerate all packages, sorted by name.

        Hidden directories (such as .git) are not packages.

        Raises:
            InvalidPackageError: If the stow directory is missing
        """
        if not self.stow_dir.is_dir():
            raise InvalidPackageError(f"Stow directory does not exist: {self.stow_dir}")

        packages = [
            Package(name=child.name, root=child.resolve())
            for child in self.stow_dir.iterdir()
            if child.is_dir() and not child.name.startswith(".")
        ]
        return sorted(packages, key=lambda p: p.name)

    def resolve(self, names: Iterable[str]) -> list[Package]:
        """Resolve package names, or the sentinel "all", to packages.

        Names are returned in the order given, without duplicates. Either
        every name resolves or nothing does.

        Raises:
            PackageNotFoundError: Listing every name that does not resolve
        """
        names = list(dict.fromkeys(names))
        known = {p.name: p for p in self.list()}

        if ALL in names:
            return list(known.values())

        missing = [name for name in names if name not in known]
        if missing:
            raise PackageNotFoundError(missing)

        logger.debug("Resolved packages: %s", ", ".join(names))
        return [known[name] for name in names]
