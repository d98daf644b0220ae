"""Custom exceptions for linkfarm."""

from collections.abc import Sequence


class LinkFarmError(Exception):
    """Base exception for linkfarm."""


class PackageNotFoundError(LinkFarmError):
    """One or more requested packages do not exist in the stow directory."""

    def __init__(self, names: Sequence[str]):
        self.names = list(names)
        missing = ", ".join(self.names[:3])
        if len(self.names) > 3:
            missing += f", ... ({len(self.names)} total)"
        noun = "Package" if len(self.names) == 1 else "Packages"
        super().__init__(f"{noun} not found: {missing}")


class InvalidPackageError(LinkFarmError):
    """Stow directory or target directory is unusable."""


class ConfigValidationError(LinkFarmError):
    """Config file is invalid or malformed."""


class PlanningError(LinkFarmError):
    """A package tree could not be read while planning."""

    def __init__(self, package_name: str, cause: OSError):
        self.package_name = package_name
        self.cause = cause
        super().__init__(f"Cannot plan {package_name}: {cause}")
