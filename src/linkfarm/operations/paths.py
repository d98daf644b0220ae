"""Path normalization and validation utilities."""

from pathlib import Path

from linkfarm.exceptions import InvalidPackageError


def normalize_target_dir(target_dir: Path) -> Path:
    """Normalize and validate target directory path.

    Args:
        target_dir: Directory where symlinks will be created

    Returns:
        Absolute, resolved path to target directory

    Raises:
        InvalidPackageError: If target_dir does not exist or is not a directory
    """
    target_dir = target_dir.expanduser().resolve()

    if not target_dir.exists():
        raise InvalidPackageError(f"Target directory does not exist: {target_dir}")
    if not target_dir.is_dir():
        raise InvalidPackageError(f"Target path is not a directory: {target_dir}")

    return target_dir


def validate_directories(stow_dir: Path, target_dir: Path) -> None:
    """Validate that the stow and target directories can be used together.

    Both paths must already be resolved.

    Raises:
        InvalidPackageError: If the target is the stow directory or inside it
    """
    if target_dir == stow_dir:
        raise InvalidPackageError(
            f"Target directory cannot be the stow directory: {target_dir}"
        )
    if target_dir.is_relative_to(stow_dir):
        raise InvalidPackageError(
            f"Target directory {target_dir} cannot be inside stow directory {stow_dir}"
        )
