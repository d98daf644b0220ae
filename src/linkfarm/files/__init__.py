"""Filesystem operations for linkfarm."""

from linkfarm.files.discover import walk
from linkfarm.files.symlinks import OwnershipOracle
from linkfarm.files.symlinks import create_symlink
from linkfarm.files.symlinks import fold_directory
from linkfarm.files.symlinks import link_destination
from linkfarm.files.symlinks import make_directory
from linkfarm.files.symlinks import probe
from linkfarm.files.symlinks import remove_directory
from linkfarm.files.symlinks import remove_symlink
from linkfarm.files.symlinks import unfold_directory

__all__ = [
    "OwnershipOracle",
    "create_symlink",
    "fold_directory",
    "link_destination",
    "make_directory",
    "probe",
    "remove_directory",
    "remove_symlink",
    "unfold_directory",
    "walk",
]
