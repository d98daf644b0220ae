"""High-level operations for linkfarm."""

from linkfarm.operations.dispatch import Dispatcher
from linkfarm.operations.dispatch import exit_code
from linkfarm.operations.execute import apply_plan
from linkfarm.operations.execute import preview_plan
from linkfarm.operations.install import plan_install
from linkfarm.operations.paths import normalize_target_dir
from linkfarm.operations.paths import validate_directories
from linkfarm.operations.uninstall import plan_remove
from linkfarm.operations.view import TargetView

__all__ = [
    "Dispatcher",
    "TargetView",
    "apply_plan",
    "exit_code",
    "normalize_target_dir",
    "plan_install",
    "plan_remove",
    "preview_plan",
    "validate_directories",
]
