"""Run install, remove and restow across a selection of packages."""

import logging
from collections.abc import Iterable
from collections.abc import Sequence
from pathlib import Path

from linkfarm.exceptions import PlanningError
from linkfarm.files.symlinks import OwnershipOracle
from linkfarm.models import Mode
from linkfarm.models import Package
from linkfarm.models import Plan
from linkfarm.models import Report
from linkfarm.operations.execute import apply_plan
from linkfarm.operations.execute import preview_plan
from linkfarm.operations.install import plan_install
from linkfarm.operations.paths import normalize_target_dir
from linkfarm.operations.paths import validate_directories
from linkfarm.operations.uninstall import plan_remove
from linkfarm.operations.view import TargetView
from linkfarm.registry import Registry

logger = logging.getLogger(__name__)


class Dispatcher:
    """Plan and apply operations one package at a time.

    Each package is planned against the live target tree right before it is
    applied, so later packages see what earlier ones did. In a dry run one
    simulated tree is shared by every plan instead.

    Concurrent runs against the same target directory are not supported.
    """

    def __init__(
        self,
        stow_dir: Path,
        target_dir: Path,
        ignore: Sequence[str] = (),
        dry_run: bool = False,
    ):
        self.registry = Registry(stow_dir)
        self.target_dir = normalize_target_dir(target_dir)
        validate_directories(self.registry.stow_dir, self.target_dir)
        self.ignore = tuple(ignore)
        self.dry_run = dry_run
        self.oracle = OwnershipOracle(self.registry.list())
        self._shared_view = (
            TargetView(self.target_dir, self.oracle) if dry_run else None
        )

    def resolve(self, names: Iterable[str]) -> list[Package]:
        return self.registry.resolve(names)

    def plan(self, mode: Mode, package: Package) -> Plan:
        """Plan an install or removal of one package."""
        view = self._shared_view or TargetView(self.target_dir, self.oracle)
        if mode == Mode.INSTALL:
            return plan_install(package, view, self.ignore)
        if mode == Mode.REMOVE:
            return plan_remove(package, view, self.ignore)
        raise ValueError(f"Cannot plan {mode.value} in a single pass")

    def run(self, mode: Mode, package: Package) -> Report:
        """Install, remove or restow one package, never raising for it."""
        try:
            if mode == Mode.RESTOW:
                return self._restow(package)
            return self._apply(self.plan(mode, package))
        except PlanningError as e:
            logger.warning("%s", e)
            return Report(package_name=package.name, mode=mode, error=str(e))

    def run_all(self, mode: Mode, names: Iterable[str]) -> list[Report]:
        """Resolve names and run mode for each package.

        Raises:
            PackageNotFoundError: Before anything is touched
        """
        return [self.run(mode, package) for package in self.resolve(names)]

    def _apply(self, plan: Plan) -> Report:
        if self.dry_run:
            return preview_plan(plan)
        return apply_plan(plan)

    def _restow(self, package: Package) -> Report:
        report = self._apply(self.plan(Mode.REMOVE, package))
        report.mode = Mode.RESTOW
        if report.failures:
            report.error = "removal failed, not reinstalling"
            return report

        try:
            report.extend(self._apply(self.plan(Mode.INSTALL, package)))
        except PlanningError as e:
            logger.warning("%s", e)
            report.error = str(e)
        return report


def exit_code(reports: Iterable[Report]) -> int:
    """0 when everything applied cleanly, 2 when anything was skipped or failed."""
    return 0 if all(report.ok for report in reports) else 2
