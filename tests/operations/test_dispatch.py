"""Tests for running operations across packages."""

from unittest.mock import patch

import pytest

from linkfarm.exceptions import InvalidPackageError
from linkfarm.exceptions import PackageNotFoundError
from linkfarm.exceptions import PlanningError
from linkfarm.models import ActionResult
from linkfarm.models import Mode
from linkfarm.models import Outcome
from linkfarm.models import RemoveLink
from linkfarm.models import Report
from linkfarm.operations import Dispatcher
from linkfarm.operations import exit_code
from linkfarm.operations import plan_install


@pytest.fixture
def dotfiles(make_package):
    """A small stow directory with two packages sharing ~/.config."""
    return [
        make_package("hypr", ".config/hypr/hyprland.conf"),
        make_package("waybar", ".config/waybar/config", ".config/waybar/style.css"),
        make_package("zsh", ".zshrc", ".zshenv"),
    ]


class TestDispatcher:
    """Tests for Dispatcher."""

    def test_install_all(self, dotfiles, stow_dir, target_dir):
        reports = Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])

        assert [r.package_name for r in reports] == ["hypr", "waybar", "zsh"]
        assert exit_code(reports) == 0
        assert (target_dir / ".config").is_dir()
        assert not (target_dir / ".config").is_symlink()
        assert (target_dir / ".config" / "waybar" / "style.css").read_text() == (
            "waybar:.config/waybar/style.css"
        )

    def test_install_is_idempotent(self, dotfiles, stow_dir, target_dir, snapshot):
        Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])
        before = snapshot(target_dir)

        reports = Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])

        assert snapshot(target_dir) == before
        assert all(r.count(Outcome.APPLIED) == 0 for r in reports)
        assert exit_code(reports) == 0

    def test_remove_undoes_install(self, dotfiles, stow_dir, target_dir):
        Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])

        reports = Dispatcher(stow_dir, target_dir).run_all(Mode.REMOVE, ["all"])

        assert exit_code(reports) == 0
        assert list(target_dir.iterdir()) == []

    def test_remove_one_package_keeps_the_others(
        self, dotfiles, stow_dir, target_dir
    ):
        Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])

        Dispatcher(stow_dir, target_dir).run_all(Mode.REMOVE, ["waybar"])

        assert not (target_dir / ".config" / "waybar").exists()
        assert (target_dir / ".config" / "hypr" / "hyprland.conf").exists()
        assert (target_dir / ".zshrc").exists()

    def test_user_files_survive_install_and_remove(
        self, dotfiles, stow_dir, target_dir
    ):
        """Test that nothing the user owns is ever replaced or deleted."""
        (target_dir / ".zshrc").write_text("mine")
        (target_dir / ".config").mkdir()
        (target_dir / ".config" / "user.conf").write_text("also mine")

        installed = Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])
        removed = Dispatcher(stow_dir, target_dir).run_all(Mode.REMOVE, ["all"])

        assert exit_code(installed) == 2
        assert exit_code(removed) == 0
        assert (target_dir / ".zshrc").read_text() == "mine"
        assert (target_dir / ".config" / "user.conf").read_text() == "also mine"
        assert sorted(p.name for p in target_dir.iterdir()) == [".config", ".zshrc"]

    def test_conflict_is_reported_and_others_applied(
        self, dotfiles, stow_dir, target_dir
    ):
        (target_dir / ".zshrc").write_text("mine")

        reports = Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["zsh"])

        assert exit_code(reports) == 2
        assert [r.action.target for r in reports[0].conflicts] == [
            target_dir / ".zshrc"
        ]
        assert (target_dir / ".zshenv").is_symlink()

    def test_restow_matches_install(self, dotfiles, stow_dir, target_dir, snapshot):
        """Test that restow on an installed tree leaves it as install would."""
        Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["all"])
        before = snapshot(target_dir)

        reports = Dispatcher(stow_dir, target_dir).run_all(Mode.RESTOW, ["all"])

        assert exit_code(reports) == 0
        assert all(r.mode == Mode.RESTOW for r in reports)
        assert snapshot(target_dir) == before

    def test_restow_picks_up_new_files(self, dotfiles, stow_dir, target_dir):
        Dispatcher(stow_dir, target_dir).run_all(Mode.INSTALL, ["zsh"])
        (stow_dir / "zsh" / ".zprofile").write_text("new")

        Dispatcher(stow_dir, target_dir).run_all(Mode.RESTOW, ["zsh"])

        assert (target_dir / ".zprofile").read_text() == "new"

    def test_restow_skips_install_after_failed_removal(
        self, dotfiles, stow_dir, target_dir
    ):
        zsh = dotfiles[2]
        failed = Report(
            "zsh",
            Mode.REMOVE,
            [
                ActionResult(
                    RemoveLink(target_dir / ".zshrc", zsh.root), Outcome.FAILED, "boom"
                )
            ],
        )
        dispatcher = Dispatcher(stow_dir, target_dir)

        with patch(
            "linkfarm.operations.dispatch.apply_plan", return_value=failed
        ) as apply:
            report = dispatcher.run(Mode.RESTOW, zsh)

        assert apply.call_count == 1
        assert report.mode == Mode.RESTOW
        assert report.error == "removal failed, not reinstalling"
        assert not report.ok

    def test_unknown_names_are_reported_together(
        self, dotfiles, stow_dir, target_dir
    ):
        """Test that nothing is applied when any name does not resolve."""
        with pytest.raises(PackageNotFoundError) as exc_info:
            Dispatcher(stow_dir, target_dir).run_all(
                Mode.INSTALL, ["zsh", "nope", "nada"]
            )

        assert exc_info.value.names == ["nope", "nada"]
        assert list(target_dir.iterdir()) == []

    def test_planning_error_does_not_stop_other_packages(
        self, dotfiles, stow_dir, target_dir
    ):
        def flaky(package, view, ignore):
            if package.name == "hypr":
                raise PlanningError(package.name, PermissionError("denied"))
            return plan_install(package, view, ignore)

        with patch("linkfarm.operations.dispatch.plan_install", side_effect=flaky):
            reports = Dispatcher(stow_dir, target_dir).run_all(
                Mode.INSTALL, ["all"]
            )

        assert reports[0].error == "Cannot plan hypr: denied"
        assert reports[1].ok and reports[2].ok
        assert exit_code(reports) == 2
        assert (target_dir / ".zshrc").is_symlink()

    def test_dry_run_touches_nothing(self, dotfiles, stow_dir, target_dir):
        for mode in Mode:
            reports = Dispatcher(stow_dir, target_dir, dry_run=True).run_all(
                mode, ["all"]
            )

            assert exit_code(reports) == 0
        assert list(target_dir.iterdir()) == []

    def test_dry_run_sees_earlier_packages(self, make_package, stow_dir, target_dir):
        """Test that a dry run simulates packages one after another."""
        make_package("bash", ".profile")
        make_package("zsh", ".profile")

        reports = Dispatcher(stow_dir, target_dir, dry_run=True).run_all(
            Mode.INSTALL, ["all"]
        )

        assert reports[0].count(Outcome.PLANNED) == 1
        assert reports[1].conflicts[0].action.reason == "owned by package bash"
        assert list(target_dir.iterdir()) == []

    def test_ignore_patterns(self, make_package, stow_dir, target_dir):
        make_package("zsh", ".zshrc", "README.md")

        Dispatcher(stow_dir, target_dir, ignore=["*.md"]).run_all(
            Mode.INSTALL, ["zsh"]
        )

        assert [p.name for p in target_dir.iterdir()] == [".zshrc"]

    def test_rejects_missing_target(self, dotfiles, stow_dir, tmp_path):
        with pytest.raises(InvalidPackageError):
            Dispatcher(stow_dir, tmp_path / "missing")

    def test_rejects_target_inside_stow_dir(self, dotfiles, stow_dir):
        with pytest.raises(InvalidPackageError):
            Dispatcher(stow_dir, stow_dir / "zsh")

    def test_plan_refuses_restow(self, dotfiles, stow_dir, target_dir):
        with pytest.raises(ValueError):
            Dispatcher(stow_dir, target_dir).plan(Mode.RESTOW, dotfiles[0])


class TestExitCode:
    """Tests for exit_code()."""

    def test_exit_codes(self):
        clean = Report("zsh", Mode.INSTALL)
        broken = Report("bash", Mode.INSTALL, error="Cannot plan bash: denied")

        assert exit_code([]) == 0
        assert exit_code([clean]) == 0
        assert exit_code([clean, broken]) == 2
