"""Tests for the validate -> filter -> confirm -> install workflow."""

import dataclasses
import io
from unittest.mock import MagicMock, patch

import pytest

from apt_provisioner.confirm import confirm, render_plan
from apt_provisioner.errors import InputError, ValidationError
from apt_provisioner.lib.command import CmdResult
from apt_provisioner.lib.pkg import AptGetBackend
from apt_provisioner.package_list import PackageList
from apt_provisioner.workflow import (
    DECLINED,
    DRY_RUN,
    INSTALLED,
    NOTHING_TO_DO,
    filter_missing,
    install_packages,
)


def _never_asked():
    raise AssertionError("confirmation should not have been requested")


class TestFilterMissing:
    def test_splits_installed(self, fake_manager):
        fake_manager.installed = {"git"}
        plan = filter_missing(PackageList.from_names(["git", "vim"]), fake_manager)
        assert plan.packages.names == ["vim"]
        assert plan.already_installed.names == ["git"]
        assert fake_manager.calls == []


class TestInstallPackages:
    def test_installs_missing_in_one_call(self, fake_manager, run_config):
        fake_manager.installed = {"git"}
        out = io.StringIO()
        result = install_packages(
            run_config, fake_manager, packages=PackageList.from_names(["git", "vim", "curl"]), out=out
        )

        assert result.outcome == INSTALLED
        assert result.installed == ["vim", "curl"]
        assert result.skipped_installed == ["git"]
        assert fake_manager.mutating_calls == [("refresh_index",), ("install_all", ["vim", "curl"])]
        assert "  - vim" in out.getvalue()
        assert "(2 total)" in out.getvalue()

    def test_reads_list_file(self, fake_manager, run_config, tmp_path):
        (tmp_path / "packages.txt").write_text("[base]\ngit\ngit\n# x\nvim # editor\n", encoding="utf-8")
        result = install_packages(run_config, fake_manager, out=io.StringIO())
        assert result.requested == ["git", "vim"]
        assert fake_manager.mutating_calls[-1] == ("install_all", ["git", "vim"])

    def test_missing_list_file(self, fake_manager, run_config):
        with pytest.raises(InputError):
            install_packages(run_config, fake_manager)
        assert fake_manager.calls == []

    def test_empty_list_is_nothing_to_do(self, fake_manager, run_config):
        result = install_packages(run_config, fake_manager, packages=PackageList())
        assert result.outcome == NOTHING_TO_DO
        assert fake_manager.calls == []

    def test_fail_closed_installs_nothing(self, fake_manager, run_config):
        with pytest.raises(ValidationError):
            install_packages(
                run_config, fake_manager, packages=PackageList.from_names(["vim", "not-a-real-pkg-xyz"])
            )
        assert fake_manager.calls == []

    def test_fail_open_plans_only_valid(self, fake_manager, run_config):
        config = dataclasses.replace(run_config, ignore_missing=True)
        result = install_packages(
            config, fake_manager, packages=PackageList.from_names(["vim", "not-a-real-pkg-xyz"]), out=io.StringIO()
        )
        assert result.invalid == ["not-a-real-pkg-xyz"]
        assert result.planned == ["vim"]
        assert fake_manager.mutating_calls[-1] == ("install_all", ["vim"])

    def test_fail_open_with_nothing_valid(self, fake_manager, run_config):
        config = dataclasses.replace(run_config, ignore_missing=True)
        result = install_packages(config, fake_manager, packages=PackageList.from_names(["nope"]))
        assert result.outcome == NOTHING_TO_DO
        assert fake_manager.calls == []

    def test_all_installed_makes_zero_install_calls(self, fake_manager, run_config):
        fake_manager.installed = {"git", "vim"}
        result = install_packages(
            run_config, fake_manager, packages=PackageList.from_names(["git", "vim"]), confirm_fn=_never_asked
        )
        assert result.outcome == NOTHING_TO_DO
        assert fake_manager.calls == []

    def test_dry_run_never_installs(self, fake_manager, run_config):
        config = dataclasses.replace(run_config, dry_run=True, assume_yes=False)
        names = ["git", "vim", "curl", "gnupg"]
        result = install_packages(
            config, fake_manager, packages=PackageList.from_names(names), confirm_fn=_never_asked, out=io.StringIO()
        )
        assert result.outcome == DRY_RUN
        assert result.planned == names
        assert fake_manager.calls == []

    def test_decline_changes_nothing(self, fake_manager, run_config):
        config = dataclasses.replace(run_config, assume_yes=False)
        result = install_packages(
            config, fake_manager, packages=PackageList.from_names(["vim"]), confirm_fn=lambda: False, out=io.StringIO()
        )
        assert result.outcome == DECLINED
        assert result.installed == []
        assert fake_manager.calls == []

    def test_confirm_accepts(self, fake_manager, run_config):
        config = dataclasses.replace(run_config, assume_yes=False)
        result = install_packages(
            config, fake_manager, packages=PackageList.from_names(["vim"]), confirm_fn=lambda: True, out=io.StringIO()
        )
        assert result.outcome == INSTALLED

    def test_result_as_dict(self, fake_manager, run_config):
        result = install_packages(run_config, fake_manager, packages=PackageList.from_names(["vim"]), out=io.StringIO())
        d = result.as_dict()
        assert d["outcome"] == INSTALLED
        assert d["backend"] == "fake"
        assert d["installed"] == ["vim"]


class TestNalaBootstrap:
    """install_packages against a real apt-get backend with subprocess mocked."""

    def _fake_run(self, ran):
        def _run(argv, **kwargs):
            ran.append(list(argv))
            if argv[:2] == ["apt-cache", "--names-only"]:
                return CmdResult(argv=list(argv), returncode=0, stdout="vim - Vi IMproved\n", stderr="")
            if argv[0] == "dpkg-query":
                return CmdResult(argv=list(argv), returncode=1, stdout="", stderr="")
            return CmdResult(argv=list(argv), returncode=0, stdout="", stderr="")

        return _run

    def test_missing_list_runs_no_commands(self, run_config):
        ran = []
        backend = AptGetBackend(wait_locks=MagicMock(return_value=True))
        config = dataclasses.replace(run_config, bootstrap_nala=True)

        with patch("apt_provisioner.lib.pkg.run_cmd", side_effect=self._fake_run(ran)):
            with pytest.raises(InputError):
                install_packages(config, backend)

        assert ran == []

    def test_bootstraps_nala_then_installs_with_it(self, run_config, tmp_path):
        (tmp_path / "packages.txt").write_text("vim\n", encoding="utf-8")
        ran = []
        backend = AptGetBackend(wait_locks=MagicMock(return_value=True))

        with patch("apt_provisioner.lib.pkg.run_cmd", side_effect=self._fake_run(ran)):
            result = install_packages(run_config, backend, out=io.StringIO())

        assert result.backend == "nala"
        assert result.outcome == INSTALLED
        assert ran.index(["apt-get", "install", "-y", "nala"]) < ran.index(["nala", "install", "--assume-yes", "vim"])
        assert ran[-2:] == [["nala", "update"], ["nala", "install", "--assume-yes", "vim"]]


class TestConfirm:
    @pytest.mark.parametrize("answer", ["y", "Y", "yes", "YES", " Yes "])
    def test_affirmative(self, answer):
        assert confirm(input_fn=lambda prompt: answer) is True

    @pytest.mark.parametrize("answer", ["", "n", "no", "yep", "sure", "y e s"])
    def test_anything_else_declines(self, answer):
        assert confirm(input_fn=lambda prompt: answer) is False

    def test_eof_declines(self):
        def _eof(prompt):
            raise EOFError

        assert confirm(input_fn=_eof) is False

    def test_prompt_passed_through(self):
        seen = []
        confirm("Install? [y/N]", input_fn=lambda p: seen.append(p) or "n")
        assert seen == ["Install? [y/N] "]

    def test_render_plan(self):
        assert render_plan(["a", "b"]) == "The following packages will be installed (2 total):\n  - a\n  - b"
