from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, Optional

from .chrome import install_chrome
from .config import RunConfig, build_run_config, load_config_file
from .errors import ProvisionError
from .lib.env import require_root
from .lib.pkg import AptFamilyBackend, select_backend
from .logging_utils import configure_logging
from .pipeline import StepCtx, run_pipeline
from .report import save_report
from .steps import (
    ChromeRepositoryStep,
    DisableFirewallStep,
    EnableSshStep,
    EnsureNalaStep,
    InstallDriversStep,
    RemoveAppArmorStep,
    UpgradeSystemStep,
)
from .workflow import install_packages

logger = logging.getLogger(__name__)


def build_steps():
    return [
        EnsureNalaStep(),
        UpgradeSystemStep(),
        InstallDriversStep(),
        ChromeRepositoryStep(),
        RemoveAppArmorStep(),
        DisableFirewallStep(),
        EnableSshStep(),
    ]


def make_manager(config: RunConfig) -> AptFamilyBackend:
    return select_backend(
        dry_run=config.dry_run,
        lock_timeout_s=config.lock_timeout_s,
        lock_poll_s=config.lock_poll_s,
    )


def run_packages(config: RunConfig, args: argparse.Namespace) -> Dict[str, Any]:
    return install_packages(config, make_manager(config)).as_dict()


def run_chrome(config: RunConfig, args: argparse.Namespace) -> Dict[str, Any]:
    return install_chrome(config, make_manager(config))


def run_post_install(config: RunConfig, args: argparse.Namespace) -> Dict[str, Any]:
    ctx = StepCtx(config=config, manager=make_manager(config))
    result = run_pipeline(
        ctx=ctx,
        steps=build_steps(),
        start_at=args.start_at,
        stop_after=args.stop_after,
    )
    logger.info("Post-install complete (ran=%s skipped=%s)", ",".join(result.ran_steps), ",".join(result.skipped_steps))
    return {
        "backend": ctx.manager.name,
        "ran_steps": result.ran_steps,
        "skipped_steps": result.skipped_steps,
        "state": result.state,
    }


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", default=None, help="YAML config file")
    common.add_argument("--log", default=None, help="Path to log file")
    common.add_argument("--report", default=None, help="Write a run report (json|yaml)")
    common.add_argument("--dry-run", action="store_true", default=None, help="Show the plan; change nothing")
    common.add_argument("--yes", "-y", action="store_true", default=None, help="Do not ask for confirmation")
    common.add_argument("--verbose", "-v", action="store_true")

    p = argparse.ArgumentParser(prog="apt-provisioner")
    sub = p.add_subparsers(dest="command", required=True)

    pk = sub.add_parser("packages", parents=[common], help="Install packages from a grouped list")
    pk.add_argument("--ignore-missing", action="store_true", default=None, help="Skip unknown packages instead of aborting")
    pk.add_argument(
        "--no-bootstrap-nala",
        dest="bootstrap_nala",
        action="store_false",
        default=None,
        help="Use apt-get when nala is missing instead of installing nala",
    )
    pk.add_argument("list_path", nargs="?", default=None, help="Package list (default ./packages.txt)")
    pk.set_defaults(func=run_packages)

    ch = sub.add_parser("chrome", parents=[common], help="Install Google Chrome Stable")
    ch.set_defaults(func=run_chrome)

    pi = sub.add_parser("post-install", parents=[common], help="Post fresh-install upgrade/drivers/SSH")
    pi.add_argument("--skip-drivers", dest="install_drivers", action="store_false", default=None)
    pi.add_argument("--no-ssh", dest="enable_ssh", action="store_false", default=None)
    pi.add_argument("--disable-ufw", action="store_true", default=None)
    pi.add_argument("--remove-apparmor", action="store_true", default=None)
    pi.add_argument("--start-at", default=None, help="Start at step_id (e.g. 30_install_drivers)")
    pi.add_argument("--stop-after", default=None, help="Stop after step_id")
    pi.set_defaults(func=run_post_install)

    return p


def _run_config_from_args(args: argparse.Namespace) -> RunConfig:
    file_cfg = load_config_file(args.config) if args.config else None
    return build_run_config(
        file_cfg,
        list_path=getattr(args, "list_path", None),
        ignore_missing=getattr(args, "ignore_missing", None),
        bootstrap_nala=getattr(args, "bootstrap_nala", None),
        install_drivers=getattr(args, "install_drivers", None),
        enable_ssh=getattr(args, "enable_ssh", None),
        disable_ufw=getattr(args, "disable_ufw", None),
        remove_apparmor=getattr(args, "remove_apparmor", None),
        dry_run=args.dry_run,
        assume_yes=args.yes,
        log_path=args.log,
        report_path=args.report,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = _run_config_from_args(args)
        configure_logging(log_path=config.log_path, verbose=args.verbose)
        require_root(args.command)

        report = args.func(config, args)
        report["command"] = args.command
        report["dry_run"] = config.dry_run
        if config.report_path:
            save_report(config.report_path, report)
        return 0
    except ProvisionError as e:
        logger.error("%s", e)
        return 1
    except Exception:
        logger.exception("apt-provisioner %s failed", args.command)
        raise


if __name__ == "__main__":
    raise SystemExit(main())
