from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, TextIO

from .config import RunConfig
from .confirm import confirm, show_plan
from .lib.pkg import PackageManager, ensure_nala
from .package_list import PackageList, load_package_list
from .validation import apply_missing_policy, validate

logger = logging.getLogger(__name__)

INSTALLED = "installed"
NOTHING_TO_DO = "nothing_to_do"
DECLINED = "declined"
DRY_RUN = "dry_run"


@dataclass(frozen=True)
class InstallPlan:
    packages: PackageList
    already_installed: PackageList


@dataclass
class WorkflowResult:
    outcome: str
    backend: str = ""
    requested: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)
    skipped_installed: List[str] = field(default_factory=list)
    planned: List[str] = field(default_factory=list)
    installed: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def filter_missing(valid: PackageList, manager: PackageManager) -> InstallPlan:
    """Drop packages that are already fully installed. Read-only."""

    missing = []
    present = []
    for entry in valid:
        (present if manager.query_installed(entry.name) else missing).append(entry)
    return InstallPlan(packages=PackageList(tuple(missing)), already_installed=PackageList(tuple(present)))


def install_packages(
    config: RunConfig,
    manager: PackageManager,
    *,
    packages: Optional[PackageList] = None,
    confirm_fn: Callable[[], bool] = confirm,
    out: Optional[TextIO] = None,
) -> WorkflowResult:
    """validate -> filter already-installed -> confirm -> install.

    Everything up to the confirmation is read-only, so failures there leave
    the system untouched.
    """

    # An unreadable list must abort before nala bootstrap touches the system.
    if packages is None:
        packages = load_package_list(config.list_path)

    manager = ensure_nala(manager, enabled=config.bootstrap_nala)

    result = WorkflowResult(outcome=NOTHING_TO_DO, backend=manager.name, requested=packages.names)
    if not packages:
        logger.info("No packages found in %s.", config.list_path)
        return result

    checked = validate(packages, manager)
    result.invalid = checked.invalid.names
    valid = apply_missing_policy(checked, ignore_missing=config.ignore_missing)
    if not valid:
        logger.info("No valid packages to install.")
        return result

    plan = filter_missing(valid, manager)
    result.skipped_installed = plan.already_installed.names
    result.planned = plan.packages.names
    if not plan.packages:
        logger.info("All valid packages are already installed.")
        return result

    show_plan(plan.packages.names, out=out)

    if config.dry_run:
        logger.info("[dry-run] No changes made.")
        result.outcome = DRY_RUN
        return result

    if not config.assume_yes and not confirm_fn():
        logger.info("Cancelled.")
        result.outcome = DECLINED
        return result

    manager.refresh_index()
    logger.info("Installing packages...")
    manager.install_all(plan.packages.names)

    result.installed = plan.packages.names
    result.outcome = INSTALLED
    logger.info("Done.")
    return result
