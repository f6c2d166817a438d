"""Idempotent Google Chrome Stable installer.

- Heals interrupted dpkg/apt state first
- Adds Google's signed apt repository if missing
- Re-runnable: never duplicates the repo; skips install if already present
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict

from .config import RunConfig
from .lib.pkg import PackageManager
from .repo_bootstrap import CHROME_SOURCE, RepositorySource, ensure_repository, fetch_dearmored_key
from .workflow import DRY_RUN, INSTALLED, NOTHING_TO_DO

logger = logging.getLogger(__name__)

CHROME_PACKAGE = "google-chrome-stable"
PREREQUISITES = ("curl", "gnupg", "ca-certificates")


def install_chrome(
    config: RunConfig,
    manager: PackageManager,
    *,
    source: RepositorySource = CHROME_SOURCE,
    write_keyring: Callable[[str, Path], None] = fetch_dearmored_key,
) -> Dict[str, Any]:
    manager.heal()

    logger.info("Ensuring prerequisites...")
    missing = [p for p in PREREQUISITES if not manager.query_installed(p)]
    manager.install_all(missing)

    changes = ensure_repository(source, dry_run=config.dry_run, write_keyring=write_keyring)

    manager.refresh_index()

    if manager.query_installed(CHROME_PACKAGE):
        logger.info("Google Chrome is already installed.")
        outcome = NOTHING_TO_DO
    else:
        logger.info("Installing Google Chrome Stable...")
        manager.install_all([CHROME_PACKAGE])
        outcome = DRY_RUN if config.dry_run else INSTALLED

    logger.info("Chrome setup complete.")
    return {
        "outcome": outcome,
        "backend": manager.name,
        "prerequisites_installed": missing,
        **changes,
    }
