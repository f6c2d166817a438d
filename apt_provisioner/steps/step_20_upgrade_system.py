from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import RunConfig
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)


class UpgradeSystemStep:
    """Update, upgrade and clean up after the initial OS install."""

    step_id = "20_upgrade_system"

    def enabled(self, config: RunConfig) -> bool:
        return True

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx.manager.refresh_index()
        logger.info("Upgrading installed packages...")
        ctx.manager.full_upgrade()
        logger.info("Removing unused packages...")
        ctx.manager.autoremove(purge=True)
        return state
