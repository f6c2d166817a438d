from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict

from ..config import RunConfig
from ..lib.services import systemctl
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)

APPARMOR_DIRS = ("/etc/apparmor.d", "/var/lib/apparmor", "/var/cache/apparmor")


class RemoveAppArmorStep:
    step_id = "50_remove_apparmor"

    def enabled(self, config: RunConfig) -> bool:
        return config.remove_apparmor

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        dry_run = ctx.config.dry_run

        # Unit may already be gone on re-runs.
        for action in ("stop", "disable", "mask"):
            systemctl(action, "apparmor", check=False, dry_run=dry_run)

        if ctx.manager.query_installed("apparmor"):
            ctx.manager.purge(["apparmor"])
            ctx.manager.autoremove(purge=True)

        for d in APPARMOR_DIRS:
            p = Path(d)
            if not p.exists():
                continue
            if dry_run:
                logger.info("Would remove %s", str(p))
            else:
                shutil.rmtree(p)
                logger.info("Removed %s", str(p))

        state.setdefault("decisions", {})["apparmor_removed"] = True
        return state
