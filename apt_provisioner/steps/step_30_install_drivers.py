from __future__ import annotations

import logging
import shutil
from typing import Any, Dict

from ..config import RunConfig
from ..lib.command import run_cmd
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)


class InstallDriversStep:
    step_id = "30_install_drivers"

    def enabled(self, config: RunConfig) -> bool:
        return config.install_drivers

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        # Driver selection belongs to ubuntu-drivers; we only invoke it.
        if not shutil.which("ubuntu-drivers"):
            logger.warning("ubuntu-drivers not found; skipping driver installation")
            state.setdefault("warnings", []).append({"step": self.step_id, "reason": "ubuntu_drivers_missing"})
            return state

        r = run_cmd(["ubuntu-drivers", "list"], check=False)
        drivers = [line.strip() for line in r.stdout.splitlines() if line.strip()]
        logger.info("Recommended drivers: %s", ", ".join(drivers) or "(none)")

        run_cmd(["ubuntu-drivers", "install"], capture=False, dry_run=ctx.config.dry_run)
        state.setdefault("decisions", {})["drivers"] = drivers
        return state
