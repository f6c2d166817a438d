from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import RunConfig
from ..lib.services import service_status, systemctl
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)


class EnableSshStep:
    step_id = "70_enable_ssh"

    def enabled(self, config: RunConfig) -> bool:
        return config.enable_ssh

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        dry_run = ctx.config.dry_run

        if ctx.manager.query_installed("openssh-server"):
            logger.info("openssh-server is already installed.")
        else:
            ctx.manager.install_all(["openssh-server"])

        systemctl("enable", "ssh", dry_run=dry_run)
        systemctl("start", "ssh", dry_run=dry_run)
        if not dry_run:
            logger.info("ssh status:\n%s", service_status("ssh"))

        state.setdefault("decisions", {})["ssh_enabled"] = True
        return state
