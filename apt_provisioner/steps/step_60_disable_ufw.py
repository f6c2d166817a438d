from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import RunConfig
from ..lib.services import systemctl
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)


class DisableFirewallStep:
    step_id = "60_disable_ufw"

    def enabled(self, config: RunConfig) -> bool:
        return config.disable_ufw

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        for action in ("stop", "disable"):
            systemctl(action, "ufw", check=False, dry_run=ctx.config.dry_run)
        state.setdefault("decisions", {})["firewall_enabled"] = False
        return state
