from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import RunConfig
from ..pipeline import StepCtx
from ..repo_bootstrap import CHROME_SOURCE, ensure_repository

logger = logging.getLogger(__name__)


class ChromeRepositoryStep:
    """Register Google's repo so later upgrades keep Chrome current."""

    step_id = "40_chrome_repository"

    def enabled(self, config: RunConfig) -> bool:
        return True

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        changes = ensure_repository(CHROME_SOURCE, dry_run=ctx.config.dry_run)
        state.setdefault("decisions", {})["chrome_repository"] = changes
        return state
