from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import RunConfig
from ..lib.pkg import ensure_nala
from ..pipeline import StepCtx

logger = logging.getLogger(__name__)


class EnsureNalaStep:
    step_id = "10_ensure_nala"

    def enabled(self, config: RunConfig) -> bool:
        return config.bootstrap_nala

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ctx.manager = ensure_nala(ctx.manager)
        state.setdefault("decisions", {})["backend"] = ctx.manager.name
        return state
