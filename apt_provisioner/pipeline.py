from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import RunConfig
from .errors import InputError
from .lib.pkg import PackageManager

logger = logging.getLogger(__name__)


@dataclass
class StepCtx:
    config: RunConfig
    # Steps may swap the backend (e.g. after installing nala).
    manager: PackageManager


class Step(Protocol):
    """A single idempotent step."""

    step_id: str

    def enabled(self, config: RunConfig) -> bool:
        ...

    def run(self, ctx: StepCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]


def run_pipeline(
    *,
    ctx: StepCtx,
    steps: Sequence[Step],
    state: Optional[Dict[str, Any]] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> PipelineResult:
    """Run steps in order; disabled steps are recorded as skipped."""

    known = [s.step_id for s in steps]
    for label, value in (("start-at", start_at), ("stop-after", stop_after)):
        if value is not None and value not in known:
            raise InputError(f"Unknown step for --{label}: {value} (known: {', '.join(known)})")

    state = state if state is not None else {}
    ran: List[str] = []
    skipped: List[str] = []

    started = start_at is None

    for step in steps:
        if not started:
            if step.step_id == start_at:
                started = True
            else:
                continue

        state["current_step"] = step.step_id

        if not step.enabled(ctx.config):
            logger.info("Skipping step %s (disabled)", step.step_id)
            skipped.append(step.step_id)
        else:
            logger.info("Running step %s", step.step_id)
            state = step.run(ctx, state)
            ran.append(step.step_id)

        if stop_after is not None and step.step_id == stop_after:
            logger.info("Stopping after %s", stop_after)
            break

    state["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
