from __future__ import annotations

import logging

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def systemctl(action: str, unit: str, *, check: bool = True, dry_run: bool = False) -> CmdResult:
    return run_cmd(["systemctl", action, unit], check=check, dry_run=dry_run)


def service_status(unit: str) -> str:
    """Best-effort `systemctl status` text for the log (read-only)."""

    r = run_cmd(["systemctl", "status", "--no-pager", unit], check=False)
    return (r.stdout or r.stderr).strip()
