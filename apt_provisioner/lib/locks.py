from __future__ import annotations

import logging
from typing import Callable, Sequence

from .command import run_cmd
from .poll import poll_until

logger = logging.getLogger(__name__)

DPKG_LOCKS = (
    "/var/lib/dpkg/lock-frontend",
    "/var/lib/apt/lists/lock",
    "/var/cache/apt/archives/lock",
)


def held_locks(paths: Sequence[str] = DPKG_LOCKS) -> list[str]:
    """Return the lock files some process currently holds open (fuser exit 0)."""

    held: list[str] = []
    for p in paths:
        r = run_cmd(["fuser", p], check=False, quiet=True)
        if r.returncode == 0:
            held.append(p)
    return held


def wait_for_locks(
    *,
    timeout_s: float = 60.0,
    interval_s: float = 2.0,
    probe: Callable[[], list[str]] = held_locks,
    **poll_kwargs,
) -> bool:
    """Wait (bounded) until no dpkg/apt lock is held.

    Returns False when the wait timed out; the caller proceeds anyway and lets
    the real operation report the contention.
    """

    def _free() -> bool:
        held = probe()
        if held:
            logger.info("Waiting for package manager locks: %s", ", ".join(held))
        return not held

    free = poll_until(_free, timeout_s=timeout_s, interval_s=interval_s, **poll_kwargs)
    if not free:
        logger.warning("Package manager locks still held after %ss; continuing", timeout_s)
    return free
