from __future__ import annotations

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


def poll_until(
    predicate: Callable[[], bool],
    *,
    timeout_s: float,
    interval_s: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Call predicate every interval_s seconds until it is true or timeout_s elapses.

    Returns the last predicate value, so False means the wait gave up. The
    predicate is always evaluated at least once, and never again once the
    deadline has passed.
    """

    if interval_s <= 0:
        raise ValueError("interval_s must be positive")

    deadline = clock() + max(timeout_s, 0.0)
    while True:
        if predicate():
            return True
        now = clock()
        if now >= deadline:
            return False
        sleep(min(interval_s, deadline - now))
