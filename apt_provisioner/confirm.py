from __future__ import annotations

import sys
from typing import Callable, Optional, Sequence, TextIO

AFFIRMATIVE = {"y", "yes"}


def render_plan(names: Sequence[str]) -> str:
    lines = [f"The following packages will be installed ({len(names)} total):"]
    lines += [f"  - {n}" for n in names]
    return "\n".join(lines)


def show_plan(names: Sequence[str], *, out: Optional[TextIO] = None) -> None:
    out = out or sys.stderr
    out.write("\n" + render_plan(names) + "\n\n")
    out.flush()


def confirm(
    prompt: str = "Continue? [y/N]",
    *,
    input_fn: Optional[Callable[[str], str]] = None,
) -> bool:
    """Ask once; only y/yes (any case) counts as consent. EOF declines."""

    try:
        answer = (input_fn or input)(prompt + " ")
    except EOFError:
        return False
    return answer.strip().lower() in AFFIRMATIVE
