from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from ..errors import BackendError

logger = logging.getLogger(__name__)

# apt/dpkg must never stop to ask questions on our behalf.
NONINTERACTIVE_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    input_text: str | None = None,
    capture: bool = True,
    quiet: bool = False,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False lets the tool draw its own progress on the terminal;
      stdout/stderr are then empty in the result.
    - quiet=True logs the command at DEBUG (read-only queries run per package).
    - dry_run logs but does not execute.
    - check=True raises BackendError carrying the tool's stderr verbatim.
    """

    argv_list = list(argv)
    logger.log(logging.DEBUG if quiet else logging.INFO, "CMD %s", fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    pipe = subprocess.PIPE if capture else None
    try:
        p = subprocess.run(
            argv_list,
            input=input_text,
            text=True,
            stdout=pipe,
            stderr=pipe,
            env=dict(os.environ, **(env or {})),
        )
    except FileNotFoundError as e:
        if not check:
            return CmdResult(argv=argv_list, returncode=127, stdout="", stderr=str(e))
        raise BackendError(f"Command not found: {argv_list[0]}", argv=argv_list, returncode=127) from e

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise BackendError(
            f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{stderr}".rstrip(),
            argv=argv_list,
            returncode=p.returncode,
            stderr=stderr,
        )

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
