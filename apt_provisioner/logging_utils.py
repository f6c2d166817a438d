from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

DEFAULT_LOG_PATH = "/var/log/apt-provisioner.log"

_HANDLER_NAMES = ("apt-provisioner-file", "apt-provisioner-console")


def _fallback_log_path() -> Path:
    state_home = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state_home) / "apt-provisioner" / "apt-provisioner.log"


def _open_file_handler(candidates: List[Path]) -> Optional[logging.FileHandler]:
    for p in candidates:
        try:
            p.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(p, encoding="utf-8")
        except OSError:
            continue
        handler.set_name(_HANDLER_NAMES[0])
        return handler
    return None


def configure_logging(log_path: str = DEFAULT_LOG_PATH, *, verbose: bool = False) -> Optional[str]:
    """Configure logging for a run.

    - The log file always records DEBUG, so captured apt/dpkg output is kept
      even when the console is quiet. verbose only affects the console.
    - If log_path is not writable (e.g. /var/log without root) the file goes
      under $XDG_STATE_HOME; if nothing is writable we log to the console only.
    - Calling it again replaces our own handlers and leaves any others alone.

    Returns the log file actually used, or None.
    """

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        if h.get_name() in _HANDLER_NAMES:
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    file_handler = _open_file_handler([Path(log_path), _fallback_log_path()])
    if file_handler is not None:
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    console = logging.StreamHandler()
    console.set_name(_HANDLER_NAMES[1])
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root.addHandler(console)

    chosen = file_handler.baseFilename if file_handler is not None else None
    log = logging.getLogger(__name__)
    if chosen is None:
        log.warning("No writable log file (tried %s); logging to console only", log_path)
    elif chosen != os.path.abspath(log_path):
        log.info("Cannot write %s; logging to %s", log_path, chosen)
    return chosen
