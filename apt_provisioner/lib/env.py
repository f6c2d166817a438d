from __future__ import annotations

import os

from ..errors import PrivilegeError


def is_root() -> bool:
    return os.geteuid() == 0


def require_root(command: str) -> None:
    """Fail fast unless running with euid 0; nothing has been touched yet."""

    if not is_root():
        raise PrivilegeError(f"Run as root: sudo apt-provisioner {command}")
