from __future__ import annotations

import logging
import shutil
from typing import Callable, List, Optional, Protocol, Sequence

from ..errors import BackendError
from .command import NONINTERACTIVE_ENV, run_cmd
from .locks import wait_for_locks

logger = logging.getLogger(__name__)

# Finish half-configured packages, fix broken deps, refresh the index.
HEAL_COMMANDS = (
    ["dpkg", "--configure", "-a"],
    ["apt-get", "-f", "install", "-y"],
    ["apt-get", "update", "-y"],
)

_ERE_SPECIAL = set(".[]()*+?{}|^$\\")


def ere_escape(name: str) -> str:
    """Escape a package name for apt-cache's POSIX regex search."""
    return "".join("\\" + c if c in _ERE_SPECIAL else c for c in name)


class PackageManager(Protocol):
    """What the workflows need from the system package manager."""

    name: str
    dry_run: bool

    def heal(self) -> None:
        ...

    def refresh_index(self) -> None:
        ...

    def install_all(self, names: Sequence[str]) -> None:
        ...

    def query_exists(self, name: str) -> bool:
        ...

    def query_candidate(self, name: str) -> Optional[str]:
        ...

    def query_installed(self, name: str) -> bool:
        ...

    def full_upgrade(self) -> None:
        ...

    def autoremove(self, *, purge: bool = True) -> None:
        ...

    def purge(self, names: Sequence[str]) -> None:
        ...


class AptFamilyBackend:
    """Shared behavior for apt front-ends.

    Queries always go through apt-cache/dpkg-query and run even in dry-run.
    Mutating calls self-heal once per instance first, and are only logged in
    dry-run.
    """

    name = "apt"
    update_argv: List[str] = []
    install_argv: List[str] = []
    full_upgrade_argv: List[str] = []
    autoremove_argv: List[str] = []
    purge_argv: List[str] = []

    def __init__(
        self,
        *,
        dry_run: bool = False,
        lock_timeout_s: float = 60.0,
        lock_poll_s: float = 2.0,
        wait_locks: Callable[..., bool] = wait_for_locks,
    ) -> None:
        self.dry_run = dry_run
        self.lock_timeout_s = lock_timeout_s
        self.lock_poll_s = lock_poll_s
        self._wait_locks = wait_locks
        self._healed = False

    def heal(self) -> None:
        """Best-effort repair of an interrupted earlier run; never raises BackendError."""

        if self._healed:
            return
        self._healed = True

        logger.info("Checking dpkg/apt state...")
        self._wait_locks(timeout_s=self.lock_timeout_s, interval_s=self.lock_poll_s)
        for argv in HEAL_COMMANDS:
            try:
                run_cmd(argv, env=NONINTERACTIVE_ENV, dry_run=self.dry_run)
            except BackendError as e:
                logger.warning("Ignoring failed heal step: %s", e)

    def _mutate(self, argv: Sequence[str]) -> None:
        self.heal()
        run_cmd(argv, env=NONINTERACTIVE_ENV, capture=False, dry_run=self.dry_run)

    def refresh_index(self) -> None:
        logger.info("Updating package index...")
        self._mutate(self.update_argv)

    def install_all(self, names: Sequence[str]) -> None:
        """Request every package in one backend call so shared deps resolve together."""

        names = list(names)
        if not names:
            return
        try:
            self._mutate([*self.install_argv, *names])
        except BackendError as e:
            raise BackendError(
                f"{self.name} failed to install {len(names)} package(s): {' '.join(names)}\n{e}",
                argv=e.argv,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def full_upgrade(self) -> None:
        self._mutate(self.full_upgrade_argv)

    def autoremove(self, *, purge: bool = True) -> None:
        argv = list(self.autoremove_argv)
        if purge:
            argv.append("--purge")
        self._mutate(argv)

    def purge(self, names: Sequence[str]) -> None:
        if names:
            self._mutate([*self.purge_argv, *names])

    def query_exists(self, name: str) -> bool:
        r = run_cmd(
            ["apt-cache", "--names-only", "search", f"^{ere_escape(name)}$"],
            check=False,
            quiet=True,
        )
        if not r.ok:
            return False
        return any(line.startswith(f"{name} - ") for line in r.stdout.splitlines())

    def query_candidate(self, name: str) -> Optional[str]:
        r = run_cmd(["apt-cache", "policy", name], check=False, quiet=True)
        if not r.ok:
            return None
        for line in r.stdout.splitlines():
            key, sep, value = line.strip().partition(":")
            if sep and key == "Candidate":
                value = value.strip()
                return None if not value or value == "(none)" else value
        return None

    def query_installed(self, name: str) -> bool:
        r = run_cmd(["dpkg-query", "-W", "-f=${Status}", name], check=False, quiet=True)
        if not r.ok:
            return False
        # "<want> <error> <status>", e.g. "install ok installed" or "hold ok installed".
        parts = r.stdout.split()
        return len(parts) == 3 and parts[1] == "ok" and parts[2] == "installed"


class NalaBackend(AptFamilyBackend):
    name = "nala"
    update_argv = ["nala", "update"]
    install_argv = ["nala", "install", "--assume-yes"]
    full_upgrade_argv = ["nala", "full-upgrade", "--assume-yes"]
    autoremove_argv = ["nala", "autoremove", "--assume-yes"]
    purge_argv = ["nala", "purge", "--assume-yes"]


class AptGetBackend(AptFamilyBackend):
    name = "apt-get"
    update_argv = ["apt-get", "update", "-y"]
    install_argv = ["apt-get", "install", "-y"]
    full_upgrade_argv = ["apt-get", "dist-upgrade", "-y"]
    autoremove_argv = ["apt-get", "autoremove", "-y"]
    purge_argv = ["apt-get", "purge", "-y"]


def select_backend(
    *,
    which: Callable[[str], Optional[str]] = shutil.which,
    **kwargs,
) -> AptFamilyBackend:
    """Prefer nala when it is on PATH, else fall back to apt-get."""

    if which("nala"):
        backend: AptFamilyBackend = NalaBackend(**kwargs)
    else:
        backend = AptGetBackend(**kwargs)
    logger.info("Using package manager backend: %s", backend.name)
    return backend


def ensure_nala(manager: PackageManager, *, enabled: bool = True) -> PackageManager:
    """Install nala through apt-get when it is missing, and switch to it."""

    if not enabled or not isinstance(manager, AptGetBackend):
        return manager

    logger.info("Nala not found; installing via apt...")
    if manager.dry_run:
        logger.info("[dry-run] Would install nala via apt-get.")
        return manager

    manager.refresh_index()
    manager.install_all(["nala"])

    nala = NalaBackend(
        dry_run=manager.dry_run,
        lock_timeout_s=manager.lock_timeout_s,
        lock_poll_s=manager.lock_poll_s,
        wait_locks=manager._wait_locks,
    )
    nala._healed = True
    return nala
