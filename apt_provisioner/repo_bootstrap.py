from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict

from .lib.command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepositorySource:
    """A third-party apt repository: its signing key and its sources line."""

    name: str
    key_url: str
    keyring_path: str
    list_path: str
    repo_line: str


CHROME_KEYRING = "/usr/share/keyrings/google-chrome.gpg"

CHROME_SOURCE = RepositorySource(
    name="Google Chrome",
    key_url="https://dl.google.com/linux/linux_signing_key.pub",
    keyring_path=CHROME_KEYRING,
    list_path="/etc/apt/sources.list.d/google-chrome.list",
    repo_line=f"deb [arch=amd64 signed-by={CHROME_KEYRING}] https://dl.google.com/linux/chrome/deb/ stable main",
)


def fetch_dearmored_key(url: str, keyring_path: Path) -> None:
    """Download an ASCII-armored key and store it de-armored at keyring_path."""

    armored = run_cmd(["curl", "-fsSL", url]).stdout
    tmp = keyring_path.with_name(keyring_path.name + ".tmp")
    try:
        run_cmd(["gpg", "--batch", "--yes", "--dearmor", "-o", str(tmp)], input_text=armored)
        os.replace(tmp, keyring_path)
    finally:
        tmp.unlink(missing_ok=True)


def key_present(source: RepositorySource) -> bool:
    p = Path(source.keyring_path)
    return p.is_file() and p.stat().st_size > 0


def repo_registered(source: RepositorySource) -> bool:
    p = Path(source.list_path)
    if not p.is_file():
        return False
    lines = p.read_text(encoding="utf-8", errors="replace").splitlines()
    return source.repo_line in lines


def ensure_key(
    source: RepositorySource,
    *,
    dry_run: bool = False,
    write_keyring: Callable[[str, Path], None] = fetch_dearmored_key,
) -> bool:
    """Absent -> Present. Returns True if the key was (or would be) written."""

    if key_present(source):
        logger.info("Signing key already present: %s", source.keyring_path)
        return False

    logger.info("Adding %s signing key...", source.name)
    p = Path(source.keyring_path)
    if dry_run:
        logger.info("Would write %s from %s", str(p), source.key_url)
        return True

    p.parent.mkdir(mode=0o755, parents=True, exist_ok=True)
    write_keyring(source.key_url, p)
    os.chmod(p, 0o644)
    return True


def ensure_repo(source: RepositorySource, *, dry_run: bool = False) -> bool:
    """Unregistered -> Registered. Returns True if the list file was (or would be) written."""

    if repo_registered(source):
        logger.info("Repository already configured: %s", source.list_path)
        return False

    logger.info("Configuring %s repository...", source.name)
    p = Path(source.list_path)
    if dry_run:
        logger.info("Would write %s", str(p))
        return True

    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(source.repo_line + "\n", encoding="utf-8")
    os.chmod(p, 0o644)
    return True


def ensure_repository(
    source: RepositorySource,
    *,
    dry_run: bool = False,
    write_keyring: Callable[[str, Path], None] = fetch_dearmored_key,
) -> Dict[str, bool]:
    """Key, then sources line. Must run before the index refresh that needs them."""

    return {
        "key_added": ensure_key(source, dry_run=dry_run, write_keyring=write_keyring),
        "repo_written": ensure_repo(source, dry_run=dry_run),
    }
