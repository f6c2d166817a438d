"""Shared pytest fixtures for apt-provisioner tests."""

from typing import Dict, Iterable, List, Optional

import pytest

from apt_provisioner.config import RunConfig
from apt_provisioner.repo_bootstrap import RepositorySource


class FakePackageManager:
    """In-memory PackageManager; records every mutating call."""

    name = "fake"

    def __init__(
        self,
        *,
        indexed: Iterable[str] = (),
        candidates: Optional[Dict[str, str]] = None,
        installed: Iterable[str] = (),
        dry_run: bool = False,
    ):
        self.indexed = set(indexed)
        self.candidates = dict(candidates or {})
        self.installed = set(installed)
        self.dry_run = dry_run
        self.calls: List[tuple] = []

    @property
    def mutating_calls(self):
        return [c for c in self.calls if c[0] != "heal"]

    def heal(self):
        self.calls.append(("heal",))

    def refresh_index(self):
        self.calls.append(("refresh_index",))

    def install_all(self, names):
        names = list(names)
        if not names:
            return
        self.calls.append(("install_all", names))
        if not self.dry_run:
            self.installed.update(names)

    def query_exists(self, name):
        return name in self.indexed

    def query_candidate(self, name):
        return self.candidates.get(name)

    def query_installed(self, name):
        return name in self.installed

    def full_upgrade(self):
        self.calls.append(("full_upgrade",))

    def autoremove(self, *, purge=True):
        self.calls.append(("autoremove", purge))

    def purge(self, names):
        self.calls.append(("purge", list(names)))


@pytest.fixture
def fake_manager():
    return FakePackageManager(
        indexed={"git", "vim", "curl"},
        candidates={"gnupg": "2.4.4-2ubuntu17"},
    )


@pytest.fixture
def run_config(tmp_path):
    return RunConfig(list_path=str(tmp_path / "packages.txt"), assume_yes=True)


@pytest.fixture
def repo_source(tmp_path):
    keyring = tmp_path / "keyrings" / "example.gpg"
    return RepositorySource(
        name="Example",
        key_url="https://example.invalid/key.pub",
        keyring_path=str(keyring),
        list_path=str(tmp_path / "sources.list.d" / "example.list"),
        repo_line=f"deb [arch=amd64 signed-by={keyring}] https://example.invalid/deb/ stable main",
    )


@pytest.fixture
def fake_keyring_writer():
    """write_keyring replacement that counts downloads."""

    calls = []

    def _write(url, path):
        calls.append(url)
        path.write_bytes(b"\x99\x01\x0dfake-keyring")

    _write.calls = calls
    return _write
