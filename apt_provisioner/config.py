from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import InputError
from .logging_utils import DEFAULT_LOG_PATH

DEFAULT_LIST_PATH = "./packages.txt"


@dataclass(frozen=True)
class RunConfig:
    """Everything a run needs to know, fixed before the first command executes."""

    list_path: str = DEFAULT_LIST_PATH
    ignore_missing: bool = False
    dry_run: bool = False
    assume_yes: bool = False
    bootstrap_nala: bool = True
    lock_timeout_s: float = 60.0
    lock_poll_s: float = 2.0
    install_drivers: bool = True
    enable_ssh: bool = True
    disable_ufw: bool = False
    remove_apparmor: bool = False
    log_path: str = DEFAULT_LOG_PATH
    report_path: Optional[str] = None


@dataclass(frozen=True)
class FileConfig:
    raw: Dict[str, Any]

    def _section(self, name: str) -> Dict[str, Any]:
        sec = self.raw.get(name) or {}
        if not isinstance(sec, dict):
            raise InputError(f"config section '{name}' must be a mapping")
        return sec

    @property
    def list_path(self) -> Optional[str]:
        v = self._section("packages").get("list")
        return str(v) if v else None

    @property
    def ignore_missing(self) -> Optional[bool]:
        return _opt_bool(self._section("packages").get("ignore_missing"))

    @property
    def bootstrap_nala(self) -> Optional[bool]:
        return _opt_bool(self._section("packages").get("bootstrap_nala"))

    @property
    def lock_timeout_s(self) -> Optional[float]:
        return _opt_float(self._section("locks").get("timeout_s"), "locks.timeout_s")

    @property
    def lock_poll_s(self) -> Optional[float]:
        return _opt_float(self._section("locks").get("poll_s"), "locks.poll_s")

    @property
    def install_drivers(self) -> Optional[bool]:
        return _opt_bool(self._section("post_install").get("install_drivers"))

    @property
    def enable_ssh(self) -> Optional[bool]:
        return _opt_bool(self._section("post_install").get("enable_ssh"))

    @property
    def disable_ufw(self) -> Optional[bool]:
        return _opt_bool(self._section("post_install").get("disable_ufw"))

    @property
    def remove_apparmor(self) -> Optional[bool]:
        return _opt_bool(self._section("post_install").get("remove_apparmor"))

    @property
    def log_path(self) -> Optional[str]:
        v = self._section("log").get("path")
        return str(v) if v else None


def _opt_bool(v: Any) -> Optional[bool]:
    return None if v is None else bool(v)


def _opt_float(v: Any, key: str) -> Optional[float]:
    if v is None:
        return None
    try:
        return float(v)
    except (TypeError, ValueError) as e:
        raise InputError(f"config value {key} must be a number, got {v!r}") from e


def load_config_file(path: str) -> FileConfig:
    p = Path(path)
    if not p.is_file():
        raise InputError(f"Config file not found: {path}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise InputError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise InputError(f"Config file must contain a mapping/object: {path}")
    return FileConfig(raw=raw)


def build_run_config(file_cfg: Optional[FileConfig] = None, **overrides: Any) -> RunConfig:
    """Merge defaults < config file < explicit overrides (None means "not given")."""

    values: Dict[str, Any] = {}
    names = [f.name for f in fields(RunConfig)]
    if file_cfg is not None:
        for name in names:
            v = getattr(file_cfg, name, None)
            if v is not None:
                values[name] = v

    for k, v in overrides.items():
        if k not in names:
            raise TypeError(f"Unknown run config field: {k}")
        if v is not None:
            values[k] = v

    return RunConfig(**values)
