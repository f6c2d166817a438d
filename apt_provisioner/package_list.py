"""Grouped, comment-friendly package lists.

Format (UTF-8 text)::

    [base]              # group headers are for organization only
    git
    curl # fetch tool   # inline comments are stripped
    # full-line comment

The first occurrence of a name wins; later duplicates are dropped.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from .errors import InputError

_GROUP_HEADER = re.compile(r"^\[[^\]]+\]$")
_NAME_END = re.compile(r"[\s#]")


@dataclass(frozen=True)
class PackageSpecEntry:
    name: str
    line: int = 0


@dataclass(frozen=True)
class PackageList:
    entries: Tuple[PackageSpecEntry, ...] = ()

    @classmethod
    def from_entries(cls, entries: Iterable[PackageSpecEntry]) -> "PackageList":
        seen: set[str] = set()
        kept: List[PackageSpecEntry] = []
        for e in entries:
            if e.name not in seen:
                seen.add(e.name)
                kept.append(e)
        return cls(entries=tuple(kept))

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "PackageList":
        return cls.from_entries(PackageSpecEntry(name=n) for n in names)

    @property
    def names(self) -> List[str]:
        return [e.name for e in self.entries]

    def to_text(self) -> str:
        return "".join(f"{n}\n" for n in self.names)

    def __iter__(self) -> Iterator[PackageSpecEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


def parse_line(raw: str) -> str | None:
    """Return the package name on a line, or None for blanks/comments/headers."""

    line = raw.rstrip("\r\n").strip()
    if not line or line.startswith("#"):
        return None
    if _GROUP_HEADER.match(line):
        return None
    return _NAME_END.split(line, maxsplit=1)[0] or None


def parse_package_text(text: str) -> PackageList:
    entries = []
    for lineno, raw in enumerate(text.splitlines(), start=1):
        name = parse_line(raw)
        if name is not None:
            entries.append(PackageSpecEntry(name=name, line=lineno))
    return PackageList.from_entries(entries)


def load_package_list(path: str) -> PackageList:
    p = Path(path)
    if not p.is_file():
        raise InputError(f"List file not found: {path}")
    try:
        text = p.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Cannot read list file {path}: {e}") from e
    return parse_package_text(text)
