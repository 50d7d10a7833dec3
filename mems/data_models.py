"""Data models for mems, store roots and query results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Optional

from mems.constants import ARCHIVE_DIR, DOC_EXTENSION
from mems.errors import MemError


def utc_now() -> datetime:
    """Return the current UTC time truncated to whole seconds."""
    return datetime.now(timezone.utc).replace(microsecond=0)


def format_timestamp(value: datetime) -> str:
    """Render ``value`` as an RFC3339 UTC string with second precision."""
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()


def is_archive_path(logical_path: str) -> bool:
    """Return True when ``logical_path`` lives in the reserved archive subtree."""
    return logical_path.startswith(f"{ARCHIVE_DIR}/")


@dataclass
class Entry:
    """A single mem: header fields plus markdown body."""

    logical_path: str
    title: str
    created_at: datetime
    updated_at: datetime
    tags: list[str] = field(default_factory=list)
    body: str = ""
    extra: dict[str, Any] = field(default_factory=dict)
    root: Optional[Path] = field(default=None, compare=False)

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.logical_path.split("/"))

    @property
    def name(self) -> str:
        return self.segments[-1]

    @property
    def archived(self) -> bool:
        return is_archive_path(self.logical_path)

    def as_payload(self, include_body: bool = True) -> dict[str, Any]:
        """Return a serializable payload representation."""
        payload: dict[str, Any] = {
            "path": self.logical_path,
            "title": self.title,
            "created_at": format_timestamp(self.created_at),
            "updated_at": format_timestamp(self.updated_at),
            "tags": list(self.tags),
            "archived": self.archived,
            "root": str(self.root) if self.root is not None else None,
        }
        if include_body:
            payload["content"] = self.body
        if self.extra:
            payload["extra"] = {
                key: value.isoformat() if isinstance(value, (date, datetime)) else value
                for key, value in self.extra.items()
            }
        return payload


@dataclass(frozen=True)
class EntryPatch:
    """Fields an edit may change. ``None`` leaves the field untouched."""

    title: Optional[str] = None
    tags: Optional[list[str]] = None
    body: Optional[str] = None


@dataclass(frozen=True)
class PathHandle:
    """A logical path mapped onto a concrete file inside one store root."""

    root: Path
    root_index: int
    segments: tuple[str, ...]

    @property
    def logical_path(self) -> str:
        return "/".join(self.segments)

    @property
    def relative(self) -> Path:
        return Path(*self.segments[:-1], f"{self.segments[-1]}{DOC_EXTENSION}")

    @property
    def path(self) -> Path:
        return self.root / self.relative

    def exists(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class Diagnostic:
    """A per-entry failure collected during a bulk walk."""

    logical_path: str
    root: Path
    error: MemError

    @property
    def kind(self) -> str:
        return self.error.kind

    def as_payload(self) -> dict[str, Any]:
        return {
            "path": self.logical_path,
            "root": str(self.root),
            "kind": self.kind,
            "message": str(self.error),
        }


@dataclass
class Enumeration:
    """Visible logical paths across a root set, with precedence applied."""

    handles: list[PathHandle] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class EntryCollection:
    """Entries loaded by a bulk walk plus the diagnostics for those that failed."""

    entries: list[Entry] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class TreeNode:
    """One node of the mem hierarchy.

    Directory nodes carry no entry; a node may hold an entry and children at the
    same time when ``x.md`` and ``x/`` both exist.
    """

    name: str
    logical_path: str
    entry: Optional[Entry] = None
    children: list[TreeNode] = field(default_factory=list)

    @property
    def is_directory(self) -> bool:
        return self.entry is None

    def child(self, name: str) -> Optional[TreeNode]:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def iter_entries(self) -> Iterator[Entry]:
        """Yield entries in tree order: node first, then children by name."""
        stack: list[TreeNode] = [self]
        while stack:
            node = stack.pop()
            if node.entry is not None:
                yield node.entry
            stack.extend(reversed(node.children))

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "path": self.logical_path}
        if self.entry is not None:
            payload["title"] = self.entry.title
        if self.children:
            payload["children"] = [child.as_payload() for child in self.children]
        return payload


@dataclass
class TreeWalk:
    """Result of walking a root set: the hierarchy plus collected diagnostics."""

    root: TreeNode
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def iter_entries(self) -> Iterator[Entry]:
        return self.root.iter_entries()


@dataclass(frozen=True)
class Violation:
    """A single lint finding."""

    logical_path: str
    kind: str
    message: str
    severity: str = "error"

    def as_payload(self) -> dict[str, Any]:
        return {
            "path": self.logical_path,
            "kind": self.kind,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class RootMetadata:
    """Normalized metadata describing a configured store root."""

    name: str
    path: Path
    description: str
    exists: bool

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
        }
