"""Core business logic for mem CRUD operations."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from mems.constants import ARCHIVE_DIR, TEMP_SUFFIX
from mems.core.frontmatter_operations import parse_entry, serialize_entry
from mems.core.path_operations import LogicalPath, resolve, split_logical_path
from mems.core.root_operations import RootSet
from mems.data_models import (
    Diagnostic,
    Entry,
    EntryCollection,
    EntryPatch,
    PathHandle,
    utc_now,
)
from mems.errors import (
    AlreadyExistsError,
    FormatError,
    IoFailure,
    MemError,
    NotFoundError,
)

logger = logging.getLogger(__name__)


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def normalize_tags(tags: Optional[Union[str, Iterable[str]]]) -> list[str]:
    """Strip, drop empties and dedupe tags case-sensitively, keeping first-seen order.

    A single string is treated as a comma-separated list.
    """
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")

    normalized: list[str] = []
    for tag in tags:
        cleaned = str(tag).strip()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


def derive_title(logical_path: LogicalPath) -> str:
    """Default title: the last segment with dashes and underscores as spaces."""
    return split_logical_path(logical_path)[-1].replace("-", " ").replace("_", " ")


def read_text_exact(path: Path) -> str:
    """Read UTF-8 text without newline translation."""
    with open(path, encoding="utf-8", newline="") as handle:
        return handle.read()


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temp file in the same directory.

    Readers see either the previous file or the complete new one. The temp file
    is removed if anything fails before the final rename.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=TEMP_SUFFIX)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def prune_empty_dirs(root: Path, start: Path) -> None:
    """Remove empty directories from ``start`` upwards, stopping at the root.

    The top-level archive directory is kept even when empty.
    """
    keep = {root.resolve(strict=False), (root / ARCHIVE_DIR).resolve(strict=False)}
    current = start
    while current.resolve(strict=False) not in keep and current.is_relative_to(root):
        try:
            current.rmdir()
        except OSError:
            break
        current = current.parent


def read_handle(handle: PathHandle) -> Entry:
    """Read and parse the document behind ``handle``.

    Raises:
        NotFoundError: If the file vanished.
        FormatError: If the document is malformed or not UTF-8.
        IoFailure: On any other filesystem error.
    """
    logical_path = handle.logical_path
    try:
        raw_text = read_text_exact(handle.path)
    except FileNotFoundError as exc:
        raise NotFoundError(f"Mem '{logical_path}' not found.", logical_path=logical_path) from exc
    except UnicodeDecodeError as exc:
        raise FormatError(
            f"Mem '{logical_path}' is not UTF-8 encoded and cannot be processed.",
            logical_path=logical_path,
        ) from exc
    except OSError as exc:
        raise IoFailure(logical_path, exc) from exc

    entry = parse_entry(raw_text, logical_path)
    entry.root = handle.root
    return entry


def write_handle(handle: PathHandle, entry: Entry) -> None:
    """Serialize ``entry`` atomically to ``handle``'s file."""
    try:
        atomic_write_text(handle.path, serialize_entry(entry))
    except OSError as exc:
        raise IoFailure(handle.logical_path, exc) from exc
    entry.root = handle.root


def select_existing(
    root_set: RootSet,
    logical_path: LogicalPath,
    root_index: Optional[int],
) -> PathHandle:
    """Locate an existing mem: the visible copy, or the copy in one chosen root."""
    if root_index is None:
        return root_set.resolve_read(logical_path)

    handle = root_set.resolve_write(logical_path, root_index=root_index)
    if not handle.exists():
        raise NotFoundError(
            f"Mem '{handle.logical_path}' not found in root '{root_set.label(root_index)}'.",
            logical_path=handle.logical_path,
        )
    return handle


# ==============================================================================
# ENTRY OPERATIONS
# ==============================================================================


def create_entry(
    root_set: RootSet,
    logical_path: LogicalPath,
    title: Optional[str] = None,
    body: str = "",
    tags: Optional[Union[str, Iterable[str]]] = None,
    *,
    root_index: int = 0,
    overwrite: bool = False,
    now: Optional[datetime] = None,
) -> Entry:
    """Create a new mem in the selected root.

    Args:
        root_set: Store roots; ``root_index`` selects the write target.
        logical_path: Hierarchical identifier such as ``arch/decisions/adr-001``.
        title: Title; derived from the last path segment when omitted.
        body: Markdown body, stored verbatim.
        tags: Tags (iterable or comma-separated string).
        root_index: Root receiving the new file.
        overwrite: Replace an existing mem in the target root instead of failing.
        now: Creation timestamp (defaults to the current UTC second).

    Returns:
        The created :class:`Entry`.

    Raises:
        AlreadyExistsError: If the path already resolves in any root (or, with
            ``overwrite``, exists in another root only).
        PathError: If ``logical_path`` is unsafe.
    """
    handle = root_set.resolve_write(logical_path, root_index=root_index)
    if not overwrite or not handle.exists():
        try:
            existing = root_set.resolve_read(handle.segments)
        except NotFoundError:
            existing = None
        if existing is not None and not (overwrite and existing.root_index == root_index):
            raise AlreadyExistsError(
                f"Mem '{handle.logical_path}' already exists in root '{root_set.label(existing.root_index)}'.",
                logical_path=handle.logical_path,
            )

    timestamp = (now or utc_now()).replace(microsecond=0)
    entry = Entry(
        logical_path=handle.logical_path,
        title=title if title is not None and title.strip() else derive_title(handle.segments),
        created_at=timestamp,
        updated_at=timestamp,
        tags=normalize_tags(tags),
        body=body,
    )
    write_handle(handle, entry)
    logger.info("Created mem '%s' in root '%s'", entry.logical_path, root_set.label(root_index))
    return entry


def read_entry(root_set: RootSet, logical_path: LogicalPath) -> Entry:
    """Read the visible copy of a mem.

    Raises:
        NotFoundError: If no root holds the path.
        FormatError: If the resolved file is malformed.
    """
    return read_handle(root_set.resolve_read(logical_path))


def update_entry(
    root_set: RootSet,
    logical_path: LogicalPath,
    patch: EntryPatch,
    *,
    root_index: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Entry:
    """Apply ``patch`` to an existing mem and refresh ``updated_at``.

    ``created_at`` is never changed. With ``root_index=None`` the visible copy is
    edited; otherwise the copy in that root.

    Raises:
        NotFoundError: If the mem does not exist.
        FormatError: If the stored document is malformed.
    """
    handle = select_existing(root_set, logical_path, root_index)
    entry = read_handle(handle)

    if patch.title is not None:
        entry.title = patch.title
    if patch.tags is not None:
        entry.tags = normalize_tags(patch.tags)
    if patch.body is not None:
        entry.body = patch.body
    entry.updated_at = max((now or utc_now()).replace(microsecond=0), entry.created_at)

    write_handle(handle, entry)
    logger.info(
        "Updated mem '%s' in root '%s'",
        entry.logical_path,
        root_set.label(handle.root_index),
    )
    return entry


def delete_entry(
    root_set: RootSet,
    logical_path: LogicalPath,
    *,
    root_index: Optional[int] = None,
) -> PathHandle:
    """Permanently remove a mem file and prune directories left empty.

    Returns:
        The handle of the removed file.

    Raises:
        NotFoundError: If the mem does not exist.
    """
    handle = select_existing(root_set, logical_path, root_index)
    try:
        handle.path.unlink()
    except FileNotFoundError as exc:
        raise NotFoundError(
            f"Mem '{handle.logical_path}' not found.", logical_path=handle.logical_path
        ) from exc
    except OSError as exc:
        raise IoFailure(handle.logical_path, exc) from exc

    prune_empty_dirs(handle.root, handle.path.parent)
    logger.info("Deleted mem '%s' in root '%s'", handle.logical_path, root_set.label(handle.root_index))
    return handle


def load_entries(
    root_set: RootSet,
    prefix: Optional[LogicalPath] = None,
    include_archived: bool = False,
) -> EntryCollection:
    """Read every visible mem under ``prefix``.

    A mem that cannot be read or parsed is recorded as a :class:`Diagnostic`
    and skipped so one bad file never hides the rest.
    """
    enumeration = root_set.enumerate(prefix, include_archived=include_archived)
    collection = EntryCollection(diagnostics=list(enumeration.diagnostics))

    for handle in enumeration.handles:
        try:
            checked = resolve(handle.root, handle.segments, root_index=handle.root_index)
            collection.entries.append(read_handle(checked))
        except MemError as exc:
            logger.warning("Skipping invalid mem '%s': %s", handle.logical_path, exc)
            collection.diagnostics.append(
                Diagnostic(logical_path=handle.logical_path, root=handle.root, error=exc)
            )

    return collection
