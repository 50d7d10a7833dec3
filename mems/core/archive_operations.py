"""Soft deletion: relocating mems into the archive subtree."""

from __future__ import annotations

import errno
import logging
import os
from datetime import datetime
from typing import Optional

from mems.constants import ARCHIVE_DIR
from mems.core.entry_operations import (
    atomic_write_text,
    prune_empty_dirs,
    read_handle,
    read_text_exact,
    select_existing,
    write_handle,
)
from mems.core.frontmatter_operations import serialize_entry
from mems.core.path_operations import LogicalPath, resolve, split_logical_path
from mems.core.root_operations import RootSet
from mems.data_models import Entry, PathHandle, is_archive_path, utc_now
from mems.errors import AlreadyArchivedError, AlreadyExistsError, IoFailure

logger = logging.getLogger(__name__)


def archive_path_for(logical_path: LogicalPath) -> str:
    """Return the archive location of ``logical_path``."""
    return "/".join((ARCHIVE_DIR, *split_logical_path(logical_path)))


def _copy_then_delete(source: PathHandle, target: PathHandle, entry: Entry) -> None:
    """Fallback relocation when a rename cannot cross filesystems.

    The original stays in place until the copy has been read back and matches.
    """
    content = serialize_entry(entry)
    try:
        atomic_write_text(target.path, content)
        if read_text_exact(target.path) != content:
            target.path.unlink()
            raise OSError(errno.EIO, "archived copy does not match the original", str(target.path))
        source.path.unlink()
    except OSError as exc:
        raise IoFailure(source.logical_path, exc) from exc


def archive_entry(
    root_set: RootSet,
    logical_path: LogicalPath,
    *,
    root_index: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Entry:
    """Move a mem to ``archive/<logical_path>`` within the same root.

    Title, tags, body and ``created_at`` are preserved and ``updated_at`` is
    refreshed. The file is moved with a rename, so it is either fully at the
    new location or untouched at the old one.

    Args:
        root_set: Store roots.
        logical_path: Mem to archive.
        root_index: Root holding the copy to archive; defaults to the visible one.
        now: Timestamp recorded as ``updated_at``.

    Returns:
        The archived :class:`Entry` at its new logical path.

    Raises:
        NotFoundError: If the mem does not exist.
        AlreadyArchivedError: If ``logical_path`` is already in the archive.
        AlreadyExistsError: If the archive location is taken in that root.
        FormatError: If the stored document is malformed.
    """
    segments = split_logical_path(logical_path)
    normalized = "/".join(segments)
    if is_archive_path(normalized):
        raise AlreadyArchivedError(f"Mem '{normalized}' is already archived.", logical_path=normalized)

    source = select_existing(root_set, segments, root_index)
    entry = read_handle(source)

    target = resolve(source.root, archive_path_for(segments), root_index=source.root_index)
    if target.exists():
        raise AlreadyExistsError(
            f"Mem '{target.logical_path}' already exists in root '{root_set.label(source.root_index)}'.",
            logical_path=target.logical_path,
        )

    entry.logical_path = target.logical_path
    entry.updated_at = max((now or utc_now()).replace(microsecond=0), entry.created_at)

    try:
        target.path.parent.mkdir(parents=True, exist_ok=True)
        os.rename(source.path, target.path)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise IoFailure(normalized, exc) from exc
        logger.info("Cross-device archive of '%s'; copying before removal", normalized)
        _copy_then_delete(source, target, entry)
    else:
        write_handle(target, entry)

    prune_empty_dirs(source.root, source.path.parent)
    logger.info(
        "Archived mem '%s' to '%s' in root '%s'",
        normalized,
        target.logical_path,
        root_set.label(source.root_index),
    )
    entry.root = source.root
    return entry
