"""Logical path validation, sandboxed resolution and physical root scanning."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from mems.constants import DOC_EXTENSION, TEMP_SUFFIX
from mems.data_models import PathHandle
from mems.errors import InvalidSegmentError, TraversalError

logger = logging.getLogger(__name__)

LogicalPath = Union[str, Sequence[str]]

_UNSAFE_CHARACTERS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')


def _validate_segment(segment: str, logical_path: str) -> None:
    if not segment:
        raise InvalidSegmentError(
            f"Mem path '{logical_path}' contains an empty segment.",
            logical_path=logical_path,
        )
    if segment in {".", ".."}:
        raise TraversalError(
            f"Mem path '{logical_path}' cannot contain '.' or '..' segments.",
            logical_path=logical_path,
        )
    if segment != segment.strip():
        raise InvalidSegmentError(
            f"Segment '{segment}' in mem path '{logical_path}' has surrounding whitespace.",
            logical_path=logical_path,
        )
    if segment.startswith("."):
        raise InvalidSegmentError(
            f"Segment '{segment}' in mem path '{logical_path}' cannot start with '.'.",
            logical_path=logical_path,
        )
    if _UNSAFE_CHARACTERS.search(segment):
        raise InvalidSegmentError(
            f"Segment '{segment}' in mem path '{logical_path}' contains unsafe characters.",
            logical_path=logical_path,
        )


def split_logical_path(logical_path: LogicalPath) -> tuple[str, ...]:
    """Validate a logical path and return its segments.

    Accepts ``"arch/decisions/adr-001"`` or ``["arch", "decisions", "adr-001"]``.
    A trailing ``.md`` suffix is tolerated and stripped.

    Args:
        logical_path: Caller-supplied logical path.

    Returns:
        The validated, normalized segments.

    Raises:
        InvalidSegmentError: If the path is empty or a segment is empty or
            contains unsafe characters.
        TraversalError: If the path is absolute, home-relative, drive-qualified or
            contains ``.``/``..`` segments.
    """
    if isinstance(logical_path, str):
        cleaned = logical_path.strip()
        display = cleaned
        if cleaned.startswith(("/", "\\", "~")) or re.match(r"^[A-Za-z]:", cleaned):
            raise TraversalError(
                f"Mem path '{display}' must be relative to the store root.",
                logical_path=display,
            )
        if cleaned.lower().endswith(DOC_EXTENSION):
            cleaned = cleaned[: -len(DOC_EXTENSION)]
        parts = cleaned.split("/") if cleaned else []
    else:
        parts = list(logical_path)
        display = "/".join(parts)
        if parts and parts[-1].lower().endswith(DOC_EXTENSION):
            parts[-1] = parts[-1][: -len(DOC_EXTENSION)]

    return validate_segments(parts, display)


def validate_segments(segments: Sequence[str], logical_path: str = "") -> tuple[str, ...]:
    """Apply the segment safety rules to already split segments."""
    display = logical_path or "/".join(segments)
    if not segments:
        raise InvalidSegmentError("Mem path cannot be empty.", logical_path=display)

    # Traversal is reported ahead of other segment problems.
    if any(part in {".", ".."} for part in segments):
        raise TraversalError(
            f"Mem path '{display}' cannot contain '.' or '..' segments.",
            logical_path=display,
        )
    for part in segments:
        _validate_segment(part, display)
    return tuple(segments)


def validate_discovered(segments: Sequence[str]) -> tuple[str, ...]:
    """Validate segments derived from a file found on disk.

    Besides the usual safety rules, the path must be addressable: resolving its
    logical form has to lead back to the same file name.
    """
    validated = validate_segments(segments)
    if validated[-1].lower().endswith(DOC_EXTENSION):
        raise InvalidSegmentError(
            f"Mem file '{'/'.join(segments)}{DOC_EXTENSION}' has a doubled extension.",
            logical_path="/".join(segments),
        )
    return validated


def normalize_logical_path(logical_path: LogicalPath) -> str:
    """Return the canonical slash-joined form of ``logical_path``."""
    return "/".join(split_logical_path(logical_path))


def resolve(root: Path, logical_path: LogicalPath, root_index: int = 0) -> PathHandle:
    """Map a logical path onto a document file inside ``root``.

    Validation happens before the filesystem is touched. The resolved candidate
    is then checked against the resolved root so symlinked directories cannot
    lead outside the store.

    Raises:
        InvalidSegmentError: On malformed input.
        TraversalError: On any attempt to escape ``root``.
    """
    segments = split_logical_path(logical_path)
    handle = PathHandle(root=root, root_index=root_index, segments=segments)

    candidate = handle.path.resolve(strict=False)
    store_root = root.resolve(strict=False)
    if not candidate.is_relative_to(store_root):
        raise TraversalError(
            f"Mem path '{handle.logical_path}' escapes store root {root}.",
            logical_path=handle.logical_path,
        )
    return handle


def iter_document_files(
    root: Path,
    on_error: Optional[Callable[[tuple[str, ...], OSError], None]] = None,
) -> Iterator[tuple[tuple[str, ...], Path]]:
    """Yield ``(segments, path)`` for every document file below ``root``.

    Uses an explicit worklist. Hidden entries and temp files are skipped, and a
    physical directory reached twice (through symlinks) is only scanned once.
    Segments are returned unvalidated.

    A directory that cannot be listed is passed to ``on_error`` as
    ``(segments, exc)``, like the ``onerror`` hook of :func:`os.walk`. Without a
    handler the error propagates.
    """
    if not root.is_dir():
        return

    visited: set[str] = set()
    worklist: list[tuple[Path, tuple[str, ...]]] = [(root, ())]

    while worklist:
        directory, prefix = worklist.pop()
        real = os.path.realpath(directory)
        if real in visited:
            logger.debug("Skipping already visited directory %s (%s)", directory, real)
            continue
        visited.add(real)

        try:
            children = sorted(directory.iterdir(), key=lambda item: item.name, reverse=True)
        except OSError as exc:
            if on_error is None:
                raise
            logger.warning("Could not scan directory '%s': %s", directory, exc)
            on_error(prefix, exc)
            continue

        for child in children:
            name = child.name
            if name.startswith(".") or name.endswith(TEMP_SUFFIX):
                continue
            if child.is_dir():
                worklist.append((child, prefix + (name,)))
            elif child.is_file() and name.lower().endswith(DOC_EXTENSION):
                yield prefix + (name[: -len(DOC_EXTENSION)],), child
