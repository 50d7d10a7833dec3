"""Read-only structural validation of mems."""

from __future__ import annotations

import logging
import posixpath
import re
from collections.abc import Iterable
from typing import Optional

from mems.constants import DOC_EXTENSION
from mems.core.entry_operations import load_entries
from mems.core.path_operations import LogicalPath, split_logical_path
from mems.core.root_operations import RootSet
from mems.data_models import Diagnostic, Entry, Violation
from mems.errors import FormatError, PathError

logger = logging.getLogger(__name__)

MALFORMED_HEADER = "malformed-header"
UNREADABLE = "unreadable"
TIMESTAMP_ORDER = "timestamp-order"
EMPTY_TITLE = "empty-title"
DUPLICATE_TAG = "duplicate-tag"
UNSAFE_PATH = "unsafe-path"
EMPTY_BODY = "empty-body"
BROKEN_LINK = "broken-link"

_MARKDOWN_LINK = re.compile(r"\[[^\]]*\]\(([^)\s]+)\)")


def _diagnostic_violation(diagnostic: Diagnostic) -> Violation:
    if isinstance(diagnostic.error, PathError):
        kind = UNSAFE_PATH
    elif isinstance(diagnostic.error, FormatError):
        kind = MALFORMED_HEADER
    else:
        kind = UNREADABLE
    return Violation(logical_path=diagnostic.logical_path, kind=kind, message=str(diagnostic.error))


def _broken_links(entry: Entry, known_paths: set[str]) -> list[str]:
    """Relative ``.md`` links in the body whose target is not a known mem."""
    broken: list[str] = []
    base = posixpath.dirname(entry.logical_path)
    for match in _MARKDOWN_LINK.finditer(entry.body):
        link = match.group(1).split("#", 1)[0]
        if "://" in link or link.startswith(("/", "mailto:")) or not link.lower().endswith(DOC_EXTENSION):
            continue
        target = posixpath.normpath(posixpath.join(base, link[: -len(DOC_EXTENSION)]))
        if target not in known_paths:
            broken.append(link)
    return broken


def lint_entry(entry: Entry, known_paths: Optional[set[str]] = None) -> list[Violation]:
    """Check one entry; ``known_paths`` enables the broken-link check."""
    path = entry.logical_path
    violations: list[Violation] = []

    try:
        canonical = "/".join(split_logical_path(path))
    except PathError as exc:
        violations.append(Violation(path, UNSAFE_PATH, str(exc)))
    else:
        if canonical != path:
            violations.append(
                Violation(path, UNSAFE_PATH, f"Mem path '{path}' is not in canonical form '{canonical}'.")
            )

    if entry.created_at > entry.updated_at:
        violations.append(
            Violation(
                path,
                TIMESTAMP_ORDER,
                f"created-at ({entry.created_at.isoformat()}) is later than "
                f"updated-at ({entry.updated_at.isoformat()}).",
            )
        )

    if not entry.title.strip():
        violations.append(Violation(path, EMPTY_TITLE, "Title is empty."))

    seen: set[str] = set()
    for tag in entry.tags:
        if tag in seen:
            violations.append(Violation(path, DUPLICATE_TAG, f"Tag '{tag}' appears more than once."))
        seen.add(tag)

    if not entry.body.strip():
        violations.append(Violation(path, EMPTY_BODY, "Body is empty.", severity="warning"))

    if known_paths is not None:
        for link in _broken_links(entry, known_paths):
            violations.append(
                Violation(path, BROKEN_LINK, f"Broken link to '{link}'.", severity="warning")
            )

    return violations


def lint(entries: Iterable[Entry], diagnostics: Iterable[Diagnostic] = ()) -> list[Violation]:
    """Validate entries (and bulk-walk diagnostics) without touching any file.

    Args:
        entries: Loaded entries to check.
        diagnostics: Failures collected while loading; each becomes a violation.

    Returns:
        Violations ordered by logical path, diagnostics first for each path.
    """
    entries = list(entries)
    known_paths = {entry.logical_path for entry in entries}

    violations = [_diagnostic_violation(diagnostic) for diagnostic in diagnostics]
    for entry in entries:
        violations.extend(lint_entry(entry, known_paths))

    violations.sort(key=lambda violation: violation.logical_path)
    return violations


def lint_store(
    root_set: RootSet,
    prefix: Optional[LogicalPath] = None,
    include_archived: bool = True,
) -> tuple[list[Violation], int]:
    """Walk the root set and lint everything found.

    Returns:
        ``(violations, checked)`` where ``checked`` counts the files examined.
    """
    collection = load_entries(root_set, prefix, include_archived=include_archived)
    violations = lint(collection.entries, collection.diagnostics)
    checked = len(collection.entries) + len(collection.diagnostics)
    logger.info("Linted %d mem(s): %d violation(s)", checked, len(violations))
    return violations, checked
