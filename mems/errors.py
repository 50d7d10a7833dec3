"""Error kinds raised by the mems core.

Every error derives from :class:`MemError` and from the builtin exception that
callers would naturally catch for the same condition (``FileNotFoundError`` for a
missing mem, ``ValueError`` for bad input or a malformed document, ...), so code
written against plain builtins keeps working.
"""

from __future__ import annotations

from typing import Optional


class MemError(Exception):
    """Base class for all mems errors."""

    kind = "error"

    def __init__(self, message: str, *, logical_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.logical_path = logical_path

    def __str__(self) -> str:
        return self.message


class NotFoundError(MemError, FileNotFoundError):
    """A logical path does not resolve to any mem."""

    kind = "not-found"


class AlreadyExistsError(MemError, FileExistsError):
    """A mem (or store root) already exists at the requested location."""

    kind = "already-exists"


class AlreadyArchivedError(MemError, ValueError):
    """The mem already lives under the archive subtree."""

    kind = "already-archived"


class PathError(MemError, ValueError):
    """Unsafe or malformed logical path input."""

    kind = "invalid-path"


class InvalidSegmentError(PathError):
    kind = "invalid-segment"


class TraversalError(PathError):
    kind = "traversal"


class FormatError(MemError, ValueError):
    """A document on disk does not follow the header+body format."""

    kind = "format"


class MissingDelimiterError(FormatError):
    kind = "missing-delimiter"


class MissingRequiredFieldError(FormatError):
    kind = "missing-required-field"

    def __init__(self, message: str, *, field: str, logical_path: Optional[str] = None) -> None:
        super().__init__(message, logical_path=logical_path)
        self.field = field


class InvalidTimestampError(FormatError):
    kind = "invalid-timestamp"

    def __init__(self, message: str, *, field: str, logical_path: Optional[str] = None) -> None:
        super().__init__(message, logical_path=logical_path)
        self.field = field


class IoFailure(MemError, OSError):
    """An underlying filesystem error, tagged with the logical path involved."""

    kind = "io-failure"

    def __init__(self, logical_path: str, original: OSError) -> None:
        super().__init__(
            f"Filesystem error on mem '{logical_path}': {original}",
            logical_path=logical_path,
        )
        self.original = original
