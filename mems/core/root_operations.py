"""Store roots: discovery, initialization and federated resolution."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Iterator, Optional, Union

from mems.constants import ARCHIVE_DIR, STORE_DIRNAME
from mems.core.path_operations import (
    LogicalPath,
    iter_document_files,
    resolve,
    split_logical_path,
    validate_discovered,
)
from mems.data_models import Diagnostic, Enumeration, PathHandle
from mems.errors import AlreadyExistsError, IoFailure, NotFoundError, PathError

logger = logging.getLogger(__name__)


def discover_root(start: Optional[Path] = None) -> Path:
    """Find a ``.mems`` directory in ``start`` or any of its parents.

    Raises:
        NotFoundError: If no store directory exists up to the filesystem root.
    """
    current = (start or Path.cwd()).resolve(strict=False)
    for candidate in (current, *current.parents):
        store = candidate / STORE_DIRNAME
        if store.is_dir():
            return store
    raise NotFoundError(
        f"No {STORE_DIRNAME}/ directory found from {current} upwards (initialize one first)."
    )


def init_root(path: Path) -> Path:
    """Create a new store root with its archive subtree.

    Raises:
        AlreadyExistsError: If ``path`` already exists.
    """
    path = Path(path).expanduser()
    if path.exists():
        raise AlreadyExistsError(f"Store root {path} already exists.")
    (path / ARCHIVE_DIR).mkdir(parents=True)
    logger.info("Initialized store root %s", path)
    return path.resolve(strict=False)


def parse_prefix(prefix: Optional[LogicalPath]) -> tuple[str, ...]:
    """Validate an optional listing prefix; empty or ``None`` selects everything."""
    if prefix is None:
        return ()
    if isinstance(prefix, str):
        prefix = prefix.strip().strip("/")
        if not prefix:
            return ()
    elif not prefix:
        return ()
    return split_logical_path(prefix)


class RootSet:
    """Ordered collection of store roots with first-match-wins reads.

    Reads resolve against roots in order and the first root holding a path
    shadows the rest. Writes always target one explicitly selected root.
    """

    def __init__(self, roots: Sequence[Union[str, Path]], labels: Optional[Sequence[str]] = None) -> None:
        if not roots:
            raise ValueError("A root set needs at least one store root.")
        self.roots: tuple[Path, ...] = tuple(
            Path(root).expanduser().resolve(strict=False) for root in roots
        )
        if labels is None:
            labels = [str(root) for root in self.roots]
        if len(labels) != len(self.roots):
            raise ValueError("Root labels must match the number of roots.")
        self.labels: tuple[str, ...] = tuple(labels)

    @classmethod
    def from_paths(cls, paths: Iterable[Union[str, Path]]) -> RootSet:
        return cls(list(paths))

    @classmethod
    def discover(cls, start: Optional[Path] = None) -> RootSet:
        return cls([discover_root(start)])

    def __len__(self) -> int:
        return len(self.roots)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.roots)

    def __repr__(self) -> str:
        return f"RootSet({[str(root) for root in self.roots]!r})"

    def root(self, root_index: int = 0) -> Path:
        """Return the root at ``root_index``.

        Raises:
            NotFoundError: If the index is outside the set.
        """
        if not 0 <= root_index < len(self.roots):
            raise NotFoundError(
                f"Root index {root_index} is out of range for {len(self.roots)} root(s)."
            )
        return self.roots[root_index]

    def label(self, root_index: int) -> str:
        return self.labels[root_index]

    def resolve_read(self, logical_path: LogicalPath) -> PathHandle:
        """Return the handle of the first root that holds ``logical_path``.

        Raises:
            PathError: If the path is unsafe (checked before any lookup).
            NotFoundError: If no root contains the path.
        """
        segments = split_logical_path(logical_path)
        for index, root in enumerate(self.roots):
            handle = resolve(root, segments, root_index=index)
            if handle.exists():
                return handle
        raise NotFoundError(
            f"Mem '{'/'.join(segments)}' not found.",
            logical_path="/".join(segments),
        )

    def resolve_write(self, logical_path: LogicalPath, root_index: int = 0) -> PathHandle:
        """Return the target location in the selected root without checking existence."""
        return resolve(self.root(root_index), logical_path, root_index=root_index)

    def enumerate(
        self,
        prefix: Optional[LogicalPath] = None,
        include_archived: bool = False,
    ) -> Enumeration:
        """List the logical paths visible across all roots.

        A path present in several roots is reported once, attributed to the
        earliest root. Files whose names break the segment rules are reported as
        diagnostics instead of handles.

        Args:
            prefix: Optional segment-wise prefix (``"arch"`` matches
                ``"arch/x"`` but not ``"architecture"``).
            include_archived: Include the ``archive/`` subtree. Implied when the
                prefix itself points into the archive.
        """
        prefix_segments = parse_prefix(prefix)
        if prefix_segments and prefix_segments[0] == ARCHIVE_DIR:
            include_archived = True

        visible: dict[tuple[str, ...], PathHandle] = {}
        result = Enumeration()

        for index, root in enumerate(self.roots):

            def report_unreadable(segments: tuple[str, ...], exc: OSError, root: Path = root) -> None:
                overlap = min(len(segments), len(prefix_segments))
                if segments[:overlap] != prefix_segments[:overlap]:
                    return
                if not include_archived and segments[:1] == (ARCHIVE_DIR,):
                    return
                logical = "/".join(segments)
                result.diagnostics.append(
                    Diagnostic(logical_path=logical, root=root, error=IoFailure(logical, exc))
                )

            for raw_segments, path in iter_document_files(root, on_error=report_unreadable):
                if raw_segments[: len(prefix_segments)] != prefix_segments:
                    continue
                logical = "/".join(raw_segments)
                if not include_archived and len(raw_segments) > 1 and raw_segments[0] == ARCHIVE_DIR:
                    continue

                try:
                    segments = validate_discovered(raw_segments)
                except PathError as exc:
                    logger.warning("Skipping unsafe mem file %s: %s", path, exc)
                    result.diagnostics.append(Diagnostic(logical_path=logical, root=root, error=exc))
                    continue

                if segments in visible:
                    logger.debug(
                        "Mem '%s' in %s is shadowed by %s",
                        logical,
                        root,
                        visible[segments].root,
                    )
                    continue
                visible[segments] = PathHandle(root=root, root_index=index, segments=segments)

        result.handles = [visible[key] for key in sorted(visible)]
        return result
