"""Concatenated markdown export of a subtree."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Optional

from mems.constants import DUMP_DIVIDER
from mems.core.path_operations import LogicalPath
from mems.core.root_operations import RootSet
from mems.core.tree_operations import walk
from mems.data_models import Entry


def render_entry(entry: Entry) -> str:
    """Render one entry with its divider block."""
    lines = [
        DUMP_DIVIDER,
        f"<!-- {entry.logical_path} -->",
        DUMP_DIVIDER,
        "",
        f"# {entry.title}",
        "",
    ]
    if entry.tags:
        lines.extend([f"Tags: {', '.join(entry.tags)}", ""])
    lines.extend([entry.body, ""])
    return "\n".join(lines) + "\n"


def dump(entries: Iterable[Entry]) -> str:
    """Concatenate entries, in the order given, into one markdown document."""
    return "".join(render_entry(entry) for entry in entries)


def dump_tree(
    root_set: RootSet,
    prefix: Optional[LogicalPath] = None,
    include_archived: bool = False,
) -> str:
    """Dump every mem under ``prefix`` in tree order."""
    return dump(walk(root_set, prefix, include_archived=include_archived).iter_entries())
