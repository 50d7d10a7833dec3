"""Hierarchy construction over a root set."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Optional

from mems.core.entry_operations import load_entries
from mems.core.path_operations import LogicalPath
from mems.core.root_operations import RootSet, parse_prefix
from mems.data_models import Entry, TreeNode, TreeWalk

logger = logging.getLogger(__name__)


def build_tree(entries: Iterable[Entry], prefix: tuple[str, ...] = ()) -> TreeNode:
    """Arrange entries into a tree rooted at ``prefix``.

    Intermediate segments without a document of their own become directory
    nodes. Children are sorted by segment name.
    """
    top = TreeNode(name=prefix[-1] if prefix else "", logical_path="/".join(prefix))
    index: dict[tuple[str, ...], TreeNode] = {prefix: top}

    for entry in entries:
        segments = entry.segments
        if segments[: len(prefix)] != prefix:
            continue
        node = top
        for depth in range(len(prefix), len(segments)):
            key = segments[: depth + 1]
            child = index.get(key)
            if child is None:
                child = TreeNode(name=segments[depth], logical_path="/".join(key))
                node.children.append(child)
                index[key] = child
            node = child
        node.entry = entry

    stack = [top]
    while stack:
        node = stack.pop()
        node.children.sort(key=lambda item: item.name)
        stack.extend(node.children)
    return top


def walk(
    root_set: RootSet,
    path_prefix: Optional[LogicalPath] = None,
    include_archived: bool = False,
) -> TreeWalk:
    """Build the mem hierarchy visible under ``path_prefix``.

    Args:
        root_set: Store roots, read with first-root-wins precedence.
        path_prefix: Segment-wise prefix; empty or ``None`` walks everything.
        include_archived: Include the ``archive/`` subtree.

    Returns:
        A :class:`TreeWalk` holding the root node and per-entry diagnostics for
        files that could not be loaded.

    Raises:
        PathError: If ``path_prefix`` is unsafe.
    """
    prefix = parse_prefix(path_prefix)
    collection = load_entries(root_set, prefix, include_archived=include_archived)
    tree = build_tree(collection.entries, prefix)
    logger.debug(
        "Walked %d mem(s) under '%s' (%d diagnostic(s))",
        len(collection.entries),
        tree.logical_path,
        len(collection.diagnostics),
    )
    return TreeWalk(root=tree, diagnostics=collection.diagnostics)
