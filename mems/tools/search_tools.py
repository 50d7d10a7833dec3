"""Listing, search and maintenance MCP tools.

This module provides MCP tool wrappers for store-wide operations:
- List mems
- Show the mem hierarchy
- Search by text and tag
- Filter by tags
- Report stale mems
- Lint the store
- Dump mems as one markdown document
"""
from __future__ import annotations

import logging
from itertools import islice
from typing import Any

from mcp.server.fastmcp import Context

from mems.server import mcp
from mems.session import resolve_root_set
from mems.config import get_store_configuration
from mems.constants import DEFAULT_STALE_DAYS
from mems.errors import NotFoundError
from mems.models import (
    ListMemsInput,
    MemTreeInput,
    FindMemsInput,
    FindMemsByTagInput,
    StaleMemsInput,
    LintMemsInput,
    DumpMemsInput,
)
from mems.core.dump_operations import dump
from mems.core.entry_operations import load_entries
from mems.core.lint_operations import lint_store
from mems.core.search_operations import search, search_by_tags
from mems.core.staleness_operations import find_stale
from mems.core.tree_operations import walk

logger = logging.getLogger(__name__)


def _configured_stale_days() -> int:
    try:
        return get_store_configuration().stale_days
    except NotFoundError:
        return DEFAULT_STALE_DAYS


# ==============================================================================
# LISTING
# ==============================================================================

@mcp.tool()
async def list_mems(
    input: ListMemsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List mems (metadata only) across the root set, ordered by path.

    Mems that cannot be read are reported under ``diagnostics`` instead of
    failing the whole listing.

    Args:
        input (ListMemsInput): Validated input containing:
            - prefix (str, optional): Only list mems under this path
            - include_archived (bool): Include archive/. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {
            "count": int,
            "mems": [{"path", "title", "created_at", "updated_at", "tags", "archived", "root"}],
            "diagnostics": [{"path", "root", "kind", "message"}]
        }

    Token Cost: ~40 tokens per mem
    """
    root_set = resolve_root_set(input.roots, ctx)
    collection = load_entries(root_set, input.prefix, include_archived=input.include_archived)
    return {
        "count": len(collection),
        "mems": [entry.as_payload(include_body=False) for entry in collection],
        "diagnostics": [diagnostic.as_payload() for diagnostic in collection.diagnostics],
    }


@mcp.tool()
async def mem_tree(
    input: MemTreeInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Show the mem hierarchy as nested nodes.

    Directory nodes have no title; a node can hold a mem and children when
    both ``x.md`` and ``x/`` exist.

    Args:
        input (MemTreeInput): Validated input containing:
            - prefix (str, optional): Subtree to show
            - include_archived (bool): Include archive/. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {
            "tree": {"name": str, "path": str, "title": str?, "children": [...]},
            "diagnostics": [...]
        }
    """
    root_set = resolve_root_set(input.roots, ctx)
    result = walk(root_set, input.prefix, include_archived=input.include_archived)
    return {
        "tree": result.root.as_payload(),
        "diagnostics": [diagnostic.as_payload() for diagnostic in result.diagnostics],
    }


# ==============================================================================
# SEARCH
# ==============================================================================

@mcp.tool()
async def find_mems(
    input: FindMemsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Search mems by tag and text.

    Mems carrying the query as an exact tag come first, then mems whose
    title, content or tags contain it (case-insensitive). Each group is
    ordered by path.

    Args:
        input (FindMemsInput): Validated input containing:
            - query (str): Text or tag
            - limit (int, optional): Maximum results
            - include_archived (bool): Search archive/ too. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {
            "query": str,
            "count": int,
            "results": [{"path", "title", "tags", "match": "tag" | "text", ...}],
            "diagnostics": [{"path", "root", "kind", "message"}]
        }

    Examples:
        - Use when: Looking for mems about a topic
        - Workflow: find_mems() → show_mem()
    """
    root_set = resolve_root_set(input.roots, ctx)
    collection = load_entries(root_set, include_archived=input.include_archived)
    matches = search(collection, input.query)
    results = [match.as_payload() for match in islice(matches, input.limit)]
    return {
        "query": input.query,
        "count": len(results),
        "results": results,
        "diagnostics": [diagnostic.as_payload() for diagnostic in collection.diagnostics],
    }


@mcp.tool()
async def find_mems_by_tag(
    input: FindMemsByTagInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Find mems by tags (case-insensitive, AND/OR).

    Args:
        input (FindMemsByTagInput): Validated input containing:
            - tags (list[str]): Tags to look for
            - match_all (bool): Require all tags. Default: False
            - include_archived (bool): Include archive/. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"tags": list[str], "match_all": bool, "count": int, "mems": [...], "diagnostics": [...]}
    """
    root_set = resolve_root_set(input.roots, ctx)
    collection = load_entries(root_set, include_archived=input.include_archived)
    matches = search_by_tags(collection, input.tags, match_all=input.match_all)
    return {
        "tags": input.tags,
        "match_all": input.match_all,
        "count": len(matches),
        "mems": [entry.as_payload(include_body=False) for entry in matches],
        "diagnostics": [diagnostic.as_payload() for diagnostic in collection.diagnostics],
    }


# ==============================================================================
# MAINTENANCE
# ==============================================================================

@mcp.tool()
async def stale_mems(
    input: StaleMemsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List mems not updated within a number of days, oldest first.

    Args:
        input (StaleMemsInput): Validated input containing:
            - days (int, optional): Threshold (default: configured stale_days)
            - prefix (str, optional): Only check mems under this path
            - include_archived (bool): Include archive/. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"days": int, "count": int, "mems": [...], "diagnostics": [...]}

    Examples:
        - Use when: Reviewing documentation that may be out of date
        - Workflow: stale_mems() → show_mem() → edit_mem() or archive_mem()
    """
    days = input.days if input.days is not None else _configured_stale_days()
    root_set = resolve_root_set(input.roots, ctx)
    collection = load_entries(root_set, input.prefix, include_archived=input.include_archived)
    stale = find_stale(collection, days, include_archived=input.include_archived)
    return {
        "days": days,
        "count": len(stale),
        "mems": [entry.as_payload(include_body=False) for entry in stale],
        "diagnostics": [diagnostic.as_payload() for diagnostic in collection.diagnostics],
    }


@mcp.tool()
async def lint_mems(
    input: LintMemsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Check mems for malformed headers and other problems (read-only).

    Reports unreadable files, missing or invalid header fields, created-at
    after updated-at, empty titles, duplicate tags, unsafe file names, empty
    bodies and links to missing mems. Nothing is modified.

    Args:
        input (LintMemsInput): Validated input containing:
            - prefix (str, optional): Only lint mems under this path
            - include_archived (bool): Lint archive/ too. Default: True
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {
            "checked": int,
            "errors": int,
            "warnings": int,
            "violations": [{"path", "kind", "message", "severity"}]
        }
    """
    root_set = resolve_root_set(input.roots, ctx)
    violations, checked = lint_store(root_set, input.prefix, include_archived=input.include_archived)
    errors = sum(1 for violation in violations if violation.severity == "error")
    return {
        "checked": checked,
        "errors": errors,
        "warnings": len(violations) - errors,
        "violations": [violation.as_payload() for violation in violations],
    }


@mcp.tool()
async def dump_mems(
    input: DumpMemsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Concatenate mems into a single markdown document in tree order.

    Each mem is introduced by a comment block naming its path, followed by
    its title as a heading, its tags and its content.

    Args:
        input (DumpMemsInput): Validated input containing:
            - prefix (str, optional): Only dump mems under this path
            - include_archived (bool): Include archive/. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"count": int, "content": str, "diagnostics": [...]}

    Token Cost: Proportional to the size of every dumped mem. Narrow with prefix.
    """
    root_set = resolve_root_set(input.roots, ctx)
    result = walk(root_set, input.prefix, include_archived=input.include_archived)
    entries = list(result.iter_entries())
    return {
        "count": len(entries),
        "content": dump(entries),
        "diagnostics": [diagnostic.as_payload() for diagnostic in result.diagnostics],
    }
