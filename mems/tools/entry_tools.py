"""Mem management MCP tools.

This module provides MCP tool wrappers for single-mem operations:
- Add a mem
- Show a mem
- Edit title, tags or content
- Remove a mem
- Archive a mem

All tools delegate to core operations in mems.core.entry_operations and
mems.core.archive_operations.
"""
from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import Context

from mems.server import mcp
from mems.session import resolve_root_set
from mems.models import (
    AddMemInput,
    ShowMemInput,
    EditMemInput,
    RemoveMemInput,
    ArchiveMemInput,
)
from mems.core.archive_operations import archive_entry
from mems.core.entry_operations import (
    create_entry,
    read_entry,
    update_entry,
    delete_entry,
)
from mems.data_models import EntryPatch


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

# Returns header fields and body of the visible copy.
@mcp.tool()
async def show_mem(
    input: ShowMemInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Show a mem: title, timestamps, tags and full markdown content.

    Reads the first copy found across the root set (earlier roots win).

    Args:
        input (ShowMemInput): Validated input containing:
            - path (str): Logical mem path (without .md extension)
                Examples: "arch/decisions/adr-001", "guides/setup"
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {
            "path": str,
            "title": str,
            "created_at": str,   # RFC3339 UTC
            "updated_at": str,
            "tags": list[str],
            "archived": bool,
            "root": str,
            "content": str
        }

    Examples:
        - Use when: Need the full content of a known mem
        - Workflow: find_mems() → show_mem()
        - Don't use: Browsing → Use list_mems() or mem_tree()

    Error Handling:
        - ValidationError: Empty path or path traversal attempt
        - Mem not found → Error with path, use find_mems()
        - Malformed header → Error naming the missing or invalid field
    """
    root_set = resolve_root_set(input.roots, ctx)
    return read_entry(root_set, input.path).as_payload()


# ==============================================================================
# CREATE OPERATIONS
# ==============================================================================

# Writes a new file in the chosen root. Fails if any root already has the path.
@mcp.tool()
async def add_mem(
    input: AddMemInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create a new mem (fails if it exists in any root).

    Parent directories are created automatically. The title defaults to the
    last path segment with dashes and underscores turned into spaces.

    Args:
        input (AddMemInput): Validated input containing:
            - path (str): Logical mem path (without .md extension)
            - content (str): Markdown body (can be empty)
            - title (str, optional): Title
            - tags (list[str], optional): Tags
            - root_index (int): Root receiving the file. Default: 0
            - force (bool): Overwrite an existing mem in that root. Default: False
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"path": str, "title": str, "root": str, "status": "created"}

    Examples:
        - Use when: Recording a new decision, guide or note
        - Don't use: Mem exists → Use edit_mem()

    Error Handling:
        - ValidationError: Invalid path or path traversal attempt
        - Mem exists → Error naming the root that holds it
    """
    root_set = resolve_root_set(input.roots, ctx)
    entry = create_entry(
        root_set,
        input.path,
        title=input.title,
        body=input.content,
        tags=input.tags,
        root_index=input.root_index,
        overwrite=input.force,
    )
    return {
        "path": entry.logical_path,
        "title": entry.title,
        "root": str(entry.root),
        "status": "created",
    }


# ==============================================================================
# UPDATE OPERATIONS
# ==============================================================================

# Changes only the supplied fields and refreshes updated-at.
@mcp.tool()
async def edit_mem(
    input: EditMemInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Edit a mem's title, tags or content.

    Fields left out are untouched. ``created-at`` is preserved and
    ``updated-at`` is set to the current time.

    Args:
        input (EditMemInput): Validated input containing:
            - path (str): Logical mem path
            - content (str, optional): Replacement markdown body
            - title (str, optional): Replacement title
            - tags (list[str], optional): Replacement tags ([] clears them)
            - root_index (int, optional): Edit the copy in this root
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"path": str, "updated_at": str, "root": str, "status": "updated"}

    Error Handling:
        - ValidationError: Nothing to edit, invalid path
        - Mem not found → Error, suggest add_mem()
    """
    root_set = resolve_root_set(input.roots, ctx)
    patch = EntryPatch(title=input.title, tags=input.tags, body=input.content)
    entry = update_entry(root_set, input.path, patch, root_index=input.root_index)
    payload = entry.as_payload(include_body=False)
    return {
        "path": payload["path"],
        "updated_at": payload["updated_at"],
        "root": payload["root"],
        "status": "updated",
    }


# Moves the file to archive/<path> in the same root.
@mcp.tool()
async def archive_mem(
    input: ArchiveMemInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Archive a mem by moving it to archive/<path> in its root.

    Title, tags, content and created-at are kept; updated-at is refreshed.
    Archived mems are hidden from listings unless include_archived is set.

    Args:
        input (ArchiveMemInput): Validated input containing:
            - path (str): Logical mem path
            - root_index (int, optional): Archive the copy in this root
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"path": str, "archived_path": str, "root": str, "status": "archived"}

    Error Handling:
        - Mem not found → Error with path
        - Path already under archive/ → Error
        - Archive location taken → Error with archived path
    """
    root_set = resolve_root_set(input.roots, ctx)
    entry = archive_entry(root_set, input.path, root_index=input.root_index)
    return {
        "path": input.path,
        "archived_path": entry.logical_path,
        "root": str(entry.root),
        "status": "archived",
    }


# ==============================================================================
# DELETE OPERATIONS
# ==============================================================================

# Removes the file and any directories left empty.
@mcp.tool()
async def remove_mem(
    input: RemoveMemInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Delete a mem permanently.

    Cannot be undone through this tool. Prefer archive_mem() unless the
    user explicitly asks to delete. Always confirm with the user first.

    Args:
        input (RemoveMemInput): Validated input containing:
            - path (str): Logical mem path
            - root_index (int, optional): Remove the copy in this root
            - roots (list[str], optional): Root set (omit to use active roots)

    Returns:
        {"path": str, "file": str, "status": "deleted"}

    Error Handling:
        - Mem not found → Error, use find_mems() to locate it
        - Filesystem permission error → Error with details
    """
    root_set = resolve_root_set(input.roots, ctx)
    handle = delete_entry(root_set, input.path, root_index=input.root_index)
    return {"path": handle.logical_path, "file": str(handle.path), "status": "deleted"}
