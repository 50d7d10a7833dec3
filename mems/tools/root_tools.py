"""MCP tools for store root management."""

import logging
from pathlib import Path
from typing import Any

from mcp.server.fastmcp import Context

from mems.server import mcp
from mems.models import ListRootsInput, SetActiveRootsInput, InitRootInput
from mems.config import get_store_configuration
from mems.constants import STORE_DIRNAME
from mems.core.root_operations import init_root
from mems.errors import NotFoundError
from mems.session import (
    set_active_roots as set_active_roots_session,
    get_active_roots,
    get_session_key,
)

logger = logging.getLogger(__name__)


@mcp.tool()
async def list_mem_roots(
    input: ListRootsInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """List configured store roots and current session state.

    Returns metadata for all configured roots, the default precedence order
    and the root set active for this session. Primary entry point for root
    discovery.

    Args:
        input (ListRootsInput): Validated input (no fields required)
        ctx (Context, optional): FastMCP context for session state

    Returns:
        {
            "default": list[str],   # Default root names, highest precedence first
            "active": list[str],    # Roots selected for this session (or None)
            "stale_days": int,
            "roots": [
                {"name": str, "path": str, "description": str, "exists": bool}
            ]
        }

    Examples:
        - Use when: Starting a conversation, need to see which stores exist
        - Don't use: Already know the roots and just need to switch

    Error Handling:
        - Invalid config format → Error describing expected YAML structure
        - No config and no .mems/ found → Empty root list, suggest init_mem_root()
    """
    active = get_active_roots(ctx) if ctx is not None else None

    try:
        configuration = get_store_configuration()
    except NotFoundError as exc:
        logger.info("No store roots available: %s", exc)
        return {"default": [], "active": active, "roots": [], "message": str(exc)}

    payload = configuration.as_payload()
    payload["active"] = active
    return payload


@mcp.tool()
async def set_active_roots(
    input: SetActiveRootsInput,
    ctx: Context,
) -> dict[str, Any]:
    """Set the active root set for this conversation session.

    All subsequent tool calls that omit ``roots`` use this set. Earlier
    roots shadow later ones when the same mem exists in several.

    Args:
        input (SetActiveRootsInput): Validated input containing:
            - roots (list[str]): Configured root names or store directories,
                highest precedence first

    Returns:
        {"roots": [{"label": str, "path": str}], "status": "active"}

    Examples:
        - Use when: User says "use the project and shared notes"
        - Don't use: Single operation against another store (pass roots directly)

    Error Handling:
        - Unknown root name that is not a directory → Error, suggest list_mem_roots()
    """
    root_set = set_active_roots_session(ctx, input.roots)
    logger.info("Active roots for session %s set to %s", get_session_key(ctx), input.roots)
    return {
        "roots": [
            {"label": root_set.label(index), "path": str(root)}
            for index, root in enumerate(root_set)
        ],
        "status": "active",
    }


@mcp.tool()
async def init_mem_root(
    input: InitRootInput,
    ctx: Context | None = None,
) -> dict[str, Any]:
    """Create a new, empty store root (with its archive/ directory).

    Args:
        input (InitRootInput): Validated input containing:
            - path (str, optional): Directory to create
                Default: .mems/ in the server's working directory

    Returns:
        {"path": str, "status": "initialized"}

    Error Handling:
        - Directory already exists → Error with the path
        - Filesystem permission error → Error with details
    """
    target = Path(input.path) if input.path else Path.cwd() / STORE_DIRNAME
    created = init_root(target)
    # Discovery may now find the new root
    get_store_configuration.cache_clear()
    return {"path": str(created), "status": "initialized"}
