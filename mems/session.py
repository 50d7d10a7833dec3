"""Session state management for active root selection."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from mcp.server.fastmcp import Context

from mems.config import get_store_configuration
from mems.core.root_operations import RootSet

# Session state storage: session key -> ordered root names or directories
_ACTIVE_ROOTS: Dict[int, list[str]] = {}


def get_session_key(ctx: Context) -> int:
    """Produce a stable per-session key for active root tracking.

    Args:
        ctx: The request context supplied by FastMCP.

    Returns:
        An integer derived from the underlying session object identity. This value
        remains stable for the lifetime of the MCP session.
    """
    return id(ctx.session)


def build_root_set(specs: list[str]) -> RootSet:
    """Turn root specifiers into a :class:`RootSet`, preserving their order.

    Each specifier is either an existing directory or the name of a root from
    the configuration file.

    Raises:
        ValueError: If a specifier is neither a directory nor a configured root.
    """
    paths: list[Path] = []
    labels: list[str] = []
    for value in specs:
        candidate = Path(value).expanduser()
        if candidate.is_dir():
            paths.append(candidate)
            labels.append(value)
        else:
            metadata = get_store_configuration().get(value)
            paths.append(metadata.path)
            labels.append(metadata.name)
    return RootSet(paths, labels=labels)


def set_active_roots(ctx: Context, roots: list[str]) -> RootSet:
    """Set the active root set for a client session.

    Raises:
        ValueError: If any root cannot be resolved.
    """
    root_set = build_root_set(roots)
    _ACTIVE_ROOTS[get_session_key(ctx)] = list(roots)
    return root_set


def get_active_roots(ctx: Context) -> Optional[list[str]]:
    """Return the root specifiers selected by this session, if any."""
    return _ACTIVE_ROOTS.get(get_session_key(ctx))


def resolve_root_set(roots: Optional[list[str]], ctx: Optional[Context] = None) -> RootSet:
    """Resolve which root set an operation should use.

    Explicit ``roots`` win, then the session's active roots, then the
    configured default root set.
    """
    if roots:
        return build_root_set(roots)

    if ctx is not None:
        active = get_active_roots(ctx)
        if active:
            return build_root_set(active)

    return get_store_configuration().root_set()
