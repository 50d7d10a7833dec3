"""Mems MCP Server

File-backed, hierarchical markdown knowledge store served via Model Context
Protocol. Mems live as ``.md`` files with a YAML header under one or more
``.mems/`` roots.
"""

from mems.config import StoreConfiguration, get_store_configuration
from mems.core.root_operations import RootSet
from mems.data_models import Entry, EntryPatch, RootMetadata
from mems.session import resolve_root_set, set_active_roots, get_active_roots
from mems.server import mcp, run_server

# Import tools to register them with the MCP server
from mems import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "StoreConfiguration",
    "get_store_configuration",
    "RootSet",
    "Entry",
    "EntryPatch",
    "RootMetadata",
    "resolve_root_set",
    "set_active_roots",
    "get_active_roots",
    "mcp",
    "run_server",
]
