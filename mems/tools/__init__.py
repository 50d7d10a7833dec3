"""MCP tool definitions for mem store operations.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from mems.tools import root_tools
from mems.tools import entry_tools
from mems.tools import search_tools

__all__ = [
    "root_tools",
    "entry_tools",
    "search_tools",
]
