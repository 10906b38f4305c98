"""MCP tool definitions for Obsidian vault operations.

This module imports all tool submodules to register them with the MCP server.
Each tool module uses the @mcp.tool() decorator to auto-register its tools.
"""

# Import all tool modules to register their @mcp.tool() decorated functions
from obsidian_mcp.tools import vault_tools
from obsidian_mcp.tools import note_tools
from obsidian_mcp.tools import search_tools
from obsidian_mcp.tools import tag_tools
from obsidian_mcp.tools import task_tools

__all__ = [
    "vault_tools",
    "note_tools",
    "search_tools",
    "tag_tools",
    "task_tools",
]
