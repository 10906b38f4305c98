"""Obsidian MCP Server

Safe, multi-vault Obsidian note management via Model Context Protocol.
"""

from obsidian_mcp.config import get_vault_configuration, resolve_vault, set_vault_configuration
from obsidian_mcp.data_models import VaultConfiguration, VaultMetadata
from obsidian_mcp.server import mcp, run_server

# Import tools to register them with the MCP server
from obsidian_mcp import tools  # noqa: F401

__version__ = "0.1.0"
__all__ = [
    "VaultMetadata",
    "VaultConfiguration",
    "get_vault_configuration",
    "set_vault_configuration",
    "resolve_vault",
    "mcp",
    "run_server",
]
