"""FastMCP server initialization and tool registration."""

import asyncio
import logging

from mcp.server.fastmcp import FastMCP

from obsidian_mcp.config import get_vault_configuration, validate_vault_configuration
from obsidian_mcp.constants import LOG_LEVEL

# Initialize logger (stderr, stdout carries the stdio transport)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)

# Initialize FastMCP server
mcp = FastMCP("obsidian_mcp")

# Tool modules are imported in __init__.py to register all @mcp.tool() decorators


def run_server():
    """Validate the configured vaults, then serve over stdio."""
    config = get_vault_configuration()
    asyncio.run(validate_vault_configuration(config))
    logger.info("Starting Obsidian MCP Server with %d vault(s): %s", len(config.vaults), ", ".join(config.vaults))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    run_server()
