"""MCP tools for vault management, daily notes, bookmarks and aliases."""

import logging
from typing import Any

from obsidian_mcp.config import get_vault_configuration, resolve_vault
from obsidian_mcp.core.bookmarks import list_bookmarks
from obsidian_mcp.core.daily_notes import get_daily_note_path as compute_daily_note_path
from obsidian_mcp.core.frontmatter_operations import add_alias, list_aliases, remove_alias
from obsidian_mcp.models import (
    AliasInput,
    GetDailyNotePathInput,
    ListAliasesInput,
    ListBookmarksInput,
    ListVaultsInput,
)
from obsidian_mcp.server import mcp

logger = logging.getLogger(__name__)


# ==============================================================================
# VAULT OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_vaults(input: ListVaultsInput) -> dict[str, Any]:
    """List configured Obsidian vaults.

    Primary entry point for vault discovery: every other tool takes one of
    these names in its ``vault`` field.

    Args:
        input (ListVaultsInput): Validated input (no fields required)

    Returns:
        {
            "vaults": [
                {
                    "name": str,
                    "path": str,
                    "description": str,
                    "exists": bool
                }
            ]
        }

    Error Handling:
        - Config file missing → Error with expected config path
        - Invalid config format → Error describing expected YAML structure
    """
    config = get_vault_configuration()
    logger.debug("Listing %d configured vault(s)", len(config.vaults))
    return config.as_payload()


@mcp.tool()
async def get_daily_note_path(input: GetDailyNotePathInput) -> dict[str, Any]:
    """Compute the path of the daily note for a date (today by default).

    Reads the Daily Notes core plugin settings (.obsidian/daily-notes.json):
    the note lives in the configured folder and is named with the configured
    date format (YYYY, MM, M, DD, D, dddd, WW, W; [text] for literals).

    Returns:
        {"vault": str, "path": str, "date": "YYYY-MM-DD", "exists": bool}

    Error Handling:
        - daily-notes.json missing → Error, the plugin is not configured
        - Invalid JSON, missing 'format' or unsupported format tokens → Error
    """
    metadata = resolve_vault(input.vault)
    return compute_daily_note_path(metadata, input.date)


@mcp.tool()
async def list_obsidian_bookmarks(input: ListBookmarksInput) -> dict[str, Any]:
    """List the vault's bookmarks (.obsidian/bookmarks.json).

    Groups keep their nested items. A vault without a bookmarks file has no
    bookmarks.

    Returns:
        {"vault": str, "bookmarks": [{"type": str, "title"?, "path"?, "query"?, "items"?}], "total": int}
    """
    metadata = resolve_vault(input.vault)
    return list_bookmarks(metadata)


# ==============================================================================
# ALIAS OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_obsidian_aliases(input: ListAliasesInput) -> dict[str, Any]:
    """List the aliases in a note's frontmatter.

    Returns:
        {"vault": str, "path": str, "aliases": [str]}
    """
    metadata = resolve_vault(input.vault)
    return list_aliases(metadata, input.path)


@mcp.tool()
async def add_obsidian_alias(input: AliasInput) -> dict[str, Any]:
    """Add an alias to a note, creating the frontmatter block if needed.

    Returns:
        {"vault": str, "path": str, "alias": str, "status": "added" | "already_present", "aliases": [str]}
    """
    metadata = resolve_vault(input.vault)
    return add_alias(metadata, input.path, input.alias)


@mcp.tool()
async def remove_obsidian_alias(input: AliasInput) -> dict[str, Any]:
    """Remove an alias from a note. A missing alias is reported, not an error.

    Returns:
        {"vault": str, "path": str, "alias": str, "status": "removed" | "not_found", "aliases": [str]}
    """
    metadata = resolve_vault(input.vault)
    return remove_alias(metadata, input.path, input.alias)
