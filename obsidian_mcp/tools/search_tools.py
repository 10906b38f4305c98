"""Search and discovery MCP tools.

This module provides MCP tool wrappers for search and listing operations:
- Search note contents, filenames and tags
- Find backlinks
- List notes, attachments and directory entries

All tools delegate to core operations in obsidian_mcp.core.search_operations.
"""
from __future__ import annotations

from typing import Any

from obsidian_mcp.config import resolve_vault
from obsidian_mcp.core.search_operations import (
    get_backlinks,
    list_directory,
    list_files,
    list_notes,
    search_vault,
)
from obsidian_mcp.models import (
    GetBacklinksInput,
    ListDirectoryInput,
    ListFilesInput,
    ListNotesInput,
    SearchVaultInput,
)
from obsidian_mcp.server import mcp


# ==============================================================================
# SEARCH OPERATIONS
# ==============================================================================

@mcp.tool()
async def search_obsidian_vault(input: SearchVaultInput) -> dict[str, Any]:
    """Search notes line by line, by filename, or by tag.

    Query operators:
        - path:Folder    limit the search to a folder
        - file:name      keep only notes whose path contains "name"
        - tag:project    search frontmatter and inline tags; "tag:project/*"
                         matches every descendant, an inner "*" matches within
                         a level and a final "*" runs across levels

    Args:
        input (SearchVaultInput): Validated input containing:
            - vault (str): Vault name
            - query (str): Search text with optional operators
            - case_sensitive (bool): Exact case matching (default False)
            - search_type (str): "content", "filename" or "both"
            - path (str, optional): Folder to search

    Returns:
        {
            "vault": str,
            "query": str,
            "results": [{"path": str, "matches": [{"line": int, "text": str}]}],
            "total_matches": int,
            "errors": [str]  # files that could not be read
        }

    Examples:
        - "roadmap" → lines containing "roadmap"
        - "standup path:Meetings file:2025" → scoped search
        - "tag:status/active" → notes tagged status/active

    Error Handling:
        - Folder not found → Error naming the folder
        - "tag:" without a tag → Error
    """
    metadata = resolve_vault(input.vault)
    return search_vault(metadata, input.query, input.case_sensitive, input.search_type, input.path)


@mcp.tool()
async def get_obsidian_backlinks(input: GetBacklinksInput) -> dict[str, Any]:
    """List notes that link to a note.

    Counts [[Note]], [[Folder/Note]], [[Folder/Note.md]] and markdown links
    by path. Links inside inline code are ignored.

    Returns:
        {"vault": str, "path": str, "backlinks": [str]}
    """
    metadata = resolve_vault(input.vault)
    return get_backlinks(metadata, input.path)


# ==============================================================================
# LISTING OPERATIONS
# ==============================================================================

@mcp.tool()
async def list_obsidian_notes(input: ListNotesInput) -> dict[str, Any]:
    """List notes in the vault or below a folder.

    Args:
        input (ListNotesInput): Validated input containing:
            - vault (str): Vault name
            - path (str, optional): Folder to list
            - include_metadata (bool): Add modified/created/size per note and
                sort by most recent modification

    Returns:
        {"vault": str, "folder": str, "notes": [str] or [{"path", "modified", "size", ...}]}
    """
    metadata = resolve_vault(input.vault)
    return list_notes(metadata, input.path, input.include_metadata)


@mcp.tool()
async def list_obsidian_files(input: ListFilesInput) -> dict[str, Any]:
    """List attachments and other non-markdown files.

    Returns:
        {"vault": str, "folder": str, "files": [str]}
    """
    metadata = resolve_vault(input.vault)
    return list_files(metadata, input.path)


@mcp.tool()
async def list_obsidian_directory(input: ListDirectoryInput) -> dict[str, Any]:
    """List the immediate folders and files of one directory."""
    metadata = resolve_vault(input.vault)
    return list_directory(metadata, input.path or "")
