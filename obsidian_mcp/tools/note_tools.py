"""Note management MCP tools.

This module provides MCP tool wrappers for basic note CRUD operations:
- Read note content
- Create new notes
- Edit notes (append, prepend, replace)
- Move/rename notes
- Delete notes
- Create directories

All tools delegate to core operations in obsidian_mcp.core.note_operations.
"""
from __future__ import annotations

from typing import Any

from obsidian_mcp.config import resolve_vault
from obsidian_mcp.core.note_operations import (
    create_directory,
    create_note,
    delete_note,
    edit_note,
    move_note,
    read_note,
)
from obsidian_mcp.models import (
    CreateDirectoryInput,
    CreateNoteInput,
    DeleteNoteInput,
    EditNoteInput,
    MoveNoteInput,
    ReadNoteInput,
)
from obsidian_mcp.server import mcp


# ==============================================================================
# READ OPERATIONS
# ==============================================================================

# Returns the full markdown text, frontmatter included. Errors if the note is missing.
@mcp.tool()
async def read_obsidian_note(input: ReadNoteInput) -> dict[str, Any]:
    """Read complete note content (full markdown, frontmatter included).

    Can be expensive for large notes. Consider search_obsidian_vault() first
    when only a few lines are needed.

    Args:
        input (ReadNoteInput): Validated input containing:
            - vault (str): Vault name from list_vaults()
            - path (str): Note path relative to the vault root (.md optional)
                Examples: "Daily Notes/2025-10-26.md", "Projects/Roadmap"
            - include_metadata (bool): Add modified/created timestamps and size

    Returns:
        {
            "vault": str,
            "path": str,
            "content": str,
            "metadata": {...}  # only when include_metadata
        }

    Error Handling:
        - ValidationError: Empty, absolute, or traversing path
        - Note not found → Error with note path, use list_obsidian_notes()
        - Unknown vault → Error listing available vaults
    """
    metadata = resolve_vault(input.vault)
    return read_note(metadata, input.path, input.include_metadata)


# ==============================================================================
# CREATE OPERATIONS
# ==============================================================================

@mcp.tool()
async def create_obsidian_note(input: CreateNoteInput) -> dict[str, Any]:
    """Create new note with markdown content (fails if exists).

    Creates the markdown file and any missing parent folders. Optional
    frontmatter is written as a YAML block above the body.

    Args:
        input (CreateNoteInput): Validated input containing:
            - vault (str): Vault name
            - path (str): Note path relative to the vault root
            - content (str): Markdown body (can be empty)
            - frontmatter (dict, optional): YAML fields such as tags or aliases

    Returns:
        {"vault": str, "path": str, "status": "created"}

    Examples:
        - Use when: User asks to "create", "make", or "start" a note
        - Don't use: Updating existing → Use edit_obsidian_note()

    Error Handling:
        - Note exists → Error, suggest read_obsidian_note() or edit_obsidian_note()
        - Path escapes the vault or contains invalid characters → Error
    """
    metadata = resolve_vault(input.vault)
    return create_note(metadata, input.path, input.content, input.frontmatter)


@mcp.tool()
async def create_obsidian_directory(input: CreateDirectoryInput) -> dict[str, Any]:
    """Create a folder (and missing parents) inside the vault.

    Returns:
        {"vault": str, "path": str, "status": "created"}
    """
    metadata = resolve_vault(input.vault)
    return create_directory(metadata, input.path)


# ==============================================================================
# UPDATE OPERATIONS
# ==============================================================================

# Backup-guarded: a failed write restores the previous note content.
@mcp.tool()
async def edit_obsidian_note(input: EditNoteInput) -> dict[str, Any]:
    """Append to, prepend to, or replace the body of an existing note.

    - append: adds content at the end, separated by a blank line
    - prepend: inserts content at the top of the body, below any frontmatter
    - replace: swaps the whole body, keeping the frontmatter

    Args:
        input (EditNoteInput): Validated input containing:
            - vault (str): Vault name
            - path (str): Note path relative to the vault root
            - operation (str): "append", "prepend" or "replace"
            - content (str): Markdown to add, or the new body

    Returns:
        {"vault": str, "path": str, "operation": str, "status": "edited"}

    Error Handling:
        - Note not found → Error, use create_obsidian_note()
        - Write failed and rollback failed → Error naming the preserved backup file
    """
    metadata = resolve_vault(input.vault)
    return edit_note(metadata, input.path, input.operation, input.content)


@mcp.tool()
async def move_obsidian_note(input: MoveNoteInput) -> dict[str, Any]:
    """Move or rename a note, optionally updating links across the vault.

    Wikilinks ([[Note]], [[Folder/Note|alias]], [[Note#Heading]]) and
    markdown links ([label](Folder/Note.md)) pointing at the old path are
    rewritten when update_links is True.

    Args:
        input (MoveNoteInput): Validated input containing:
            - vault (str): Vault name
            - source (str): Current note path
            - destination (str): New note path
            - update_links (bool): Rewrite links in other notes (default True)

    Returns:
        {
            "vault": str,
            "old_path": str,
            "new_path": str,
            "links_updated": int,  # number of notes whose links changed
            "status": "moved"
        }

    Error Handling:
        - Source not found → Error
        - Destination exists → Error, choose another name
    """
    metadata = resolve_vault(input.vault)
    return move_note(metadata, input.source, input.destination, input.update_links)


# ==============================================================================
# DELETE OPERATIONS
# ==============================================================================

@mcp.tool()
async def delete_obsidian_note(input: DeleteNoteInput) -> dict[str, Any]:
    """Delete a note (moved to the vault's .trash folder unless permanent).

    Links to the note in other notes are struck through (~~[[Note]]~~) when
    update_links is True. Always confirm with user before calling.

    Returns:
        {
            "vault": str,
            "path": str,
            "status": "deleted",
            "permanent": bool,
            "links_updated": int,
            "trash_path": str  # only when moved to .trash
        }
    """
    metadata = resolve_vault(input.vault)
    return delete_note(metadata, input.path, input.permanent, input.update_links)
