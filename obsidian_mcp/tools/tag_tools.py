"""Tag management MCP tools.

All tools delegate to core operations in obsidian_mcp.core.tag_operations.
Batch tools report a per-note status instead of aborting on the first
failing note.
"""
from __future__ import annotations

from typing import Any

from obsidian_mcp.config import resolve_vault
from obsidian_mcp.core.tag_operations import add_tags, remove_tags, rename_tag
from obsidian_mcp.models import AddTagsInput, RemoveTagsInput, RenameTagInput
from obsidian_mcp.server import mcp


@mcp.tool()
async def add_obsidian_tags(input: AddTagsInput) -> dict[str, Any]:
    """Add tags to one or more notes.

    Frontmatter tags are merged into the 'tags' field (kept sorted, a single
    tag is stored as a plain string). Content tags are appended to the body
    as a line of #tags.

    Args:
        input (AddTagsInput): Validated input containing:
            - vault (str): Vault name
            - paths (list[str]): Notes to tag
            - tags (list[str]): Tags with or without '#'
            - location (str): "frontmatter" (default), "content" or "both"
            - normalize (bool): camelCase → kebab-case (default True)

    Returns:
        {
            "vault": str,
            "tags": [str],
            "results": [{"path": str, "status": "updated" | "unchanged" | "error", ...}],
            "notes_updated": int
        }

    Error Handling:
        - Malformed tag → Error before any note is touched
        - Missing note → reported with status "error" for that note only
    """
    metadata = resolve_vault(input.vault)
    return add_tags(metadata, input.paths, input.tags, input.location, input.normalize)


@mcp.tool()
async def remove_obsidian_tags(input: RemoveTagsInput) -> dict[str, Any]:
    """Remove tags from one or more notes.

    Each note reports which tags were removed (with line numbers for inline
    tags), which child tags were preserved and which requested tags were not
    present. Inline tags in code blocks and inline code are never touched.

    Returns:
        {
            "vault": str,
            "results": [{"path", "status", "removed", "preserved", "not_found"}],
            "notes_updated": int
        }
    """
    metadata = resolve_vault(input.vault)
    return remove_tags(
        metadata,
        input.paths,
        input.tags,
        input.location,
        input.normalize,
        input.preserve_children,
        input.patterns,
    )


@mcp.tool()
async def rename_obsidian_tag(input: RenameTagInput) -> dict[str, Any]:
    """Rename a tag, and its child tags, in every note of the vault.

    Renaming "project" to "work" also turns "project/alpha" into "work/alpha".

    Returns:
        {
            "vault": str,
            "old_tag": str,
            "new_tag": str,
            "notes_updated": [str],
            "frontmatter_changes": int,
            "content_changes": int,
            "errors": [{"path": str, "error": str}]
        }
    """
    metadata = resolve_vault(input.vault)
    return rename_tag(metadata, input.old_tag, input.new_tag)
