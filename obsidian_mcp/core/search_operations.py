"""Search and discovery operations for notes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal, Optional

from obsidian_mcp.core.frontmatter_operations import parse_note
from obsidian_mcp.core.link_operations import contains_link
from obsidian_mcp.core.note_operations import _get_note_metadata
from obsidian_mcp.core.tag_operations import (
    frontmatter_tags,
    inline_tags_by_line,
    matches_tag_pattern,
    normalize_tag,
)
from obsidian_mcp.core.vault_operations import (
    ensure_vault_ready,
    iter_markdown_files,
    iter_non_markdown_files,
    note_display_name,
    read_note_text,
    relative_note_path,
    require_existing_note,
    resolve_vault_relative,
)
from obsidian_mcp.data_models import VaultMetadata
from obsidian_mcp.errors import InvalidInputError, NotFoundError, VaultToolError

logger = logging.getLogger(__name__)

SearchType = Literal["content", "filename", "both"]


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _strip_quotes(value: str) -> str:
    return value.strip("\"'")


def parse_search_query(raw_query: str) -> dict[str, Optional[str]]:
    """Split ``path:`` and ``file:`` operators from the free-text query.

    Examples:
        >>> parse_search_query("meeting path:Work file:2024")
        {'query': 'meeting', 'path': 'Work', 'file': '2024'}
    """
    terms: list[str] = []
    operators: dict[str, Optional[str]] = {"path": None, "file": None}
    for part in raw_query.split():
        if part.startswith("path:"):
            operators["path"] = _strip_quotes(part[5:])
        elif part.startswith("file:"):
            operators["file"] = _strip_quotes(part[5:])
        else:
            terms.append(part)
    return {"query": " ".join(terms), **operators}


def _resolve_folder(vault: VaultMetadata, folder: str) -> Path:
    target = resolve_vault_relative(vault, folder)
    if not target.is_dir():
        raise NotFoundError(f"Folder '{folder}' not found in vault '{vault.name}'")
    return target


def _tag_matches(tag_query: str, tag: str) -> bool:
    normalized = normalize_tag(tag)
    return normalized == tag_query or matches_tag_pattern(tag_query, normalized)


def _search_tags(text: str, tag_query: str) -> list[dict[str, Any]]:
    parsed = parse_note(text)
    matches: list[dict[str, Any]] = []
    for tag in frontmatter_tags(parsed):
        if _tag_matches(tag_query, tag):
            matches.append({"line": 0, "text": f"Frontmatter tag: {tag}"})

    offset = text[: len(text) - len(parsed.content)].count("\n")
    for number, line, tags in inline_tags_by_line(parsed.content):
        if any(_tag_matches(tag_query, tag) for tag in tags):
            matches.append({"line": number + offset, "text": line.strip()})
    return matches


def _search_lines(text: str, needle: str, case_sensitive: bool) -> list[dict[str, Any]]:
    matches: list[dict[str, Any]] = []
    for number, line in enumerate(text.split("\n"), start=1):
        haystack = line if case_sensitive else line.lower()
        if needle in haystack:
            matches.append({"line": number, "text": line.strip()})
    return matches


# ==============================================================================
# SEARCH OPERATIONS
# ==============================================================================


def search_vault(
    vault: VaultMetadata,
    query: str,
    case_sensitive: bool = False,
    search_type: SearchType = "content",
    path: Optional[str] = None,
) -> dict[str, Any]:
    """Search note contents, filenames or tags.

    The query may carry operators: ``path:Folder`` limits the search to a
    folder, ``file:name`` keeps only files whose path contains ``name`` and a
    query starting with ``tag:`` searches tags (frontmatter and inline) with
    normalization and wildcard support.

    Args:
        vault: Vault metadata.
        query: Raw query string including operators.
        case_sensitive: Match text exactly instead of case-insensitively.
        search_type: ``content``, ``filename`` or ``both``.
        path: Folder to search when the query has no ``path:`` operator.

    Returns:
        Dictionary with the vault, the query, per-file line matches, the total
        match count and any per-file read errors.

    Raises:
        InvalidInputError: If the query has neither text nor a ``file:`` filter.
        NotFoundError: If the search folder does not exist.
    """
    ensure_vault_ready(vault)

    parsed_query = parse_search_query(query)
    text_query = parsed_query["query"] or ""
    file_filter = parsed_query["file"]
    folder = parsed_query["path"] or path or ""
    if not text_query and not file_filter:
        raise InvalidInputError("Search query cannot be empty")

    tag_query = normalize_tag(text_query[4:]) if text_query.startswith("tag:") else None
    if tag_query is not None and not tag_query:
        raise InvalidInputError("Tag search requires a tag after 'tag:'")

    needle = text_query if case_sensitive else text_query.lower()
    if file_filter and not case_sensitive:
        file_filter = file_filter.lower()

    search_filenames = (search_type in ("filename", "both") or not text_query) and tag_query is None
    search_content = search_type in ("content", "both") or tag_query is not None

    root = _resolve_folder(vault, folder)
    results: list[dict[str, Any]] = []
    errors: list[str] = []

    for note_file in iter_markdown_files(root):
        relative = relative_note_path(vault, note_file)
        comparable = relative if case_sensitive else relative.lower()
        if file_filter and file_filter not in comparable:
            continue

        file_matches: list[dict[str, Any]] = []
        if search_filenames and (not needle or needle in comparable):
            file_matches.append({"line": 0, "text": f"Filename match: {relative}"})

        if search_content and (needle or tag_query):
            try:
                text = read_note_text(note_file)
                if tag_query is not None:
                    file_matches.extend(_search_tags(text, tag_query))
                else:
                    file_matches.extend(_search_lines(text, needle, case_sensitive))
            except VaultToolError as exc:
                logger.warning("Skipping file '%s' in vault '%s': %s", relative, vault.name, exc.message)
                errors.append(f"Error reading file {relative}: {exc.message}")

        if file_matches:
            results.append({"path": relative, "matches": file_matches})

    return {
        "vault": vault.name,
        "query": query,
        "results": results,
        "total_matches": sum(len(result["matches"]) for result in results),
        "errors": errors,
    }


def get_backlinks(vault: VaultMetadata, path: str) -> dict[str, Any]:
    """Find notes that link to the note at ``path``.

    Wikilinks by full path, path without extension or bare name count, as do
    markdown links by path. Links inside inline code are ignored.
    """
    target = require_existing_note(vault, path)
    target_relative = relative_note_path(vault, target)

    backlinks: list[str] = []
    for note_file in iter_markdown_files(vault.path):
        relative = relative_note_path(vault, note_file)
        if relative == target_relative:
            continue
        try:
            text = read_note_text(note_file)
        except VaultToolError as exc:
            logger.warning("Skipping file '%s' while collecting backlinks: %s", relative, exc.message)
            continue
        if contains_link(text, target_relative):
            backlinks.append(relative)

    return {
        "vault": vault.name,
        "path": target_relative,
        "backlinks": backlinks,
    }


def list_notes(
    vault: VaultMetadata,
    path: Optional[str] = None,
    include_metadata: bool = False,
) -> dict[str, Any]:
    """List notes below a folder (the whole vault by default).

    Args:
        vault: Vault metadata.
        path: Folder relative to the vault root.
        include_metadata: When ``True`` each entry contains metadata (modified, created,
            size) and entries are sorted by most recent modification.

    Returns:
        A dictionary containing the vault name, folder and note paths.
    """
    ensure_vault_ready(vault)
    root = _resolve_folder(vault, path or "")

    notes: list[Any] = []
    for note_file in iter_markdown_files(root):
        relative = relative_note_path(vault, note_file)
        if include_metadata:
            metadata = _get_note_metadata(note_file)
            metadata["path"] = relative
            metadata["name"] = note_display_name(vault, note_file)
            notes.append(metadata)
        else:
            notes.append(relative)

    if include_metadata:
        notes.sort(key=lambda item: item["modified"], reverse=True)
    else:
        notes.sort()

    return {
        "vault": vault.name,
        "folder": path or "",
        "notes": notes,
    }


def list_files(vault: VaultMetadata, path: Optional[str] = None) -> dict[str, Any]:
    """List non-markdown files (attachments) below a folder."""
    ensure_vault_ready(vault)
    root = _resolve_folder(vault, path or "")
    files = [relative_note_path(vault, file_path) for file_path in iter_non_markdown_files(root)]
    return {
        "vault": vault.name,
        "folder": path or "",
        "files": sorted(files),
    }


def list_directory(vault: VaultMetadata, path: str = "") -> dict[str, Any]:
    """List the immediate, non-hidden children of a folder."""
    ensure_vault_ready(vault)
    root = _resolve_folder(vault, path)

    directories: list[str] = []
    files: list[str] = []
    for entry in sorted(root.iterdir(), key=lambda item: item.name.lower()):
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            directories.append(entry.name)
        else:
            files.append(entry.name)

    return {
        "vault": vault.name,
        "path": path,
        "directories": directories,
        "files": files,
    }
