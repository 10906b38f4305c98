"""Core business logic for note CRUD operations."""

from __future__ import annotations

import logging
import platform
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Literal, Optional

from obsidian_mcp.constants import TRASH_DIR
from obsidian_mcp.core.backup_writer import guarded_update
from obsidian_mcp.core.frontmatter_operations import parse_note, stringify_note
from obsidian_mcp.core.link_operations import rewrite_links, strike_links
from obsidian_mcp.core.vault_operations import (
    ensure_vault_ready,
    iter_markdown_files,
    read_note_text,
    relative_note_path,
    require_existing_note,
    resolve_note_path,
    resolve_vault_relative,
    safe_join_path,
)
from obsidian_mcp.data_models import ParsedNote, VaultMetadata
from obsidian_mcp.errors import (
    AlreadyExistsError,
    InvalidInputError,
    NoteExistsError,
    VaultToolError,
    handle_fs_error,
)

logger = logging.getLogger(__name__)

EditOperation = Literal["append", "prepend", "replace"]


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def _join_blocks(first: str, second: str) -> str:
    """Trim both pieces and join them with a blank line when both are non-empty."""
    return "\n\n".join(piece for piece in (first.strip(), second.strip()) if piece)


def _append(text: str, addition: str) -> str:
    return _join_blocks(text, addition)


def _prepend(text: str, addition: str) -> str:
    parsed = parse_note(text)
    if not parsed.has_frontmatter:
        return _join_blocks(addition, text)
    header = text[: len(text) - len(parsed.content)]
    return header + _join_blocks(addition, parsed.content)


def _replace_body(text: str, replacement: str) -> str:
    parsed = parse_note(text)
    return stringify_note(
        ParsedNote(frontmatter=parsed.frontmatter, content=replacement, has_frontmatter=parsed.has_frontmatter)
    )


_EDITS: dict[str, Callable[[str, str], str]] = {
    "append": _append,
    "prepend": _prepend,
    "replace": _replace_body,
}


def _get_note_metadata(note_path: Path) -> dict[str, Any]:
    """Extract filesystem metadata for a note in a cross-platform friendly way.

    Args:
        note_path: Absolute path to the markdown file.

    Returns:
        A dictionary containing modification timestamp, optional creation timestamp,
        and file size in bytes.
    """
    stat = note_path.stat()
    metadata: dict[str, Any] = {
        "modified": datetime.fromtimestamp(stat.st_mtime).isoformat(),
        "size": stat.st_size,
    }

    system = platform.system()
    if system in ("Darwin", "Windows"):
        metadata["created"] = datetime.fromtimestamp(stat.st_ctime).isoformat()
    elif hasattr(stat, "st_birthtime"):
        metadata["created"] = datetime.fromtimestamp(stat.st_birthtime).isoformat()

    return metadata


def _update_links(
    vault: VaultMetadata,
    rewrite: Callable[[str], tuple[str, int]],
    operation: str,
) -> int:
    """Apply ``rewrite`` to every note in the vault.

    Args:
        vault: Vault metadata.
        rewrite: Returns the new text and the number of links it changed.
        operation: Description used for backups and log messages.

    Returns:
        Number of notes that were modified.
    """
    updated_count = 0

    for note_path in iter_markdown_files(vault.path):
        try:
            _, changed = rewrite(read_note_text(note_path))
            if not changed:
                continue
            original, updated = guarded_update(note_path, lambda text: rewrite(text)[0], operation)
            if original == updated:
                continue
            updated_count += 1
        except VaultToolError as exc:
            logger.warning("Failed to %s in '%s': %s", operation, note_path, exc.message)

    return updated_count


def _trash_destination(vault: VaultMetadata, relative: str) -> Path:
    destination = safe_join_path(vault.path, TRASH_DIR, relative)
    if destination.exists():
        stamped = f"{destination.stem} {time.strftime('%Y%m%d%H%M%S')}{destination.suffix}"
        destination = destination.with_name(stamped)
    return destination


# ==============================================================================
# NOTE OPERATIONS
# ==============================================================================


def read_note(vault: VaultMetadata, path: str, include_metadata: bool = False) -> dict[str, Any]:
    """Retrieve the content of a markdown note.

    Args:
        vault: Vault metadata.
        path: Note path relative to the vault root.
        include_metadata: Add modification time, creation time and size.

    Returns:
        A dictionary containing the vault name, note path and raw note content.

    Raises:
        NoteNotFoundError: If the note cannot be located.
    """
    target = require_existing_note(vault, path)
    result: dict[str, Any] = {
        "vault": vault.name,
        "path": relative_note_path(vault, target),
        "content": read_note_text(target),
    }
    if include_metadata:
        try:
            result["metadata"] = _get_note_metadata(target)
        except OSError as exc:
            raise handle_fs_error(exc, "read note metadata", target) from exc
    return result


def create_note(
    vault: VaultMetadata,
    path: str,
    content: str,
    frontmatter: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Create a markdown note, creating missing parent folders.

    Args:
        vault: Vault metadata describing where the note should reside.
        path: Note path relative to the vault root; ``.md`` is added if missing.
        content: Markdown body to write into the new file.
        frontmatter: Optional mapping written as a YAML block above the body.

    Returns:
        A dictionary describing the created note.

    Raises:
        NoteExistsError: If the note already exists.
        PathRejectedError: If ``path`` is malformed or escapes the vault.
    """
    ensure_vault_ready(vault)
    target = resolve_note_path(vault, path)
    text = content
    if frontmatter:
        text = stringify_note(ParsedNote(frontmatter=dict(frontmatter), content=content, has_frontmatter=True))

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("x", encoding="utf-8") as handle:
            handle.write(text)
    except FileExistsError as exc:
        raise NoteExistsError(path) from exc
    except OSError as exc:
        raise handle_fs_error(exc, "create note", target) from exc

    note_path = relative_note_path(vault, target)
    logger.info("Created note '%s' in vault '%s'", note_path, vault.name)
    return {
        "vault": vault.name,
        "path": note_path,
        "status": "created",
    }


def edit_note(
    vault: VaultMetadata,
    path: str,
    operation: EditOperation,
    content: str,
) -> dict[str, Any]:
    """Append to, prepend to, or replace the body of an existing note.

    ``append`` and ``prepend`` trim both pieces and separate them with a blank
    line. ``prepend`` inserts below an existing frontmatter block. ``replace``
    swaps the body and keeps the frontmatter. The write is backup-guarded:
    on failure the note is restored to its previous content.

    Raises:
        NoteNotFoundError: If the note does not exist.
        RollbackError: If the write failed and the note could not be restored.
    """
    edit = _EDITS.get(operation)
    if edit is None:
        raise InvalidInputError(f"Invalid operation: {operation}")
    target = require_existing_note(vault, path)
    guarded_update(target, lambda text: edit(text, content), f"{operation} note")

    note_path = relative_note_path(vault, target)
    logger.info("Edited note '%s' in vault '%s' (%s)", note_path, vault.name, operation)
    return {
        "vault": vault.name,
        "path": note_path,
        "operation": operation,
        "status": "edited",
    }


def move_note(
    vault: VaultMetadata,
    source: str,
    destination: str,
    update_links: bool = True,
) -> dict[str, Any]:
    """Move or rename a note, optionally updating links across the vault.

    Args:
        vault: Vault metadata.
        source: Current note path relative to the vault root.
        destination: Desired note path relative to the vault root.
        update_links: When ``True`` update wikilinks/markdown links referencing the note.

    Returns:
        A dictionary summarizing the operation outcome, including the number of notes that
        required link adjustments.

    Raises:
        NoteNotFoundError: If the original note cannot be located.
        NoteExistsError: If a note already exists at the new location.
    """
    old_path = require_existing_note(vault, source)
    new_path = resolve_note_path(vault, destination)
    old_relative = relative_note_path(vault, old_path)
    new_relative = relative_note_path(vault, new_path)

    if old_path != new_path:
        if new_path.exists():
            raise NoteExistsError(destination)
        try:
            new_path.parent.mkdir(parents=True, exist_ok=True)
            old_path.rename(new_path)
        except OSError as exc:
            raise handle_fs_error(exc, "move note", old_path) from exc

    links_updated = 0
    if update_links and old_path != new_path:
        links_updated = _update_links(
            vault,
            lambda text: rewrite_links(text, old_relative, new_relative),
            "update links",
        )

    logger.info(
        "Moved note from '%s' to '%s' in vault '%s' (%d notes with updated links)",
        old_relative,
        new_relative,
        vault.name,
        links_updated,
    )
    return {
        "vault": vault.name,
        "old_path": old_relative,
        "new_path": new_relative,
        "links_updated": links_updated,
        "status": "moved",
    }


def delete_note(
    vault: VaultMetadata,
    path: str,
    permanent: bool = False,
    update_links: bool = True,
) -> dict[str, Any]:
    """Delete a note, moving it to the vault's ``.trash`` folder unless ``permanent``.

    Links to the deleted note in other notes are struck through when
    ``update_links`` is set.

    Raises:
        NoteNotFoundError: If the note does not exist.
    """
    target = require_existing_note(vault, path)
    relative = relative_note_path(vault, target)

    trashed_to: Optional[str] = None
    try:
        if permanent:
            target.unlink()
        else:
            destination = _trash_destination(vault, relative)
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(target), str(destination))
            trashed_to = relative_note_path(vault, destination)
    except OSError as exc:
        raise handle_fs_error(exc, "delete note", target) from exc

    links_updated = 0
    if update_links:
        links_updated = _update_links(vault, lambda text: strike_links(text, relative), "strike links")

    logger.info(
        "Deleted note '%s' in vault '%s' (permanent=%s, %d notes with struck links)",
        relative,
        vault.name,
        permanent,
        links_updated,
    )
    result: dict[str, Any] = {
        "vault": vault.name,
        "path": relative,
        "status": "deleted",
        "permanent": permanent,
        "links_updated": links_updated,
    }
    if trashed_to is not None:
        result["trash_path"] = trashed_to
    return result


def create_directory(vault: VaultMetadata, path: str) -> dict[str, Any]:
    """Create a folder (and missing parents) inside the vault.

    Raises:
        AlreadyExistsError: If something already exists at ``path``.
    """
    ensure_vault_ready(vault)
    target = resolve_vault_relative(vault, path)
    if target.exists():
        raise AlreadyExistsError(f"Directory already exists: {path}")

    try:
        target.mkdir(parents=True)
    except OSError as exc:
        raise handle_fs_error(exc, "create directory", target) from exc

    relative = relative_note_path(vault, target)
    logger.info("Created directory '%s' in vault '%s'", relative, vault.name)
    return {
        "vault": vault.name,
        "path": relative,
        "status": "created",
    }
