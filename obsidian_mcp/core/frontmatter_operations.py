"""YAML frontmatter parsing, serialization and alias management."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

import frontmatter
import yaml

from obsidian_mcp.core.backup_writer import guarded_update
from obsidian_mcp.core.vault_operations import (
    read_note_text,
    relative_note_path,
    require_existing_note,
)
from obsidian_mcp.data_models import ParsedNote, VaultMetadata
from obsidian_mcp.errors import InvalidInputError, MalformedContentError

logger = logging.getLogger(__name__)

ALIASES_FIELD = "aliases"


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================

# The blank line written after the closing delimiter is consumed so that
# parse(stringify(note)) returns the body unchanged.
_EMPTY_BLOCK = re.compile(r"^---\r?\n---[ \t]*(?:\r?\n|$)(?:\r?\n)?(.*)\Z", re.DOTALL)
_BLOCK = re.compile(r"^---\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|$)(?:\r?\n)?(.*)\Z", re.DOTALL)


def parse_note(text: str) -> ParsedNote:
    """Split raw note text into frontmatter and body.

    Args:
        text: Raw markdown text, possibly starting with a ``---`` fenced YAML block.

    Returns:
        A :class:`ParsedNote`. Without a leading block the whole text becomes
        the content and ``has_frontmatter`` is False.

    Raises:
        MalformedContentError: If the block is not valid YAML or is not a mapping.
    """
    match = _EMPTY_BLOCK.match(text)
    if match:
        return ParsedNote(frontmatter={}, content=match.group(1), has_frontmatter=True)

    match = _BLOCK.match(text)
    if not match:
        return ParsedNote(frontmatter={}, content=text, has_frontmatter=False)

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise MalformedContentError(f"Frontmatter contains invalid YAML: {exc}") from exc

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, Mapping):
        raise MalformedContentError(
            f"Frontmatter must be a mapping of key/value pairs, got {type(metadata).__name__}"
        )

    return ParsedNote(frontmatter=dict(metadata), content=match.group(2), has_frontmatter=True)


def stringify_note(parsed: ParsedNote) -> str:
    """Reassemble a parsed note into markdown text.

    An empty frontmatter mapping is never written as an empty block; the body
    is returned unchanged instead.
    """
    if not parsed.has_frontmatter or not parsed.frontmatter:
        return parsed.content

    post = frontmatter.Post(parsed.content.strip())
    post.metadata.update(parsed.frontmatter)
    return frontmatter.dumps(post, sort_keys=False)


def _alias_list(frontmatter: Mapping[str, Any]) -> list[str]:
    value = frontmatter.get(ALIASES_FIELD)
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    raise MalformedContentError(
        f"Frontmatter field '{ALIASES_FIELD}' must be a string or a list, got {type(value).__name__}"
    )


def add_alias_to_frontmatter(frontmatter: Mapping[str, Any], alias: str) -> tuple[dict[str, Any], bool]:
    """Return a copy of ``frontmatter`` with ``alias`` added to ``aliases``.

    The list is kept sorted. The boolean is False when the alias was already
    present (case-sensitive), in which case the copy is unchanged.
    """
    if not alias.strip():
        raise InvalidInputError("Alias cannot be empty")

    aliases = _alias_list(frontmatter)
    updated = dict(frontmatter)
    if alias in aliases:
        return updated, False

    updated[ALIASES_FIELD] = sorted(aliases + [alias])
    return updated, True


def remove_alias_from_frontmatter(frontmatter: Mapping[str, Any], alias: str) -> tuple[dict[str, Any], bool]:
    """Return a copy of ``frontmatter`` without ``alias``.

    An emptied ``aliases`` field is removed. The boolean is False when the
    alias was not present.
    """
    aliases = _alias_list(frontmatter)
    updated = dict(frontmatter)
    if alias not in aliases:
        return updated, False

    remaining = [item for item in aliases if item != alias]
    if remaining:
        updated[ALIASES_FIELD] = remaining
    else:
        updated.pop(ALIASES_FIELD, None)
    return updated, True


# ==============================================================================
# ALIAS OPERATIONS
# ==============================================================================


def list_aliases(vault: VaultMetadata, path: str) -> dict[str, Any]:
    """List the aliases declared in a note's frontmatter.

    Args:
        vault: Vault metadata.
        path: Note path relative to the vault root.

    Returns:
        Dictionary with vault, path, and the sorted aliases.
    """
    target = require_existing_note(vault, path)
    parsed = parse_note(read_note_text(target))
    return {
        "vault": vault.name,
        "path": relative_note_path(vault, target),
        "aliases": sorted(_alias_list(parsed.frontmatter)),
    }


def add_alias(vault: VaultMetadata, path: str, alias: str) -> dict[str, Any]:
    """Add an alias to a note, creating the frontmatter block if needed.

    Args:
        vault: Vault metadata.
        path: Note path relative to the vault root.
        alias: Alias text to add.

    Returns:
        Dictionary with vault, path, alias, status (``added`` or
        ``already_present``) and the resulting aliases.
    """
    target = require_existing_note(vault, path)

    def _transform(text: str) -> str:
        parsed = parse_note(text)
        updated, changed = add_alias_to_frontmatter(parsed.frontmatter, alias)
        if not changed:
            return text
        return stringify_note(ParsedNote(frontmatter=updated, content=parsed.content, has_frontmatter=True))

    original, updated_text = guarded_update(target, _transform, "add alias")
    changed = original != updated_text
    note_path = relative_note_path(vault, target)
    if changed:
        logger.info("Added alias '%s' to note '%s' in vault '%s'", alias, note_path, vault.name)

    return {
        "vault": vault.name,
        "path": note_path,
        "alias": alias,
        "status": "added" if changed else "already_present",
        "aliases": sorted(_alias_list(parse_note(updated_text).frontmatter)),
    }


def remove_alias(vault: VaultMetadata, path: str, alias: str) -> dict[str, Any]:
    """Remove an alias from a note. A missing alias is reported, not raised.

    Returns:
        Dictionary with vault, path, alias, status (``removed`` or
        ``not_found``) and the remaining aliases.
    """
    target = require_existing_note(vault, path)

    def _transform(text: str) -> str:
        parsed = parse_note(text)
        updated, changed = remove_alias_from_frontmatter(parsed.frontmatter, alias)
        if not changed:
            return text
        return stringify_note(ParsedNote(frontmatter=updated, content=parsed.content, has_frontmatter=True))

    original, updated_text = guarded_update(target, _transform, "remove alias")
    changed = original != updated_text
    note_path = relative_note_path(vault, target)
    if changed:
        logger.info("Removed alias '%s' from note '%s' in vault '%s'", alias, note_path, vault.name)

    return {
        "vault": vault.name,
        "path": note_path,
        "alias": alias,
        "status": "removed" if changed else "not_found",
        "aliases": sorted(_alias_list(parse_note(updated_text).frontmatter)),
    }
