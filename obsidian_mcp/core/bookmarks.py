"""Read-only access to the Bookmarks core plugin data."""

from __future__ import annotations

import json
import logging
from typing import Any

from obsidian_mcp.constants import BOOKMARKS_FILE, OBSIDIAN_CONFIG_DIR
from obsidian_mcp.core.vault_operations import ensure_vault_ready
from obsidian_mcp.data_models import Bookmark, VaultMetadata
from obsidian_mcp.errors import MalformedContentError, handle_fs_error

logger = logging.getLogger(__name__)


def _parse_bookmark(raw: Any) -> Bookmark:
    if not isinstance(raw, dict) or not isinstance(raw.get("type"), str):
        raise MalformedContentError(f"Invalid bookmark entry in bookmarks.json: {raw!r}")
    children = raw.get("items") or []
    if not isinstance(children, list):
        raise MalformedContentError("Invalid bookmarks.json structure: group 'items' must be an array.")
    return Bookmark(
        type=raw["type"],
        title=raw.get("title"),
        path=raw.get("path"),
        query=raw.get("query"),
        subpath=raw.get("subpath"),
        ctime=raw.get("ctime"),
        items=tuple(_parse_bookmark(child) for child in children),
    )


def read_bookmarks(vault: VaultMetadata) -> list[Bookmark]:
    """Load ``.obsidian/bookmarks.json``.

    A missing file means the vault has no bookmarks.

    Raises:
        MalformedContentError: If the file is not JSON or has no ``items`` array.
    """
    bookmarks_path = vault.path / OBSIDIAN_CONFIG_DIR / BOOKMARKS_FILE
    try:
        data = json.loads(bookmarks_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.debug("No bookmarks file in vault '%s'", vault.name)
        return []
    except json.JSONDecodeError as exc:
        raise MalformedContentError(f"Error parsing bookmarks.json: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise handle_fs_error(exc, "read bookmarks file", bookmarks_path) from exc

    if not isinstance(data, dict) or not isinstance(data.get("items"), list):
        raise MalformedContentError("Invalid bookmarks.json structure: 'items' array not found or invalid.")
    return [_parse_bookmark(item) for item in data["items"]]


def _count(bookmarks: list[Bookmark] | tuple[Bookmark, ...]) -> int:
    return sum(1 + _count(bookmark.items) for bookmark in bookmarks)


def list_bookmarks(vault: VaultMetadata) -> dict[str, Any]:
    """Return the vault's bookmarks, groups nested, with a total count."""
    ensure_vault_ready(vault)
    bookmarks = read_bookmarks(vault)
    return {
        "vault": vault.name,
        "bookmarks": [bookmark.as_payload() for bookmark in bookmarks],
        "total": _count(bookmarks),
    }
