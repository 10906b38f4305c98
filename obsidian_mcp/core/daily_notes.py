"""Daily Notes core plugin support: configuration, date formatting, note path."""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import date
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from obsidian_mcp.constants import DAILY_NOTES_CACHE_TTL_SECONDS, DAILY_NOTES_CONFIG_FILE, OBSIDIAN_CONFIG_DIR
from obsidian_mcp.core.vault_operations import (
    ensure_vault_ready,
    relative_note_path,
    resolve_note_path,
)
from obsidian_mcp.data_models import VaultMetadata
from obsidian_mcp.errors import MalformedContentError, NotFoundError, handle_fs_error

logger = logging.getLogger(__name__)

V = TypeVar("V")


# ==============================================================================
# CONFIGURATION CACHE
# ==============================================================================


class TTLCache(Generic[V]):
    """Small time-bound cache with expiry checked on lookup.

    Entries are ``(value, inserted_at)`` pairs. Nothing watches the underlying
    source, so a value may be up to ``ttl`` seconds stale.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[V, float]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, inserted_at = entry
        if self._clock() - inserted_at >= self.ttl:
            del self._entries[key]
            return None
        logger.debug("Cache hit for '%s'", key)
        return value

    def put(self, key: Hashable, value: V) -> None:
        self._entries[key] = (value, self._clock())

    def evict(self, key: Hashable) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


_config_cache: TTLCache[dict[str, Any]] = TTLCache(DAILY_NOTES_CACHE_TTL_SECONDS)


def load_daily_notes_config(
    vault: VaultMetadata,
    cache: Optional[TTLCache[dict[str, Any]]] = None,
) -> dict[str, Any]:
    """Read ``.obsidian/daily-notes.json`` for ``vault``, cached per vault name.

    Args:
        vault: Vault metadata.
        cache: Cache to use; defaults to the module-level cache.

    Returns:
        The parsed configuration object. ``format`` is always present.

    Raises:
        NotFoundError: If the configuration file does not exist.
        MalformedContentError: If the file is not a JSON object with a ``format``.
    """
    cache = _config_cache if cache is None else cache
    cached = cache.get(vault.name)
    if cached is not None:
        return cached

    config_path = vault.path / OBSIDIAN_CONFIG_DIR / DAILY_NOTES_CONFIG_FILE
    try:
        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise NotFoundError(
                "Daily Notes configuration file (daily-notes.json) not found in .obsidian folder. "
                "Is the plugin enabled and configured?"
            ) from exc
        except json.JSONDecodeError as exc:
            raise MalformedContentError(f"Error parsing daily-notes.json: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise handle_fs_error(exc, "read daily notes config", config_path) from exc

        if not isinstance(config, dict):
            raise MalformedContentError("Daily notes configuration must be a JSON object.")
        if not config.get("format"):
            raise MalformedContentError("Daily notes configuration is missing the 'format' field.")
    except Exception:
        cache.evict(vault.name)
        raise

    cache.put(vault.name, config)
    return config


# ==============================================================================
# DATE FORMATTING
# ==============================================================================

_WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_TOKENS: dict[str, Callable[[date], str]] = {
    "YYYY": lambda value: f"{value.year:04d}",
    "dddd": lambda value: _WEEKDAYS[value.weekday()],
    "MM": lambda value: f"{value.month:02d}",
    "DD": lambda value: f"{value.day:02d}",
    "WW": lambda value: f"{value.isocalendar()[1]:02d}",
    "M": lambda value: str(value.month),
    "D": lambda value: str(value.day),
    "W": lambda value: str(value.isocalendar()[1]),
}
_TOKEN_RUN = re.compile(r"Y+|M+|D+|W+|d+")


def tokenize_date_format(fmt: str) -> list[tuple[str, str]]:
    """Split a date format into ``("literal", text)`` and ``("token", name)`` segments.

    Text in square brackets is literal. A run of one token letter must be a
    supported token as a whole, so ``MMMM`` raises instead of reading as two
    ``MM`` tokens.

    Examples:
        >>> tokenize_date_format("[Week] WW")
        [('literal', 'Week'), ('literal', ' '), ('token', 'WW')]
    """
    segments: list[tuple[str, str]] = []
    index = 0
    while index < len(fmt):
        char = fmt[index]
        if char == "[":
            closing = fmt.find("]", index + 1)
            if closing != -1:
                segments.append(("literal", fmt[index + 1 : closing]))
                index = closing + 1
                continue

        run = _TOKEN_RUN.match(fmt, index)
        if run is not None:
            if run.group(0) not in _TOKENS:
                raise MalformedContentError(f'Daily note format "{fmt}" contains unsupported formatting tokens.')
            segments.append(("token", run.group(0)))
            index = run.end()
            continue

        segments.append(("literal", char))
        index += 1
    return segments


def format_daily_note_date(value: date, fmt: str) -> str:
    """Render ``value`` with a Moment-style format string.

    Examples:
        >>> format_daily_note_date(date(2024, 6, 1), "YYYY-MM-DD dddd")
        '2024-06-01 Saturday'
    """
    return "".join(
        _TOKENS[text](value) if kind == "token" else text for kind, text in tokenize_date_format(fmt)
    )


# ==============================================================================
# DAILY NOTE OPERATIONS
# ==============================================================================


def get_daily_note_path(
    vault: VaultMetadata,
    target_date: Optional[date] = None,
    cache: Optional[TTLCache[dict[str, Any]]] = None,
) -> dict[str, Any]:
    """Compute where the daily note for ``target_date`` (today by default) lives.

    The path is the configured ``folder`` joined with the formatted date,
    with ``.md`` appended.

    Returns:
        Dictionary with vault, vault-relative path, ISO date and whether the
        note exists.
    """
    ensure_vault_ready(vault)
    target_date = target_date or date.today()
    config = load_daily_notes_config(vault, cache)

    folder = str(config.get("folder") or "").strip().strip("/")
    formatted = format_daily_note_date(target_date, str(config["format"]))
    target = resolve_note_path(vault, f"{folder}/{formatted}" if folder else formatted)

    return {
        "vault": vault.name,
        "path": relative_note_path(vault, target),
        "date": target_date.isoformat(),
        "exists": target.is_file(),
    }
