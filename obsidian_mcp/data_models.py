"""Data models for vaults, parsed notes, tags, tasks and bookmarks."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional

from .errors import InvalidInputError


@dataclass(frozen=True)
class VaultMetadata:
    """Normalized metadata describing an Obsidian vault."""

    name: str
    path: Path
    description: str = ""

    def as_payload(self) -> dict[str, Any]:
        """Return a serializable payload representation."""
        return {
            "name": self.name,
            "path": str(self.path),
            "description": self.description,
            "exists": self.path.is_dir(),
        }


class VaultConfiguration:
    """Holds the immutable name -> vault mapping shared by all tools.

    Built once at startup from vaults.yaml. Names are sanitized and unique,
    and no vault path is nested inside another.
    """

    def __init__(self, vaults: dict[str, VaultMetadata]) -> None:
        self.vaults = dict(vaults)

    def get(self, name: str) -> VaultMetadata:
        """Get vault metadata by name.

        Args:
            name: The name of the vault to retrieve.

        Returns:
            VaultMetadata for the requested vault.

        Raises:
            InvalidInputError: If the vault name is not found in configuration.
        """
        try:
            return self.vaults[name]
        except KeyError as exc:
            available = ", ".join(sorted(self.vaults)) or "none"
            raise InvalidInputError(f"Unknown vault '{name}'. Available vaults: {available}") from exc

    def as_payload(self) -> dict[str, Any]:
        return {"vaults": [vault.as_payload() for vault in self.vaults.values()]}


@dataclass
class ParsedNote:
    """A note split into its YAML frontmatter mapping and markdown body."""

    frontmatter: dict[str, Any] = field(default_factory=dict)
    content: str = ""
    has_frontmatter: bool = False


@dataclass(frozen=True)
class TagChange:
    """One tag added, removed or preserved, used for reporting only."""

    tag: str
    location: Literal["frontmatter", "content"]
    line: Optional[int] = None
    context: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"tag": self.tag, "location": self.location}
        if self.line is not None:
            payload["line"] = self.line
        if self.context is not None:
            payload["context"] = self.context
        return payload


@dataclass
class TagRemovalReport:
    removed: list[TagChange] = field(default_factory=list)
    preserved: list[TagChange] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)

    def extend(self, other: TagRemovalReport) -> None:
        self.removed.extend(other.removed)
        self.preserved.extend(other.preserved)

    def as_payload(self) -> dict[str, Any]:
        return {
            "removed": [change.as_payload() for change in self.removed],
            "preserved": [change.as_payload() for change in self.preserved],
            "not_found": list(self.not_found),
        }


@dataclass(frozen=True)
class TaskItem:
    """A markdown checkbox line; ``line`` is 1-based."""

    text: str
    checked: bool
    line: int

    def as_payload(self) -> dict[str, Any]:
        return {"text": self.text, "checked": self.checked, "line": self.line}


@dataclass(frozen=True)
class Bookmark:
    """An entry of the Bookmarks core plugin (``.obsidian/bookmarks.json``)."""

    type: str
    title: Optional[str] = None
    path: Optional[str] = None
    query: Optional[str] = None
    subpath: Optional[str] = None
    ctime: Optional[int] = None
    items: tuple[Bookmark, ...] = ()

    def as_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type}
        for key in ("title", "path", "query", "subpath", "ctime"):
            value = getattr(self, key)
            if value is not None:
                payload[key] = value
        if self.type == "group":
            payload["items"] = [item.as_payload() for item in self.items]
        return payload
