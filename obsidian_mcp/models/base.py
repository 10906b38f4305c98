"""Base Pydantic models for MCP tool input validation.

This module defines base models that provide common validation patterns
for vault and note operations. Other input models inherit from these bases.

Base Models:
- BaseVaultInput: Required vault name
- BaseNoteInput: Adds a vault-relative note path
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, Field, field_validator

_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:")


def validate_relative_path(value: str, label: str = "Path") -> str:
    """Validate a vault-relative path.

    Enforces:
    - Non-empty after stripping whitespace
    - Relative path only (no leading slash, backslash or drive letter)
    - No '.' or '..' segments

    Args:
        value: The path to validate
        label: Field label used in error messages

    Returns:
        The stripped path

    Raises:
        ValueError: If the path is empty, absolute or contains traversal segments
    """
    cleaned = value.strip()

    if not cleaned:
        raise ValueError(f"{label} cannot be empty. Provide a path relative to the vault root.")

    if cleaned.startswith(("/", "\\")) or _DRIVE_PREFIX.match(cleaned):
        raise ValueError(
            f"{label} must be relative to the vault root. "
            f"Do not start with '/' or a drive letter. Invalid path: '{cleaned}'"
        )

    parts = re.split(r"[\\/]", cleaned)
    if any(part in {".", ".."} for part in parts):
        raise ValueError(
            f"{label} cannot contain '.' or '..' path segments. "
            f"Invalid path: '{cleaned}'"
        )

    return cleaned


def validate_optional_folder(value: Optional[str]) -> Optional[str]:
    """Validate an optional folder path; empty means the vault root."""
    if value is None or not value.strip().strip("/"):
        return None
    return validate_relative_path(value.strip().strip("/"), "Folder path")


class BaseVaultInput(BaseModel):
    """Base model for every tool: the target vault is always explicit."""

    vault: str = Field(
        min_length=1,
        description=(
            "Vault name from the server configuration. "
            "Use list_vaults() to discover available vaults."
        ),
        examples=["personal", "work"]
    )

    @field_validator('vault')
    @classmethod
    def validate_vault(cls, v: str) -> str:
        """Validate vault name format.

        Raises:
            ValueError: If vault name is empty or only whitespace
        """
        cleaned = v.strip()
        if not cleaned:
            raise ValueError(
                "Vault name cannot be empty. "
                "Use list_vaults() to see available vaults."
            )
        return cleaned


class BaseNoteInput(BaseVaultInput):
    """Base model for operations on a single note.

    The ``.md`` extension is optional; it is added during path resolution.
    """

    path: str = Field(
        min_length=1,
        description=(
            "Note path relative to the vault root, with or without .md. "
            "Examples: 'Daily Notes/2025-10-27.md', 'Projects/New Project'. "
            "Forward slashes for folders."
        ),
        examples=["Daily Notes/2025-10-27.md", "Projects/New Project", "README"]
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        return validate_relative_path(v, "Note path")
