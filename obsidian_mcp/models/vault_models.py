"""Pydantic input models for vault-level operations.

This module defines input models for vault management tools:
- List configured vaults
- Daily note path from the Daily Notes plugin settings
- Bookmarks from the Bookmarks plugin
- Note aliases
"""

from __future__ import annotations

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .base import BaseNoteInput, BaseVaultInput


class ListVaultsInput(BaseModel):
    """Input model for list_vaults tool.

    Lists all configured vaults. Takes no parameters, but using a model
    maintains API consistency.

    Examples:
        >>> ListVaultsInput()
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{}]
        }


class GetDailyNotePathInput(BaseVaultInput):
    """Input model for get_daily_note_path tool.

    Examples:
        >>> GetDailyNotePathInput(vault="personal")
        >>> GetDailyNotePathInput(vault="personal", date="2025-10-27")
    """

    date: Optional[dt.date] = Field(
        None,
        description="Date of the daily note (YYYY-MM-DD). Defaults to today."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "personal"},
                {"vault": "personal", "date": "2025-10-27"}
            ]
        }


class ListBookmarksInput(BaseVaultInput):
    """Input model for list_obsidian_bookmarks tool."""


class ListAliasesInput(BaseNoteInput):
    """Input model for list_obsidian_aliases tool."""


class AliasInput(BaseNoteInput):
    """Input model for add_obsidian_alias and remove_obsidian_alias tools.

    Examples:
        >>> AliasInput(vault="work", path="Projects/Roadmap.md", alias="Plan 2025")
    """

    alias: str = Field(
        min_length=1,
        description="Alias text stored in the note's 'aliases' frontmatter field. Case-sensitive."
    )

    @field_validator('alias')
    @classmethod
    def validate_alias(cls, v: str) -> str:
        """Validate alias is not blank."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError("Alias cannot be empty. Provide the alternative name for the note.")
        return cleaned

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work", "path": "Projects/Roadmap.md", "alias": "Plan 2025"}
            ]
        }
