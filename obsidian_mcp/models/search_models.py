"""Pydantic input models for search and discovery operations.

This module defines input models for search and discovery tools:
- Search note contents, filenames and tags
- Find backlinks to a note
- List notes, attachments and directory entries
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator

from .base import BaseNoteInput, BaseVaultInput, validate_optional_folder


class SearchVaultInput(BaseVaultInput):
    """Input model for search_obsidian_vault tool.

    Line-by-line search with optional operators inside the query:
    ``path:Folder`` limits the search to a folder, ``file:name`` filters by
    filename and ``tag:project`` searches tags (wildcards allowed).

    Examples:
        >>> SearchVaultInput(vault="work", query="meeting path:Projects")
        >>> SearchVaultInput(vault="work", query="tag:project/*")
    """

    query: str = Field(
        min_length=1,
        description=(
            "Search text with optional operators. "
            "Examples: 'roadmap', 'meeting path:Work file:2024', 'tag:status/active'"
        )
    )

    case_sensitive: bool = Field(
        False,
        description="If True, match letter case exactly. Default: case-insensitive."
    )

    search_type: Literal["content", "filename", "both"] = Field(
        "content",
        description="Search note contents, filenames, or both. Ignored for 'tag:' queries."
    )

    path: Optional[str] = Field(
        None,
        description="Folder to search (relative to vault root). Overridden by a 'path:' operator."
    )

    @field_validator('query')
    @classmethod
    def validate_query(cls, v: str) -> str:
        """Validate search query is not empty."""
        if not v.strip():
            raise ValueError(
                "Search query cannot be empty. "
                "Provide a search term to find notes."
            )
        return v.strip()

    @field_validator('path')
    @classmethod
    def validate_folder(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work", "query": "roadmap"},
                {"vault": "work", "query": "standup", "search_type": "both", "path": "Meetings"},
                {"vault": "personal", "query": "tag:health"}
            ]
        }


class GetBacklinksInput(BaseNoteInput):
    """Input model for get_obsidian_backlinks tool.

    Finds notes whose wikilinks or markdown links point at ``path``.
    """


class ListNotesInput(BaseVaultInput):
    """Input model for list_obsidian_notes tool.

    Lists all notes below a folder (whole vault by default).

    Examples:
        >>> ListNotesInput(vault="personal", include_metadata=True)
    """

    path: Optional[str] = Field(
        None,
        description="Folder to list (relative to vault root). Omit for the whole vault."
    )

    include_metadata: bool = Field(
        False,
        description=(
            "If True, include file metadata (modified, created, size) for each note "
            "and sort by most recently modified."
        )
    )

    @field_validator('path')
    @classmethod
    def validate_folder(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder(v)

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "personal"},
                {"vault": "work", "path": "Projects", "include_metadata": True}
            ]
        }


class ListFilesInput(BaseVaultInput):
    """Input model for list_obsidian_files tool (attachments and other non-markdown files)."""

    path: Optional[str] = Field(
        None,
        description="Folder to list (relative to vault root). Omit for the whole vault."
    )

    @field_validator('path')
    @classmethod
    def validate_folder(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder(v)


class ListDirectoryInput(BaseVaultInput):
    """Input model for list_obsidian_directory tool.

    Lists the immediate folders and files of one directory. Hidden entries
    (such as .obsidian) are skipped.
    """

    path: Optional[str] = Field(
        None,
        description="Directory to list (relative to vault root). Omit for the vault root."
    )

    @field_validator('path')
    @classmethod
    def validate_folder(cls, v: Optional[str]) -> Optional[str]:
        return validate_optional_folder(v)
