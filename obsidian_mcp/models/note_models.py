"""Pydantic input models for note CRUD operations.

This module defines input models for basic note management operations:
- Read note content
- Create new notes
- Edit notes (append, prepend, replace)
- Move/rename notes
- Delete notes
- Create directories
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import Field, field_validator, model_validator

from .base import BaseNoteInput, BaseVaultInput, validate_relative_path


class ReadNoteInput(BaseNoteInput):
    """Input model for read_obsidian_note tool.

    Retrieves complete note content (full markdown, frontmatter included).

    Examples:
        >>> ReadNoteInput(vault="personal", path="Daily Notes/2025-10-27.md")
    """

    include_metadata: bool = Field(
        False,
        description="If True, include modification time, creation time and size in bytes."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "personal", "path": "Daily Notes/2025-10-27.md"},
                {"vault": "work", "path": "Projects/Roadmap", "include_metadata": True}
            ]
        }


class CreateNoteInput(BaseNoteInput):
    """Input model for create_obsidian_note tool.

    Creates a new markdown file with the given content. Fails if the note
    already exists. Parent folders are created automatically.

    Examples:
        >>> CreateNoteInput(vault="work", path="Projects/New Project", content="# New Project")
    """

    content: str = Field(
        description=(
            "Markdown body for the note. "
            "Can be empty string to create a blank note."
        )
    )

    frontmatter: Optional[dict[str, Any]] = Field(
        None,
        description="Optional YAML frontmatter fields written above the body (e.g., tags, aliases)."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "vault": "work",
                    "path": "Projects/New Project.md",
                    "content": "# New Project\n\nGoals:\n- Goal 1",
                    "frontmatter": {"tags": ["project"]}
                }
            ]
        }


class EditNoteInput(BaseNoteInput):
    """Input model for edit_obsidian_note tool.

    ``append`` adds to the end, ``prepend`` inserts below the frontmatter,
    ``replace`` swaps the body and keeps the frontmatter.

    Examples:
        >>> EditNoteInput(vault="personal", path="Log", operation="append", content="- 3:00 PM: Call")
    """

    operation: Literal["append", "prepend", "replace"] = Field(
        description="Edit to perform: 'append', 'prepend' or 'replace'."
    )

    content: str = Field(
        description=(
            "Markdown content to add, or the new body for 'replace'. "
            "Must not be empty for append and prepend."
        )
    )

    @model_validator(mode='after')
    def validate_content_for_operation(self) -> 'EditNoteInput':
        """Reject blank content for append and prepend.

        Raises:
            ValueError: If content is empty or only whitespace
        """
        if self.operation != "replace" and not self.content.strip():
            raise ValueError(
                f"Content cannot be empty when using '{self.operation}'. "
                "Provide the text you want to add to the note."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "vault": "personal",
                    "path": "Daily Notes/2025-10-27.md",
                    "operation": "append",
                    "content": "## Evening Notes\n\n- Completed project review"
                }
            ]
        }


class MoveNoteInput(BaseVaultInput):
    """Input model for move_obsidian_note tool.

    Moves or renames a note, optionally updating all links that reference
    the old path to point to the new path.

    Examples:
        >>> MoveNoteInput(vault="work", source="Old Name.md", destination="Archive/Old Name.md")
    """

    source: str = Field(
        min_length=1,
        description="Current note path relative to the vault root. Example: 'Projects/Old Name.md'"
    )

    destination: str = Field(
        min_length=1,
        description=(
            "New note path relative to the vault root. "
            "Examples: 'Projects/New Name.md' (rename), 'Archive/Old Name.md' (move)"
        )
    )

    update_links: bool = Field(
        True,
        description=(
            "If True, update all wikilinks ([[link]]) and markdown links "
            "that reference the old path. Default: True (recommended for vault consistency)."
        )
    )

    @field_validator('source', 'destination')
    @classmethod
    def validate_paths(cls, v: str) -> str:
        return validate_relative_path(v, "Note path")

    @model_validator(mode='after')
    def validate_paths_different(self) -> 'MoveNoteInput':
        """Validate that source and destination are different.

        Raises:
            ValueError: If source equals destination
        """
        if self.source == self.destination:
            raise ValueError(
                "Source and destination must be different. "
                f"Both are set to '{self.source}'."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {
                    "vault": "work",
                    "source": "Projects/Old Name.md",
                    "destination": "Projects/New Name.md",
                    "update_links": True
                }
            ]
        }


class DeleteNoteInput(BaseNoteInput):
    """Input model for delete_obsidian_note tool.

    Moves the note to the vault's .trash folder, or removes it when
    ``permanent`` is set. Always confirm with user before calling.
    """

    permanent: bool = Field(
        False,
        description="If True, delete the file instead of moving it to .trash. Cannot be undone."
    )

    update_links: bool = Field(
        True,
        description="If True, strike through links to the deleted note in other notes."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "personal", "path": "Temporary Note.md"},
                {"vault": "work", "path": "Archive/Old Project.md", "permanent": True}
            ]
        }


class CreateDirectoryInput(BaseVaultInput):
    """Input model for create_obsidian_directory tool."""

    path: str = Field(
        min_length=1,
        description="Folder path relative to the vault root. Missing parents are created.",
        examples=["Projects/2025", "Archive"]
    )

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        return validate_relative_path(v, "Directory path")
