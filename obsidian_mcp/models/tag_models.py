"""Pydantic input models for tag management operations.

This module defines input models for tag tools:
- Add tags to notes (frontmatter, inline, or both)
- Remove tags from notes, with patterns and hierarchy control
- Rename a tag across the vault
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator, model_validator

from .base import BaseVaultInput, validate_relative_path


def _clean_tags(values: list[str]) -> list[str]:
    cleaned = [value.strip() for value in values]
    if any(not value or value == "#" for value in cleaned):
        raise ValueError("Tags cannot be empty. Provide tag names like 'project' or '#status/active'.")
    return cleaned


class BaseTagInput(BaseVaultInput):
    """Shared fields for tag tools operating on a list of notes."""

    paths: list[str] = Field(
        min_length=1,
        description="Note paths relative to the vault root. Each note is processed independently.",
        examples=[["Projects/Roadmap.md", "Daily Notes/2025-10-27.md"]]
    )

    tags: list[str] = Field(
        min_length=1,
        description=(
            "Tags with or without '#'. Hierarchical tags use '/': 'status/active'. "
            "Each level is letters and digits only; camelCase is normalized to kebab-case."
        ),
        examples=[["project", "status/active"]]
    )

    normalize: bool = Field(
        True,
        description="If True, convert camelCase tag segments to lowercase kebab-case (ProjectActive → project-active)."
    )

    @field_validator('paths')
    @classmethod
    def validate_paths(cls, v: list[str]) -> list[str]:
        return [validate_relative_path(path, "Note path") for path in v]

    @field_validator('tags')
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return _clean_tags(v)


class AddTagsInput(BaseTagInput):
    """Input model for add_obsidian_tags tool.

    Examples:
        >>> AddTagsInput(vault="work", paths=["Roadmap.md"], tags=["project"])
    """

    location: Literal["frontmatter", "content", "both"] = Field(
        "frontmatter",
        description=(
            "Where to add tags: 'frontmatter' (tags field), 'content' "
            "(inline #tags appended to the body), or 'both'."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work", "paths": ["Projects/Roadmap.md"], "tags": ["project", "status/active"]},
                {"vault": "personal", "paths": ["Journal.md"], "tags": ["mood"], "location": "content"}
            ]
        }


class RemoveTagsInput(BaseTagInput):
    """Input model for remove_obsidian_tags tool.

    Removing a parent tag from note content also removes its children
    unless ``preserve_children`` is set.

    Examples:
        >>> RemoveTagsInput(vault="work", paths=["Roadmap.md"], tags=["status"], preserve_children=True)
    """

    location: Literal["frontmatter", "content", "both"] = Field(
        "both",
        description="Where to remove tags from: 'frontmatter', 'content', or 'both'."
    )

    preserve_children: bool = Field(
        False,
        description="If True, removing 'status' keeps inline tags such as 'status/active'."
    )

    patterns: list[str] = Field(
        default_factory=list,
        description=(
            "Additional wildcard patterns: an inner '*' matches within one level, "
            "a final '*' runs across levels ('proj*' matches 'project/a'), "
            "a trailing '/*' matches every descendant. Example: 'project/*'."
        )
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work", "paths": ["Projects/Roadmap.md"], "tags": ["draft"]},
                {
                    "vault": "work",
                    "paths": ["Projects/Roadmap.md"],
                    "tags": ["status"],
                    "patterns": ["status/*"],
                    "location": "content"
                }
            ]
        }


class RenameTagInput(BaseVaultInput):
    """Input model for rename_obsidian_tag tool.

    Renames a tag (and its children) in every note of the vault.
    """

    old_tag: str = Field(
        min_length=1,
        description="Tag to rename, with or without '#'. Example: 'project/old'."
    )

    new_tag: str = Field(
        min_length=1,
        description="New tag name, with or without '#'. Example: 'project/new'."
    )

    @field_validator('old_tag', 'new_tag')
    @classmethod
    def validate_tag_value(cls, v: str) -> str:
        return _clean_tags([v])[0]

    @model_validator(mode='after')
    def validate_tags_different(self) -> 'RenameTagInput':
        """Validate that old_tag and new_tag are different.

        Raises:
            ValueError: If both name the same tag
        """
        if self.old_tag.lstrip("#") == self.new_tag.lstrip("#"):
            raise ValueError(
                "Old tag and new tag must be different. "
                f"Both are set to '{self.old_tag}'."
            )
        return self

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [
                {"vault": "work", "old_tag": "project/old", "new_tag": "project/new"}
            ]
        }
