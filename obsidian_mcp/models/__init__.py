"""Pydantic input models for MCP tool validation.

This package defines Pydantic models that provide automatic input validation
for all MCP tools. Each model represents the input schema for one tool, with
field-level validation, type checking, and descriptive error messages.
Validation happens before any filesystem access.

Architecture:
- base: Base models (BaseVaultInput, BaseNoteInput) and path validators
- note_models: Input models for note CRUD operations
- search_models: Input models for search and listing operations
- tag_models: Input models for tag management operations
- task_models: Input models for markdown task operations
- vault_models: Input models for vaults, daily notes, bookmarks and aliases

Usage:
    from obsidian_mcp.models import ReadNoteInput, SearchVaultInput
"""

from .base import BaseNoteInput, BaseVaultInput
from .note_models import (
    ReadNoteInput,
    CreateNoteInput,
    EditNoteInput,
    MoveNoteInput,
    DeleteNoteInput,
    CreateDirectoryInput,
)
from .search_models import (
    SearchVaultInput,
    GetBacklinksInput,
    ListNotesInput,
    ListFilesInput,
    ListDirectoryInput,
)
from .tag_models import (
    AddTagsInput,
    RemoveTagsInput,
    RenameTagInput,
)
from .task_models import (
    GetTasksInput,
    ToggleTaskInput,
)
from .vault_models import (
    ListVaultsInput,
    GetDailyNotePathInput,
    ListBookmarksInput,
    ListAliasesInput,
    AliasInput,
)

__all__ = [
    # Base models
    "BaseVaultInput",
    "BaseNoteInput",
    # Note CRUD models
    "ReadNoteInput",
    "CreateNoteInput",
    "EditNoteInput",
    "MoveNoteInput",
    "DeleteNoteInput",
    "CreateDirectoryInput",
    # Search models
    "SearchVaultInput",
    "GetBacklinksInput",
    "ListNotesInput",
    "ListFilesInput",
    "ListDirectoryInput",
    # Tag models
    "AddTagsInput",
    "RemoveTagsInput",
    "RenameTagInput",
    # Task models
    "GetTasksInput",
    "ToggleTaskInput",
    # Vault models
    "ListVaultsInput",
    "GetDailyNotePathInput",
    "ListBookmarksInput",
    "ListAliasesInput",
    "AliasInput",
]
