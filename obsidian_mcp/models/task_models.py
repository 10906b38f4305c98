"""Pydantic input models for markdown task operations."""

from __future__ import annotations

from pydantic import Field

from .base import BaseNoteInput


class GetTasksInput(BaseNoteInput):
    """Input model for get_tasks_in_note tool.

    Lists every '- [ ]' and '- [x]' line with its 1-based line number.
    """

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{"vault": "personal", "path": "Todo.md"}]
        }


class ToggleTaskInput(BaseNoteInput):
    """Input model for toggle_obsidian_task tool.

    Examples:
        >>> ToggleTaskInput(vault="personal", path="Todo.md", line=5)
    """

    line: int = Field(
        gt=0,
        description="The 1-based line number of the task, as returned by get_tasks_in_note."
    )

    class Config:
        """Pydantic model configuration."""
        json_schema_extra = {
            "examples": [{"vault": "personal", "path": "Todo.md", "line": 5}]
        }
