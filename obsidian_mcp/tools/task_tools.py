"""Markdown task MCP tools."""
from __future__ import annotations

from typing import Any

from obsidian_mcp.config import resolve_vault
from obsidian_mcp.core.task_operations import get_tasks_in_note as find_tasks_in_note
from obsidian_mcp.core.task_operations import toggle_task
from obsidian_mcp.models import GetTasksInput, ToggleTaskInput
from obsidian_mcp.server import mcp


@mcp.tool()
async def get_tasks_in_note(input: GetTasksInput) -> dict[str, Any]:
    """List the '- [ ]' and '- [x]' tasks of a note with 1-based line numbers.

    Returns:
        {
            "vault": str,
            "path": str,
            "tasks": [{"text": str, "checked": bool, "line": int}],
            "total": int,
            "completed": int
        }

    Examples:
        - Workflow: get_tasks_in_note() → toggle_obsidian_task(line=...)
    """
    metadata = resolve_vault(input.vault)
    return find_tasks_in_note(metadata, input.path)


@mcp.tool()
async def toggle_obsidian_task(input: ToggleTaskInput) -> dict[str, Any]:
    """Toggle a task between '- [ ]' and '- [x]' on a specific line.

    Args:
        input (ToggleTaskInput): Validated input containing:
            - vault (str): Vault name
            - path (str): Note path relative to the vault root
            - line (int): 1-based line number from get_tasks_in_note()

    Returns:
        {"vault": str, "path": str, "line": int, "checked": bool, "status": "completed" | "incomplete"}

    Error Handling:
        - Line out of range → Error with the note's line count
        - Line is not a task → Error quoting the line
    """
    metadata = resolve_vault(input.vault)
    return toggle_task(metadata, input.path, input.line)
