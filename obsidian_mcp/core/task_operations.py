"""Markdown checkbox tasks: listing and toggling by line number."""

from __future__ import annotations

import logging
import re
from typing import Any

from obsidian_mcp.core.backup_writer import guarded_update
from obsidian_mcp.core.vault_operations import read_note_text, relative_note_path, require_existing_note
from obsidian_mcp.data_models import TaskItem, VaultMetadata
from obsidian_mcp.errors import InvalidInputError, MalformedContentError

logger = logging.getLogger(__name__)

_TASK_LINE = re.compile(r"^(\s*- \[)([ xX])(\] .*)")
_LINE_BREAK = re.compile(r"\r?\n")


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def find_tasks(content: str) -> list[TaskItem]:
    """Return every ``- [ ]`` / ``- [x]`` line in ``content``.

    Examples:
        >>> find_tasks("intro\\n- [ ] buy milk\\n- [x] done")
        [TaskItem(text='buy milk', checked=False, line=2), TaskItem(text='done', checked=True, line=3)]
    """
    tasks: list[TaskItem] = []
    for number, line in enumerate(_LINE_BREAK.split(content), start=1):
        match = _TASK_LINE.match(line)
        if match:
            tasks.append(
                TaskItem(
                    text=match.group(3)[2:].strip(),
                    checked=match.group(2) != " ",
                    line=number,
                )
            )
    return tasks


def toggle_task_line(content: str, line: int) -> tuple[str, bool]:
    """Flip the checkbox on 1-based ``line`` and return the new text and state.

    Line endings are normalized to ``\\n`` in the returned text.

    Raises:
        InvalidInputError: If ``line`` is outside the note.
        MalformedContentError: If the line is not a task.
    """
    lines = _LINE_BREAK.split(content)
    if line < 1 or line > len(lines):
        raise InvalidInputError(f"Invalid line number: {line}. Note has {len(lines)} lines.")

    match = _TASK_LINE.match(lines[line - 1])
    if not match:
        raise MalformedContentError(f'Line {line} is not a valid Markdown task: "{lines[line - 1][:50]}"')

    checked = match.group(2) == " "
    lines[line - 1] = match.group(1) + ("x" if checked else " ") + match.group(3)
    return "\n".join(lines), checked


# ==============================================================================
# TASK OPERATIONS
# ==============================================================================


def get_tasks_in_note(vault: VaultMetadata, path: str) -> dict[str, Any]:
    """List the tasks of a note with their 1-based line numbers."""
    target = require_existing_note(vault, path)
    tasks = find_tasks(read_note_text(target))
    return {
        "vault": vault.name,
        "path": relative_note_path(vault, target),
        "tasks": [task.as_payload() for task in tasks],
        "total": len(tasks),
        "completed": sum(1 for task in tasks if task.checked),
    }


def toggle_task(vault: VaultMetadata, path: str, line: int) -> dict[str, Any]:
    """Toggle the task on ``line`` between ``- [ ]`` and ``- [x]``.

    Args:
        vault: Vault metadata.
        path: Note path relative to the vault root.
        line: 1-based line number, as reported by :func:`get_tasks_in_note`.

    Returns:
        Dictionary with the note path, the line and the new ``checked`` state.

    Raises:
        NoteNotFoundError: If the note does not exist.
        InvalidInputError: If the line number is out of range.
        MalformedContentError: If the line is not a task.
    """
    target = require_existing_note(vault, path)
    toggle_task_line(read_note_text(target), line)

    state: dict[str, bool] = {}

    def _transform(text: str) -> str:
        updated, state["checked"] = toggle_task_line(text, line)
        return updated

    guarded_update(target, _transform, "toggle task")

    note_path = relative_note_path(vault, target)
    logger.info(
        "Marked task on line %d of '%s' in vault '%s' as %s",
        line,
        note_path,
        vault.name,
        "completed" if state["checked"] else "incomplete",
    )
    return {
        "vault": vault.name,
        "path": note_path,
        "line": line,
        "checked": state["checked"],
        "status": "completed" if state["checked"] else "incomplete",
    }
