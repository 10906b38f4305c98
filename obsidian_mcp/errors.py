"""Typed errors surfaced to MCP clients.

Every error raised by a tool is a :class:`VaultToolError`, which is an
``McpError`` carrying a JSON-RPC error code. FastMCP reports the message to the
client; callers inside the package can branch on the concrete subclass.

Validators never raise these: they return a reason string and the call site
decides which error to build from it.
"""

from __future__ import annotations

import errno
from pathlib import Path
from typing import Optional, Union

from mcp.shared.exceptions import McpError
from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, ErrorData


class VaultToolError(McpError):
    """Base class for all errors raised by vault tools."""

    code: int = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(ErrorData(code=self.code, message=message))
        self.message = message


class InvalidInputError(VaultToolError):
    """Malformed arguments detected before any I/O."""

    code = INVALID_PARAMS


class PathRejectedError(VaultToolError):
    """A path failed a safety check (characters, locality, vault escape)."""

    code = INVALID_REQUEST


class InvalidPathError(PathRejectedError):
    """A path string could not be normalized."""


class NotFoundError(VaultToolError):
    """A note, directory or configuration file does not exist."""

    code = INVALID_PARAMS


class NoteNotFoundError(NotFoundError):
    def __init__(self, note_path: str) -> None:
        super().__init__(f"Note not found: {note_path}")
        self.note_path = note_path


class AlreadyExistsError(VaultToolError):
    code = INVALID_PARAMS


class NoteExistsError(AlreadyExistsError):
    def __init__(self, note_path: str) -> None:
        super().__init__(f"Note already exists: {note_path}")
        self.note_path = note_path


class MalformedContentError(VaultToolError):
    """Invalid frontmatter YAML, configuration JSON or task line."""

    code = INVALID_PARAMS


class VaultConfigurationError(VaultToolError):
    """The vault registry is missing, invalid, or contains unsafe paths."""

    code = INVALID_REQUEST


class FileSystemError(VaultToolError):
    """Unexpected OS-level failure, wrapped with the operation and path."""

    code = INTERNAL_ERROR

    def __init__(self, operation: str, path: Union[str, Path, None], detail: str) -> None:
        location = f" ({path})" if path is not None else ""
        super().__init__(f"Failed to {operation}{location}: {detail}")
        self.operation = operation
        self.path = None if path is None else str(path)


class RollbackError(FileSystemError):
    """Restoring a backup after a failed mutation also failed.

    The backup file is left in place so the note can be recovered by hand.
    """

    def __init__(
        self,
        operation: str,
        path: Union[str, Path],
        original: BaseException,
        rollback: BaseException,
        backup_path: Union[str, Path],
    ) -> None:
        super().__init__(
            operation,
            path,
            (
                f"Failed to rollback changes. Original error: {original}. "
                f"Rollback error: {rollback}. Backup file preserved at {backup_path}"
            ),
        )
        self.original = original
        self.rollback = rollback
        self.backup_path = str(backup_path)


def handle_fs_error(
    exc: BaseException,
    operation: str,
    path: Optional[Union[str, Path]] = None,
) -> VaultToolError:
    """Convert an arbitrary exception raised during I/O into a typed error.

    Args:
        exc: The exception that was caught.
        operation: Short description of what was being attempted ("read note").
        path: Path involved in the failing call, when known.

    Returns:
        ``exc`` unchanged when it is already a :class:`VaultToolError`, otherwise
        a :class:`NotFoundError` for missing files or a :class:`FileSystemError`.
    """
    if isinstance(exc, VaultToolError):
        return exc

    if isinstance(exc, FileNotFoundError) or getattr(exc, "errno", None) == errno.ENOENT:
        target = path if path is not None else getattr(exc, "filename", None)
        return NotFoundError(f"File or directory not found: {target}")

    if isinstance(exc, PermissionError):
        return FileSystemError(operation, path, f"Permission denied ({exc})")

    if isinstance(exc, UnicodeDecodeError):
        return MalformedContentError(f"File is not UTF-8 encoded and cannot be processed: {path}")

    return FileSystemError(operation, path, str(exc))
