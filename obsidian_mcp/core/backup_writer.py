"""Backup-guarded mutation of existing notes.

Every write that overwrites an existing file follows the same sequence:
snapshot the file to ``<name>.<epoch-ms>.backup``, mutate, then either delete
the backup (commit) or copy it back over the target (rollback). When the
rollback itself fails the backup is left on disk and a :class:`RollbackError`
names both failures.

There is no locking. Core operations are synchronous, so two tool calls in
this process never interleave inside a guarded write; edits made by other
processes to the same note are last-writer-wins.
"""

from __future__ import annotations

import logging
import shutil
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from obsidian_mcp.constants import BACKUP_SUFFIX
from obsidian_mcp.errors import RollbackError, VaultToolError, handle_fs_error

logger = logging.getLogger(__name__)


def backup_path_for(target: Path) -> Path:
    """Return a fresh sibling backup path for ``target``."""
    return target.with_name(f"{target.name}.{time.time_ns() // 1_000_000}{BACKUP_SUFFIX}")


def _write_note_text(target: Path, text: str) -> None:
    target.write_text(text, encoding="utf-8")


def _restore_backup(backup: Path, target: Path) -> None:
    shutil.copy2(backup, target)


def _discard_backup(backup: Path) -> None:
    try:
        backup.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("Could not remove backup '%s': %s", backup, exc)


@contextmanager
def backup_guard(target: Path, operation: str) -> Iterator[Path]:
    """Snapshot ``target`` for the duration of the block.

    Args:
        target: Existing file about to be modified.
        operation: Short description used in error messages ("edit note").

    Yields:
        The path of the backup copy.

    Raises:
        FileSystemError: If the snapshot cannot be taken. Nothing has been
            modified at that point.
        RollbackError: If the block failed and the backup could not be
            restored. The backup file is preserved.
    """
    backup = backup_path_for(target)
    try:
        shutil.copy2(target, backup)
    except OSError as exc:
        raise handle_fs_error(exc, f"create backup before {operation}", target) from exc

    try:
        yield backup
    except Exception as exc:
        try:
            _restore_backup(backup, target)
        except OSError as rollback_exc:
            logger.error(
                "Rollback of '%s' failed during %s, backup kept at '%s': %s",
                target,
                operation,
                backup,
                rollback_exc,
            )
            raise RollbackError(operation, target, exc, rollback_exc, backup) from exc
        _discard_backup(backup)
        logger.warning("Rolled back '%s' after failed %s: %s", target, operation, exc)
        raise
    _discard_backup(backup)


def guarded_update(target: Path, transform: Callable[[str], str], operation: str) -> tuple[str, str]:
    """Rewrite an existing note through ``transform`` under a backup guard.

    Args:
        target: Absolute path of the note to rewrite.
        transform: Receives the current text and returns the new text. May
            raise a :class:`VaultToolError` to abort; the note is restored.
        operation: Short description used in error messages.

    Returns:
        ``(original_text, updated_text)``. When both are equal nothing was
        written.
    """
    with backup_guard(target, operation):
        try:
            original = target.read_text(encoding="utf-8")
            updated = transform(original)
            if updated != original:
                _write_note_text(target, updated)
        except VaultToolError:
            raise
        except (OSError, UnicodeDecodeError) as exc:
            raise handle_fs_error(exc, operation, target) from exc
    return original, updated
