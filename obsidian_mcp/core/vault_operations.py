"""Core vault operations and validation."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Iterator, Optional, Union

from obsidian_mcp.core.local_filesystem import check_local_path
from obsidian_mcp.core.path_validation import (
    PlatformProfile,
    check_path_characters,
    check_suspicious_path,
    current_platform,
    normalize_path,
)
from obsidian_mcp.data_models import VaultMetadata
from obsidian_mcp.errors import NotFoundError, NoteNotFoundError, PathRejectedError, handle_fs_error


async def check_path_safety(
    path: str,
    platform: Optional[PlatformProfile] = None,
    expect_directory: bool = True,
) -> Optional[str]:
    """Decide whether ``path`` may be used as a vault root.

    Runs the character check, stats the path, verifies local storage and
    finally rejects suspicious locations. The first failing check wins.

    Args:
        path: Absolute path to inspect.
        platform: Rule set to apply. Defaults to the host platform.
        expect_directory: Reject the path when it exists but is not a directory.

    Returns:
        ``None`` when the path is approved, otherwise the rejection reason.
    """
    if not isinstance(path, str) or not path:
        return "Invalid path provided to path safety check"

    platform = platform or current_platform()

    reason = check_path_characters(path, platform)
    if reason:
        return reason

    try:
        is_directory = await asyncio.to_thread(os.path.isdir, path)
        exists = is_directory or await asyncio.to_thread(os.path.exists, path)
    except OSError as exc:
        return f"Failed to access path info: {exc}"
    if not exists:
        return "Path does not exist"
    if expect_directory and not is_directory:
        return "Path is not a directory"

    reason = await check_local_path(path, platform)
    if reason:
        return reason

    return check_suspicious_path(path, platform)


def validate_vault_path(vault_path: Union[str, Path], target_path: Union[str, Path]) -> Path:
    """Confirm a resolved target stays inside its vault.

    Args:
        vault_path: Absolute vault root.
        target_path: Candidate path, absolute or relative to the vault root.

    Returns:
        The resolved absolute target path.

    Raises:
        PathRejectedError: If the target resolves outside the vault root.
    """
    vault_root = Path(vault_path).resolve(strict=False)
    candidate = Path(target_path)
    if not candidate.is_absolute():
        candidate = vault_root / candidate
    candidate = candidate.resolve(strict=False)

    if candidate != vault_root and not candidate.is_relative_to(vault_root):
        raise PathRejectedError(
            f"Path must be within the vault directory. Path: {target_path}, Vault: {vault_path}"
        )
    return candidate


def safe_join_path(vault_path: Union[str, Path], *segments: str) -> Path:
    """Join ``segments`` onto the vault root and reject any escape."""
    return validate_vault_path(vault_path, Path(vault_path).joinpath(*segments))


def ensure_markdown_extension(path: str) -> str:
    """Return ``path`` normalized and guaranteed to end in ``.md``.

    Examples:
        >>> ensure_markdown_extension("Projects\\\\Plan")
        'Projects/Plan.md'
        >>> ensure_markdown_extension("Docs/Overview.MD")
        'Docs/Overview.md'
    """
    normalized = normalize_path(path)
    if normalized.lower().endswith(".md"):
        return normalized[:-3] + ".md"
    return f"{normalized}.md"


def _reject_bad_relative_path(path: str) -> None:
    reason = check_path_characters(path)
    if reason:
        raise PathRejectedError(f"Invalid note path '{path}': {reason}")


def resolve_vault_relative(vault: VaultMetadata, path: str) -> Path:
    """Resolve a vault-relative file or folder path to an absolute path.

    An empty string (or ``"/"``) addresses the vault root.
    """
    cleaned = path.strip().strip("/\\")
    if not cleaned:
        return validate_vault_path(vault.path, vault.path)
    _reject_bad_relative_path(cleaned)
    return safe_join_path(vault.path, normalize_path(cleaned))


def resolve_note_path(vault: VaultMetadata, path: str) -> Path:
    """Resolve a vault-relative note path to an absolute ``.md`` path.

    Args:
        vault: Vault metadata.
        path: Note path relative to the vault root, with or without ``.md``.

    Returns:
        The absolute :class:`Path` to the note inside ``vault``.

    Raises:
        PathRejectedError: If the path is malformed or escapes the vault.
    """
    _reject_bad_relative_path(path)
    return safe_join_path(vault.path, ensure_markdown_extension(path))


def _relative_to_vault(vault: VaultMetadata, path: Path) -> Path:
    try:
        return path.relative_to(vault.path.resolve(strict=False))
    except ValueError:
        return path.relative_to(vault.path)


def relative_note_path(vault: VaultMetadata, path: Path) -> str:
    """Vault-relative, forward-slash path of ``path`` including its extension."""
    return _relative_to_vault(vault, path).as_posix()


def note_display_name(vault: VaultMetadata, path: Path) -> str:
    """Convert a note path into a normalized display name without extension.

    Args:
        vault: Vault metadata.
        path: Absolute path to the note within the vault.

    Returns:
        A forward-slash separated string suitable for UI display.
    """
    relative = _relative_to_vault(vault, path)
    return relative.with_suffix("").as_posix()


def ensure_vault_ready(vault: VaultMetadata) -> None:
    """Ensure the target vault directory is accessible before performing operations.

    Args:
        vault: Metadata describing the vault to use.

    Raises:
        NotFoundError: If the vault path does not exist or is not a directory.
    """
    if not vault.path.is_dir():
        raise NotFoundError(f"Vault '{vault.name}' is not accessible at {vault.path}")


def _walk_visible(root: Path) -> Iterator[Path]:
    for current, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not name.startswith("."))
        for filename in sorted(filenames):
            if not filename.startswith("."):
                yield Path(current) / filename


def iter_markdown_files(root: Path) -> Iterator[Path]:
    """Yield every markdown file below ``root``, skipping hidden entries."""
    for path in _walk_visible(root):
        if path.suffix.lower() == ".md":
            yield path


def iter_non_markdown_files(root: Path) -> Iterator[Path]:
    """Yield every non-markdown file below ``root``, skipping hidden entries."""
    for path in _walk_visible(root):
        if path.suffix.lower() != ".md":
            yield path


def require_existing_note(vault: VaultMetadata, path: str) -> Path:
    """Resolve ``path`` and insist that the note exists.

    Raises:
        PathRejectedError: If the path is malformed or escapes the vault.
        NoteNotFoundError: If no file exists at the resolved location.
    """
    ensure_vault_ready(vault)
    target = resolve_note_path(vault, path)
    if not target.is_file():
        raise NoteNotFoundError(path)
    return target


def read_note_text(path: Path) -> str:
    """Read a note as UTF-8, converting OS errors into typed errors."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise handle_fs_error(exc, "read note", path) from exc
