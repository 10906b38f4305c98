"""Path normalization and string-level safety checks.

Every validator in this module is synchronous and pure: it inspects a path
string and returns ``None`` when the path is acceptable or a human-readable
reason when it is not. Only :func:`normalize_path` and
:func:`check_path_overlap` raise, because their callers have no sensible way
to continue with a bad value.

The target platform is passed in explicitly as a :class:`PlatformProfile` so
Windows rules can be exercised on any host.
"""

from __future__ import annotations

import ntpath
import os
import posixpath
import re
import sys
from enum import Enum
from typing import Iterable, Optional

from obsidian_mcp.constants import (
    MAX_COMPONENT_LENGTH,
    MAX_VAULT_PATH_LENGTH,
    OBSIDIAN_CONFIG_DIR,
    POSIX_MAX_PATH_LENGTH,
    WINDOWS_MAX_PATH_LENGTH,
)
from obsidian_mcp.errors import InvalidPathError, VaultConfigurationError


class PlatformProfile(str, Enum):
    """Filesystem rule set applied by the validators."""

    POSIX = "posix"
    WINDOWS = "windows"


def current_platform() -> PlatformProfile:
    """Return the profile matching the running interpreter."""
    return PlatformProfile.WINDOWS if sys.platform == "win32" else PlatformProfile.POSIX


# Case-insensitive; entries ending in ``*`` are plain prefix matches, the rest
# match the directory itself and anything below it.
SYSTEM_DIRECTORIES: tuple[str, ...] = (
    "/etc",
    "/bin",
    "/sbin",
    "/usr",
    "/var",
    "/tmp",
    "/dev",
    "/sys",
    "/proc",
    "/boot",
    "C:/Windows",
    "C:/Program Files*",
    "C:/ProgramData",
    "C:/Users/All Users",
    "C:/System32",
)

_SEPARATORS = re.compile(r"[\\/]")
_DRIVE_PREFIX = re.compile(r"^[A-Za-z]:(?:[\\/]|$)")
_BARE_DRIVE = re.compile(r"^[A-Za-z]:$")
_DRIVE_ROOT = re.compile(r"^[A-Za-z]:[\\/]?$")
_CONTROL_CHARACTERS = re.compile(r"[\x01-\x1f\x7f]")
_WINDOWS_RESERVED = re.compile(r"^(con|prn|aux|nul|com[1-9]|lpt[1-9])(\..*)?$", re.IGNORECASE)
_WINDOWS_INVALID = re.compile(r'[<>:"|?*]')
_FILENAME_INVALID = re.compile(r'[<>"|?*]')
_CONSECUTIVE_SEPARATORS = re.compile(r"[\\/]{2,}")


def _components(path: str) -> list[str]:
    return _SEPARATORS.split(path)


def normalize_path(input_path: str, platform: Optional[PlatformProfile] = None) -> str:
    r"""Canonicalize a path string for prefix comparison.

    UNC paths keep exactly two leading slashes, drive-letter paths keep their
    drive, ``./`` and ``../`` prefixed paths are made absolute against the
    working directory and everything else only has its backslashes turned
    into forward slashes. Absolute paths are never resolved against the
    filesystem here; symlinks are :func:`check_local_path`'s concern.

    Args:
        input_path: Raw path using either separator convention.
        platform: Rule set for the filename check. Defaults to the host.

    Returns:
        The canonical, forward-slash separated path.

    Raises:
        InvalidPathError: If the input is empty, not a string, or its final
            component contains characters invalid for ``platform``.

    Examples:
        >>> normalize_path(r"\\server\share\notes")
        '//server/share/notes'
        >>> normalize_path(r"C:\Users\me\..\vault", PlatformProfile.WINDOWS)
        'C:/Users/vault'
    """
    if not isinstance(input_path, str) or not input_path:
        raise InvalidPathError(f"Invalid path: {input_path!r}")

    platform = platform or current_platform()

    filename = _components(input_path.rstrip("\\/"))[-1]
    if platform is PlatformProfile.WINDOWS:
        invalid = bool(_FILENAME_INVALID.search(filename)) or (
            ":" in filename and not _BARE_DRIVE.match(filename)
        )
    else:
        invalid = bool(_FILENAME_INVALID.search(filename))
    if invalid:
        raise InvalidPathError(f"Filename contains invalid characters: {filename}")

    if input_path.startswith("\\\\") or input_path.startswith("//"):
        return "//" + input_path[2:].replace("\\", "/")

    if _DRIVE_PREFIX.match(input_path):
        return ntpath.normpath(input_path).replace("\\", "/")

    converted = input_path.replace("\\", "/")
    if converted.startswith("./") or converted.startswith("../"):
        return os.path.abspath(converted).replace("\\", "/")

    return converted


def check_path_characters(path: str, platform: Optional[PlatformProfile] = None) -> Optional[str]:
    """Inspect a path string for malformed or dangerous content.

    The checks run in a fixed order so that, for example, the ``.`` inside a
    Windows device path is reported as a device path and not as a traversal
    component.

    Returns:
        ``None`` when the path is acceptable, otherwise the rejection reason.
    """
    if not isinstance(path, str) or not path:
        return "Path must be a non-empty string"

    platform = platform or current_platform()
    windows = platform is PlatformProfile.WINDOWS

    max_length = WINDOWS_MAX_PATH_LENGTH if windows else POSIX_MAX_PATH_LENGTH
    if len(path) > max_length:
        return f"Path exceeds maximum length ({max_length} characters)"

    components = _components(path)
    for component in components:
        if len(component) > MAX_COMPONENT_LENGTH:
            return f'Directory/file name too long: "{component[:50]}..."'

    if windows and (path.startswith("\\\\.\\") or path.startswith("\\\\?\\")):
        return "Device paths are not allowed"

    if windows and _DRIVE_ROOT.match(path):
        return "Cannot use drive root directory"
    if path.strip("\\/") == "":
        return "Cannot use filesystem root directory"

    if "." in components or ".." in components:
        return "Path cannot contain relative components (. or ..)"

    if "\x00" in path:
        if windows:
            return "Contains null characters, which are not allowed on Windows"
        return "Contains null characters, which are not allowed on Unix"

    if _CONTROL_CHARACTERS.search(path):
        return "Contains non-printable characters"

    if windows:
        if any(_WINDOWS_RESERVED.match(component) for component in components):
            return "Contains Windows reserved names (CON, PRN, etc.)"

        start = 1 if _BARE_DRIVE.match(components[0]) else 0
        if any(_WINDOWS_INVALID.search(component) for component in components[start:]):
            return 'Contains characters not allowed on Windows (<>:"|?*)'

    if "\ufffd" in path:
        return "Contains invalid Unicode characters"

    if path != path.strip():
        return "Contains leading or trailing whitespace"

    if _CONSECUTIVE_SEPARATORS.search(path):
        return "Contains consecutive path separators"

    return None


def _matches_system_directory(path: str) -> bool:
    candidate = path.replace("\\", "/").rstrip("/").lower()
    for entry in SYSTEM_DIRECTORIES:
        entry = entry.lower()
        if entry.endswith("*"):
            if candidate.startswith(entry[:-1]):
                return True
        elif candidate == entry or candidate.startswith(entry + "/"):
            return True
    return False


def check_suspicious_path(
    path: str,
    platform: Optional[PlatformProfile] = None,
    home: Optional[str] = None,
) -> Optional[str]:
    """Reject locations that are inappropriate for a vault even when local.

    Hidden components (other than ``.obsidian``), system directories, the
    home directory root and overly long paths are refused, followed by a
    final :func:`check_path_characters` pass.
    """
    if not isinstance(path, str) or not path:
        return "Path must be a non-empty string"

    if any(
        component.startswith(".") and component != OBSIDIAN_CONFIG_DIR
        for component in _components(path)
    ):
        return "Contains hidden directories"

    if _matches_system_directory(path):
        return "Points to a system directory"

    home_dir = home if home is not None else os.path.expanduser("~")
    if path.replace("\\", "/").rstrip("/") == home_dir.replace("\\", "/").rstrip("/"):
        return "Points to home directory root"

    if len(path) > MAX_VAULT_PATH_LENGTH:
        return f"Path is too long (maximum {MAX_VAULT_PATH_LENGTH} characters)"

    return check_path_characters(path, platform)


def sanitize_vault_name(name: str) -> str:
    """Lowercase ``name`` and collapse every non-alphanumeric run to ``-``."""
    sanitized = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return sanitized or "unnamed-vault"


def _comparable(path: str) -> str:
    normalized = normalize_path(path)
    if normalized.startswith("//"):
        return "//" + posixpath.normpath(normalized[2:]).rstrip("/")
    collapsed = posixpath.normpath(normalized)
    return collapsed if collapsed == "/" else collapsed.rstrip("/")


def is_parent_path(parent: str, child: str) -> bool:
    """Return True if ``child`` lies strictly below ``parent``.

    Identical paths are not considered parent and child.
    """
    parent_path = _comparable(parent)
    child_path = _comparable(child)
    if parent_path == child_path:
        return False
    prefix = parent_path if parent_path.endswith("/") else parent_path + "/"
    return child_path.startswith(prefix)


def check_path_overlap(paths: Iterable[str]) -> None:
    """Ensure no two vault paths are duplicates or nested inside each other.

    Raises:
        VaultConfigurationError: Naming both the original and the normalized
            form of the offending paths.
    """
    originals = list(paths)
    normalized = [_comparable(path) for path in originals]

    seen: dict[str, int] = {}
    for index, path in enumerate(normalized):
        if path in seen:
            first = seen[path]
            raise VaultConfigurationError(
                "Duplicate vault path provided:\n"
                f"  Original paths:\n"
                f"    1: {originals[first]}\n"
                f"    2: {originals[index]}\n"
                f"  Both resolve to: {path}"
            )
        seen[path] = index

    for i in range(len(normalized)):
        for j in range(i + 1, len(normalized)):
            if is_parent_path(normalized[i], normalized[j]) or is_parent_path(normalized[j], normalized[i]):
                raise VaultConfigurationError(
                    "Vault paths cannot overlap:\n"
                    f"  Path 1: {originals[i]}\n"
                    f"  Path 2: {originals[j]}\n"
                    "  (One vault directory cannot be inside another)\n"
                    "  Normalized paths:\n"
                    f"    1: {normalized[i]}\n"
                    f"    2: {normalized[j]}"
                )
