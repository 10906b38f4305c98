"""Local-storage verification for vault roots.

Checks that a path resolves without symlink loops, does not escape its parent
directory through a symlink, and lives on local fixed storage. Storage type
is determined by shelling out (``df`` on POSIX, ``wmic``/PowerShell on
Windows). Any probe failure, timeout or unrecognized answer rejects the path.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import ntpath
import os
import posixpath
import re
import subprocess
from typing import Optional

from obsidian_mcp.constants import PROBE_TIMEOUT_SECONDS
from obsidian_mcp.core.path_validation import PlatformProfile, current_platform

logger = logging.getLogger(__name__)

MOUNT_PREFIXES: tuple[str, ...] = ("/net/", "/mnt/", "/media/", "/Volumes/")

# Win32_LogicalDisk.DriveType: 2 removable, 3 local fixed, 4 network, 5 CD-ROM, 6 RAM disk
LOCAL_FIXED_DRIVE_TYPE = 3

_NETWORK_FILESYSTEM = re.compile(
    r"^(?:nfs|cifs|smb|afp|ftp|ssh|davfs|fuse\.sshfs|fuse\.davfs)"
    r"|^[^\s/]+:"
    r"|^//"
    r"|\bfuse\."
    r"|network",
    re.IGNORECASE,
)
_DRIVE_TYPE = re.compile(r"DriveType=(\d+)")
_DRIVE_LETTER = re.compile(r"^([A-Za-z]):")

UNVERIFIED_DRIVE = "Unable to verify if drive is local"
UNSUPPORTED_DRIVE = "Network, removable, or unknown drive type is not supported"
UNVERIFIED_FILESYSTEM = "Unable to verify if filesystem is local"
NETWORK_FILESYSTEM = "Network or remote filesystem is not supported"


async def _run_probe(*argv: str, timeout: float = PROBE_TIMEOUT_SECONDS) -> str:
    """Run an external command and return its decoded standard output.

    Raises:
        asyncio.TimeoutError: The command did not finish within ``timeout``.
        subprocess.CalledProcessError: The command exited with a non-zero code.
        OSError: The executable could not be started.
    """
    process = await asyncio.create_subprocess_exec(
        *argv,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise

    if process.returncode != 0:
        raise subprocess.CalledProcessError(process.returncode, argv, stdout, stderr)
    if stderr:
        logger.warning("Probe %s wrote to stderr: %s", argv[0], stderr.decode(errors="replace").strip())
    return stdout.decode(errors="replace")


def _resolve_real_path(path: str) -> str:
    return os.path.realpath(path, strict=True)


def _is_on_mount(real_path: str) -> bool:
    return any(real_path.startswith(prefix) for prefix in MOUNT_PREFIXES)


async def _query_drive_type(drive: str) -> int:
    """Return the Win32 drive type for ``drive``, trying wmic then PowerShell."""
    try:
        output = await _run_probe(
            "wmic", "logicaldisk", "where", f"DeviceID='{drive}:'", "get", "DriveType", "/value"
        )
    except (OSError, subprocess.CalledProcessError, asyncio.TimeoutError) as exc:
        logger.debug("wmic drive probe failed for %s: (%s), falling back to PowerShell", drive, exc)
        output = await _run_probe(
            "powershell",
            "-Command",
            "(Get-WmiObject -Class Win32_LogicalDisk | "
            f"Where-Object {{ $_.DeviceID -eq '{drive}:' }}).DriveType",
        )
        output = f"DriveType={output.strip()}"

    match = _DRIVE_TYPE.search(output)
    return int(match.group(1)) if match else 0


async def _check_windows_storage(real_path: str) -> Optional[str]:
    if real_path.startswith("\\\\") or real_path.startswith("//"):
        return UNSUPPORTED_DRIVE

    match = _DRIVE_LETTER.match(real_path)
    if not match:
        return UNVERIFIED_DRIVE

    try:
        drive_type = await _query_drive_type(match.group(1).upper())
    except asyncio.TimeoutError:
        logger.warning("Drive type probe timed out for %s", real_path)
        return UNSUPPORTED_DRIVE
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.warning("Drive type probe failed for %s: %s", real_path, exc)
        return UNVERIFIED_DRIVE

    if drive_type != LOCAL_FIXED_DRIVE_TYPE:
        logger.warning("Rejected %s: drive type %d is not local fixed storage", real_path, drive_type)
        return UNSUPPORTED_DRIVE
    return None


async def _check_posix_storage(real_path: str) -> Optional[str]:
    if not _is_on_mount(real_path):
        return None

    try:
        output = await _run_probe("df", "-P", real_path)
    except asyncio.TimeoutError:
        logger.warning("Filesystem probe timed out for %s", real_path)
        return NETWORK_FILESYSTEM
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.warning("Filesystem probe failed for %s: %s", real_path, exc)
        return UNVERIFIED_FILESYSTEM

    lines = [line for line in output.splitlines() if line.strip()]
    if len(lines) < 2:
        return UNVERIFIED_FILESYSTEM

    if _NETWORK_FILESYSTEM.search(lines[-1]):
        logger.warning("Rejected %s: mounted from %s", real_path, lines[-1].split()[0])
        return NETWORK_FILESYSTEM
    return None


async def check_local_path(path: str, platform: Optional[PlatformProfile] = None) -> Optional[str]:
    """Verify that ``path`` is anchored on local, fixed storage.

    Args:
        path: Absolute path that is expected to exist.
        platform: Rule set to apply. Defaults to the host platform.

    Returns:
        ``None`` if the path is local, otherwise the rejection reason.
    """
    platform = platform or current_platform()

    try:
        real_path = await asyncio.to_thread(_resolve_real_path, path)
    except RuntimeError:
        return "Contains circular symlinks"
    except OSError as exc:
        if exc.errno == errno.ELOOP:
            return "Contains circular symlinks"
        return f"Failed to resolve path realpath: {exc}"

    pathmod = ntpath if platform is PlatformProfile.WINDOWS else posixpath
    original_dir = pathmod.dirname(pathmod.abspath(path))
    real_dir = pathmod.dirname(real_path)
    if original_dir != real_dir and not _is_on_mount(real_path):
        return "Path contains symlinks that point outside the parent directory"

    if platform is PlatformProfile.WINDOWS:
        return await _check_windows_storage(real_path)
    return await _check_posix_storage(real_path)
