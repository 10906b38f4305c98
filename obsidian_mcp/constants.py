"""Module-level constants for the Obsidian MCP server."""

import os
from pathlib import Path

# Configuration
CONFIG_PATH = Path(os.environ.get("OBSIDIAN_MCP_CONFIG", Path(__file__).parent.parent / "vaults.yaml"))
MAX_VAULTS = 10
OBSIDIAN_CONFIG_DIR = ".obsidian"
DAILY_NOTES_CONFIG_FILE = "daily-notes.json"
BOOKMARKS_FILE = "bookmarks.json"
TRASH_DIR = ".trash"

# Path limits
WINDOWS_MAX_PATH_LENGTH = 260
POSIX_MAX_PATH_LENGTH = 4096
MAX_COMPONENT_LENGTH = 255
MAX_VAULT_PATH_LENGTH = 255

# Local filesystem probes (df, wmic, powershell)
PROBE_TIMEOUT_SECONDS = 5.0

# Daily notes configuration cache
DAILY_NOTES_CACHE_TTL_SECONDS = 30.0

# Backups created by mutating tools
BACKUP_SUFFIX = ".backup"

# Logging
LOG_LEVEL = os.environ.get("OBSIDIAN_MCP_LOG_LEVEL", "INFO")
