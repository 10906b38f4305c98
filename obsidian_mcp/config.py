"""Configuration loading and vault registry."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from obsidian_mcp.constants import CONFIG_PATH, MAX_VAULTS, OBSIDIAN_CONFIG_DIR
from obsidian_mcp.core.path_validation import PlatformProfile, check_path_overlap, sanitize_vault_name
from obsidian_mcp.core.vault_operations import check_path_safety
from obsidian_mcp.data_models import VaultConfiguration, VaultMetadata
from obsidian_mcp.errors import VaultConfigurationError

logger = logging.getLogger(__name__)

_VAULT_CONFIGURATION: Optional[VaultConfiguration] = None


def _unique_name(name: str, taken: dict[str, VaultMetadata]) -> str:
    candidate = name
    suffix = 2
    while candidate in taken:
        candidate = f"{name}-{suffix}"
        suffix += 1
    return candidate


def load_vault_configuration(config_path: Path = CONFIG_PATH) -> VaultConfiguration:
    """Load and validate the vault configuration file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to ``vaults.yaml``
        at the repository root, or ``$OBSIDIAN_MCP_CONFIG``.

    Returns:
        A :class:`VaultConfiguration` keyed by sanitized vault names.

    Raises:
        VaultConfigurationError: If the file is missing or unreadable, does not
            provide the expected structure, lists too many vaults, or contains
            duplicate or nested vault paths.
    """
    if not config_path.exists():
        raise VaultConfigurationError(f"Vault configuration file not found at {config_path}")

    try:
        raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise VaultConfigurationError(f"Could not read vault configuration {config_path}: {exc}") from exc

    vaults_section = raw_config.get("vaults") if isinstance(raw_config, dict) else None
    if not isinstance(vaults_section, dict) or not vaults_section:
        raise VaultConfigurationError("Vault configuration must include a non-empty 'vaults' mapping")
    if len(vaults_section) > MAX_VAULTS:
        raise VaultConfigurationError(
            f"Too many vaults configured ({len(vaults_section)}). Maximum allowed is {MAX_VAULTS}."
        )

    processed: dict[str, VaultMetadata] = {}
    for name, entry in vaults_section.items():
        if not isinstance(entry, dict):
            raise VaultConfigurationError(f"Vault '{name}' must map to a dictionary of settings")

        raw_path = entry.get("path")
        if not isinstance(raw_path, str) or not raw_path.strip():
            raise VaultConfigurationError(f"Vault '{name}' is missing a valid 'path' string")

        description = entry.get("description") or ""
        if not isinstance(description, str):
            raise VaultConfigurationError(f"Vault '{name}' has a non-string 'description'")

        vault_name = _unique_name(sanitize_vault_name(str(name)), processed)
        if vault_name != name:
            logger.info("Vault '%s' registered as '%s'", name, vault_name)

        processed[vault_name] = VaultMetadata(
            name=vault_name,
            path=Path(os.path.abspath(os.path.expanduser(raw_path.strip()))),
            description=description.strip(),
        )

    check_path_overlap([str(vault.path) for vault in processed.values()])
    return VaultConfiguration(vaults=processed)


async def validate_vault_configuration(
    config: VaultConfiguration,
    platform: Optional[PlatformProfile] = None,
) -> None:
    """Run the path-safety checks on every vault root.

    Each root must pass the safety gate and contain an ``.obsidian`` folder.

    Raises:
        VaultConfigurationError: Naming the first vault that fails.
    """
    for vault in config.vaults.values():
        reason = await check_path_safety(str(vault.path), platform)
        if reason:
            raise VaultConfigurationError(f"Vault '{vault.name}' ({vault.path}) rejected: {reason}")
        if not (vault.path / OBSIDIAN_CONFIG_DIR).is_dir():
            raise VaultConfigurationError(
                f"Vault '{vault.name}' ({vault.path}) is not an Obsidian vault: "
                f"missing {OBSIDIAN_CONFIG_DIR} directory"
            )
        logger.info("Vault '%s' validated at '%s'", vault.name, vault.path)


def get_vault_configuration() -> VaultConfiguration:
    """Return the active configuration, loading it on first use."""
    global _VAULT_CONFIGURATION
    if _VAULT_CONFIGURATION is None:
        _VAULT_CONFIGURATION = load_vault_configuration()
    return _VAULT_CONFIGURATION


def set_vault_configuration(config: Optional[VaultConfiguration]) -> None:
    """Replace the active configuration; ``None`` forces a reload on next use."""
    global _VAULT_CONFIGURATION
    _VAULT_CONFIGURATION = config


def resolve_vault(vault: str) -> VaultMetadata:
    """Resolve a vault name to its metadata.

    Raises:
        InvalidInputError: If ``vault`` is not configured.
    """
    return get_vault_configuration().get(vault)
