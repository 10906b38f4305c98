from pathlib import Path

import pytest
import yaml

from obsidian_mcp import config
from obsidian_mcp.config import (
    get_vault_configuration,
    load_vault_configuration,
    resolve_vault,
    set_vault_configuration,
    validate_vault_configuration,
)
from obsidian_mcp.core import path_validation
from obsidian_mcp.core.path_validation import PlatformProfile
from obsidian_mcp.data_models import VaultConfiguration, VaultMetadata
from obsidian_mcp.errors import InvalidInputError, VaultConfigurationError


def _write_config(tmp_path: Path, data) -> Path:
    config_path = tmp_path / "vaults.yaml"
    text = data if isinstance(data, str) else yaml.safe_dump(data)
    config_path.write_text(text, encoding="utf-8")
    return config_path


class TestLoadVaultConfiguration:
    def test_loads_and_sanitizes_names(self, tmp_path):
        config_path = _write_config(
            tmp_path,
            {
                "vaults": {
                    "My Work Vault!": {"path": str(tmp_path / "work"), "description": " Work notes "},
                    "personal": {"path": str(tmp_path / "personal")},
                }
            },
        )
        loaded = load_vault_configuration(config_path)

        assert list(loaded.vaults) == ["my-work-vault", "personal"]
        work = loaded.get("my-work-vault")
        assert work.path == tmp_path / "work"
        assert work.description == "Work notes"
        assert loaded.get("personal").description == ""

    def test_colliding_names_get_suffixes(self, tmp_path):
        config_path = _write_config(
            tmp_path,
            {
                "vaults": {
                    "Notes": {"path": str(tmp_path / "a")},
                    "notes": {"path": str(tmp_path / "b")},
                    "NOTES!": {"path": str(tmp_path / "c")},
                }
            },
        )
        assert list(load_vault_configuration(config_path).vaults) == ["notes", "notes-2", "notes-3"]

    def test_expands_user_directory(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        config_path = _write_config(tmp_path, {"vaults": {"home": {"path": "~/vault"}}})
        assert load_vault_configuration(config_path).get("home").path == tmp_path / "vault"

    def test_missing_file(self, tmp_path):
        with pytest.raises(VaultConfigurationError, match="not found"):
            load_vault_configuration(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(VaultConfigurationError, match="Could not read"):
            load_vault_configuration(_write_config(tmp_path, "vaults: [unclosed"))

    @pytest.mark.parametrize("data", ["", {"vaults": {}}, {"vaults": ["a"]}, {"other": 1}])
    def test_requires_vaults_mapping(self, tmp_path, data):
        with pytest.raises(VaultConfigurationError, match="non-empty 'vaults' mapping"):
            load_vault_configuration(_write_config(tmp_path, data))

    def test_too_many_vaults(self, tmp_path):
        vaults = {f"v{index}": {"path": str(tmp_path / f"v{index}")} for index in range(11)}
        with pytest.raises(VaultConfigurationError, match="Maximum allowed is 10"):
            load_vault_configuration(_write_config(tmp_path, {"vaults": vaults}))

    @pytest.mark.parametrize(
        ("entry", "message"),
        [
            ("just-a-string", "must map to a dictionary"),
            ({"description": "no path"}, "missing a valid 'path'"),
            ({"path": "   "}, "missing a valid 'path'"),
            ({"path": "/vaults/x", "description": 5}, "non-string 'description'"),
        ],
    )
    def test_invalid_entries(self, tmp_path, entry, message):
        with pytest.raises(VaultConfigurationError, match=message):
            load_vault_configuration(_write_config(tmp_path, {"vaults": {"bad": entry}}))

    def test_nested_vault_paths_are_rejected(self, tmp_path):
        config_path = _write_config(
            tmp_path,
            {
                "vaults": {
                    "outer": {"path": str(tmp_path / "vaults")},
                    "inner": {"path": str(tmp_path / "vaults" / "inner")},
                }
            },
        )
        with pytest.raises(VaultConfigurationError, match="cannot overlap"):
            load_vault_configuration(config_path)


class TestValidateVaultConfiguration:
    @pytest.fixture(autouse=True)
    def _allow_tmp(self, monkeypatch):
        monkeypatch.setattr(
            path_validation,
            "SYSTEM_DIRECTORIES",
            tuple(entry for entry in path_validation.SYSTEM_DIRECTORIES if entry not in ("/tmp", "/var")),
        )

    @staticmethod
    def _configuration(*vaults: VaultMetadata) -> VaultConfiguration:
        return VaultConfiguration({vault.name: vault for vault in vaults})

    @pytest.mark.asyncio
    async def test_obsidian_vault_passes(self, vault):
        await validate_vault_configuration(self._configuration(vault), PlatformProfile.POSIX)

    @pytest.mark.asyncio
    async def test_missing_obsidian_folder(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        with pytest.raises(VaultConfigurationError, match="missing .obsidian directory"):
            await validate_vault_configuration(
                self._configuration(VaultMetadata(name="plain", path=plain)),
                PlatformProfile.POSIX,
            )

    @pytest.mark.asyncio
    async def test_missing_path(self, tmp_path):
        with pytest.raises(VaultConfigurationError, match="Path does not exist"):
            await validate_vault_configuration(
                self._configuration(VaultMetadata(name="gone", path=tmp_path / "gone")),
                PlatformProfile.POSIX,
            )


class TestVaultRegistry:
    @pytest.fixture(autouse=True)
    def _reset(self):
        yield
        set_vault_configuration(None)

    def test_resolve_known_vault(self, vault):
        set_vault_configuration(VaultConfiguration({"test": vault}))
        assert resolve_vault("test") is vault

    def test_unknown_vault_lists_available(self, vault):
        set_vault_configuration(VaultConfiguration({"test": vault}))
        with pytest.raises(InvalidInputError, match="Unknown vault 'nope'. Available vaults: test"):
            resolve_vault("nope")

    def test_configuration_is_loaded_lazily(self, tmp_path, monkeypatch):
        config_path = _write_config(tmp_path, {"vaults": {"lazy": {"path": str(tmp_path / "lazy")}}})
        monkeypatch.setattr(
            config, "load_vault_configuration", lambda: load_vault_configuration(config_path)
        )
        set_vault_configuration(None)
        first = get_vault_configuration()
        assert list(first.vaults) == ["lazy"]
        assert get_vault_configuration() is first
