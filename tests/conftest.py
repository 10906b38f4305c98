from pathlib import Path
from typing import Callable

import pytest

from obsidian_mcp.config import set_vault_configuration
from obsidian_mcp.core import daily_notes
from obsidian_mcp.data_models import VaultConfiguration, VaultMetadata


@pytest.fixture
def vault(tmp_path: Path) -> VaultMetadata:
    """An empty vault with an ``.obsidian`` folder."""
    vault_path = tmp_path / "vault"
    (vault_path / ".obsidian").mkdir(parents=True)
    return VaultMetadata(name="test", path=vault_path, description="test vault")


@pytest.fixture
def write_note(vault: VaultMetadata) -> Callable[[str, str], Path]:
    def _write(relative: str, content: str) -> Path:
        note_path = vault.path / relative
        note_path.parent.mkdir(parents=True, exist_ok=True)
        note_path.write_text(content, encoding="utf-8")
        return note_path

    return _write


@pytest.fixture
def configured_vault(vault: VaultMetadata):
    """Register ``vault`` as the only configured vault for tool calls."""
    set_vault_configuration(VaultConfiguration({vault.name: vault}))
    yield vault
    set_vault_configuration(None)


@pytest.fixture(autouse=True)
def _clear_daily_notes_cache():
    daily_notes._config_cache.clear()
    yield
    daily_notes._config_cache.clear()
