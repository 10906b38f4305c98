import os

import pytest

from obsidian_mcp.core.vault_operations import safe_join_path, validate_vault_path
from obsidian_mcp.errors import PathRejectedError


class TestValidateVaultPath:
    def test_relative_target_inside_vault(self, vault):
        assert validate_vault_path(vault.path, "Projects/Plan.md") == (vault.path / "Projects/Plan.md").resolve()

    def test_vault_root_itself_is_allowed(self, vault):
        assert validate_vault_path(vault.path, vault.path) == vault.path.resolve()

    @pytest.mark.parametrize("target", ["../../etc/passwd", "../outside.md", "Projects/../../escape.md"])
    def test_traversal_is_rejected(self, vault, target):
        with pytest.raises(PathRejectedError, match="must be within the vault directory"):
            validate_vault_path(vault.path, target)

    def test_absolute_target_outside_vault(self, vault, tmp_path):
        with pytest.raises(PathRejectedError):
            validate_vault_path(vault.path, tmp_path / "elsewhere.md")

    def test_sibling_with_shared_prefix_is_rejected(self, vault):
        with pytest.raises(PathRejectedError):
            validate_vault_path(vault.path, vault.path.parent / f"{vault.path.name}-other" / "note.md")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need extra privileges on Windows")
    def test_symlink_escaping_vault_is_rejected(self, vault, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.md").write_text("secret", encoding="utf-8")
        os.symlink(outside, vault.path / "link")

        with pytest.raises(PathRejectedError):
            validate_vault_path(vault.path, "link/secret.md")

    @pytest.mark.skipif(os.name == "nt", reason="symlinks need extra privileges on Windows")
    def test_symlink_within_vault_is_allowed(self, vault):
        (vault.path / "real").mkdir()
        os.symlink(vault.path / "real", vault.path / "alias")
        assert validate_vault_path(vault.path, "alias/note.md") == (vault.path / "real/note.md").resolve()


class TestSafeJoinPath:
    def test_joins_segments(self, vault):
        assert safe_join_path(vault.path, ".trash", "Old.md") == (vault.path / ".trash/Old.md").resolve()

    def test_escape_through_segments_is_rejected(self, vault):
        with pytest.raises(PathRejectedError):
            safe_join_path(vault.path, "..", "..", "etc", "passwd")
