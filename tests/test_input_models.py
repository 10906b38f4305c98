"""Tests for Pydantic input models.

This test suite validates the input validation logic for MCP tools,
ensuring that:
- Valid inputs are accepted and normalized correctly
- Invalid inputs raise ValidationError with descriptive messages
- Cross-field rules (move, rename, edit) are enforced
- Schema generation produces correct JSON schemas for MCP
"""

from datetime import date

import pytest
from pydantic import ValidationError

from obsidian_mcp.models import (
    AddTagsInput,
    AliasInput,
    BaseNoteInput,
    CreateDirectoryInput,
    EditNoteInput,
    GetDailyNotePathInput,
    ListNotesInput,
    MoveNoteInput,
    RemoveTagsInput,
    RenameTagInput,
    SearchVaultInput,
    ToggleTaskInput,
)


class TestBaseNoteInput:
    """Test suite for BaseNoteInput model validation."""

    def test_valid_nested_path(self):
        """Test that nested paths with folders are accepted."""
        model = BaseNoteInput(vault="personal", path="Daily Notes/2025-10-27")
        assert model.path == "Daily Notes/2025-10-27"

    def test_md_extension_is_kept(self):
        """Test that the .md extension is left for path resolution."""
        model = BaseNoteInput(vault="personal", path="Projects/Plan.md")
        assert model.path == "Projects/Plan.md"

    def test_whitespace_is_stripped(self):
        """Test that vault and path are stripped of surrounding whitespace."""
        model = BaseNoteInput(vault="  personal  ", path="  Note  ")
        assert model.vault == "personal"
        assert model.path == "Note"

    def test_dots_inside_names_are_allowed(self):
        """Test that dots within a filename are not treated as traversal."""
        model = BaseNoteInput(vault="work", path="Files/my.config.file")
        assert model.path == "Files/my.config.file"

    # Validation Error Tests

    def test_vault_is_required(self):
        """Test that omitting the vault raises ValidationError."""
        with pytest.raises(ValidationError):
            BaseNoteInput(path="Note")

    def test_blank_vault_raises_error(self):
        """Test that a whitespace-only vault name is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(vault="   ", path="Note")
        assert "Vault name cannot be empty" in str(exc_info.value)

    def test_blank_path_raises_error(self):
        """Test that a whitespace-only path is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(vault="work", path="   ")
        assert "cannot be empty" in str(exc_info.value)

    @pytest.mark.parametrize("path", ["/etc/passwd", "\\share\\note", "C:\\Users\\note"])
    def test_absolute_path_raises_error(self, path):
        """Test that absolute paths and drive letters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(vault="work", path=path)
        assert "must be relative to the vault root" in str(exc_info.value)

    @pytest.mark.parametrize("path", ["../secrets", "Notes/../../etc", "./Note", "Notes\\..\\x"])
    def test_traversal_raises_error(self, path):
        """Test that '.' and '..' segments are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(vault="work", path=path)
        assert "'.' or '..'" in str(exc_info.value)

    def test_schema_lists_required_fields(self):
        """Test that the generated JSON schema marks vault and path as required."""
        schema = BaseNoteInput.model_json_schema()
        assert set(schema["required"]) == {"vault", "path"}


class TestNoteInputs:
    """Test suite for note operation models."""

    def test_edit_append_requires_content(self):
        """Test that append with blank content is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            EditNoteInput(vault="work", path="Log", operation="append", content="  ")
        assert "Content cannot be empty when using 'append'" in str(exc_info.value)

    def test_edit_replace_accepts_empty_content(self):
        """Test that replace may clear the body."""
        model = EditNoteInput(vault="work", path="Log", operation="replace", content="")
        assert model.content == ""

    def test_edit_rejects_unknown_operation(self):
        """Test that only append, prepend and replace are allowed."""
        with pytest.raises(ValidationError):
            EditNoteInput(vault="work", path="Log", operation="insert", content="x")

    def test_move_requires_different_paths(self):
        """Test that moving a note onto itself is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            MoveNoteInput(vault="work", source="A.md", destination="A.md")
        assert "must be different" in str(exc_info.value)

    def test_move_defaults_to_updating_links(self):
        """Test that link updates are on by default."""
        model = MoveNoteInput(vault="work", source="A.md", destination="Archive/A.md")
        assert model.update_links is True

    def test_move_validates_both_paths(self):
        """Test that the destination is validated like the source."""
        with pytest.raises(ValidationError):
            MoveNoteInput(vault="work", source="A.md", destination="../A.md")

    def test_create_directory_rejects_traversal(self):
        """Test that directory paths cannot climb out of the vault."""
        with pytest.raises(ValidationError):
            CreateDirectoryInput(vault="work", path="../outside")


class TestSearchInputs:
    """Test suite for search and listing models."""

    def test_query_is_stripped(self):
        """Test that surrounding whitespace is removed from the query."""
        assert SearchVaultInput(vault="work", query="  roadmap ").query == "roadmap"

    def test_blank_query_raises_error(self):
        """Test that whitespace-only queries are rejected."""
        with pytest.raises(ValidationError):
            SearchVaultInput(vault="work", query="   ")

    def test_invalid_search_type(self):
        """Test that search_type is restricted to its literal values."""
        with pytest.raises(ValidationError):
            SearchVaultInput(vault="work", query="x", search_type="everything")

    def test_folder_slashes_are_trimmed(self):
        """Test that folder paths are normalized and empty means the vault root."""
        assert ListNotesInput(vault="work", path="/Projects/").path == "Projects"
        assert ListNotesInput(vault="work", path="/").path is None


class TestTagInputs:
    """Test suite for tag operation models."""

    def test_add_tags_defaults(self):
        """Test default location and normalization for add."""
        model = AddTagsInput(vault="work", paths=["A.md"], tags=[" #project "])
        assert model.tags == ["#project"]
        assert model.location == "frontmatter"
        assert model.normalize is True

    def test_remove_tags_defaults(self):
        """Test default location and child handling for remove."""
        model = RemoveTagsInput(vault="work", paths=["A.md"], tags=["draft"])
        assert model.location == "both"
        assert model.preserve_children is False
        assert model.patterns == []

    def test_empty_lists_raise_error(self):
        """Test that paths and tags need at least one entry."""
        with pytest.raises(ValidationError):
            AddTagsInput(vault="work", paths=[], tags=["x"])
        with pytest.raises(ValidationError):
            AddTagsInput(vault="work", paths=["A.md"], tags=[])

    def test_blank_tag_raises_error(self):
        """Test that blank or bare '#' tags are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            AddTagsInput(vault="work", paths=["A.md"], tags=["ok", "#"])
        assert "Tags cannot be empty" in str(exc_info.value)

    def test_rename_requires_different_tags(self):
        """Test that renaming a tag to itself is rejected."""
        with pytest.raises(ValidationError):
            RenameTagInput(vault="work", old_tag="#project", new_tag="project")


class TestVaultInputs:
    """Test suite for vault-level models."""

    def test_daily_note_date_is_parsed(self):
        """Test that ISO date strings become date objects."""
        model = GetDailyNotePathInput(vault="personal", date="2025-10-27")
        assert model.date == date(2025, 10, 27)

    def test_daily_note_date_defaults_to_none(self):
        """Test that the date is optional."""
        assert GetDailyNotePathInput(vault="personal").date is None

    def test_invalid_date_raises_error(self):
        """Test that malformed dates are rejected."""
        with pytest.raises(ValidationError):
            GetDailyNotePathInput(vault="personal", date="27/10/2025")

    def test_alias_is_stripped(self):
        """Test that alias whitespace is removed."""
        assert AliasInput(vault="work", path="A.md", alias="  Plan  ").alias == "Plan"

    def test_blank_alias_raises_error(self):
        """Test that whitespace-only aliases are rejected."""
        with pytest.raises(ValidationError):
            AliasInput(vault="work", path="A.md", alias="   ")

    def test_toggle_line_must_be_positive(self):
        """Test that line numbers are 1-based."""
        with pytest.raises(ValidationError):
            ToggleTaskInput(vault="work", path="Todo.md", line=0)
