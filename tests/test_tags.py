"""Tests for the tag engine: pure helpers and vault-level operations."""

import pytest

from obsidian_mcp.core.frontmatter_operations import parse_note
from obsidian_mcp.core.tag_operations import (
    add_tags,
    add_tags_to_frontmatter,
    extract_tags,
    get_related_tags,
    is_parent_tag,
    matches_tag_pattern,
    normalize_tag,
    remove_inline_tags,
    remove_tags,
    remove_tags_from_frontmatter,
    rename_inline_tag,
    rename_tag,
    validate_tag,
)
from obsidian_mcp.errors import InvalidInputError, MalformedContentError


class TestTagHelpers:
    @pytest.mark.parametrize("tag", ["project", "#project", "project/active", "a1/b2/c3"])
    def test_valid_tags(self, tag):
        assert validate_tag(tag)

    @pytest.mark.parametrize("tag", ["", "#", "project//active", "/project", "bad tag", "dash-ed"])
    def test_invalid_tags(self, tag):
        assert not validate_tag(tag)

    def test_normalize_kebab_cases_camel_segments(self):
        assert normalize_tag("#ProjectActive") == "project-active"
        assert normalize_tag("Work/MeetingNotes") == "work/meeting-notes"
        assert normalize_tag("#KeepCase", normalize=False) == "KeepCase"

    def test_parent_tag(self):
        assert is_parent_tag("project", "project/active")
        assert not is_parent_tag("project", "projects/active")
        assert not is_parent_tag("project", "project")

    @pytest.mark.parametrize(
        ("pattern", "tag", "expected"),
        [
            ("project/*", "project/a", True),
            ("project/*", "project/a/b", True),
            ("project/*", "project", False),
            ("proj*/active", "project/active", True),
            ("proj*", "project/active", True),
            ("*", "a/b", True),
            ("proj*/a", "project/a/b", False),
            ("*", "anything", True),
            ("#status/*", "status/done", True),
        ],
    )
    def test_matches_tag_pattern(self, pattern, tag, expected):
        assert matches_tag_pattern(pattern, tag) is expected

    def test_related_tags(self):
        related = get_related_tags("a/b", ["a", "a/b", "a/b/c", "a/b/c/d", "a/bc"])
        assert related == {"parents": ["a"], "children": ["a/b/c"]}


class TestExtractTags:
    def test_skips_code_and_comments(self):
        content = (
            "Intro #visible\n"
            "```\n#fenced\n```\n"
            "`#inline` <!-- #hidden --> #after <!-- #also -->\n"
            "<!-- start\n#multiline\nend --> #tail\n"
        )
        assert extract_tags(content) == ["visible", "after", "tail"]

    def test_ignores_headings(self):
        assert extract_tags("# Heading\n## Sub\nword#inside and #real") == ["real"]

    def test_deduplicates_in_order(self):
        assert extract_tags("#b #a #b") == ["b", "a"]


class TestFrontmatterMutators:
    def test_add_keeps_input_unchanged(self):
        original = {"tags": ["b"]}
        updated, added = add_tags_to_frontmatter(original, ["#a", "b"])
        assert updated["tags"] == ["a", "b"]
        assert [change.tag for change in added] == ["a"]
        assert original == {"tags": ["b"]}

    def test_single_tag_stored_as_string(self):
        updated, _ = add_tags_to_frontmatter({}, ["Solo"])
        assert updated == {"tags": "solo"}

    def test_hash_prefixed_existing_tag_is_not_duplicated(self):
        updated, added = add_tags_to_frontmatter({"tags": ["#foo"]}, ["foo"])
        assert updated == {"tags": ["#foo"]}
        assert added == []

    def test_existing_tags_lose_hash_when_rewritten(self):
        updated, _ = add_tags_to_frontmatter({"tags": ["#foo"]}, ["bar"])
        assert updated["tags"] == ["bar", "foo"]

    def test_invalid_tag_rejected(self):
        with pytest.raises(InvalidInputError):
            add_tags_to_frontmatter({}, ["bad tag"])

    def test_bad_tags_field_is_malformed(self):
        with pytest.raises(MalformedContentError):
            add_tags_to_frontmatter({"tags": 5}, ["a"])

    def test_remove_reports_not_found_and_preserved(self):
        updated, report = remove_tags_from_frontmatter({"tags": ["a", "b", "a/child"]}, ["a", "zzz"])
        assert updated["tags"] == ["a/child", "b"]
        assert [change.tag for change in report.removed] == ["a"]
        assert [change.tag for change in report.preserved] == ["b", "a/child"]
        assert report.not_found == ["zzz"]

    def test_remove_with_pattern_and_empty_result(self):
        updated, report = remove_tags_from_frontmatter({"tags": "status/done", "x": 1}, [], patterns=["status/*"])
        assert updated == {"x": 1}
        assert report.removed[0].tag == "status/done"

    def test_star_pattern_removes_hierarchical_tags(self):
        updated, report = remove_tags_from_frontmatter(
            {"tags": ["project/alpha", "status/open/urgent", "solo"]}, [], patterns=["*"]
        )
        assert "tags" not in updated
        assert len(report.removed) == 3


class TestInlineMutators:
    def test_removes_tag_and_children(self):
        content, report = remove_inline_tags("Text #project and #project/alpha #other", ["project"])
        assert content == "Text and #other"
        assert [change.tag for change in report.removed] == ["project", "project/alpha"]
        assert report.removed[0].line == 1

    def test_preserve_children(self):
        content, report = remove_inline_tags("#project #project/alpha", ["project"], preserve_children=True)
        assert content == "#project/alpha"
        assert [change.tag for change in report.preserved] == ["project/alpha"]

    def test_line_left_blank_is_dropped(self):
        content, _ = remove_inline_tags("Body\n#drop\nEnd", ["drop"])
        assert content == "Body\nEnd"

    def test_code_is_untouched(self):
        source = "```\n#drop\n```\n`#drop` #drop"
        content, report = remove_inline_tags(source, ["drop"])
        assert content == "```\n#drop\n```\n`#drop`"
        assert len(report.removed) == 1

    def test_rename_inline_with_children(self):
        content, changes = rename_inline_tag("#old and #old/sub but #older", "old", "new")
        assert content == "#new and #new/sub but #older"
        assert [change.tag for change in changes] == ["new", "new/sub"]


class TestVaultTagOperations:
    def test_add_tags_to_frontmatter_and_content(self, vault, write_note):
        note = write_note("plan.md", "---\ntitle: Plan\n---\n\nBody")
        result = add_tags(vault, ["plan"], ["Project", "status/active"], location="both")

        assert result["notes_updated"] == 1
        assert result["tags"] == ["project", "status/active"]
        parsed = parse_note(note.read_text(encoding="utf-8"))
        assert parsed.frontmatter == {"title": "Plan", "tags": ["project", "status/active"]}
        assert parsed.content == "Body\n\n#project #status/active"

    def test_add_tags_reports_missing_note_and_continues(self, vault, write_note):
        write_note("a.md", "A")
        result = add_tags(vault, ["missing", "a"], ["x"])
        statuses = {item["path"]: item["status"] for item in result["results"]}
        assert statuses == {"missing": "error", "a.md": "updated"}

    def test_add_existing_tag_is_unchanged(self, vault, write_note):
        content = "---\ntags: x\n---\n\nA"
        note = write_note("a.md", content)
        result = add_tags(vault, ["a"], ["x"])
        assert result["results"][0]["status"] == "unchanged"
        assert note.read_text(encoding="utf-8") == content

    def test_add_invalid_tag_writes_nothing(self, vault, write_note):
        note = write_note("a.md", "A")
        with pytest.raises(InvalidInputError):
            add_tags(vault, ["a"], ["ok", "not ok"])
        assert note.read_text(encoding="utf-8") == "A"

    def test_remove_tags_everywhere(self, vault, write_note):
        note = write_note("a.md", "---\ntags: [draft, keep]\n---\n\nText #draft here\n#draft/v2")
        result = remove_tags(vault, ["a"], ["draft"])
        entry = result["results"][0]
        assert entry["status"] == "updated"
        assert entry["not_found"] == []
        assert len(entry["removed"]) == 3
        parsed = parse_note(note.read_text(encoding="utf-8"))
        assert parsed.frontmatter == {"tags": "keep"}
        assert parsed.content == "Text here"

    def test_remove_tag_not_present(self, vault, write_note):
        write_note("a.md", "Plain")
        entry = remove_tags(vault, ["a"], ["ghost"])["results"][0]
        assert entry["status"] == "unchanged"
        assert entry["not_found"] == ["ghost"]

    def test_rename_tag_across_vault(self, vault, write_note):
        first = write_note("one.md", "---\ntags: [project/alpha, misc]\n---\n\nSee #project")
        second = write_note("sub/two.md", "---\ntitle: Two\n---\nOnly #project/beta here")
        untouched = write_note("three.md", "#unrelated")

        result = rename_tag(vault, "#project", "work")

        assert sorted(result["notes_updated"]) == ["one.md", "sub/two.md"]
        assert result["frontmatter_changes"] == 1
        assert result["content_changes"] == 2
        assert parse_note(first.read_text(encoding="utf-8")).frontmatter["tags"] == ["misc", "work/alpha"]
        assert "#work" in first.read_text(encoding="utf-8")
        assert second.read_text(encoding="utf-8") == "---\ntitle: Two\n---\nOnly #work/beta here"
        assert untouched.read_text(encoding="utf-8") == "#unrelated"

    def test_rename_to_invalid_tag(self, vault):
        with pytest.raises(InvalidInputError):
            rename_tag(vault, "a", "b c")
