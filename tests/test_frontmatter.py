import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from obsidian_mcp.core.frontmatter_operations import (
    add_alias,
    add_alias_to_frontmatter,
    list_aliases,
    parse_note,
    remove_alias,
    remove_alias_from_frontmatter,
    stringify_note,
)
from obsidian_mcp.data_models import ParsedNote, VaultMetadata
from obsidian_mcp.errors import InvalidInputError, MalformedContentError, NoteNotFoundError


class FrontmatterParsingTests(unittest.TestCase):
    def test_parse_splits_metadata_and_content(self) -> None:
        raw = "---\ntitle: Example Note\ntags:\n  - test\n---\n\nBody text."
        parsed = parse_note(raw)
        self.assertTrue(parsed.has_frontmatter)
        self.assertEqual(parsed.frontmatter, {"title": "Example Note", "tags": ["test"]})
        self.assertEqual(parsed.content, "Body text.")

    def test_parse_without_block_returns_original_content(self) -> None:
        raw = "No frontmatter here.\n---\nnot: yaml"
        parsed = parse_note(raw)
        self.assertFalse(parsed.has_frontmatter)
        self.assertEqual(parsed.frontmatter, {})
        self.assertEqual(parsed.content, raw)

    def test_parse_empty_block(self) -> None:
        parsed = parse_note("---\n---\nBody")
        self.assertTrue(parsed.has_frontmatter)
        self.assertEqual(parsed.frontmatter, {})
        self.assertEqual(parsed.content, "Body")

    def test_parse_handles_crlf(self) -> None:
        parsed = parse_note("---\r\nstatus: draft\r\n---\r\nBody")
        self.assertEqual(parsed.frontmatter, {"status": "draft"})
        self.assertEqual(parsed.content, "Body")

    def test_invalid_yaml_is_malformed(self) -> None:
        with self.assertRaises(MalformedContentError):
            parse_note("---\ntags: [unclosed\n---\nBody")

    def test_non_mapping_yaml_is_malformed(self) -> None:
        with self.assertRaises(MalformedContentError):
            parse_note("---\n- just\n- a list\n---\nBody")

    def test_stringify_writes_block_and_trims_body(self) -> None:
        note = ParsedNote(frontmatter={"title": "Plan", "tags": ["a", "b"]}, content="\n\nBody\n\n", has_frontmatter=True)
        self.assertEqual(stringify_note(note), "---\ntitle: Plan\ntags:\n- a\n- b\n---\n\nBody")

    def test_stringify_empty_frontmatter_returns_body(self) -> None:
        note = ParsedNote(frontmatter={}, content="Body only", has_frontmatter=True)
        self.assertEqual(stringify_note(note), "Body only")

    def test_round_trip_preserves_body_and_metadata(self) -> None:
        note = ParsedNote(frontmatter={"aliases": ["Ünïcode"], "n": 3}, content="# Heading\n\ntext", has_frontmatter=True)
        parsed = parse_note(stringify_note(note))
        self.assertEqual(parsed.frontmatter, note.frontmatter)
        self.assertEqual(parsed.content, note.content)


class AliasMutatorTests(unittest.TestCase):
    def test_add_alias_returns_new_sorted_mapping(self) -> None:
        original = {"aliases": ["Zeta"], "title": "x"}
        updated, changed = add_alias_to_frontmatter(original, "Alpha")
        self.assertTrue(changed)
        self.assertEqual(updated["aliases"], ["Alpha", "Zeta"])
        self.assertEqual(original["aliases"], ["Zeta"])

    def test_add_existing_alias_is_noop(self) -> None:
        updated, changed = add_alias_to_frontmatter({"aliases": "Plan"}, "Plan")
        self.assertFalse(changed)
        self.assertEqual(updated, {"aliases": "Plan"})

    def test_add_blank_alias_rejected(self) -> None:
        with self.assertRaises(InvalidInputError):
            add_alias_to_frontmatter({}, "   ")

    def test_remove_last_alias_drops_field(self) -> None:
        updated, changed = remove_alias_from_frontmatter({"aliases": ["Only"], "title": "t"}, "Only")
        self.assertTrue(changed)
        self.assertEqual(updated, {"title": "t"})

    def test_remove_missing_alias(self) -> None:
        _, changed = remove_alias_from_frontmatter({"aliases": ["Other"]}, "Missing")
        self.assertFalse(changed)

    def test_invalid_aliases_type_is_malformed(self) -> None:
        with self.assertRaises(MalformedContentError):
            add_alias_to_frontmatter({"aliases": {"a": 1}}, "b")


class AliasOperationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = TemporaryDirectory()
        self.vault_path = Path(self.tmpdir.name).resolve()
        self.vault = VaultMetadata(name="test", path=self.vault_path, description="test vault")

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def _write_note(self, name: str, content: str) -> Path:
        note_path = self.vault_path / f"{name}.md"
        note_path.parent.mkdir(parents=True, exist_ok=True)
        note_path.write_text(content, encoding="utf-8")
        return note_path

    def test_add_alias_creates_frontmatter(self) -> None:
        note_path = self._write_note("plan", "# Plan\n")
        result = add_alias(self.vault, "plan", "Roadmap")
        self.assertEqual(result["status"], "added")
        self.assertEqual(result["path"], "plan.md")
        self.assertEqual(note_path.read_text(encoding="utf-8"), "---\naliases:\n- Roadmap\n---\n\n# Plan")

    def test_add_alias_twice_reports_already_present(self) -> None:
        self._write_note("plan", "---\naliases: [Roadmap]\n---\nBody")
        result = add_alias(self.vault, "plan.md", "Roadmap")
        self.assertEqual(result["status"], "already_present")
        self.assertEqual(result["aliases"], ["Roadmap"])

    def test_remove_alias(self) -> None:
        note_path = self._write_note("plan", "---\naliases: [A, B]\n---\n\nBody")
        result = remove_alias(self.vault, "plan", "A")
        self.assertEqual(result["status"], "removed")
        self.assertEqual(result["aliases"], ["B"])
        self.assertEqual(parse_note(note_path.read_text(encoding="utf-8")).frontmatter, {"aliases": ["B"]})

    def test_remove_missing_alias_leaves_file_untouched(self) -> None:
        content = "---\naliases: [A]\n---\nBody"
        note_path = self._write_note("plan", content)
        result = remove_alias(self.vault, "plan", "Z")
        self.assertEqual(result["status"], "not_found")
        self.assertEqual(note_path.read_text(encoding="utf-8"), content)

    def test_list_aliases(self) -> None:
        self._write_note("folder/plan", "---\naliases: [b, a]\n---\nBody")
        self.assertEqual(list_aliases(self.vault, "folder/plan")["aliases"], ["a", "b"])

    def test_missing_note(self) -> None:
        with self.assertRaises(NoteNotFoundError):
            list_aliases(self.vault, "nowhere")
