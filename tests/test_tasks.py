import pytest

from obsidian_mcp.core.task_operations import find_tasks, get_tasks_in_note, toggle_task, toggle_task_line
from obsidian_mcp.data_models import TaskItem
from obsidian_mcp.errors import InvalidInputError, MalformedContentError, NoteNotFoundError


def test_find_tasks_reports_lines_and_state():
    content = "# List\n- [ ] buy milk\n  - [X] nested done\n- [] not a task\n* [ ] other bullet"
    assert find_tasks(content) == [
        TaskItem(text="buy milk", checked=False, line=2),
        TaskItem(text="nested done", checked=True, line=3),
    ]


def test_find_tasks_handles_crlf():
    assert find_tasks("a\r\n- [x] done\r\n") == [TaskItem(text="done", checked=True, line=2)]


class TestToggleTaskLine:
    def test_checks_open_task(self):
        assert toggle_task_line("- [ ] buy milk\n- [x] done", 1) == ("- [x] buy milk\n- [x] done", True)

    def test_unchecks_done_task(self):
        assert toggle_task_line("- [ ] buy milk\n- [X] done", 2) == ("- [ ] buy milk\n- [ ] done", False)

    def test_keeps_indentation(self):
        assert toggle_task_line("x\n    - [ ] deep", 2)[0] == "x\n    - [x] deep"

    @pytest.mark.parametrize("line", [0, 3])
    def test_out_of_range(self, line):
        with pytest.raises(InvalidInputError, match="Note has 2 lines"):
            toggle_task_line("- [ ] a\n- [ ] b", line)

    def test_non_task_line(self):
        with pytest.raises(MalformedContentError, match="Line 1 is not a valid Markdown task"):
            toggle_task_line("plain text\n- [ ] b", 1)


class TestTaskOperations:
    def test_get_tasks_in_note(self, vault, write_note):
        write_note("todo.md", "- [ ] one\n- [x] two\n- [ ] three")
        result = get_tasks_in_note(vault, "todo")
        assert result["path"] == "todo.md"
        assert result["total"] == 3
        assert result["completed"] == 1
        assert result["tasks"][1] == {"text": "two", "checked": True, "line": 2}

    def test_toggle_task_writes_note(self, vault, write_note):
        note = write_note("todo.md", "- [ ] buy milk\n- [x] done")
        result = toggle_task(vault, "todo", 1)
        assert result["checked"] is True
        assert result["status"] == "completed"
        assert note.read_text(encoding="utf-8") == "- [x] buy milk\n- [x] done"
        assert list(vault.path.glob("*.backup")) == []

    def test_toggle_invalid_line_leaves_note_untouched(self, vault, write_note):
        note = write_note("todo.md", "- [ ] buy milk")
        with pytest.raises(InvalidInputError):
            toggle_task(vault, "todo", 5)
        assert note.read_text(encoding="utf-8") == "- [ ] buy milk"

    def test_toggle_missing_note(self, vault):
        with pytest.raises(NoteNotFoundError):
            toggle_task(vault, "missing", 1)
