"""Wikilink and markdown link matching and rewriting."""

from __future__ import annotations

import posixpath
import re
from typing import Callable

_INLINE_CODE = re.compile(r"`[^`\n]*`")


def _without_extension(path: str) -> str:
    return path[:-3] if path.lower().endswith(".md") else path


def link_targets(relative_path: str) -> list[str]:
    """Return the link targets that address a note.

    Examples:
        >>> link_targets("Projects/Plan.md")
        ['Projects/Plan.md', 'Projects/Plan', 'Plan']
    """
    stem = _without_extension(relative_path)
    targets = [relative_path, stem, posixpath.basename(stem)]
    return list(dict.fromkeys(targets))


def _alternation(targets: list[str]) -> str:
    return "|".join(re.escape(target) for target in sorted(set(targets), key=len, reverse=True))


def _wikilink_pattern(targets: list[str]) -> re.Pattern[str]:
    return re.compile(r"\[\[(?P<target>" + _alternation(targets) + r")(?P<suffix>[#|][^\]]*)?\]\]")


def _markdown_link_pattern(targets: list[str]) -> re.Pattern[str]:
    return re.compile(
        r"\[(?P<label>[^\]]*)\]\((?P<target>" + _alternation(targets) + r")(?P<anchor>#[^)\s]*)?\)"
    )


def _markdown_targets(relative_path: str) -> list[str]:
    plain = [relative_path, _without_extension(relative_path)]
    return plain + [target.replace(" ", "%20") for target in plain]


def _outside_code(content: str, rewrite: Callable[[str], tuple[str, int]]) -> tuple[str, int]:
    """Apply ``rewrite`` to the text outside fenced code blocks and inline code spans."""
    output: list[str] = []
    total = 0
    in_code_block = False
    for line in content.split("\n"):
        if line.strip().startswith("```"):
            in_code_block = not in_code_block
            output.append(line)
            continue
        if in_code_block:
            output.append(line)
            continue

        pieces: list[str] = []
        cursor = 0
        for span in _INLINE_CODE.finditer(line):
            text, count = rewrite(line[cursor : span.start()])
            pieces.extend((text, span.group(0)))
            total += count
            cursor = span.end()
        text, count = rewrite(line[cursor:])
        pieces.append(text)
        total += count
        output.append("".join(pieces))
    return "\n".join(output), total


def contains_link(content: str, relative_path: str) -> bool:
    """Return True if ``content`` links to the note at ``relative_path``.

    Wikilinks may use the full path, the path without ``.md`` or the bare
    note name; markdown links must use the path. Links inside fenced code
    blocks and inline code spans do not count.
    """
    patterns = (
        _wikilink_pattern(link_targets(relative_path)),
        _markdown_link_pattern(_markdown_targets(relative_path)),
    )
    _, found = _outside_code(
        content, lambda text: (text, sum(1 for pattern in patterns if pattern.search(text)))
    )
    return found > 0


def rewrite_links(content: str, old_path: str, new_path: str) -> tuple[str, int]:
    """Point every link to ``old_path`` at ``new_path``.

    Each link keeps its form: a link by bare name gets the new bare name, a
    link by path gets the new path, and aliases, headings and block
    references are preserved. Links whose text would not change, such as a
    bare name after a move between folders, are left alone and not counted.

    Returns:
        The rewritten content and the number of links changed.
    """
    old_stem, new_stem = _without_extension(old_path), _without_extension(new_path)
    mapping = {posixpath.basename(old_stem): posixpath.basename(new_stem)}
    mapping[old_stem] = new_stem
    mapping[old_path] = new_path
    mapping = {old: new for old, new in mapping.items() if old != new}

    markdown_mapping = {old_path: new_path, old_stem: new_stem}
    markdown_mapping.update(
        {old.replace(" ", "%20"): new.replace(" ", "%20") for old, new in list(markdown_mapping.items())}
    )
    markdown_mapping = {old: new for old, new in markdown_mapping.items() if old != new}

    def _rewrite(text: str) -> tuple[str, int]:
        total = 0
        if mapping:
            text, count = _wikilink_pattern(list(mapping)).subn(
                lambda match: f"[[{mapping[match.group('target')]}{match.group('suffix') or ''}]]",
                text,
            )
            total += count
        if markdown_mapping:
            text, count = _markdown_link_pattern(list(markdown_mapping)).subn(
                lambda match: (
                    f"[{match.group('label')}]({markdown_mapping[match.group('target')]}"
                    f"{match.group('anchor') or ''})"
                ),
                text,
            )
            total += count
        return text, total

    return _outside_code(content, _rewrite)


def strike_links(content: str, old_path: str) -> tuple[str, int]:
    """Wrap every link to ``old_path`` in ``~~`` strikethrough markers.

    Links in code are left alone and links already struck through are not
    wrapped again.
    """
    patterns = [
        re.compile(r"(?<!~~)(?:" + pattern.pattern + r")(?!~~)")
        for pattern in (
            _wikilink_pattern(link_targets(old_path)),
            _markdown_link_pattern(_markdown_targets(old_path)),
        )
    ]

    def _strike(text: str) -> tuple[str, int]:
        total = 0
        for pattern in patterns:
            text, count = pattern.subn(lambda match: f"~~{match.group(0)}~~", text)
            total += count
        return text, total

    return _outside_code(content, _strike)
