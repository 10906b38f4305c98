"""Tag extraction, validation and rewriting.

Tags live in two places: the frontmatter ``tags`` field (a string or a list)
and inline ``#tag`` occurrences in the body. Inline scanning skips fenced code
blocks, HTML comments and inline code. The pure helpers never mutate their
arguments; they return new values together with a change report.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Callable, Iterator, Literal, Optional

from obsidian_mcp.core.backup_writer import guarded_update
from obsidian_mcp.core.frontmatter_operations import parse_note, stringify_note
from obsidian_mcp.core.vault_operations import (
    ensure_vault_ready,
    iter_markdown_files,
    read_note_text,
    relative_note_path,
    require_existing_note,
)
from obsidian_mcp.data_models import ParsedNote, TagChange, TagRemovalReport, VaultMetadata
from obsidian_mcp.errors import InvalidInputError, MalformedContentError, VaultToolError

logger = logging.getLogger(__name__)

TAGS_FIELD = "tags"
TAG_PATTERN = re.compile(r"(?<![\w`])#([a-zA-Z0-9/_-]+)(?![a-zA-Z0-9/_-])")

_VALID_TAG = re.compile(r"^[a-zA-Z0-9]+(/[a-zA-Z0-9]+)*$")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")

TagLocation = Literal["frontmatter", "content", "both"]


# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================


def validate_tag(tag: str) -> bool:
    """Return True for ``tag``, ``#tag`` and hierarchical ``a/b/c`` forms.

    Segments are alphanumeric and separated by single slashes.
    """
    return bool(_VALID_TAG.match(tag.removeprefix("#")))


def normalize_tag(tag: str, normalize: bool = True) -> str:
    """Strip a leading ``#`` and, if ``normalize``, kebab-case each segment.

    Examples:
        >>> normalize_tag("#ProjectActive")
        'project-active'
        >>> normalize_tag("Work/MeetingNotes")
        'work/meeting-notes'
    """
    tag = tag.removeprefix("#")
    if not normalize:
        return tag
    return "/".join(_CAMEL_BOUNDARY.sub(r"\1-\2", part).lower() for part in tag.split("/"))


def is_parent_tag(parent: str, child: str) -> bool:
    return child.startswith(parent + "/")


def _pattern_regex(pattern: str) -> re.Pattern[str]:
    pattern = pattern.removeprefix("#")
    descendants = pattern.endswith("/*")
    open_ended = not descendants and pattern.endswith("*")
    if descendants:
        pattern = pattern[:-2]
    elif open_ended:
        pattern = pattern[:-1]
    body = "/".join(
        "[^/]*".join(re.escape(piece) for piece in segment.split("*"))
        for segment in pattern.split("/")
    )
    if descendants:
        return re.compile(f"^{body}/.+$")
    return re.compile(f"^{body}.*$" if open_ended else f"^{body}$")


def matches_tag_pattern(pattern: str, tag: str) -> bool:
    """Match ``tag`` against a wildcard pattern.

    A ``*`` inside the pattern matches within one segment, so
    ``proj*/active`` matches ``project/active``. A final ``*`` runs across
    segments: ``*`` matches every tag and ``proj*`` matches ``project/a``.
    A trailing ``/*`` matches every descendant but not the parent itself.
    """
    return bool(_pattern_regex(pattern).match(tag.removeprefix("#")))


def get_related_tags(tag: str, all_tags: Iterable[str]) -> dict[str, list[str]]:
    """Return the ancestors of ``tag`` and its direct children within ``all_tags``."""
    parts = tag.split("/")
    parents = ["/".join(parts[: index + 1]) for index in range(len(parts) - 1)]
    children = [
        other
        for other in all_tags
        if is_parent_tag(tag, other) and "/" not in other[len(tag) + 1 :]
    ]
    return {"parents": parents, "children": children}


def _scan_lines(lines: Sequence[str]) -> Iterator[list[tuple[int, int]]]:
    """Yield, per line, the ``(start, end)`` spans outside code fences and comments."""
    in_code_block = False
    in_comment = False
    for line in lines:
        if not in_comment and line.strip().startswith("```"):
            in_code_block = not in_code_block
            yield []
            continue
        if in_code_block:
            yield []
            continue

        spans: list[tuple[int, int]] = []
        position = 0
        while True:
            if in_comment:
                end = line.find("-->", position)
                if end == -1:
                    break
                in_comment = False
                position = end + 3
            else:
                start = line.find("<!--", position)
                if start == -1:
                    spans.append((position, len(line)))
                    break
                spans.append((position, start))
                in_comment = True
                position = start + 4
        yield spans


def extract_tags(content: str) -> list[str]:
    """Return the distinct inline tags of ``content`` (without ``#``) in order of appearance.

    Examples:
        >>> extract_tags("`#notatag` #realtag")
        ['realtag']
        >>> extract_tags("```\\n#codeTag\\n```\\n#outside")
        ['outside']
    """
    found: dict[str, None] = {}
    lines = content.split("\n")
    for line, spans in zip(lines, _scan_lines(lines)):
        for start, end in spans:
            for match in TAG_PATTERN.finditer(line, start, end):
                found.setdefault(match.group(1), None)
    return list(found)


def inline_tags_by_line(content: str) -> Iterator[tuple[int, str, list[str]]]:
    """Yield ``(line_number, line, tags)`` for each line carrying visible inline tags."""
    lines = content.split("\n")
    for number, (line, spans) in enumerate(zip(lines, _scan_lines(lines)), start=1):
        tags = [
            match.group(1)
            for start, end in spans
            for match in TAG_PATTERN.finditer(line, start, end)
        ]
        if tags:
            yield number, line, tags


def _rewrite_inline_tags(content: str, replace: Callable[[str, int, str], Optional[str]]) -> str:
    """Apply ``replace(tag, line_number, line)`` to every visible inline tag.

    ``replace`` returns None to keep the tag, a new tag name to rename it, or
    an empty string to delete it. A line left blank by deletions is dropped.
    """
    lines = content.split("\n")
    output: list[str] = []
    for number, (line, spans) in enumerate(zip(lines, _scan_lines(lines)), start=1):
        pieces: list[str] = []
        cursor = 0
        changed = False
        for start, end in spans:
            for match in TAG_PATTERN.finditer(line, start, end):
                replacement = replace(match.group(1), number, line)
                if replacement is None:
                    continue
                cut, resume = match.start(), match.end()
                if replacement:
                    replacement = f"#{replacement}"
                elif cut > cursor and line[cut - 1] in " \t":
                    cut -= 1
                elif resume < len(line) and line[resume] in " \t":
                    resume += 1
                pieces.append(line[cursor:cut])
                pieces.append(replacement)
                cursor = resume
                changed = True
        pieces.append(line[cursor:])
        rewritten = "".join(pieces)
        if changed and not rewritten.strip():
            continue
        output.append(rewritten)
    return "\n".join(output)


def _tag_list(frontmatter: Mapping[str, Any]) -> list[str]:
    value = frontmatter.get(TAGS_FIELD)
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(item) for item in value if item is not None]
    raise MalformedContentError(
        f"Frontmatter field '{TAGS_FIELD}' must be a string or a list, got {type(value).__name__}"
    )


def _store_tags(frontmatter: Mapping[str, Any], tags: Iterable[str]) -> dict[str, Any]:
    """Return a copy of ``frontmatter`` with ``tags`` stored the way Obsidian writes them."""
    updated = dict(frontmatter)
    unique = sorted(set(tags))
    if not unique:
        updated.pop(TAGS_FIELD, None)
    elif len(unique) == 1:
        updated[TAGS_FIELD] = unique[0]
    else:
        updated[TAGS_FIELD] = unique
    return updated


def frontmatter_tags(parsed: ParsedNote) -> list[str]:
    """Tags declared in the frontmatter, with any leading ``#`` removed."""
    return [tag.removeprefix("#") for tag in _tag_list(parsed.frontmatter)]


def add_tags_to_frontmatter(
    frontmatter: Mapping[str, Any],
    tags: Sequence[str],
    normalize: bool = True,
) -> tuple[dict[str, Any], list[TagChange]]:
    """Return a copy of ``frontmatter`` with ``tags`` added.

    Raises:
        InvalidInputError: If any tag fails :func:`validate_tag`.
    """
    existing = _tag_list(frontmatter)
    current = {tag.removeprefix("#") for tag in existing}
    seen = {normalize_tag(tag, normalize) for tag in existing}
    added: list[TagChange] = []
    for tag in tags:
        if not validate_tag(tag):
            raise InvalidInputError(f"Invalid tag format: {tag}")
        normalized = normalize_tag(tag, normalize)
        if normalized not in seen and normalized not in current:
            seen.add(normalized)
            current.add(normalized)
            added.append(TagChange(tag=normalized, location="frontmatter"))

    if not added:
        return dict(frontmatter), added
    return _store_tags(frontmatter, current), added


def _removal_matcher(
    tags: Sequence[str],
    normalize: bool,
    patterns: Sequence[str],
    include_children: bool,
) -> Callable[[str], Optional[str]]:
    """Build a predicate returning the requested tag a candidate matched, if any."""
    targets = {normalize_tag(tag, normalize): tag for tag in tags}
    compiled = [(pattern, _pattern_regex(pattern)) for pattern in patterns]

    def _match(candidate: str) -> Optional[str]:
        if candidate in targets:
            return targets[candidate]
        for pattern, regex in compiled:
            if regex.match(candidate):
                return pattern
        if include_children:
            for normalized, original in targets.items():
                if is_parent_tag(normalized, candidate):
                    return original
        return None

    return _match


def remove_tags_from_frontmatter(
    frontmatter: Mapping[str, Any],
    tags: Sequence[str],
    normalize: bool = True,
    patterns: Sequence[str] = (),
) -> tuple[dict[str, Any], TagRemovalReport]:
    """Return a copy of ``frontmatter`` without the requested tags.

    Requested tags that are absent are listed in ``report.not_found``.
    """
    matcher = _removal_matcher(tags, normalize, patterns, include_children=False)
    report = TagRemovalReport()
    remaining: list[str] = []
    hits: set[str] = set()
    for tag in _tag_list(frontmatter):
        matched = matcher(normalize_tag(tag, normalize))
        if matched is None:
            remaining.append(tag)
            report.preserved.append(TagChange(tag=tag, location="frontmatter"))
        else:
            hits.add(matched)
            report.removed.append(TagChange(tag=tag, location="frontmatter"))

    report.not_found = [tag for tag in tags if tag not in hits]
    if not report.removed:
        return dict(frontmatter), report
    return _store_tags(frontmatter, remaining), report


def remove_inline_tags(
    content: str,
    tags: Sequence[str],
    normalize: bool = True,
    preserve_children: bool = False,
    patterns: Sequence[str] = (),
) -> tuple[str, TagRemovalReport]:
    """Delete matching ``#tag`` occurrences from ``content``.

    Child tags (``#project/a`` for ``project``) are removed too unless
    ``preserve_children`` is set. Tags inside code or comments are untouched.
    """
    matcher = _removal_matcher(tags, normalize, patterns, include_children=not preserve_children)
    report = TagRemovalReport()
    hits: set[str] = set()

    def _replace(tag: str, line_number: int, line: str) -> Optional[str]:
        normalized = normalize_tag(tag, normalize)
        change = TagChange(tag=normalized, location="content", line=line_number, context=line.strip())
        matched = matcher(normalized)
        if matched is None:
            report.preserved.append(change)
            return None
        hits.add(matched)
        report.removed.append(change)
        return ""

    updated = _rewrite_inline_tags(content, _replace)
    report.not_found = [tag for tag in tags if tag not in hits]
    return updated, report


def _renamed(tag: str, old_tag: str, new_tag: str) -> Optional[str]:
    bare = tag.removeprefix("#")
    if bare.lower() == old_tag.lower():
        return new_tag
    if bare.lower().startswith(old_tag.lower() + "/"):
        return new_tag + bare[len(old_tag) :]
    return None


def rename_tag_in_frontmatter(
    frontmatter: Mapping[str, Any],
    old_tag: str,
    new_tag: str,
) -> tuple[dict[str, Any], list[TagChange]]:
    """Rename ``old_tag`` and its children in the frontmatter ``tags`` field."""
    renamed: list[str] = []
    changes: list[TagChange] = []
    for tag in _tag_list(frontmatter):
        replacement = _renamed(tag, old_tag, new_tag)
        if replacement is None:
            renamed.append(tag)
        else:
            renamed.append(replacement)
            changes.append(TagChange(tag=replacement, location="frontmatter", context=tag))

    if not changes:
        return dict(frontmatter), changes
    return _store_tags(frontmatter, renamed), changes


def rename_inline_tag(content: str, old_tag: str, new_tag: str) -> tuple[str, list[TagChange]]:
    """Rename ``#old_tag`` (and ``#old_tag/child``) occurrences in ``content``."""
    changes: list[TagChange] = []

    def _replace(tag: str, line_number: int, line: str) -> Optional[str]:
        replacement = _renamed(tag, old_tag, new_tag)
        if replacement is not None:
            changes.append(
                TagChange(tag=replacement, location="content", line=line_number, context=line.strip())
            )
        return replacement

    return _rewrite_inline_tags(content, _replace), changes


def _append_inline_tags(content: str, tags: Sequence[str]) -> tuple[str, list[TagChange]]:
    present = {normalize_tag(tag, False) for tag in extract_tags(content)}
    missing = [tag for tag in tags if tag not in present]
    if not missing:
        return content, []
    tag_line = " ".join(f"#{tag}" for tag in missing)
    body = content.rstrip()
    updated = f"{body}\n\n{tag_line}\n" if body else f"{tag_line}\n"
    line_number = updated.count("\n")
    return updated, [
        TagChange(tag=tag, location="content", line=line_number, context=tag_line) for tag in missing
    ]


# ==============================================================================
# TAG OPERATIONS
# ==============================================================================


def add_tags(
    vault: VaultMetadata,
    paths: Sequence[str],
    tags: Sequence[str],
    location: TagLocation = "frontmatter",
    normalize: bool = True,
) -> dict[str, Any]:
    """Add tags to one or more notes.

    Args:
        vault: Vault metadata.
        paths: Note paths relative to the vault root.
        tags: Tags to add, with or without ``#``.
        location: ``frontmatter``, ``content`` (a ``#tag`` line appended to the
            body) or ``both``.
        normalize: Convert camelCase segments to kebab-case.

    Returns:
        Dictionary with vault, per-note results and a summary count.

    Raises:
        InvalidInputError: If any tag is malformed. Nothing is written.
    """
    invalid = [tag for tag in tags if not validate_tag(tag)]
    if invalid:
        raise InvalidInputError(f"Invalid tag format: {', '.join(invalid)}")
    normalized = [normalize_tag(tag, normalize) for tag in tags]

    ensure_vault_ready(vault)
    results: list[dict[str, Any]] = []
    for path in paths:
        added: list[TagChange] = []

        def _transform(text: str) -> str:
            added.clear()
            parsed = parse_note(text)
            frontmatter, content = parsed.frontmatter, parsed.content
            if location in ("frontmatter", "both"):
                frontmatter, changes = add_tags_to_frontmatter(frontmatter, tags, normalize)
                added.extend(changes)
            if location in ("content", "both"):
                content, changes = _append_inline_tags(content, normalized)
                added.extend(changes)
            if not added:
                return text
            return stringify_note(
                ParsedNote(frontmatter=frontmatter, content=content, has_frontmatter=bool(frontmatter))
            )

        try:
            target = require_existing_note(vault, path)
            guarded_update(target, _transform, "add tags")
        except VaultToolError as exc:
            logger.warning("Skipped adding tags to '%s' in vault '%s': %s", path, vault.name, exc.message)
            results.append({"path": path, "status": "error", "error": exc.message})
            continue

        note_path = relative_note_path(vault, target)
        if added:
            logger.info("Added %d tag(s) to note '%s' in vault '%s'", len(added), note_path, vault.name)
        results.append(
            {
                "path": note_path,
                "status": "updated" if added else "unchanged",
                "added": [change.as_payload() for change in added],
            }
        )

    return {
        "vault": vault.name,
        "tags": normalized,
        "results": results,
        "notes_updated": sum(1 for result in results if result["status"] == "updated"),
    }


def remove_tags(
    vault: VaultMetadata,
    paths: Sequence[str],
    tags: Sequence[str],
    location: TagLocation = "both",
    normalize: bool = True,
    preserve_children: bool = False,
    patterns: Sequence[str] = (),
) -> dict[str, Any]:
    """Remove tags from one or more notes.

    A tag that a note does not carry is reported under ``not_found`` for that
    note; removing it is never an error.

    Returns:
        Dictionary with vault, per-note removal reports and a summary count.
    """
    ensure_vault_ready(vault)
    results: list[dict[str, Any]] = []
    for path in paths:
        report = TagRemovalReport()

        def _transform(text: str) -> str:
            nonlocal report
            report = TagRemovalReport()
            parsed = parse_note(text)
            frontmatter, content = parsed.frontmatter, parsed.content
            found: set[str] = set()
            if location in ("frontmatter", "both"):
                frontmatter, partial = remove_tags_from_frontmatter(frontmatter, tags, normalize, patterns)
                report.extend(partial)
                found.update(tag for tag in tags if tag not in partial.not_found)
            if location in ("content", "both"):
                content, partial = remove_inline_tags(content, tags, normalize, preserve_children, patterns)
                report.extend(partial)
                found.update(tag for tag in tags if tag not in partial.not_found)
            report.not_found = [tag for tag in tags if tag not in found]
            if not report.removed:
                return text
            return stringify_note(
                ParsedNote(frontmatter=frontmatter, content=content, has_frontmatter=parsed.has_frontmatter)
            )

        try:
            target = require_existing_note(vault, path)
            guarded_update(target, _transform, "remove tags")
        except VaultToolError as exc:
            logger.warning("Skipped removing tags from '%s' in vault '%s': %s", path, vault.name, exc.message)
            results.append({"path": path, "status": "error", "error": exc.message})
            continue

        note_path = relative_note_path(vault, target)
        if report.removed:
            logger.info(
                "Removed %d tag(s) from note '%s' in vault '%s'", len(report.removed), note_path, vault.name
            )
        results.append(
            {
                "path": note_path,
                "status": "updated" if report.removed else "unchanged",
                **report.as_payload(),
            }
        )

    return {
        "vault": vault.name,
        "results": results,
        "notes_updated": sum(1 for result in results if result["status"] == "updated"),
    }


def rename_tag(vault: VaultMetadata, old_tag: str, new_tag: str) -> dict[str, Any]:
    """Rename a tag and all of its children across the whole vault.

    Args:
        vault: Vault metadata.
        old_tag: Existing tag, with or without ``#``.
        new_tag: Replacement tag; must pass :func:`validate_tag`.

    Returns:
        Dictionary with vault, old/new tag, the updated notes and change counts.
    """
    old_tag = old_tag.removeprefix("#")
    new_tag = new_tag.removeprefix("#")
    if not old_tag:
        raise InvalidInputError("Tag to rename cannot be empty")
    if not validate_tag(new_tag):
        raise InvalidInputError(f"Invalid tag format: {new_tag}")

    ensure_vault_ready(vault)
    frontmatter_changes = 0
    content_changes = 0
    updated_notes: list[str] = []
    errors: list[dict[str, str]] = []

    for note_file in iter_markdown_files(vault.path):
        note_path = relative_note_path(vault, note_file)
        changes: list[TagChange] = []

        def _transform(text: str) -> str:
            changes.clear()
            parsed = parse_note(text)
            frontmatter, fm_changes = rename_tag_in_frontmatter(parsed.frontmatter, old_tag, new_tag)
            content, inline_changes = rename_inline_tag(parsed.content, old_tag, new_tag)
            changes.extend(fm_changes + inline_changes)
            if not changes:
                return text
            if not fm_changes:
                # body-only edits must not touch how the frontmatter block is written
                header = text[: len(text) - len(parsed.content)]
                return header + content
            return stringify_note(
                ParsedNote(frontmatter=frontmatter, content=content, has_frontmatter=parsed.has_frontmatter)
            )

        try:
            _transform(read_note_text(note_file))
            if not changes:
                continue
            guarded_update(note_file, _transform, "rename tag")
        except VaultToolError as exc:
            logger.warning("Skipped renaming tag in '%s': %s", note_path, exc.message)
            errors.append({"path": note_path, "error": exc.message})
            continue

        frontmatter_changes += sum(1 for change in changes if change.location == "frontmatter")
        content_changes += sum(1 for change in changes if change.location == "content")
        updated_notes.append(note_path)

    logger.info(
        "Renamed tag '%s' to '%s' in %d note(s) of vault '%s'",
        old_tag,
        new_tag,
        len(updated_notes),
        vault.name,
    )
    return {
        "vault": vault.name,
        "old_tag": old_tag,
        "new_tag": new_tag,
        "notes_updated": updated_notes,
        "frontmatter_changes": frontmatter_changes,
        "content_changes": content_changes,
        "errors": errors,
    }
