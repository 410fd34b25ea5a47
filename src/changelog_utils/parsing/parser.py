"""
changelog-utils — Markdown changelog parser.

File: src/changelog_utils/parsing/parser.py

Purpose
- Turn raw changelog text into an immutable ``Changelog`` model in one pass.

What should be included in this file
- Recognition of release headings (``## ...``), change-type headings (``### ...``)
  and entry list items (``- (category) [#N](link) Description``).
- Escape directive attachment to the immediately following entry line.
- Opaque carry-through of the preamble, HTML comments, prose and legacy history.

Functional requirements
- Fail fast with ``ParseError(line_number, reason)`` on malformed structure.
- Never drop or rewrite source text: ``serialize(parse(text)) == text``.

Non-functional requirements
- Pure and deterministic; no I/O.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Final

from changelog_utils.domain.models import (
    ChangeTypeSection,
    Changelog,
    Entry,
    Escape,
    EscapeKind,
    Release,
    Version,
)
from changelog_utils.errors import ParseError
from changelog_utils.parsing.escapes import parse_escape

ENTRY_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?P<ws0>\s*)-(?P<ws1>\s*)\((?P<category>[a-zA-Z0-9\-]+)\)(?P<ws2>\s*)"
    r"\[(?P<bs>\\)?#(?P<pr>\d+)\](?P<ws3>\s*)\((?P<link>[^)]*)\)(?P<ws4>\s*)(?P<desc>\S.*)$"
)
CHANGE_TYPE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*###\s*(?P<name>[a-zA-Z0-9\- ]*[a-zA-Z0-9\-])\s*$"
)
UNRELEASED_PATTERN: Final[re.Pattern[str]] = re.compile(r"^\s*##\s*unreleased\s*$", re.IGNORECASE)
RELEASE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^\s*##\s*\[(?P<version>[^\]]*)\](?:\((?P<link>[^)]*)\))?\s*(?:-\s*(?P<date>.*?))?\s*$"
)

_LIST_ITEM_RE = re.compile(r"^\s*-(?!-)")
_RELEASE_HEADING_RE = re.compile(r"^\s*##(?!#)")
_CHANGE_TYPE_HEADING_RE = re.compile(r"^\s*###(?!#)")
_CATEGORY_RE = re.compile(r"^\s*-\s*\([a-zA-Z0-9\-]+\)")
_PR_RE = re.compile(r"^\s*-\s*\([^)]*\)\s*\[\\?#\d+\]")
_LINK_RE = re.compile(r"^\s*-\s*\([^)]*\)\s*\[\\?#\d+\]\s*\([^)]*\)")


@dataclass(slots=True)
class _EntryDraft:
    entry: Entry
    trailer: list[str] = field(default_factory=list)

    def build(self) -> Entry:
        if not self.trailer:
            return self.entry
        return replace(self.entry, trailer=tuple(self.trailer))


@dataclass(slots=True)
class _SectionDraft:
    name: str
    heading: str
    line_number: int
    trailer: list[str] = field(default_factory=list)
    entries: list[_EntryDraft] = field(default_factory=list)

    def build(self) -> ChangeTypeSection:
        return ChangeTypeSection(
            name=self.name,
            heading=self.heading,
            line_number=self.line_number,
            entries=tuple(item.build() for item in self.entries),
            trailer=tuple(self.trailer),
        )


@dataclass(slots=True)
class _ReleaseDraft:
    version: Version | None
    heading: str
    line_number: int
    link: str | None
    date_text: str | None
    trailer: list[str] = field(default_factory=list)
    sections: list[_SectionDraft] = field(default_factory=list)

    def build(self) -> Release:
        return Release(
            version=self.version,
            heading=self.heading,
            line_number=self.line_number,
            link=self.link,
            date_text=self.date_text,
            trailer=tuple(self.trailer),
            sections=tuple(section.build() for section in self.sections),
        )

    def opaque(self, line: str) -> None:
        if self.sections:
            section = self.sections[-1]
            if section.entries:
                section.entries[-1].trailer.append(line)
            else:
                section.trailer.append(line)
            return
        self.trailer.append(line)


def parse(text: str, *, legacy_version: Version | None = None) -> Changelog:
    """Parse changelog ``text`` into a ``Changelog``.

    Releases whose version is less than or equal to ``legacy_version`` start the
    legacy history: that heading and every following line are kept verbatim.
    """

    trailing_newline = text.endswith("\n")
    lines = text.split("\n")
    if trailing_newline:
        lines.pop()

    preamble: list[str] = []
    releases: list[_ReleaseDraft] = []
    legacy: list[str] = []
    legacy_head: Version | None = None
    dangling: list[Escape] = []

    in_comment = False
    pending_escape: Escape | None = None

    for index, line in enumerate(lines):
        line_number = index + 1
        current = releases[-1] if releases else None

        if in_comment:
            in_comment = not _closes_comment(line)
            _append_opaque(current, preamble, line)
            continue

        if pending_escape is not None:
            escape, pending_escape = pending_escape, None
            entry_match = ENTRY_PATTERN.match(line)
            if entry_match is None:
                if escape.kind is not EscapeKind.DISABLE_ALL:
                    raise ParseError(line_number, _describe_entry_failure(line))
                # A fully escaped malformed item is kept as raw text.
                _append_opaque(current, preamble, escape.raw)
                _append_opaque(current, preamble, line)
                continue
            _add_entry(current, _entry_from_match(entry_match, line_number, escape), line_number)
            continue

        if current is None and not _RELEASE_HEADING_RE.match(line):
            in_comment = _opens_comment(line)
            preamble.append(line)
            continue

        if _RELEASE_HEADING_RE.match(line):
            release = _parse_release_heading(line, line_number)
            if (
                legacy_version is not None
                and release.version is not None
                and release.version <= legacy_version
            ):
                legacy_head = release.version
                legacy.extend(lines[index:])
                break
            releases.append(release)
            continue

        if current is None:
            raise ParseError(line_number, "content outside of a release")

        escape = parse_escape(line, line_number)
        if escape is not None:
            next_line = lines[index + 1] if index + 1 < len(lines) else None
            if next_line is not None and _LIST_ITEM_RE.match(next_line):
                pending_escape = escape
            else:
                dangling.append(escape)
                current.opaque(line)
            continue

        if _CHANGE_TYPE_HEADING_RE.match(line):
            match = CHANGE_TYPE_PATTERN.match(line)
            if match is None:
                raise ParseError(line_number, "malformed change type heading; expected '### Name'")
            current.sections.append(
                _SectionDraft(name=match.group("name").strip(), heading=line, line_number=line_number)
            )
            continue

        if _LIST_ITEM_RE.match(line):
            entry_match = ENTRY_PATTERN.match(line)
            if entry_match is None:
                raise ParseError(line_number, _describe_entry_failure(line))
            _add_entry(current, _entry_from_match(entry_match, line_number, None), line_number)
            continue

        in_comment = _opens_comment(line)
        current.opaque(line)

    return Changelog(
        preamble=tuple(preamble),
        releases=tuple(release.build() for release in releases),
        legacy=tuple(legacy),
        legacy_version=legacy_head,
        trailing_newline=trailing_newline,
        dangling_escapes=tuple(dangling),
    )


def parse_entry_line(line: str, line_number: int = 0) -> Entry:
    """Parse a single entry line, raising ``ParseError`` when it does not match."""

    match = ENTRY_PATTERN.match(line)
    if match is None:
        raise ParseError(line_number, _describe_entry_failure(line))
    return _entry_from_match(match, line_number, None)


def _parse_release_heading(line: str, line_number: int) -> _ReleaseDraft:
    if UNRELEASED_PATTERN.match(line):
        return _ReleaseDraft(
            version=None, heading=line, line_number=line_number, link=None, date_text=None
        )
    match = RELEASE_PATTERN.match(line)
    if match is None:
        raise ParseError(
            line_number,
            "malformed release heading; expected '## Unreleased' or "
            "'## [vX.Y.Z](link) - YYYY-MM-DD'",
        )
    try:
        version = Version.parse(match.group("version"))
    except ValueError as exc:
        raise ParseError(line_number, f"malformed version in release heading: {exc}") from exc
    date_text = match.group("date")
    return _ReleaseDraft(
        version=version,
        heading=line,
        line_number=line_number,
        link=match.group("link"),
        date_text=date_text if date_text else None,
    )


def _entry_from_match(match: re.Match[str], line_number: int, escape: Escape | None) -> Entry:
    return Entry(
        category=match.group("category"),
        pr_number=int(match.group("pr")),
        link=match.group("link"),
        description=match.group("desc"),
        line_number=line_number,
        spacing=(
            match.group("ws0"),
            match.group("ws1"),
            match.group("ws2"),
            match.group("ws3"),
            match.group("ws4"),
        ),
        escaped_hash=match.group("bs") is not None,
        escape=escape,
    )


def _add_entry(current: _ReleaseDraft | None, entry: Entry, line_number: int) -> None:
    if current is None or not current.sections:
        raise ParseError(line_number, "entry is not inside a change type section")
    current.sections[-1].entries.append(_EntryDraft(entry=entry))


def _append_opaque(current: _ReleaseDraft | None, preamble: list[str], line: str) -> None:
    if current is None:
        preamble.append(line)
    else:
        current.opaque(line)


def _opens_comment(line: str) -> bool:
    start = line.rfind("<!--")
    return start != -1 and "-->" not in line[start:]


def _closes_comment(line: str) -> bool:
    end = line.rfind("-->")
    return end != -1 and "<!--" not in line[end:]


def _describe_entry_failure(line: str) -> str:
    if not _CATEGORY_RE.match(line):
        return "malformed entry: missing category in parentheses, e.g. '- (cli)'"
    if not _PR_RE.match(line):
        return "malformed entry: missing PR reference, e.g. '[#123]'"
    if not _LINK_RE.match(line):
        return "malformed entry: missing PR link in parentheses after the PR reference"
    return "malformed entry: missing description"


__all__ = [
    "CHANGE_TYPE_PATTERN",
    "ENTRY_PATTERN",
    "RELEASE_PATTERN",
    "UNRELEASED_PATTERN",
    "parse",
    "parse_entry_line",
]
