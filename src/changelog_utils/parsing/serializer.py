"""Serialization of a ``Changelog`` model back to Markdown text."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from changelog_utils.domain.models import ChangeTypeSection, Changelog, Release


def serialize(changelog: Changelog) -> str:
    """Inverse of ``parse``: unchanged models reproduce their source byte-for-byte."""

    lines: list[str] = list(changelog.preamble)
    for release in changelog.releases:
        lines.extend(release_lines(release))
    lines.extend(changelog.legacy)
    text = "\n".join(lines)
    if changelog.trailing_newline:
        text += "\n"
    return text


def release_lines(release: Release) -> list[str]:
    lines = [release.heading, *release.trailer]
    for section in release.sections:
        lines.extend(section_lines(section))
    return lines


def section_lines(section: ChangeTypeSection) -> list[str]:
    lines = [section.heading, *section.trailer]
    for entry in section.entries:
        lines.extend(entry.lines())
    return lines


__all__ = ["release_lines", "section_lines", "serialize"]
