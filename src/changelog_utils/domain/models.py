"""Immutable changelog model: releases, change-type sections, entries and escapes."""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import TYPE_CHECKING

from changelog_utils.constants import CANONICAL_ENTRY_SPACING

if TYPE_CHECKING:
    from collections.abc import Iterator

_VERSION_RE = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)(?:-rc(\d+))?$")
_PULL_LINK_RE = re.compile(r"^(?P<repository>.+?)/pull/(?P<number>\d+)/?$")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ReleaseType(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    RC_MAJOR = "rc-major"
    RC_MINOR = "rc-minor"
    RC_PATCH = "rc-patch"

    @property
    def is_candidate(self) -> bool:
        return self.value.startswith("rc-")


class EscapeKind(StrEnum):
    DISABLE_ALL = "disable-all"
    DISABLE_DUPLICATE_PR = "disable-duplicate-pr"


@functools.total_ordering
@dataclass(frozen=True, slots=True)
class Version:
    """Release version ``vMAJOR.MINOR.PATCH[-rcN]``.

    Release candidates order below the final release of the same number,
    so ``v1.0.0-rc2 < v1.0.0``.
    """

    major: int
    minor: int
    patch: int
    rc: int | None = None

    @classmethod
    def parse(cls, text: str) -> Version:
        match = _VERSION_RE.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"invalid version {text!r}; expected vX.Y.Z or vX.Y.Z-rcN")
        major, minor, patch, rc = match.groups()
        return cls(int(major), int(minor), int(patch), None if rc is None else int(rc))

    @property
    def sort_key(self) -> tuple[int, int, int, int, int]:
        if self.rc is None:
            return (self.major, self.minor, self.patch, 1, 0)
        return (self.major, self.minor, self.patch, 0, self.rc)

    @property
    def is_candidate(self) -> bool:
        return self.rc is not None

    @property
    def final(self) -> Version:
        return Version(self.major, self.minor, self.patch)

    def bump(self, release_type: ReleaseType) -> Version:
        """Return the next version for ``release_type``.

        A final bump of a release candidate promotes it to its final version.
        A candidate bump of a candidate increments the rc counter.
        """

        if release_type.is_candidate:
            if self.rc is not None:
                return Version(self.major, self.minor, self.patch, self.rc + 1)
            base = self.bump(ReleaseType(release_type.value.removeprefix("rc-")))
            return Version(base.major, base.minor, base.patch, 1)

        if self.rc is not None:
            return self.final
        if release_type is ReleaseType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if release_type is ReleaseType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        return Version(self.major, self.minor, self.patch + 1)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key < other.sort_key

    def __str__(self) -> str:
        text = f"v{self.major}.{self.minor}.{self.patch}"
        if self.rc is not None:
            text += f"-rc{self.rc}"
        return text


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    repository: str
    number: int

    @classmethod
    def from_link(cls, link: str) -> PullRequestRef | None:
        match = _PULL_LINK_RE.fullmatch(link.strip())
        if match is None:
            return None
        return cls(repository=match.group("repository"), number=int(match.group("number")))

    def normalized(self) -> PullRequestRef:
        return PullRequestRef(self.repository.strip().rstrip("/"), self.number)


@dataclass(frozen=True, slots=True)
class Escape:
    """Inline directive that suppresses checks for the following entry line."""

    kind: EscapeKind
    justification: str | None
    line_number: int
    raw: str


@dataclass(frozen=True, slots=True)
class Entry:
    category: str
    pr_number: int
    link: str
    description: str
    line_number: int = 0
    spacing: tuple[str, ...] = CANONICAL_ENTRY_SPACING
    escaped_hash: bool = False
    escape: Escape | None = None
    trailer: tuple[str, ...] = ()

    @property
    def pr_reference(self) -> PullRequestRef | None:
        return PullRequestRef.from_link(self.link)

    @property
    def is_fully_escaped(self) -> bool:
        return self.escape is not None and self.escape.kind is EscapeKind.DISABLE_ALL

    def render(self) -> str:
        """Rebuild the source line; unchanged entries render byte-identical."""

        ws0, ws1, ws2, ws3, ws4 = self.spacing
        hash_mark = "\\#" if self.escaped_hash else "#"
        return (
            f"{ws0}-{ws1}({self.category}){ws2}[{hash_mark}{self.pr_number}]"
            f"{ws3}({self.link}){ws4}{self.description}"
        )

    def lines(self) -> tuple[str, ...]:
        head = (self.escape.raw,) if self.escape is not None else ()
        return (*head, self.render(), *self.trailer)


@dataclass(frozen=True, slots=True)
class ChangeTypeSection:
    name: str
    heading: str
    line_number: int = 0
    entries: tuple[Entry, ...] = ()
    trailer: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Release:
    """A versioned release, or the Unreleased bucket when ``version`` is None."""

    version: Version | None
    heading: str
    line_number: int = 0
    link: str | None = None
    date_text: str | None = None
    trailer: tuple[str, ...] = ()
    sections: tuple[ChangeTypeSection, ...] = ()

    @property
    def is_unreleased(self) -> bool:
        return self.version is None

    @property
    def label(self) -> str:
        return "Unreleased" if self.version is None else str(self.version)

    @property
    def release_date(self) -> date | None:
        if self.date_text is None or not _ISO_DATE_RE.fullmatch(self.date_text):
            return None
        try:
            return date.fromisoformat(self.date_text)
        except ValueError:
            return None

    def iter_entries(self) -> Iterator[Entry]:
        for section in self.sections:
            yield from section.entries

    @property
    def entry_count(self) -> int:
        return sum(len(section.entries) for section in self.sections)


@dataclass(frozen=True, slots=True)
class Changelog:
    """Parsed changelog.

    ``preamble`` and ``legacy`` are carried as raw lines and never linted.
    ``legacy_version`` is the version of the first legacy release heading.
    """

    preamble: tuple[str, ...] = ()
    releases: tuple[Release, ...] = ()
    legacy: tuple[str, ...] = ()
    legacy_version: Version | None = None
    trailing_newline: bool = True
    dangling_escapes: tuple[Escape, ...] = ()

    @property
    def unreleased(self) -> Release | None:
        for release in self.releases:
            if release.is_unreleased:
                return release
        return None

    @property
    def newest_version(self) -> Version | None:
        """Highest released version, including the legacy history."""

        versions = [release.version for release in self.releases if release.version is not None]
        if self.legacy_version is not None:
            versions.append(self.legacy_version)
        if not versions:
            return None
        return max(versions)

    def find_release(self, version: Version) -> Release | None:
        for release in self.releases:
            if release.version == version:
                return release
        return None


__all__ = [
    "ChangeTypeSection",
    "Changelog",
    "Entry",
    "Escape",
    "EscapeKind",
    "PullRequestRef",
    "Release",
    "ReleaseType",
    "Version",
]
