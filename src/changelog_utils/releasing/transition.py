"""
changelog-utils — release transition.

File: src/changelog_utils/releasing/transition.py

Purpose
- Turn the Unreleased bucket into a versioned, dated release.

What should be included in this file
- ``cut_release`` with empty-Unreleased and version-order guards.
- ``next_version`` bump helper driven by ``ReleaseType``.

Functional requirements
- Failures raise ``ReleaseError`` subclasses and leave the input model untouched.
- A fresh, empty Unreleased release is inserted above the new release.

Non-functional requirements
- Pure and deterministic: the same inputs serialize byte-identically.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from typing import TYPE_CHECKING

import structlog

from changelog_utils.constants import UNRELEASED_HEADING
from changelog_utils.domain.models import Release, ReleaseType, Version
from changelog_utils.errors import EmptyUnreleasedError, VersionOrderError
from changelog_utils.linting.checks import canonical_release_heading
from changelog_utils.parsing.parser import parse
from changelog_utils.parsing.serializer import serialize

if TYPE_CHECKING:
    from changelog_utils.domain.models import Changelog
    from changelog_utils.rules.ruleset import RuleSet

logger = structlog.get_logger(__name__)


def cut_release(
    model: Changelog,
    version: Version | str,
    release_date: date | str,
    *,
    ruleset: RuleSet | None = None,
) -> Changelog:
    """Rename Unreleased to ``version`` dated ``release_date``.

    Raises ``EmptyUnreleasedError`` when there is nothing to release and
    ``VersionOrderError`` when ``version`` is not newer than every existing release.
    """

    target = Version.parse(version) if isinstance(version, str) else version
    day = date.fromisoformat(release_date) if isinstance(release_date, str) else release_date

    unreleased = model.unreleased
    if unreleased is None or unreleased.entry_count == 0:
        raise EmptyUnreleasedError("there are no unreleased entries to release")

    newest = model.newest_version
    if newest is not None and not target > newest:
        raise VersionOrderError(
            f"version {target} must be greater than the latest release {newest}"
        )

    link = ruleset.release_link(target) if ruleset is not None else None
    date_text = day.isoformat()
    released = replace(
        unreleased,
        version=target,
        link=link,
        date_text=date_text,
        heading=canonical_release_heading(target, link, date_text),
    )
    fresh = Release(version=None, heading=UNRELEASED_HEADING, trailer=("",))

    releases: list[Release] = []
    for release in model.releases:
        if release is unreleased:
            releases.extend((fresh, released))
        else:
            releases.append(release)

    legacy_version = ruleset.legacy_version if ruleset is not None else model.legacy_version
    result = parse(serialize(replace(model, releases=tuple(releases))), legacy_version=legacy_version)
    logger.info(
        "release_cut",
        version=str(target),
        release_date=date_text,
        entries=unreleased.entry_count,
    )
    return result


def next_version(model: Changelog, release_type: ReleaseType | str) -> Version:
    """Version that follows the newest release for ``release_type``."""

    kind = ReleaseType(release_type)
    newest = model.newest_version
    if newest is None:
        newest = Version(0, 0, 0)
    return newest.bump(kind)


__all__ = ["cut_release", "next_version"]
