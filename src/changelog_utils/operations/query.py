"""Read-only queries over a parsed changelog."""

from __future__ import annotations

from typing import TYPE_CHECKING

from changelog_utils.domain.models import Version
from changelog_utils.errors import ReleaseNotFoundError
from changelog_utils.parsing.serializer import release_lines

if TYPE_CHECKING:
    from changelog_utils.domain.models import Changelog, Release


def get_release(model: Changelog, version: Version | str) -> Release:
    """Return the release for ``version``; ``"unreleased"`` selects the Unreleased bucket."""

    if isinstance(version, str) and version.strip().lower() == "unreleased":
        unreleased = model.unreleased
        if unreleased is None:
            raise ReleaseNotFoundError("changelog has no Unreleased release")
        return unreleased

    try:
        target = Version.parse(version) if isinstance(version, str) else version
    except ValueError as exc:
        raise ReleaseNotFoundError(str(exc)) from exc

    release = model.find_release(target)
    if release is None:
        raise ReleaseNotFoundError(f"release {target} not found in changelog")
    return release


def render_release(release: Release) -> str:
    """Markdown of one release, without surrounding blank lines."""

    lines = release_lines(release)
    while lines and not lines[-1].strip():
        lines.pop()
    return "\n".join(lines) + "\n"


__all__ = ["get_release", "render_release"]
