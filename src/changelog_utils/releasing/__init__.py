"""Release cutting for the Unreleased bucket."""

from changelog_utils.releasing.transition import cut_release, next_version

__all__ = ["cut_release", "next_version"]
