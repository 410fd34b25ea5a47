"""Open pull request lookup seam used by the duplicate-PR escape check."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from changelog_utils.domain.models import PullRequestRef

logger = structlog.get_logger(__name__)


class PullRequestLookupError(RuntimeError):
    """Raised by a source when open pull requests cannot be determined."""


@runtime_checkable
class OpenPullRequestSource(Protocol):
    def open_pull_requests(self) -> frozenset[PullRequestRef]: ...


@dataclass(frozen=True, slots=True)
class StaticPullRequestSource:
    """Source backed by an already known set of open pull requests."""

    refs: frozenset[PullRequestRef]

    @classmethod
    def from_numbers(cls, repository: str, numbers: Iterable[int]) -> StaticPullRequestSource:
        return cls(frozenset(PullRequestRef(repository, number).normalized() for number in numbers))

    def open_pull_requests(self) -> frozenset[PullRequestRef]:
        return self.refs


def resolve_open_pull_requests(
    source: OpenPullRequestSource | None,
) -> frozenset[PullRequestRef] | None:
    """Resolve ``source`` once; None means the lookup is unavailable."""

    if source is None:
        return None
    try:
        refs = source.open_pull_requests()
    except PullRequestLookupError as exc:
        logger.warning("open_pull_request_lookup_failed", error=str(exc))
        return None
    return frozenset(ref.normalized() for ref in refs)


__all__ = [
    "OpenPullRequestSource",
    "PullRequestLookupError",
    "StaticPullRequestSource",
    "resolve_open_pull_requests",
]
