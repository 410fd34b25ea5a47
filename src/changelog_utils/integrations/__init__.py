"""Seams to collaborators outside the engine: PR lookup and description suggestions."""

from changelog_utils.integrations.pull_requests import (
    OpenPullRequestSource,
    PullRequestLookupError,
    StaticPullRequestSource,
    resolve_open_pull_requests,
)
from changelog_utils.integrations.suggestions import (
    Suggestion,
    SuggestionReview,
    review_suggestion,
)

__all__ = [
    "OpenPullRequestSource",
    "PullRequestLookupError",
    "StaticPullRequestSource",
    "Suggestion",
    "SuggestionReview",
    "resolve_open_pull_requests",
    "review_suggestion",
]
