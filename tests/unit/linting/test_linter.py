"""
changelog-utils — unit tests for the changelog linter

File: tests/unit/linting/test_linter.py

Purpose
- Validate entry, section and release rules and their severities.
- Validate cross-release duplicate detection and escape handling.
- Validate deterministic diagnostic ordering.
"""

from __future__ import annotations

from typing import Any

import pytest

from changelog_utils.domain.models import PullRequestRef
from changelog_utils.linting import (
    OPEN_PR_LOOKUP_SKIPPED_NOTE,
    Diagnostic,
    RuleId,
    Severity,
    lint,
    lint_report,
)
from changelog_utils.parsing import parse
from changelog_utils.rules import RuleSet

RULES = RuleSet.create(categories={"lint", "cli"}, change_types=["Bug Fixes", "Features"])
TARGET = "https://github.com/org/repo"

CLEAN = "## Unreleased\n\n### Bug Fixes\n\n- (lint) [#1](https://x/pull/1) Fix bug\n"

DUPLICATED = (
    "## Unreleased\n"
    "\n"
    "### Bug Fixes\n"
    "\n"
    "- (lint) [#1](https://x/pull/1) Fix bug\n"
    "\n"
    "## [v1.0.0] - 2024-01-01\n"
    "\n"
    "### Bug Fixes\n"
    "\n"
    "{escape}"
    "- (lint) [#1](https://x/pull/1) Fix bug\n"
)
BACKPORT_ESCAPE = "<!-- clu-disable-next-line-duplicate-pr: backport -->\n"


def _lint(text: str, rules: RuleSet = RULES, **kwargs: Any) -> tuple[Diagnostic, ...]:
    return lint(parse(text), rules, **kwargs)


def _entry_text(line: str) -> str:
    return f"## Unreleased\n\n### Bug Fixes\n\n{line}\n"


def _keys(diagnostics: tuple[Diagnostic, ...]) -> list[tuple[int, RuleId]]:
    return [(item.line_number, item.rule_id) for item in diagnostics]


def test_clean_changelog_has_no_diagnostics() -> None:
    assert _lint(CLEAN) == ()


def test_unknown_category_is_a_single_error() -> None:
    diagnostics = _lint(CLEAN.replace("(lint)", "(docs)"))
    assert _keys(diagnostics) == [(5, RuleId.CATEGORY)]
    assert diagnostics[0].severity is Severity.ERROR
    assert diagnostics[0].message == "invalid change category: (docs)"


@pytest.mark.parametrize(
    ("line", "rule_id"),
    [
        ("-  (lint) [#1](https://x/pull/1) Fix bug", RuleId.WHITESPACE),
        ("- (lint) [#1]( https://x/pull/1) Fix bug", RuleId.PR_LINK),
        ("- (lint) [#1] (https://x/pull/1) Fix bug", RuleId.WHITESPACE),
        ("- (lint) [\\#1](https://x/pull/1) Fix bug", RuleId.PR_HASH),
        ("- (LINT) [#1](https://x/pull/1) Fix bug", RuleId.CATEGORY_CASE),
        ("- (lint) [#1](https://x/pull/2) Fix bug", RuleId.PR_LINK),
        ("- (lint) [#1](https://x/pull/1) fix bug", RuleId.DESCRIPTION_CAPITAL),
    ],
)
def test_entry_problems_are_fixable(line: str, rule_id: RuleId) -> None:
    diagnostics = _lint(_entry_text(line))
    assert [(item.rule_id, item.severity) for item in diagnostics] == [
        (rule_id, Severity.FIXABLE)
    ]


def test_pr_link_must_point_at_target_repository() -> None:
    rules = RuleSet.create(categories={"lint"}, change_types=["Bug Fixes"], target_repository=TARGET)
    diagnostics = _lint(
        _entry_text("- (lint) [#1](https://github.com/other/repo/pull/1) Fix bug"), rules
    )
    assert _keys(diagnostics) == [(5, RuleId.PR_LINK)]
    assert "wrong repository" in diagnostics[0].message
    assert diagnostics[0].is_fixable


def test_malformed_pr_link_is_fixable_only_when_a_target_is_known() -> None:
    text = _entry_text("- (lint) [#1](not-a-link) Fix bug")

    (without_target,) = _lint(text)
    assert without_target.rule_id is RuleId.PR_LINK
    assert without_target.severity is Severity.ERROR

    rules = RuleSet.create(categories={"lint"}, change_types=["Bug Fixes"], target_repository=TARGET)
    (with_target,) = _lint(text, rules)
    assert with_target.severity is Severity.FIXABLE


def test_trailing_period_is_checked_when_enabled() -> None:
    rules = RuleSet.create(
        categories={"lint"}, change_types=["Bug Fixes"], require_trailing_period=True
    )
    assert _keys(_lint(CLEAN, rules)) == [(5, RuleId.DESCRIPTION_PERIOD)]
    assert _lint(CLEAN.replace("Fix bug", "Fix bug."), rules) == ()


def test_spelling_is_checked_outside_code_spans() -> None:
    rules = RuleSet.create(
        categories={"lint"},
        change_types=["Bug Fixes"],
        spelling_corrections={"git ?hub": "GitHub"},
    )
    diagnostics = _lint(_entry_text("- (lint) [#1](https://x/pull/1) Fix github action"), rules)
    assert _keys(diagnostics) == [(5, RuleId.SPELLING)]
    assert diagnostics[0].message == "'GitHub' should be used instead of 'github'"

    in_code = _entry_text("- (lint) [#1](https://x/pull/1) Run `make github now` again")
    assert _lint(in_code, rules) == ()
    assert _lint(_entry_text("- (lint) [#1](https://x/pull/1) Use GitHub"), rules) == ()


def test_change_type_rules() -> None:
    assert _keys(_lint(CLEAN.replace("### Bug Fixes", "### bug fixes"))) == [
        (3, RuleId.CHANGE_TYPE_NAME)
    ]
    assert _keys(_lint(CLEAN.replace("### Bug Fixes", "###Bug Fixes"))) == [
        (3, RuleId.CHANGE_TYPE_HEADING)
    ]
    (unknown,) = _lint(CLEAN.replace("### Bug Fixes", "### Chores"))
    assert unknown.rule_id is RuleId.CHANGE_TYPE
    assert unknown.severity is Severity.ERROR


def test_duplicate_change_type_in_one_release() -> None:
    text = (
        "## Unreleased\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (lint) [#1](https://x/pull/1) Fix bug\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (lint) [#2](https://x/pull/2) Fix other bug\n"
    )
    assert _keys(_lint(text)) == [(7, RuleId.DUPLICATE_CHANGE_TYPE)]


def test_entry_order_is_checked_when_sorting_is_enabled() -> None:
    text = (
        "## Unreleased\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (lint) [#1](https://x/pull/1) Fix bug\n"
        "- (lint) [#2](https://x/pull/2) Fix other bug\n"
    )
    assert _lint(text) == ()
    rules = RuleSet.create(categories={"lint"}, change_types=["Bug Fixes"], sort_entries=True)
    assert _keys(_lint(text, rules)) == [(3, RuleId.ENTRY_ORDER)]


def test_release_order_compares_with_previous_release() -> None:
    text = (
        "## [v1.2.0] - 2024-03-01\n"
        "\n"
        "## [v1.0.0] - 2024-01-01\n"
        "\n"
        "## [v1.1.0] - 2024-02-01\n"
    )
    assert _keys(_lint(text)) == [(5, RuleId.RELEASE_ORDER)]
    descending = "## [v1.2.0] - 2024-03-01\n\n## [v1.1.0] - 2024-02-01\n\n## [v1.0.0] - 2024-01-01\n"
    assert _lint(descending) == ()


def test_unreleased_must_come_first_and_releases_must_be_unique() -> None:
    assert _keys(_lint("## [v1.0.0] - 2024-01-01\n\n## Unreleased\n")) == [
        (3, RuleId.RELEASE_ORDER)
    ]
    assert _keys(_lint("## [v1.0.0] - 2024-01-01\n\n## [v1.0.0] - 2024-01-01\n")) == [
        (3, RuleId.DUPLICATE_RELEASE)
    ]


def test_release_heading_rules() -> None:
    assert _keys(_lint("## [v1.0.0]\n")) == [(1, RuleId.RELEASE_DATE)]
    (invalid,) = _lint("## [v1.0.0] - 2024-13-01\n")
    assert invalid.rule_id is RuleId.RELEASE_DATE
    assert invalid.severity is Severity.ERROR
    assert _keys(_lint("## [v1.0.0]  -  2024-01-01\n")) == [(1, RuleId.RELEASE_HEADING)]
    assert _keys(_lint("## unreleased\n")) == [(1, RuleId.RELEASE_HEADING)]

    rules = RuleSet.create(categories=[], change_types=[], target_repository=TARGET)
    (missing_link,) = _lint("## [v1.0.0] - 2024-01-01\n", rules)
    assert missing_link.rule_id is RuleId.RELEASE_LINK
    assert missing_link.is_fixable
    linked = f"## [v1.0.0]({TARGET}/releases/tag/v1.0.0) - 2024-01-01\n"
    assert _lint(linked, rules) == ()


def test_duplicate_pr_across_releases_flags_the_older_entry() -> None:
    diagnostics = _lint(DUPLICATED.format(escape=""))
    assert _keys(diagnostics) == [(11, RuleId.DUPLICATE_PR)]
    assert diagnostics[0].message == "duplicate PR: #1"


def test_same_pr_in_another_category_is_not_a_duplicate() -> None:
    text = DUPLICATED.format(escape="").replace(
        "- (lint) [#1](https://x/pull/1) Fix bug\n\n## [",
        "- (cli) [#1](https://x/pull/1) Fix bug\n\n## [",
    )
    assert _lint(text) == ()


def test_duplicate_pr_escape_without_open_pr_lookup_adds_note() -> None:
    report = lint_report(parse(DUPLICATED.format(escape=BACKPORT_ESCAPE)), RULES)
    assert report.diagnostics == ()
    assert report.notes == (OPEN_PR_LOOKUP_SKIPPED_NOTE,)


def test_duplicate_pr_escape_for_closed_pull_request_is_honored() -> None:
    report = lint_report(
        parse(DUPLICATED.format(escape=BACKPORT_ESCAPE)), RULES, open_pull_requests=frozenset()
    )
    assert report.diagnostics == ()
    assert report.notes == ()


def test_duplicate_pr_escape_for_open_pull_request_is_rejected() -> None:
    diagnostics = _lint(
        DUPLICATED.format(escape=BACKPORT_ESCAPE),
        open_pull_requests={PullRequestRef("https://x/", 1)},
    )
    assert _keys(diagnostics) == [(12, RuleId.DUPLICATE_PR)]
    assert "escape not honored" in diagnostics[0].message


def test_duplicate_pr_in_one_release_cannot_be_escaped() -> None:
    text = (
        "## Unreleased\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (lint) [#1](https://x/pull/1) Fix bug\n"
        f"{BACKPORT_ESCAPE}"
        "- (lint) [#1](https://x/pull/1) Fix bug again\n"
    )
    assert _keys(_lint(text, open_pull_requests=frozenset())) == [(7, RuleId.DUPLICATE_PR)]


def test_disable_all_escape_suppresses_entry_rules() -> None:
    text = _entry_text("<!-- clu-disable-next-line -->\n- (docs)  [\\#1](bad) fix it")
    assert _lint(text) == ()


def test_dangling_escape_is_an_escape_scope_error() -> None:
    text = (
        "## Unreleased\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "<!-- clu-disable-next-line -->\n"
        "\n"
        "- (lint) [#1](https://x/pull/1) Fix bug\n"
    )
    diagnostics = _lint(text)
    assert _keys(diagnostics) == [(5, RuleId.ESCAPE_SCOPE)]
    assert diagnostics[0].severity is Severity.ERROR


@pytest.mark.parametrize(
    "escape",
    ["<!-- clu-disable-next-line -->", "<!-- clu-disable-next-line-duplicate-pr: backport -->"],
)
def test_escape_above_a_heading_is_an_escape_scope_error(escape: str) -> None:
    text = (
        "## Unreleased\n"
        "\n"
        f"{escape}\n"
        "### Bug fixes\n"
        "\n"
        "- (lint) [#1](https://x/pull/1) Fix bug\n"
        "\n"
        f"{escape}\n"
        "## [v1.0.0] - 2024-01-01\n"
        "\n"
        "### Bug Fixes\n"
        "\n"
        "- (lint) [#2](https://x/pull/2) Fix other bug\n"
    )
    assert _keys(_lint(text)) == [
        (3, RuleId.ESCAPE_SCOPE),
        (4, RuleId.CHANGE_TYPE_NAME),
        (8, RuleId.ESCAPE_SCOPE),
    ]


def test_diagnostics_are_ordered_by_line_then_rule() -> None:
    text = "## unreleased\n\n### Bug Fixes\n\n-  (LINT) [#1](https://x/pull/1) fix bug\n"
    assert _keys(_lint(text)) == [
        (1, RuleId.RELEASE_HEADING),
        (5, RuleId.CATEGORY_CASE),
        (5, RuleId.DESCRIPTION_CAPITAL),
        (5, RuleId.WHITESPACE),
    ]
