from __future__ import annotations

import pytest

from changelog_utils.domain.models import EscapeKind
from changelog_utils.parsing.escapes import parse_escape, render_escape


@pytest.mark.parametrize(
    ("line", "kind", "justification"),
    [
        ("<!-- clu-disable-next-line -->", EscapeKind.DISABLE_ALL, None),
        ("  <!--clu-disable-next-line-->", EscapeKind.DISABLE_ALL, None),
        ("<!-- clu-disable-next-line: imported -->", EscapeKind.DISABLE_ALL, "imported"),
        ("<!-- clu-disable-next-line-duplicate-pr -->", EscapeKind.DISABLE_DUPLICATE_PR, None),
        (
            "<!-- clu-disable-next-line-duplicate-pr:  backport of #4  -->",
            EscapeKind.DISABLE_DUPLICATE_PR,
            "backport of #4",
        ),
    ],
)
def test_parse_escape_variants(line: str, kind: EscapeKind, justification: str | None) -> None:
    escape = parse_escape(line, 9)
    assert escape is not None
    assert escape.kind is kind
    assert escape.justification == justification
    assert escape.line_number == 9
    assert escape.raw == line


@pytest.mark.parametrize(
    "line",
    [
        "<!-- some other comment -->",
        "<!-- clu-disable-next-line",
        "text <!-- clu-disable-next-line -->",
        "- (cli) [#1](https://x/pull/1) Add",
    ],
)
def test_parse_escape_ignores_other_lines(line: str) -> None:
    assert parse_escape(line, 1) is None


def test_render_escape_is_parseable() -> None:
    assert render_escape(EscapeKind.DISABLE_ALL) == "<!-- clu-disable-next-line -->"
    rendered = render_escape(EscapeKind.DISABLE_DUPLICATE_PR, " backport ")
    assert rendered == "<!-- clu-disable-next-line-duplicate-pr: backport -->"
    escape = parse_escape(rendered, 1)
    assert escape is not None
    assert escape.justification == "backport"
