"""
changelog-utils — property tests for parse/serialize round trips

File: tests/unit/parsing/test_roundtrip_properties.py

Purpose
- Any well-formed changelog, canonical or not, serializes back to its exact source.
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from changelog_utils.parsing import parse, serialize

_WHITESPACE = st.sampled_from(["", " ", "  ", "\t"])
_DESCRIPTION = st.text(
    alphabet="abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 .,`-()",
    min_size=1,
    max_size=30,
).filter(lambda value: not value[0].isspace())
_OPAQUE = st.sampled_from(["", "Some notes.", "  indented text", "<!-- note -->"])


@st.composite
def _entry_lines(draw: st.DrawFn) -> list[str]:
    ws = [draw(_WHITESPACE) for _ in range(5)]
    category = draw(st.sampled_from(["cli", "CLI", "docs", "unknown-thing"]))
    number = draw(st.integers(min_value=1, max_value=9999))
    hash_mark = draw(st.sampled_from(["#", "\\#"]))
    link = draw(
        st.sampled_from(
            [f"https://github.com/org/repo/pull/{number}", "https://example.com/x", ""]
        )
    )
    description = draw(_DESCRIPTION)
    lines: list[str] = []
    if draw(st.booleans()):
        lines.append(
            draw(
                st.sampled_from(
                    [
                        "<!-- clu-disable-next-line -->",
                        "<!-- clu-disable-next-line-duplicate-pr: backport -->",
                    ]
                )
            )
        )
    lines.append(
        f"{ws[0]}-{ws[1]}({category}){ws[2]}[{hash_mark}{number}]{ws[3]}({link}){ws[4]}{description}"
    )
    lines.extend(draw(st.lists(_OPAQUE, max_size=2)))
    return lines


@st.composite
def _section_lines(draw: st.DrawFn) -> list[str]:
    name = draw(st.sampled_from(["Features", "Bug Fixes", "bug fixes", "Chores"]))
    heading = draw(st.sampled_from([f"### {name}", f"###{name}", f"###  {name}  "]))
    lines = [heading, *draw(st.lists(_OPAQUE, max_size=2))]
    for entry in draw(st.lists(_entry_lines(), max_size=4)):
        lines.extend(entry)
    return lines


@st.composite
def _changelog_text(draw: st.DrawFn) -> str:
    lines = ["# Changelog", ""]
    if draw(st.booleans()):
        lines.extend(["## Unreleased", ""])
        for section in draw(st.lists(_section_lines(), max_size=3)):
            lines.extend(section)
    versions = draw(
        st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=3),
                st.integers(min_value=0, max_value=12),
                st.integers(min_value=0, max_value=12),
            ),
            max_size=3,
        )
    )
    for major, minor, patch in versions:
        date_part = draw(st.sampled_from([" - 2024-01-31", "", " - someday"]))
        lines.extend([f"## [v{major}.{minor}.{patch}]{date_part}", ""])
        for section in draw(st.lists(_section_lines(), max_size=2)):
            lines.extend(section)
    text = "\n".join(lines)
    if draw(st.booleans()):
        text += "\n"
    return text


@settings(max_examples=60, derandomize=True, deadline=None)
@given(text=_changelog_text())
def test_serialize_parse_is_identity(text: str) -> None:
    assert serialize(parse(text)) == text


@settings(max_examples=25, derandomize=True, deadline=None)
@given(text=_changelog_text())
def test_reparse_of_serialized_model_is_stable(text: str) -> None:
    model = parse(text)
    assert parse(serialize(model)) == model
