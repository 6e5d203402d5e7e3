"""
Unit tests for markup escaping tools.

Tests value escaping, control character removal, pattern escaping, and line
splitting in longlist.utils.escaping.
"""

import re

import pytest
from lxml import etree

from longlist.utils.escaping import (
    LINE_BREAK,
    escape_literal_for_match,
    escape_markup_text,
    has_line_break,
    sanitize_control_characters,
    split_lines,
)


@pytest.mark.unit
class TestEscapeMarkupText:
    """Tests for escape_markup_text function."""

    def test_markup_characters(self):
        """Test the five markup characters become entities."""
        assert escape_markup_text("R&D <Lead>") == "R&amp;D &lt;Lead&gt;"
        assert escape_markup_text("\"Q\" 'A'") == "&quot;Q&quot; &apos;A&apos;"

    def test_existing_entity_is_escaped_again(self):
        """Test escaping is not idempotent: a raw entity is treated as text."""
        assert escape_markup_text("&amp;") == "&amp;amp;"

    def test_empty(self):
        assert escape_markup_text("") == ""

    def test_control_characters_removed(self):
        """Test C0 controls other than tab/newline/CR are dropped."""
        assert escape_markup_text("a\x00b\x0bc\x1fd\te") == "abcd\te"

    def test_lone_surrogate_removed(self):
        assert escape_markup_text("R\udc00&D") == "R&amp;D"

    def test_parses_back_to_original(self):
        """Test an escaped value parses back to the raw value exactly once."""
        raw = "AT&T <Board> \"Chair\" & 'Founder'"
        root = etree.fromstring(f"<t>{escape_markup_text(raw)}</t>".encode("utf-8"))

        assert root.text == raw


@pytest.mark.unit
class TestSanitizeControlCharacters:
    """Tests for sanitize_control_characters function."""

    def test_keeps_whitespace_controls(self):
        assert sanitize_control_characters("a\tb\nc\rd") == "a\tb\nc\rd"

    def test_removes_noncharacters(self):
        assert sanitize_control_characters("a\ufffeb\uffffc") == "abc"

    def test_removes_lone_surrogates(self):
        """Test unpaired surrogates, which cannot be encoded as UTF-8, are dropped."""
        cleaned = sanitize_control_characters("Ann\ud800e\udfff")

        assert cleaned == "Anne"
        assert cleaned.encode("utf-8") == b"Anne"

    def test_empty(self):
        assert sanitize_control_characters("") == ""


@pytest.mark.unit
class TestEscapeLiteralForMatch:
    """Tests for escape_literal_for_match function."""

    @pytest.mark.parametrize(
        "literal",
        ["{{NAME_1}}", "{?WORK_HISTORY_2}", "{/?EDUCATION_3}", "a.b*c+d?", "$(x)|[y]^\\z"],
    )
    def test_matches_literal_exactly(self, literal):
        """Test the escaped pattern matches only the literal text."""
        pattern = escape_literal_for_match(literal)

        assert re.fullmatch(pattern, literal)

    def test_braces_escaped(self):
        assert escape_literal_for_match("{{A}}") == r"\{\{A\}\}"

    def test_metacharacters_do_not_match_other_text(self):
        """Test '.' in a literal does not act as a wildcard."""
        assert re.search(escape_literal_for_match("a.c"), "abc") is None


@pytest.mark.unit
class TestSplitLines:
    """Tests for split_lines and has_line_break functions."""

    def test_single_line(self):
        assert split_lines("single") == ["single"]

    def test_normalizes_carriage_returns(self):
        """Test CRLF and CR split the same way as the line-break marker."""
        assert split_lines("a\r\nb\rc\nd") == ["a", "b", "c", "d"]

    def test_keeps_empty_lines(self):
        assert split_lines(f"a{LINE_BREAK}{LINE_BREAK}b") == ["a", "", "b"]

    def test_has_line_break(self):
        assert has_line_break("a\nb")
        assert has_line_break("a\rb")
        assert not has_line_break("a b")
