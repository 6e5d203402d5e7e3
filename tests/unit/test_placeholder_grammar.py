"""
Unit tests for the placeholder grammar.

Tests scanning, parsing, expansion, and cleanup in
longlist.contexts.templating.placeholder_grammar.
"""

import pytest

from longlist.contexts.templating.placeholder_grammar import (
    LiteralSpan,
    ScalarNode,
    SectionNode,
    TokenSpan,
    expand_part,
    find_placeholder_keys,
    has_placeholders,
    is_truthy,
    parse_part,
    scan,
    strip_residual_placeholders,
)
from longlist.contexts.templating.placeholder_patterns import TOKEN_PATTERN, TokenKind, scalar_token


@pytest.mark.unit
class TestScan:
    """Tests for scan function."""

    def test_spans_reproduce_input(self):
        """Test concatenating span text gives back the part text."""
        text = "<a:t>{?NAME_1}Hi {{NAME_1}}{/?NAME_1}</a:t>"
        spans = scan(text)

        assert "".join(span.text for span in spans) == text

    def test_token_kinds(self):
        """Test every delimiter is classified."""
        spans = [span for span in scan("{{A}}{?B}{/?B}{#C}{/C}") if isinstance(span, TokenSpan)]

        assert [span.kind for span in spans] == [
            TokenKind.SCALAR,
            TokenKind.COND_OPEN,
            TokenKind.COND_CLOSE,
            TokenKind.LOOP_OPEN,
            TokenKind.LOOP_CLOSE,
        ]
        assert [span.key for span in spans] == ["A", "B", "B", "C", "C"]

    def test_lowercase_keys_are_literal(self):
        """Test keys outside [A-Z0-9_] are not placeholders."""
        spans = scan("{{name}}")

        assert len(spans) == 1
        assert isinstance(spans[0], LiteralSpan)

    def test_offsets(self):
        span = scan("ab{{X}}")[1]

        assert (span.start, span.end) == (2, 7)


@pytest.mark.unit
class TestPlaceholderKeys:
    """Tests for find_placeholder_keys and has_placeholders functions."""

    def test_distinct_keys_in_order(self):
        text = "{?NAME_1}{{NAME_1}}{/?NAME_1}{{COMPANY}}{{NAME_1}}"

        assert find_placeholder_keys(text) == ["NAME_1", "COMPANY"]

    def test_has_placeholders(self):
        assert has_placeholders("<a:t>{{X}}</a:t>")
        assert not has_placeholders("<a:t>{ X }</a:t>")

    def test_scalar_token(self):
        assert scalar_token("NAME_2") == "{{NAME_2}}"


@pytest.mark.unit
class TestParse:
    """Tests for parse and parse_part functions."""

    def test_conditional_tree(self):
        nodes = parse_part("{?A}x{{A}}{/?A}")

        assert len(nodes) == 1
        section = nodes[0]
        assert isinstance(section, SectionNode)
        assert section.key == "A"
        assert not section.is_loop
        assert section.children == ["x", ScalarNode(key="A", text="{{A}}")]

    def test_loop_inside_conditional(self):
        section = parse_part("{?W}{#W}[{{COMPANY}}]{/W}{/?W}")[0]
        loop = section.children[0]

        assert loop.is_loop
        assert loop.key == "W"
        assert loop.children[1] == ScalarNode(key="COMPANY", text="{{COMPANY}}")

    def test_stray_closer_kept_as_token(self):
        nodes = parse_part("x{/?A}y")

        assert nodes[0] == "x"
        assert isinstance(nodes[1], TokenSpan)
        assert nodes[2] == "y"

    def test_unclosed_opener_flattened(self):
        """Test an opener that never closes becomes a stray token followed by its body."""
        nodes = parse_part("{?A}x")

        assert isinstance(nodes[0], TokenSpan)
        assert nodes[1] == "x"


@pytest.mark.unit
class TestExpandPart:
    """Tests for expand_part function."""

    def test_scalar_becomes_value_slot(self):
        part = expand_part("<a:t>{{NAME_1}}</a:t>", {"NAME_1": "ADA"})

        assert part.text == "<a:t>" + part.slot(0) + "</a:t>"
        assert part.values == ["ADA"]
        assert part.residuals_removed == 0
        assert part.keys == ["NAME_1"]
        assert part.key(0) == "NAME_1"
        assert part.key(1) is None

    def test_conditional_kept_when_set(self):
        part = expand_part("{?NAME_1}Hi {{NAME_1}}{/?NAME_1}", {"NAME_1": "ADA"})

        assert part.text == "Hi " + part.slot(0)

    @pytest.mark.parametrize("value", ["", []])
    def test_conditional_removed_when_empty(self, value):
        """Test an empty string or empty list removes the block with its delimiters."""
        part = expand_part("<a:t>{?K}Hi {{K}}{/?K}</a:t>", {"K": value})

        assert part.text == "<a:t></a:t>"
        assert part.values == []

    def test_conditional_removed_when_unbound(self):
        assert expand_part("a{?K}b{/?K}c", {}).text == "ac"

    def test_loop_repeats_per_item(self):
        binding = {"W": [{"COMPANY": "Acme"}, {"COMPANY": "Beta"}]}
        part = expand_part("{?W}{#W}[{{COMPANY}}]{/W}{/?W}", binding)

        assert part.text == f"[{part.slot(0)}][{part.slot(1)}]"
        assert part.values == ["Acme", "Beta"]
        assert part.keys == ["COMPANY", "COMPANY"]

    def test_loop_with_no_items(self):
        assert expand_part("a{#W}[{{COMPANY}}]{/W}b", {"W": []}).text == "ab"

    def test_loop_item_scope_hides_outer_keys(self):
        """Test a scalar inside a loop resolves only against the item."""
        binding = {"NAME_1": "ADA", "W": [{"COMPANY": "Acme"}]}
        part = expand_part("{#W}{{NAME_1}}{/W}", binding)

        assert part.text == ""
        assert part.values == []
        assert part.residuals_removed == 1

    def test_loop_bound_to_string(self):
        """Test a loop key bound to a string renders its body once if non-empty."""
        assert expand_part("{#A}x{/A}", {"A": "yes"}).text == "x"
        assert expand_part("{#A}x{/A}", {"A": ""}).text == ""

    def test_list_bound_to_scalar_is_unbound(self):
        part = expand_part("a{{W}}b", {"W": [{"COMPANY": "Acme"}]})

        assert part.text == "ab"
        assert part.residuals_removed == 1

    def test_unbound_scalar_removed(self):
        part = expand_part("a{{MISSING}}b", {})

        assert part.text == "ab"
        assert part.residuals_removed == 1

    def test_nested_conditionals(self):
        assert expand_part("{?A}{?B}x{/?B}y{/?A}", {"A": "1", "B": ""}).text == "y"

    def test_mismatched_nesting_is_cleaned(self):
        """Test an inner block left open by its parent's closer is cleaned up."""
        part = expand_part("{?A}{?B}x{/?A}", {"A": "1", "B": "1"})

        assert part.text == "x"
        assert part.residuals_removed == 1

    def test_values_are_not_rescanned(self):
        """Test placeholder syntax inside a value is kept as a raw value."""
        part = expand_part("{{A}}", {"A": "{{B}}", "B": "leak"})

        assert part.values == ["{{B}}"]
        assert TOKEN_PATTERN.search(part.text) is None

    def test_no_tokens_survive(self):
        """Test nothing matching the placeholder grammar survives expansion."""
        text = "{?A}{{A}}{/?A}{#B}{{X}}{/B}{{C}}{/?D}{#E}"
        part = expand_part(text, {"A": "a", "B": [{"X": "x"}]})

        assert TOKEN_PATTERN.search(part.text) is None


@pytest.mark.unit
class TestStripResidualPlaceholders:
    """Tests for strip_residual_placeholders function."""

    def test_removes_every_token_kind(self):
        assert strip_residual_placeholders("{{A}}{?B}{/?B}{#C}{/C}z") == ("z", 5)

    def test_leaves_plain_braces(self):
        assert strip_residual_placeholders("{a} {{b}} {}") == ("{a} {{b}} {}", 0)


@pytest.mark.unit
def test_is_truthy():
    assert is_truthy("x")
    assert is_truthy([{"A": ""}])
    assert not is_truthy("")
    assert not is_truthy([])
    assert not is_truthy(None)
