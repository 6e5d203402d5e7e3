"""
Placeholder Pattern Constants

Centralized placeholder delimiters and markup patterns used for scanning and injection.
Organized into frozen dataclasses by category for immutability and clear grouping.
"""

import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PlaceholderDelimiters:
    """
    Literal delimiters of the placeholder grammar.

    Formats accept the key via .format(key=...).
    """

    SCALAR: str = "{{{{{key}}}}}"  # {{KEY}}
    COND_OPEN: str = "{{?{key}}}"  # {?KEY}
    COND_CLOSE: str = "{{/?{key}}}"  # {/?KEY}
    LOOP_OPEN: str = "{{#{key}}}"  # {#KEY}
    LOOP_CLOSE: str = "{{/{key}}}"  # {/KEY}


@dataclass(frozen=True)
class PlaceholderRegex:
    """
    Regex patterns for placeholder tokens.

    Keys are restricted to [A-Z0-9_], so key text never needs escaping.
    Group order in TOKEN matches TokenKind below.
    """

    KEY: str = r"[A-Z0-9_]+"
    TOKEN: str = (
        r"\{\{(?P<scalar>[A-Z0-9_]+)\}\}"
        r"|\{\?(?P<cond_open>[A-Z0-9_]+)\}"
        r"|\{/\?(?P<cond_close>[A-Z0-9_]+)\}"
        r"|\{#(?P<loop_open>[A-Z0-9_]+)\}"
        r"|\{/(?P<loop_close>[A-Z0-9_]+)\}"
    )


class TokenKind:
    """Enum-like class for placeholder token kinds"""

    SCALAR = "scalar"
    COND_OPEN = "cond_open"
    COND_CLOSE = "cond_close"
    LOOP_OPEN = "loop_open"
    LOOP_CLOSE = "loop_close"

    OPENERS = {COND_OPEN: COND_CLOSE, LOOP_OPEN: LOOP_CLOSE}
    CLOSERS = {COND_CLOSE: COND_OPEN, LOOP_CLOSE: LOOP_OPEN}


TOKEN_PATTERN = re.compile(PlaceholderRegex.TOKEN)


def scalar_token(key: str) -> str:
    """Return the literal scalar placeholder for a key (e.g., "{{NAME_1}}")."""
    return PlaceholderDelimiters.SCALAR.format(key=key)


@dataclass(frozen=True)
class RunMarkup:
    """
    Markup vocabulary of one OOXML text dialect.

    Attributes:
        name: Dialect name for logging
        run_tag: Qualified run element name (a:r, w:r)
        props_tag: Qualified run-properties element name (a:rPr, w:rPr)
        text_tag: Qualified text element name (a:t, w:t)
        break_template: Break markup between lines; {props} receives the
            run-properties element verbatim
        empty_break: Break markup used when the run has no properties element
            (None means break_template works with empty props)
    """

    name: str
    run_tag: str
    props_tag: str
    text_tag: str
    break_template: str
    empty_break: Optional[str] = None

    def open_pattern(self, tag: str) -> str:
        """Pattern for an opening (non-self-closing) tag, e.g. <a:r> or <a:r attr="x">."""
        return rf"<{re.escape(tag)}(?:\s[^>]*)?(?<!/)>"

    def close_tag(self, tag: str) -> str:
        return f"</{tag}>"

    def props_pattern(self) -> str:
        """Pattern for the run-properties element, self-closing or with children."""
        tag = re.escape(self.props_tag)
        return rf"<{tag}(?:\s[^>]*)?/>|<{tag}(?:\s[^>]*)?>.*?</{tag}>"

    def render_break(self, props: str) -> str:
        if not props and self.empty_break is not None:
            return self.empty_break
        return self.break_template.format(props=props)


# PresentationML slides: breaks are siblings of runs and carry their own rPr
DRAWINGML = RunMarkup(
    name="DrawingML",
    run_tag="a:r",
    props_tag="a:rPr",
    text_tag="a:t",
    break_template="<a:br>{props}</a:br>",
    empty_break="<a:br/>",
)

# WordprocessingML documents: a break is a run containing <w:br/>
WORDML = RunMarkup(
    name="WordprocessingML",
    run_tag="w:r",
    props_tag="w:rPr",
    text_tag="w:t",
    break_template="<w:r>{props}<w:br/></w:r>",
)

RUN_DIALECTS = (DRAWINGML, WORDML)
