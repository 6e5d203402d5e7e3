"""
Markup Escaping Tools

Escaping helpers for injecting plain values into XML parts and for turning
literal placeholder text into search patterns.

Self-contained module with no project dependencies.
"""

import re
from typing import List

# The marker callers use to join logical lines before binding a scalar value
LINE_BREAK = "\n"

# Characters that are not allowed anywhere in an XML 1.0 document.
# Tab, newline and carriage return are the only permitted C0 controls. Lone
# surrogates (e.g. from "\ud800" escapes in JSON) cannot be encoded as UTF-8.
ILLEGAL_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

# Entity forms for XML text and attribute content
MARKUP_ENTITIES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

# Characters with special meaning in Python regular expressions
PATTERN_METACHARACTERS = ".*+?^${}()|[]\\"


def sanitize_control_characters(text: str) -> str:
    """
    Remove characters that cannot appear in XML 1.0 content.

    Args:
        text: Raw value

    Returns:
        Value with illegal control characters removed
    """
    if not text:
        return ""
    return ILLEGAL_XML_CHARS.sub("", text)


def escape_markup_text(text: str) -> str:
    """
    Escape a plain value for use as XML text content.

    Sanitizes illegal control characters, then replaces the five markup
    characters with their entity forms. Must be applied exactly once per value:
    a raw "&amp;" becomes "&amp;amp;", which parses back to "&amp;".

    Conversions:
    - & → &amp; (must be first to avoid double-escaping the other entities)
    - < → &lt;
    - > → &gt;
    - " → &quot;
    - ' → &apos;

    Args:
        text: Plain (unescaped) value

    Returns:
        XML-safe text

    Example:
        >>> escape_markup_text("R&D <Lead>")
        'R&amp;D &lt;Lead&gt;'
    """
    if not text:
        return ""

    result = sanitize_control_characters(text)
    result = result.replace("&", MARKUP_ENTITIES["&"])
    result = result.replace("<", MARKUP_ENTITIES["<"])
    result = result.replace(">", MARKUP_ENTITIES[">"])
    result = result.replace('"', MARKUP_ENTITIES['"'])
    result = result.replace("'", MARKUP_ENTITIES["'"])

    return result


def escape_literal_for_match(text: str) -> str:
    """
    Escape pattern metacharacters so literal text can be used as a regex.

    Used whenever placeholder text such as "{{NAME_1}}" is turned into a search
    pattern; the braces are the characters that actually need it.

    Args:
        text: Literal text

    Returns:
        Pattern matching exactly ``text``

    Example:
        >>> escape_literal_for_match("{{NAME_1}}")
        '\\\\{\\\\{NAME_1\\\\}\\\\}'
    """
    return "".join(f"\\{char}" if char in PATTERN_METACHARACTERS else char for char in text)


def split_lines(value: str) -> List[str]:
    """
    Split a multi-line value on the line-break marker.

    Carriage returns are normalized to the marker first, so "a\\r\\nb" and
    "a\\nb" produce the same lines.

    Args:
        value: Scalar value, possibly joined with LINE_BREAK

    Returns:
        List of lines (a single-element list when there is no marker)
    """
    normalized = value.replace("\r\n", LINE_BREAK).replace("\r", LINE_BREAK)
    return normalized.split(LINE_BREAK)


def has_line_break(value: str) -> bool:
    """Check whether a value spans several lines."""
    return LINE_BREAK in value or "\r" in value
