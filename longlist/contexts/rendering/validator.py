"""
Rendered part validation.

Every rendered part must still parse as XML before the package is written; a
malformed part would produce a document the presentation software refuses to open.
"""

from typing import Iterable, Tuple

from lxml import etree

from longlist.contexts.rendering.logger import _log_debug, _log_error
from longlist.contexts.templating.exceptions import PartValidationError


def check_well_formed(name: str, text: str) -> None:
    """
    Parse a rendered part with lxml.

    Args:
        name: Part name (for the error message)
        text: Rendered part text

    Raises:
        PartValidationError: If the text is not well-formed XML
    """
    try:
        # Parse bytes so an encoding declaration in the prolog is accepted
        etree.fromstring(text.encode("utf-8"))
    except etree.XMLSyntaxError as e:
        _log_error(f"Rendered part is not well-formed: {name} ({e})")
        raise PartValidationError("Rendered part is not well-formed XML", part_name=name, original_error=e)


def check_parts(parts: Iterable[Tuple[str, str]]) -> int:
    """
    Validate several rendered parts.

    Args:
        parts: (name, text) pairs

    Returns:
        Number of parts checked

    Raises:
        PartValidationError: On the first malformed part
    """
    count = 0
    for name, text in parts:
        check_well_formed(name, text)
        count += 1
    _log_debug(f"Validated {count} rendered parts")
    return count
