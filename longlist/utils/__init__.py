"""
Shared utilities for LONGLIST.

Common functionality used across contexts:
- Markup escaping
- Logger setup
- Pipeline event logging
- Timestamps
"""

from longlist.utils.escaping import escape_literal_for_match, escape_markup_text
from longlist.utils.timestamp import now, now_exact

__all__ = ["escape_literal_for_match", "escape_markup_text", "now", "now_exact"]
