"""
Name and label normalization for consistent matching.

Two concerns:
- Comparing names the player typed against oracle labels (casefolded,
  whitespace-collapsed, punctuation-trimmed)
- Sanitizing labels before they land in a graph snapshot (control
  characters stripped, whitespace trimmed)
"""

from __future__ import annotations

import re
import unicodedata

_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F-\x9F]")


def clean_query(name: str) -> str:
    """
    Collapse whitespace in a user-supplied name without changing its case.

    Examples:
        >>> clean_query("  Tom   Hanks ")
        'Tom Hanks'
    """
    return " ".join((name or "").split())


def normalize_entity_name(name: str) -> str:
    """
    Normalize an actor name for comparison.

    Steps:
    1. Unicode NFKC normalization
    2. Casefold
    3. Collapse whitespace
    4. Strip leading/trailing punctuation only

    Args:
        name: The name to normalize.

    Returns:
        Normalized name for comparison.

    Examples:
        >>> normalize_entity_name("  Tom  HANKS  ")
        'tom hanks'
        >>> normalize_entity_name("Robert Downey Jr.")
        'robert downey jr'
    """
    if not name:
        return ""

    text = unicodedata.normalize("NFKC", name)
    text = text.casefold()
    text = " ".join(text.split())
    text = text.strip(".,;:!?\"'()[]{}")

    return text


def same_name(left: str, right: str) -> bool:
    """Whether two names are equal ignoring case and surrounding whitespace."""
    return clean_query(left).casefold() == clean_query(right).casefold()


def sanitize_label(label: str) -> str:
    """
    Remove control characters from an oracle label and trim it.

    Examples:
        >>> sanitize_label("Tom\\x00 Hanks\\n")
        'Tom Hanks'
    """
    if not label:
        return ""
    return _CONTROL_CHARS.sub("", label).strip()
