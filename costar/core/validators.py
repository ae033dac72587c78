"""
Centralized validation utilities for graph identifiers.

Wikidata entities are addressed as "Q<digits>" either bare or embedded
in a concept URI (http://www.wikidata.org/entity/Q42). Everything past
the oracle boundary works with bare identifiers only.
"""

from __future__ import annotations

import re

# Wikidata item identifier (Q42, Q2263, ...)
ENTITY_ID_PATTERN = re.compile(r"^Q[1-9][0-9]*$")

ENTITY_URI_PREFIX = "http://www.wikidata.org/entity/"


def is_valid_entity_id(value: str) -> bool:
    """
    Check if a string is a bare Wikidata item identifier.

    Args:
        value: The string to validate

    Returns:
        True if the value matches the Q-identifier format, False otherwise
    """
    return bool(ENTITY_ID_PATTERN.match(value))


def entity_id_from_uri(value: str) -> str:
    """
    Strip a concept URI down to its bare identifier.

    Bare identifiers pass through unchanged.

    Examples:
        >>> entity_id_from_uri("http://www.wikidata.org/entity/Q2263")
        'Q2263'
        >>> entity_id_from_uri("Q2263")
        'Q2263'
    """
    return value.rstrip("/").rsplit("/", 1)[-1]
