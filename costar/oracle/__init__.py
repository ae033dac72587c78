"""
Remote graph oracle access.

Provides the oracle interface, the Wikidata-backed client, typed result
rows, and the best-effort name-correction collaborator.
"""

from costar.oracle.base import GraphOracle
from costar.oracle.client import WikidataClient
from costar.oracle.correction import (
    LLMNameCorrector,
    NameCorrector,
    PassthroughCorrector,
)

__all__ = [
    "GraphOracle",
    "WikidataClient",
    "NameCorrector",
    "LLMNameCorrector",
    "PassthroughCorrector",
]
