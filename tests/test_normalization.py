"""
Tests for name and label normalization.
"""

from __future__ import annotations

import pytest

from costar.core.validators import entity_id_from_uri, is_valid_entity_id
from costar.graph.normalization import (
    clean_query,
    normalize_entity_name,
    same_name,
    sanitize_label,
)


class TestCleanQuery:
    def test_collapses_whitespace_keeps_case(self) -> None:
        assert clean_query("  Tom \t  Hanks\n") == "Tom Hanks"

    def test_empty(self) -> None:
        assert clean_query("   ") == ""


class TestNormalizeEntityName:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  Tom  HANKS  ", "tom hanks"),
            ("Robert Downey Jr.", "robert downey jr"),
            ('"Meryl Streep"', "meryl streep"),
            ("ＭＥＧ ＲＹＡＮ", "meg ryan"),
            ("", ""),
        ],
    )
    def test_normalization(self, raw: str, expected: str) -> None:
        assert normalize_entity_name(raw) == expected


class TestSameName:
    def test_case_and_spacing_ignored(self) -> None:
        assert same_name("tom  hanks", "TOM HANKS ")

    def test_different_names(self) -> None:
        assert not same_name("Tom Hanks", "Tom Hanx")


class TestSanitizeLabel:
    def test_strips_control_characters(self) -> None:
        assert sanitize_label("Tom\x00 Hanks\x9f\n") == "Tom Hanks"

    def test_keeps_accents(self) -> None:
        assert sanitize_label(" Penélope Cruz ") == "Penélope Cruz"


class TestEntityIds:
    @pytest.mark.parametrize("value", ["Q1", "Q2263", "Q42"])
    def test_valid(self, value: str) -> None:
        assert is_valid_entity_id(value)

    @pytest.mark.parametrize("value", ["Q0", "q42", "P106", "Q42/", "", "../Q1"])
    def test_invalid(self, value: str) -> None:
        assert not is_valid_entity_id(value)

    def test_uri_to_id(self) -> None:
        assert entity_id_from_uri("http://www.wikidata.org/entity/Q2263") == "Q2263"
        assert entity_id_from_uri("Q2263") == "Q2263"
