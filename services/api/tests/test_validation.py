"""
Tests for validation functions.

Run with: pytest tests/test_validation.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import EmptyTitleError
from core.validation import (
    coerce_doc_type,
    derive_tab_name,
    find_duplicates,
    normalize_placeholder_key,
    require_title,
)


class TestNormalizePlaceholderKey:
    """Tests for placeholder key normalization."""

    def test_lowercase_words(self):
        """Words are uppercased and joined with underscores."""
        assert normalize_placeholder_key("client nom") == "CLIENT_NOM"

    def test_trim_and_collapse(self):
        """Surrounding whitespace trimmed, inner runs collapsed."""
        assert normalize_placeholder_key("  proj   adreca\t ") == "PROJ_ADRECA"

    def test_already_normalized(self):
        assert normalize_placeholder_key("CLIENT_NOM") == "CLIENT_NOM"

    def test_variants_collide(self):
        """Different spellings of the same key normalize identically."""
        assert normalize_placeholder_key("Client Nom") == normalize_placeholder_key("CLIENT_NOM")

    def test_empty(self):
        assert normalize_placeholder_key("") == ""
        assert normalize_placeholder_key("   ") == ""
        assert normalize_placeholder_key(None) == ""


class TestDeriveTabName:
    """Tests for chapter title -> sheet tab name."""

    def test_memoria_descriptiva(self):
        """Uppercased, '?' stripped, spaces become underscores."""
        name = derive_tab_name("01 Memòria Descriptiva?")
        assert name == "01_MEMÒRIA_DESCRIPTIVA"
        assert "?" not in name
        assert " " not in name
        assert len(name) <= 30

    def test_deterministic(self):
        assert derive_tab_name("02 Plànols: planta") == derive_tab_name("02 Plànols: planta")

    def test_forbidden_chars(self):
        """All of [ ] ? * / \\ : are removed."""
        assert derive_tab_name("a[b]c?d*e/f\\g:h") == "ABCDEFGH"

    def test_truncated_to_30(self):
        name = derive_tab_name("x" * 50)
        assert len(name) == 30

    def test_whitespace_runs(self):
        assert derive_tab_name("  a   b ") == "_A_B_"

    def test_empty(self):
        assert derive_tab_name("") == ""
        assert derive_tab_name(None) == ""

    def test_mixed_title(self):
        assert derive_tab_name("Annex: càlculs / estructura") == "ANNEX_CÀLCULS_ESTRUCTURA"


class TestRequireTitle:
    def test_trimmed(self):
        assert require_title("  Memòria ") == "Memòria"

    def test_blank_raises(self):
        with pytest.raises(EmptyTitleError) as exc:
            require_title("   ", "Chapter title")
        assert exc.value.status_code == 400
        assert "Chapter title" in exc.value.message


class TestFindDuplicates:
    def test_none(self):
        assert find_duplicates(["A", "B"]) == []

    def test_first_seen_order(self):
        assert find_duplicates(["B", "A", "B", "A", "B"]) == ["B", "A"]


class TestCoerceDocType:
    """Document type tags and URL inference."""

    def test_explicit(self):
        assert coerce_doc_type("pdf") == "PDF"
        assert coerce_doc_type(" sheet ") == "SHEET"

    def test_unknown_tag_falls_back_to_url(self):
        assert coerce_doc_type("word", "https://docs.google.com/document/d/abc/edit") == "DOC"

    def test_inferred(self):
        assert coerce_doc_type(None, "https://docs.google.com/spreadsheets/d/abc") == "SHEET"
        assert coerce_doc_type(None, "https://example.com/plànol.PDF?dl=1") == "PDF"
        assert coerce_doc_type(None, "https://example.com/foto.jpg") == "OTHER"
        assert coerce_doc_type(None, "") == "OTHER"
