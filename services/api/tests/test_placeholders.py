"""
Tests for the placeholder set.

Run with: pytest tests/test_placeholders.py -v
"""
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.errors import DuplicateKeyError, NotFoundError, ValidationError
from models.placeholder import DEFAULT_PLACEHOLDERS, Placeholder, PlaceholderSet


def _set(*pairs):
    return PlaceholderSet(Placeholder(k, v) for k, v in pairs)


class TestAdd:
    """Adding keys."""

    def test_normalized_and_prepended(self):
        ps = _set(("A", "1"))
        added = ps.add("client nom")
        assert added.key == "CLIENT_NOM"
        assert ps.keys() == ["CLIENT_NOM", "A"]
        assert added.value == "" and added.description == ""

    def test_twice_is_duplicate(self):
        ps = PlaceholderSet()
        ps.add("client nom")
        with pytest.raises(DuplicateKeyError) as exc:
            ps.add("client nom")
        assert exc.value.status_code == 409
        assert len(ps) == 1

    def test_spelling_variants_collide(self):
        ps = PlaceholderSet()
        ps.add("Client Nom")
        with pytest.raises(DuplicateKeyError):
            ps.add("CLIENT_NOM")

    def test_empty_is_noop(self):
        ps = _set(("A", ""))
        assert ps.add("   ") is None
        assert ps.add("") is None
        assert ps.keys() == ["A"]

    def test_constructor_rejects_duplicates(self):
        with pytest.raises(DuplicateKeyError):
            _set(("a b", ""), ("A_B", ""))


class TestUpdateRemove:
    def test_update_value_and_description(self):
        ps = _set(("A", ""))
        ps.update(0, "value", "x")
        ps.update(0, "description", "desc")
        assert ps[0].value == "x"
        assert ps[0].description == "desc"

    def test_key_not_editable(self):
        ps = _set(("A", ""))
        with pytest.raises(ValidationError) as exc:
            ps.update(0, "key", "B")
        assert exc.value.code == "FIELD_NOT_EDITABLE"
        assert ps.keys() == ["A"]

    def test_bad_index(self):
        ps = _set(("A", ""))
        with pytest.raises(NotFoundError):
            ps.update(3, "value", "x")
        with pytest.raises(NotFoundError):
            ps.remove(-1)

    def test_remove_shifts(self):
        ps = _set(("A", ""), ("B", ""), ("C", ""))
        removed = ps.remove(1)
        assert removed.key == "B"
        assert ps.keys() == ["A", "C"]
        assert ps[1].key == "C"


class TestBulkApplySuggestions:
    """Merging assistant suggestions."""

    def test_partial_mapping(self):
        ps = _set(("A", ""), ("B", ""))
        applied = ps.bulk_apply_suggestions({"A": "x"})
        assert applied == 1
        assert [(p.key, p.value) for p in ps] == [("A", "x"), ("B", "")]

    def test_unknown_keys_ignored(self):
        ps = _set(("A", ""))
        assert ps.bulk_apply_suggestions({"Z": "zz"}) == 0
        assert ps.keys() == ["A"]

    def test_empty_suggestion_keeps_value(self):
        ps = _set(("A", "old"), ("B", "keep"))
        ps.bulk_apply_suggestions({"A": "", "B": None})
        assert ps.as_dict() == {"A": "old", "B": "keep"}

    def test_none_mapping(self):
        ps = _set(("A", "old"))
        assert ps.bulk_apply_suggestions(None) == 0
        assert ps.as_dict() == {"A": "old"}


class TestSubstitute:
    """{{KEY}} substitution."""

    def test_known_tokens(self):
        ps = _set(("PROJ_NOM", "Casa Vilaró"), ("CLIENT_NOM", "Anna Puig"))
        text = "Projecte {{PROJ_NOM}} per a {{ CLIENT_NOM }}."
        assert ps.substitute(text) == "Projecte Casa Vilaró per a Anna Puig."

    def test_key_matched_after_normalization(self):
        ps = _set(("CLIENT_NOM", "Anna"))
        assert ps.substitute("{{client nom}}") == "Anna"

    def test_unknown_token_untouched(self):
        ps = _set(("A", "x"))
        assert ps.substitute("{{A}} {{B}}") == "x {{B}}"
        assert ps.missing_keys("{{A}} {{B}} {{b}}") == ["B"]

    def test_empty_text(self):
        assert PlaceholderSet().substitute("") == ""
        assert PlaceholderSet().substitute(None) == ""


class TestDefaults:
    def test_default_catalogue(self):
        ps = PlaceholderSet.defaults()
        assert ps.keys() == [d["key"] for d in DEFAULT_PLACEHOLDERS]
        assert "CLIENT_NOM" in ps.keys()
        assert all(p.value == "" for p in ps)

    def test_copy_is_independent(self):
        ps = PlaceholderSet.defaults()
        clone = ps.copy()
        clone.update(0, "value", "changed")
        assert ps[0].value == ""
