"""
Tests for sheet row <-> model converters.

Run with: pytest tests/test_converters.py -v
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.converters import (
    _bool_from_sheet,
    chapters_from_rows,
    placeholders_from_rows,
    project_from_catalog_row,
    project_to_catalog_row,
    structure_tab_names,
)
from models.project import Project


class TestBoolFromSheet:
    def test_truthy(self):
        for v in ("TRUE", "true", " 1 ", "yes", "Y"):
            assert _bool_from_sheet(v)

    def test_falsy(self):
        for v in ("FALSE", "", None, "0", "no"):
            assert not _bool_from_sheet(v)


class TestCatalogRows:
    def test_stub(self):
        p = project_from_catalog_row(["p1", " Casa ", "s1", "2024-01-01T00:00:00Z", "TRUE"])
        assert (p.id, p.name, p.sheet_id, p.is_template) == ("p1", "Casa", "s1", True)
        assert not p.loaded

    def test_short_row(self):
        p = project_from_catalog_row(["p1", "Casa"])
        assert p.sheet_id is None
        assert p.is_template is False

    def test_to_row(self):
        p = Project(name="Casa", id="p1", created_at="2024-01-01T00:00:00Z", sheet_id="s1")
        assert project_to_catalog_row(p) == ["p1", "Casa", "s1", "2024-01-01T00:00:00Z", "FALSE"]


class TestConfigRows:
    def test_blank_and_repeated_keys(self):
        ps = placeholders_from_rows([
            ["CLIENT_NOM", "Anna", "Promotor"],
            ["", "orphan"],
            ["CLIENT_NOM", "Other"],
            ["PROJ_NOM"],
        ])
        assert ps.keys() == ["CLIENT_NOM", "PROJ_NOM"]
        assert ps[0].value == "Anna"
        assert ps[1].value == "" and ps[1].description == ""

    def test_keys_equal_after_normalization(self):
        """Rows edited by hand in the sheet may repeat a key in another spelling."""
        ps = placeholders_from_rows([
            ["CLIENT_NOM", "Anna"],
            ["client nom", "Joan"],
            ["  proj  adreca ", "Girona", "Obra"],
        ])
        assert ps.keys() == ["CLIENT_NOM", "PROJ_ADRECA"]
        assert ps[0].value == "Anna"
        assert ps[1].description == "Obra"


class TestStructureRows:
    def test_chapters_with_documents(self):
        structure = [["01 Memòria", "01_MEM", "1"], ["Legacy"], ["", "IGNORED"]]
        docs = {"01_MEM": [["Índex", "https://docs.google.com/document/d/x"], ["", "no title"]]}

        chapters = chapters_from_rows(structure, docs)

        assert [c.title for c in chapters] == ["01 Memòria", "Legacy"]
        assert chapters[0].sheet_tab_name == "01_MEM"
        assert chapters[1].sheet_tab_name is None
        assert chapters[1].resolved_tab_name == "LEGACY"
        assert [(d.title, d.type) for d in chapters[0].documents] == [("Índex", "DOC")]

    def test_tab_names(self):
        assert structure_tab_names([["A b", ""], ["C", "TAB_C"], ["", "X"]]) == ["A_B", "TAB_C"]

