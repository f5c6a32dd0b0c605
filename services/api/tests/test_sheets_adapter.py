"""
Tests for the Google Sheets adapters, with fake gspread objects (no network).

Run with: pytest tests/test_sheets_adapter.py -v
"""
import time
from types import SimpleNamespace

import gspread
import pytest

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from adapters.sheets import SheetsProjectCatalog, SheetsSpreadsheetStore
from core.credentials import Credential
from core.errors import AuthenticationError, NotFoundError, RemoteStoreError

CRED = Credential(cache_key="test:user")


def api_error(status, message="error"):
    """APIError as gspread builds it from an HTTP response."""
    err = gspread.exceptions.APIError.__new__(gspread.exceptions.APIError)
    Exception.__init__(err, message)
    err.response = SimpleNamespace(status_code=status, text=message)
    err.code = status
    err.error = {"code": status, "message": message, "status": "ERROR"}
    return err


class FakeWorksheet:
    def __init__(self, title, rows=None):
        self.title = title
        self.rows = rows or []
        self.appended = []

    def get_values(self, range_name):
        return self.rows

    def append_rows(self, rows, value_input_option=None, table_range=None):
        self.appended.append((rows, value_input_option, table_range))


class FakeSpreadsheet:
    def __init__(self, tabs=(), failures=None):
        self.id = "sheet-1"
        self._worksheets = [FakeWorksheet(t) for t in tabs]
        self.sheet1 = SimpleNamespace(id=0)
        self.failures = list(failures or [])
        self.calls = []

    def _maybe_fail(self):
        if self.failures:
            raise self.failures.pop(0)

    def worksheets(self):
        self.calls.append("worksheets")
        self._maybe_fail()
        return self._worksheets

    def worksheet(self, title):
        for ws in self._worksheets:
            if ws.title == title:
                return ws
        raise gspread.exceptions.WorksheetNotFound(title)

    def batch_update(self, body):
        self.calls.append(("batch_update", body))
        self._maybe_fail()

    def values_batch_clear(self, body=None):
        self.calls.append(("values_batch_clear", body))

    def values_batch_update(self, body=None):
        self.calls.append(("values_batch_update", body))

    def values_batch_get(self, ranges):
        self.calls.append(("values_batch_get", list(ranges)))
        return {"valueRanges": [{"range": r, "values": [["a", 1]]} for r in ranges]}


class FakeClient:
    def __init__(self, spreadsheet, open_error=None):
        self.spreadsheet = spreadsheet
        self.open_error = open_error
        self.created = []

    def open_by_key(self, key):
        if self.open_error is not None:
            raise self.open_error
        return self.spreadsheet

    def create(self, title, folder_id=None):
        self.created.append((title, folder_id))
        return self.spreadsheet


def _store(client):
    store = SheetsSpreadsheetStore()
    store._clients._cache[CRED.cache_key] = client
    return store


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda seconds: None)


class TestErrorTranslation:
    """gspread failures mapped onto the error taxonomy."""

    def test_quota_retried(self, no_sleep):
        ss = FakeSpreadsheet(["CONFIG"], failures=[api_error(429), api_error(429)])
        store = _store(FakeClient(ss))
        assert store.get_tab_titles(CRED, "sheet-1") == {"CONFIG"}
        assert ss.calls.count("worksheets") == 3

    def test_quota_gives_up(self, no_sleep):
        ss = FakeSpreadsheet(["CONFIG"], failures=[api_error(429)] * 3)
        store = _store(FakeClient(ss))
        with pytest.raises(RemoteStoreError):
            store.get_tab_titles(CRED, "sheet-1")
        assert ss.calls.count("worksheets") == 3

    def test_permission_denied_not_retried(self, no_sleep):
        ss = FakeSpreadsheet(["CONFIG"], failures=[api_error(403, "forbidden")])
        store = _store(FakeClient(ss))
        with pytest.raises(RemoteStoreError) as exc:
            store.get_tab_titles(CRED, "sheet-1")
        assert exc.value.code == "PERMISSION_DENIED"
        assert ss.calls.count("worksheets") == 1

    def test_unauthorized_drops_cached_client(self):
        store = _store(FakeClient(FakeSpreadsheet(), open_error=api_error(401)))
        with pytest.raises(AuthenticationError):
            store.get_tab_titles(CRED, "sheet-1")
        assert CRED.cache_key not in store._clients._cache

    def test_not_found(self):
        store = _store(FakeClient(FakeSpreadsheet(), open_error=gspread.exceptions.SpreadsheetNotFound()))
        with pytest.raises(NotFoundError):
            store.get_tab_titles(CRED, "missing")

    def test_network_error(self):
        store = _store(FakeClient(FakeSpreadsheet(), open_error=ConnectionError("reset")))
        with pytest.raises(RemoteStoreError):
            store.get_tab_titles(CRED, "sheet-1")


class TestSpreadsheetStore:
    def test_create_spreadsheet(self):
        ss = FakeSpreadsheet()
        client = FakeClient(ss)
        sheet_id = _store(client).create_spreadsheet(CRED, "ARCHI - Casa", ["CONFIG", "ESTRUCTURA"], "folder-1")

        assert sheet_id == "sheet-1"
        assert client.created == [("ARCHI - Casa", "folder-1")]
        _, body = ss.calls[0]
        first, second = body["requests"]
        assert first["updateSheetProperties"]["properties"] == {"sheetId": 0, "title": "CONFIG"}
        assert second == {"addSheet": {"properties": {"title": "ESTRUCTURA"}}}

    def test_create_spreadsheet_not_retried(self, no_sleep):
        ss = FakeSpreadsheet(failures=[api_error(429)])
        client = FakeClient(ss)
        with pytest.raises(RemoteStoreError):
            _store(client).create_spreadsheet(CRED, "ARCHI - Casa", ["CONFIG", "ESTRUCTURA"])
        assert len(client.created) == 1

    def test_batch_create_tabs(self):
        ss = FakeSpreadsheet()
        _store(FakeClient(ss)).batch_create_tabs(CRED, "sheet-1", ["A", "B"])
        _, body = ss.calls[0]
        assert [r["addSheet"]["properties"]["title"] for r in body["requests"]] == ["A", "B"]

    def test_batch_create_nothing(self):
        ss = FakeSpreadsheet()
        _store(FakeClient(ss)).batch_create_tabs(CRED, "sheet-1", [])
        assert ss.calls == []

    def test_write_clears_then_updates(self):
        ss = FakeSpreadsheet()
        _store(FakeClient(ss)).batch_write_ranges(
            CRED, "sheet-1", {"'CONFIG'!A1:C": [["CLAU", "VALOR", "DESCRIPCIO"]]}
        )
        assert [c[0] for c in ss.calls] == ["values_batch_clear", "values_batch_update"]
        assert ss.calls[0][1] == {"ranges": ["'CONFIG'!A1:C"]}
        update = ss.calls[1][1]
        assert update["valueInputOption"] == "USER_ENTERED"
        assert update["data"] == [{"range": "'CONFIG'!A1:C", "values": [["CLAU", "VALOR", "DESCRIPCIO"]]}]

    def test_read_skips_missing_tabs(self):
        ss = FakeSpreadsheet(["CONFIG"])
        out = _store(FakeClient(ss)).read_ranges(CRED, "sheet-1", ["'CONFIG'!A2:C", "'GONE'!A2:B"])
        assert out == {"'CONFIG'!A2:C": [["a", "1"]], "'GONE'!A2:B": []}
        assert ("values_batch_get", ["'CONFIG'!A2:C"]) in ss.calls


class TestProjectCatalog:
    def _catalog(self, ss, master="master-1"):
        catalog = SheetsProjectCatalog(master_sheet_id=master)
        catalog._clients._cache[CRED.cache_key] = FakeClient(ss)
        return catalog

    def test_fetch_drops_blank_rows(self):
        ss = FakeSpreadsheet(["PROJECTES"])
        ss._worksheets[0].rows = [["p1", "Casa", "s1", "2024", "FALSE"], ["", " ", ""], ["p2", "B"]]
        rows = self._catalog(ss).fetch_all(CRED)
        assert [r[0] for r in rows] == ["p1", "p2"]

    def test_append(self):
        ss = FakeSpreadsheet(["PROJECTES"])
        self._catalog(ss).append_row(CRED, ["p1", "Casa", "s1", "2024", "FALSE"])
        rows, option, table_range = ss._worksheets[0].appended[0]
        assert rows == [["p1", "Casa", "s1", "2024", "FALSE"]]
        assert option == "USER_ENTERED"
        assert table_range == "A:E"

    def test_missing_tab(self):
        with pytest.raises(NotFoundError) as exc:
            self._catalog(FakeSpreadsheet(["Sheet1"])).fetch_all(CRED)
        assert exc.value.code == "CATALOG_TAB_NOT_FOUND"

    def test_master_not_configured(self):
        with pytest.raises(NotFoundError) as exc:
            self._catalog(FakeSpreadsheet(), master="").fetch_all(CRED)
        assert exc.value.code == "MASTER_NOT_CONFIGURED"
