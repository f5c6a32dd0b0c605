"""
In-memory storage adapters for ArchiSheets.
Simple process-local storage for quick demos and testing.
Not persistent and not shared between processes.
"""
import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from core.credentials import Credential
from core.errors import NotFoundError, RemoteStoreError
from core.sync_planner import split_a1

logger = logging.getLogger(__name__)


class InMemorySpreadsheetStore:
    """
    Spreadsheets kept as {sheet_id: {tab: rows}}.

    Every call is appended to `calls` as (method, sheet_id, payload) so tests
    can check what would have gone over the wire. `fail_on` makes the named
    method raise RemoteStoreError once.
    """

    def __init__(self) -> None:
        self.sheets: Dict[str, Dict[str, List[List[Any]]]] = {}
        self.titles: Dict[str, str] = {}
        self.folders: Dict[str, Optional[str]] = {}
        self.calls: List[Tuple[str, str, Any]] = []
        self.fail_on: Set[str] = set()

    def _maybe_fail(self, method: str) -> None:
        if method in self.fail_on:
            self.fail_on.discard(method)
            raise RemoteStoreError(f"{method}: simulated network failure")

    def _sheet(self, sheet_id: str) -> Dict[str, List[List[Any]]]:
        if sheet_id not in self.sheets:
            raise NotFoundError(f"Spreadsheet {sheet_id} not found", code="SHEET_NOT_FOUND")
        return self.sheets[sheet_id]

    def create_spreadsheet(
        self,
        credential: Credential,
        title: str,
        initial_tabs: Sequence[str],
        folder_id: Optional[str] = None,
    ) -> str:
        self.calls.append(("create_spreadsheet", "", {"title": title, "tabs": list(initial_tabs)}))
        self._maybe_fail("create_spreadsheet")
        sheet_id = f"mem-{uuid.uuid4().hex[:12]}"
        self.sheets[sheet_id] = {t: [] for t in (initial_tabs or ["Sheet1"])}
        self.titles[sheet_id] = title
        self.folders[sheet_id] = folder_id
        return sheet_id

    def get_tab_titles(self, credential: Credential, sheet_id: str) -> Set[str]:
        self.calls.append(("get_tab_titles", sheet_id, None))
        self._maybe_fail("get_tab_titles")
        return set(self._sheet(sheet_id).keys())

    def batch_create_tabs(self, credential: Credential, sheet_id: str, titles: Sequence[str]) -> None:
        self.calls.append(("batch_create_tabs", sheet_id, list(titles)))
        self._maybe_fail("batch_create_tabs")
        sheet = self._sheet(sheet_id)
        clash = [t for t in titles if t in sheet]
        if clash:
            # same answer Sheets gives for addSheet on an existing title
            raise RemoteStoreError(f"A sheet with the name '{clash[0]}' already exists")
        for t in titles:
            sheet[t] = []

    def batch_write_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        range_rows: Dict[str, Sequence[Sequence[Any]]],
    ) -> None:
        self.calls.append(("batch_write_ranges", sheet_id, dict(range_rows)))
        self._maybe_fail("batch_write_ranges")
        sheet = self._sheet(sheet_id)
        for r in range_rows:
            tab, _ = split_a1(r)
            if tab not in sheet:
                raise RemoteStoreError(f"Unable to parse range: {r}")
        for r, rows in range_rows.items():
            tab, _ = split_a1(r)
            # ranges always start at A1: replacing the tab content is a full overwrite
            sheet[tab] = [list(row) for row in rows]

    def read_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        ranges: Sequence[str],
    ) -> Dict[str, List[List[str]]]:
        self.calls.append(("read_ranges", sheet_id, list(ranges)))
        self._maybe_fail("read_ranges")
        sheet = self._sheet(sheet_id)
        out: Dict[str, List[List[str]]] = {}
        for r in ranges:
            tab, cells = split_a1(r)
            rows = sheet.get(tab, [])
            first_row = _first_row(cells)
            out[r] = [["" if c is None else str(c) for c in row] for row in rows[first_row - 1:]]
        return out

    def methods_called(self) -> List[str]:
        return [c[0] for c in self.calls]


def _first_row(cells: str) -> int:
    """'A2:C' -> 2. Defaults to 1."""
    start = cells.split(":", 1)[0]
    digits = "".join(ch for ch in start if ch.isdigit())
    return int(digits) if digits else 1


class InMemoryProjectCatalog:
    """
    Master project list kept in a Python list.

    `visibility_lag` mimics the remote catalog's eventual consistency: a row
    appended now is hidden from the next `visibility_lag` fetches.
    """

    def __init__(self, rows: Optional[List[List[str]]] = None, visibility_lag: int = 0) -> None:
        self.rows: List[List[str]] = [list(r) for r in rows or []]
        self.visibility_lag = visibility_lag
        self._pending: List[Tuple[int, List[str]]] = []

    def fetch_all(self, credential: Credential) -> List[List[str]]:
        still_pending: List[Tuple[int, List[str]]] = []
        for remaining, row in self._pending:
            if remaining <= 0:
                self.rows.append(row)
            else:
                still_pending.append((remaining - 1, row))
        self._pending = still_pending
        return [list(r) for r in self.rows]

    def append_row(self, credential: Credential, row: Sequence[Any]) -> None:
        cells = [str(c) for c in row]
        if self.visibility_lag > 0:
            self._pending.append((self.visibility_lag, cells))
        else:
            self.rows.append(cells)
        logger.debug("Catalog row appended: %s", cells[:2])
