# services/api/adapters/sheets/__init__.py
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set

import gspread
from cachetools import TTLCache
from google.auth.exceptions import RefreshError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from core.credentials import Credential
from core.errors import ArchiSheetsError, AuthenticationError, NotFoundError, RemoteStoreError
from core.sync_planner import split_a1

logger = logging.getLogger(__name__)

# Columns of the master catalog tab: id, name, sheetId, createdAt, isTemplate
CATALOG_RANGE = "A2:E"
CATALOG_COLUMNS = "A:E"


def _status_of(exc: Exception) -> Optional[int]:
    """HTTP status of a gspread APIError (works across gspread 5/6)."""
    code = getattr(exc, "code", None)
    if isinstance(code, int):
        return code
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def _is_quota_error(exc: BaseException) -> bool:
    # remote_call() wraps the APIError, the original is kept as __cause__
    if isinstance(exc, RemoteStoreError):
        exc = exc.__cause__
    return isinstance(exc, gspread.exceptions.APIError) and _status_of(exc) == 429


# ========== Retry decorator for Google Sheets API calls ==========
def retry_sheets_api(func):
    """
    Retry Sheets API calls with exponential backoff on quota (429) errors only.
    Every other failure is surfaced to the caller at once.
    """
    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(_is_quota_error),
        reraise=True,
    )
    def wrapper(*args, **kwargs):
        return func(*args, **kwargs)

    wrapper.__name__ = func.__name__
    wrapper.__doc__ = func.__doc__
    return wrapper


@contextmanager
def remote_call(what: str) -> Iterator[None]:
    """Translate gspread/google-auth failures into the ArchiSheets error taxonomy."""
    try:
        yield
    except ArchiSheetsError:
        raise
    except RefreshError as e:
        raise AuthenticationError(f"Google credential expired: {e}") from e
    except gspread.exceptions.SpreadsheetNotFound as e:
        raise NotFoundError(f"{what}: spreadsheet not found", code="SHEET_NOT_FOUND") from e
    except gspread.exceptions.WorksheetNotFound as e:
        raise NotFoundError(f"{what}: tab {e} not found", code="TAB_NOT_FOUND") from e
    except gspread.exceptions.APIError as e:
        status = _status_of(e)
        if status == 401:
            raise AuthenticationError(f"{what}: Google rejected the credential") from e
        if status == 404:
            raise NotFoundError(f"{what}: {e}", code="SHEET_NOT_FOUND") from e
        if status == 403:
            raise RemoteStoreError(f"{what}: permission denied ({e})", code="PERMISSION_DENIED") from e
        logger.error("%s failed (status=%s): %s", what, status, e)
        raise RemoteStoreError(f"{what}: {e}") from e
    except OSError as e:
        # requests' connection/timeout errors are OSError subclasses
        logger.error("%s failed: %s", what, e)
        raise RemoteStoreError(f"{what}: {e}") from e


class _ClientPool:
    """One authorized gspread client per credential, kept for a while."""

    def __init__(self, ttl_seconds: int = 1800, maxsize: int = 64) -> None:
        self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)

    def get(self, credential: Credential) -> gspread.Client:
        client = self._cache.get(credential.cache_key)
        if client is None:
            client = gspread.authorize(credential.google)
            self._cache[credential.cache_key] = client
        return client

    def forget(self, credential: Credential) -> None:
        self._cache.pop(credential.cache_key, None)


class SheetsSpreadsheetStore:
    """
    Google Sheets implementation of SpreadsheetStore:
    - one spreadsheet per project
    - batch requests only (one call per sync phase)
    - quota retries, nothing else
    """

    def __init__(self, client_cache_ttl: int = 1800) -> None:
        self._clients = _ClientPool(ttl_seconds=client_cache_ttl)

    def _open(self, credential: Credential, sheet_id: str) -> gspread.Spreadsheet:
        try:
            return self._clients.get(credential).open_by_key(sheet_id)
        except gspread.exceptions.APIError as e:
            if _status_of(e) == 401:
                self._clients.forget(credential)
            raise

    # not retried: a retry after a partial success would create a second spreadsheet
    def create_spreadsheet(
        self,
        credential: Credential,
        title: str,
        initial_tabs: Sequence[str],
        folder_id: Optional[str] = None,
    ) -> str:
        with remote_call("Create spreadsheet"):
            ss = self._clients.get(credential).create(title, folder_id=folder_id)
            tabs = list(initial_tabs)
            if tabs:
                requests: List[Dict[str, Any]] = [
                    {
                        "updateSheetProperties": {
                            "properties": {"sheetId": ss.sheet1.id, "title": tabs[0]},
                            "fields": "title",
                        }
                    }
                ]
                requests += [{"addSheet": {"properties": {"title": t}}} for t in tabs[1:]]
                ss.batch_update({"requests": requests})
            logger.info("Created spreadsheet %s (%s)", ss.id, title)
            return ss.id

    @retry_sheets_api
    def get_tab_titles(self, credential: Credential, sheet_id: str) -> Set[str]:
        with remote_call("Read tab titles"):
            ss = self._open(credential, sheet_id)
            return {ws.title for ws in ss.worksheets()}

    @retry_sheets_api
    def batch_create_tabs(self, credential: Credential, sheet_id: str, titles: Sequence[str]) -> None:
        if not titles:
            return
        with remote_call("Create tabs"):
            ss = self._open(credential, sheet_id)
            ss.batch_update(
                {"requests": [{"addSheet": {"properties": {"title": t}}} for t in titles]}
            )
            logger.info("Created %d tab(s) in %s: %s", len(titles), sheet_id, ", ".join(titles))

    @retry_sheets_api
    def batch_write_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        range_rows: Dict[str, Sequence[Sequence[Any]]],
    ) -> None:
        if not range_rows:
            return
        with remote_call("Write ranges"):
            ss = self._open(credential, sheet_id)
            ranges = list(range_rows.keys())
            ss.values_batch_clear(body={"ranges": ranges})
            ss.values_batch_update(
                body={
                    "valueInputOption": "USER_ENTERED",
                    "data": [
                        {"range": r, "values": [list(row) for row in rows]}
                        for r, rows in range_rows.items()
                    ],
                }
            )
            logger.info("Wrote %d range(s) in %s", len(ranges), sheet_id)

    @retry_sheets_api
    def read_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        ranges: Sequence[str],
    ) -> Dict[str, List[List[str]]]:
        out: Dict[str, List[List[str]]] = {r: [] for r in ranges}
        with remote_call("Read ranges"):
            ss = self._open(credential, sheet_id)
            existing = {ws.title for ws in ss.worksheets()}
            wanted = [r for r in ranges if split_a1(r)[0] in existing]
            if not wanted:
                return out
            resp = ss.values_batch_get(wanted)
            for r, vr in zip(wanted, resp.get("valueRanges", [])):
                out[r] = [[str(c) for c in row] for row in vr.get("values", [])]
        return out


class SheetsProjectCatalog:
    """The `PROJECTES` tab of the studio's master spreadsheet."""

    def __init__(
        self,
        master_sheet_id: str,
        tab_name: str = "PROJECTES",
        client_cache_ttl: int = 1800,
    ) -> None:
        self.master_sheet_id = master_sheet_id
        self.tab_name = tab_name
        self._clients = _ClientPool(ttl_seconds=client_cache_ttl)

    def _worksheet(self, credential: Credential) -> gspread.Worksheet:
        if not self.master_sheet_id:
            raise NotFoundError("MASTER_SHEET_ID is not configured", code="MASTER_NOT_CONFIGURED")
        ss = self._clients.get(credential).open_by_key(self.master_sheet_id)
        try:
            return ss.worksheet(self.tab_name)
        except gspread.WorksheetNotFound as e:
            raise NotFoundError(
                f"Tab '{self.tab_name}' not found in the master spreadsheet",
                code="CATALOG_TAB_NOT_FOUND",
            ) from e

    @retry_sheets_api
    def fetch_all(self, credential: Credential) -> List[List[str]]:
        with remote_call("Read project catalog"):
            rows = self._worksheet(credential).get_values(CATALOG_RANGE)
        return [[str(c) for c in r] for r in rows if any(str(c).strip() for c in r)]

    @retry_sheets_api
    def append_row(self, credential: Credential, row: Sequence[Any]) -> None:
        with remote_call("Append project to catalog"):
            self._worksheet(credential).append_rows(
                [list(row)],
                value_input_option="USER_ENTERED",
                table_range=CATALOG_COLUMNS,
            )
