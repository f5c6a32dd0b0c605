"""
Storage adapter interfaces for ArchiSheets.
Defines the contracts the project catalog and the per-project spreadsheet
store must implement.
"""

from typing import Dict, List, Optional, Protocol, Sequence, Set

from core.credentials import Credential

Row = List[object]


class ProjectCatalog(Protocol):
    """
    The master list of projects (one row per project).

    Rows are positional: [id, name, sheetId, createdAt, isTemplate].
    This allows swapping Google Sheets for the in-memory catalog
    without changing the registry or the routers.
    """

    def fetch_all(self, credential: Credential) -> List[List[str]]:
        """
        Return every catalog row (header excluded), in sheet order.

        Raises:
            NotFoundError if the catalog tab/sheet is missing.
        """
        ...

    def append_row(self, credential: Credential, row: Row) -> None:
        """
        Append one project row.

        NOTE: the remote catalog is eventually consistent; a row appended here
        may not show up in the very next fetch_all().
        """
        ...


class SpreadsheetStore(Protocol):
    """
    One spreadsheet per project, one tab per chapter plus CONFIG/ESTRUCTURA.
    The store is owned by Google, we only reference it by sheet id.
    """

    def create_spreadsheet(
        self,
        credential: Credential,
        title: str,
        initial_tabs: Sequence[str],
        folder_id: Optional[str] = None,
    ) -> str:
        """
        Create a spreadsheet with the given tabs.

        Returns:
            The new sheet id.
        """
        ...

    def get_tab_titles(self, credential: Credential, sheet_id: str) -> Set[str]:
        """Titles of all tabs currently in the spreadsheet."""
        ...

    def batch_create_tabs(self, credential: Credential, sheet_id: str, titles: Sequence[str]) -> None:
        """Create all `titles` in one request (all or nothing)."""
        ...

    def batch_write_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        range_rows: Dict[str, Sequence[Row]],
    ) -> None:
        """
        Replace every addressed range with the given rows.

        Implementations must clear the range before writing so that rows
        beyond the new data do not survive.
        """
        ...

    def read_ranges(
        self,
        credential: Credential,
        sheet_id: str,
        ranges: Sequence[str],
    ) -> Dict[str, List[List[str]]]:
        """
        Read several ranges at once.

        Returns:
            {requested range: rows}; ranges on missing tabs map to [].
        """
        ...
