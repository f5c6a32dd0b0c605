# services/api/core/sync_planner.py
"""
Diff a project's chapter tree against the tabs that already exist in its
spreadsheet and produce the remote operations that make the sheet match.

The plan only ever creates tabs and overwrites ranges. It never deletes: a
chapter removed locally keeps its tab in the sheet.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from core.errors import DuplicateTabNameError
from core.validation import find_duplicates
from models.placeholder import Placeholder
from models.project import CONFIG_TAB, RESERVED_TABS, STRUCTURE_TAB, Chapter

CONFIG_HEADER = ["CLAU", "VALOR", "DESCRIPCIO"]
STRUCTURE_HEADER = ["TITOL", "PESTANYA", "DOCS"]
CHAPTER_HEADER = ["NOM DOCUMENT", "URL DRIVE"]


def a1_range(tab: str, last_column: str, first_row: int = 1) -> str:
    """Quoted A1 range covering columns A..last_column from `first_row` down."""
    quoted = tab.replace("'", "''")
    return f"'{quoted}'!A{first_row}:{last_column}"


def split_a1(range_name: str) -> Tuple[str, str]:
    """Split 'TAB'!A1:C into ("TAB", "A1:C"). Unquoted tab names are accepted too."""
    tab, sep, cells = range_name.rpartition("!")
    if not sep:
        return range_name, ""
    if len(tab) >= 2 and tab[0] == "'" and tab[-1] == "'":
        tab = tab[1:-1].replace("''", "'")
    return tab, cells


@dataclass
class RangeWrite:
    """Full replacement of one range: header row followed by data rows."""
    tab: str
    last_column: str
    rows: List[List[object]]

    @property
    def range(self) -> str:
        return a1_range(self.tab, self.last_column)


@dataclass
class SyncPlan:
    tabs_to_create: List[str] = field(default_factory=list)
    writes: List[RangeWrite] = field(default_factory=list)
    skipped_chapters: List[str] = field(default_factory=list)

    @property
    def written_tabs(self) -> List[str]:
        return [w.tab for w in self.writes]

    def range_rows(self) -> Dict[str, List[List[object]]]:
        """{A1 range: rows} mapping as the spreadsheet store takes it."""
        return {w.range: w.rows for w in self.writes}


def resolve_tab_names(chapters: Sequence[Chapter]) -> List[str]:
    """
    Stored tab name, or the one derived from the title when none is stored.

    Raises:
        DuplicateTabNameError: if two chapters resolve to the same tab
    """
    names = [c.resolved_tab_name for c in chapters]
    dupes = find_duplicates(names)
    if dupes:
        raise DuplicateTabNameError(
            f"Several chapters map to the same sheet tab: {', '.join(dupes)}"
        )
    return names


def plan_sync(
    existing_tab_titles: Iterable[str],
    chapters: Sequence[Chapter],
    placeholders: Iterable[Placeholder] = (),
) -> SyncPlan:
    existing = set(existing_tab_titles)
    tab_names = resolve_tab_names(chapters)

    plan = SyncPlan()
    for name in tab_names:
        if name in RESERVED_TABS:
            continue
        if name not in existing:
            plan.tabs_to_create.append(name)

    plan.writes.append(
        RangeWrite(
            tab=CONFIG_TAB,
            last_column="C",
            rows=[CONFIG_HEADER[:]] + [p.to_row() for p in placeholders],
        )
    )
    plan.writes.append(
        RangeWrite(
            tab=STRUCTURE_TAB,
            last_column="C",
            rows=[STRUCTURE_HEADER[:]]
            + [[c.title, name, len(c.documents)] for c, name in zip(chapters, tab_names)],
        )
    )
    for chapter, name in zip(chapters, tab_names):
        if name in RESERVED_TABS:
            # its rows would overwrite the project's own CONFIG/ESTRUCTURA range
            plan.skipped_chapters.append(chapter.title)
            continue
        plan.writes.append(
            RangeWrite(
                tab=name,
                last_column="B",
                rows=[CHAPTER_HEADER[:]] + [d.to_row() for d in chapter.documents],
            )
        )
    return plan
