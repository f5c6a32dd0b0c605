from __future__ import annotations

from typing import Any, Dict, List, Sequence

from core.validation import coerce_doc_type, normalize_placeholder_key
from models.placeholder import Placeholder, PlaceholderSet
from models.project import Chapter, Document, Project


def _bool_from_sheet(v: Any) -> bool:
    """
    Convert Sheets-style boolean cells to Python bool.
    Accepts: TRUE/FALSE, 1/0, yes/no, y/n (case-insensitive).
    """
    if v is None:
        return False
    s = str(v).strip().upper()
    return s in ("TRUE", "1", "YES", "Y")


def _cell(row: Sequence[Any], idx: int) -> str:
    if idx < len(row) and row[idx] is not None:
        return str(row[idx]).strip()
    return ""


# ---------- master catalog: [id, name, sheetId, createdAt, isTemplate] ----------

def project_from_catalog_row(row: Sequence[Any]) -> Project:
    """Lightweight stub: chapters/placeholders stay in the project sheet until opened."""
    sheet_id = _cell(row, 2)
    return Project(
        id=_cell(row, 0),
        name=_cell(row, 1),
        sheet_id=sheet_id or None,
        created_at=_cell(row, 3),
        is_template=_bool_from_sheet(_cell(row, 4)),
        loaded=False,
    )


def project_to_catalog_row(project: Project) -> List[str]:
    return [
        project.id,
        project.name,
        project.sheet_id or "",
        project.created_at,
        "TRUE" if project.is_template else "FALSE",
    ]


# ---------- CONFIG tab: [key, value, description] ----------

def placeholders_from_rows(rows: Sequence[Sequence[Any]]) -> PlaceholderSet:
    """
    Rebuild placeholders from CONFIG rows (header excluded).
    Keys are normalized as on entry; blank keys are skipped and a key that
    normalizes to one already seen keeps its first row.
    """
    seen: set[str] = set()
    items: List[Placeholder] = []
    for r in rows:
        key = normalize_placeholder_key(_cell(r, 0))
        if not key or key in seen:
            continue
        seen.add(key)
        items.append(Placeholder(key=key, value=_cell(r, 1), description=_cell(r, 2)))
    return PlaceholderSet(items)


# ---------- ESTRUCTURA tab: [title, tabName, documentCount] ----------

def chapters_from_rows(
    structure_rows: Sequence[Sequence[Any]],
    documents_by_tab: Dict[str, Sequence[Sequence[Any]]],
) -> List[Chapter]:
    """
    Rebuild the chapter tree from ESTRUCTURA rows plus each chapter tab's
    [documentTitle, documentUrl] rows (headers excluded).
    """
    chapters: List[Chapter] = []
    for r in structure_rows:
        title = _cell(r, 0)
        if not title:
            continue
        chapter = Chapter(title=title, sheet_tab_name=_cell(r, 1) or None)
        for d in documents_by_tab.get(chapter.resolved_tab_name, []):
            doc_title = _cell(d, 0)
            if not doc_title:
                continue
            url = _cell(d, 1)
            chapter.documents.append(
                Document(title=doc_title, url=url, type=coerce_doc_type(None, url))
            )
        chapters.append(chapter)
    return chapters


def structure_tab_names(structure_rows: Sequence[Sequence[Any]]) -> List[str]:
    """Tab names listed in ESTRUCTURA, in order (used to know which tabs to read)."""
    return [
        Chapter(title=_cell(r, 0), sheet_tab_name=_cell(r, 1) or None).resolved_tab_name
        for r in structure_rows
        if _cell(r, 0)
    ]

