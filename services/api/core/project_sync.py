# services/api/core/project_sync.py
"""
Execute sync plans against a project's spreadsheet, and read a project's
content back when it is opened.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from fastapi.concurrency import run_in_threadpool

from adapters.base import SpreadsheetStore
from core.credentials import Credential
from core.errors import ValidationError
from core.sync_planner import SyncPlan, a1_range, plan_sync
from models.converters import chapters_from_rows, placeholders_from_rows, structure_tab_names
from models.project import CONFIG_TAB, STRUCTURE_TAB, Project, utc_iso

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    sheet_id: str
    created_tabs: List[str] = field(default_factory=list)
    written_ranges: List[str] = field(default_factory=list)
    skipped_chapters: List[str] = field(default_factory=list)
    synced_at: str = field(default_factory=utc_iso)


def _require_sheet(project: Project) -> str:
    if not project.sheet_id:
        raise ValidationError(
            f"Project '{project.name}' has no spreadsheet yet",
            code="NO_SHEET",
        )
    return project.sheet_id


async def build_plan(store: SpreadsheetStore, credential: Credential, project: Project) -> SyncPlan:
    """Read the sheet's current tabs and plan against them (no writes)."""
    sheet_id = _require_sheet(project)
    existing = await run_in_threadpool(store.get_tab_titles, credential, sheet_id)
    return plan_sync(existing, project.chapters, project.placeholders)


async def run_sync(store: SpreadsheetStore, credential: Credential, project: Project) -> SyncResult:
    """
    Make the project spreadsheet match the in-memory project.

    Order: read tabs -> create missing tabs -> overwrite ranges. A failure at
    any step propagates at once; in particular the ranges are never written if
    tab creation failed. The project itself is not modified.
    """
    plan = await build_plan(store, credential, project)
    sheet_id = project.sheet_id

    if plan.tabs_to_create:
        await run_in_threadpool(store.batch_create_tabs, credential, sheet_id, plan.tabs_to_create)

    range_rows = plan.range_rows()
    await run_in_threadpool(store.batch_write_ranges, credential, sheet_id, range_rows)

    if plan.skipped_chapters:
        logger.warning(
            "Sync %s: chapters mapped to reserved tabs were not written: %s",
            sheet_id,
            ", ".join(plan.skipped_chapters),
        )
    logger.info(
        "Synced project %s: %d tab(s) created, %d range(s) written",
        project.id,
        len(plan.tabs_to_create),
        len(range_rows),
    )
    return SyncResult(
        sheet_id=sheet_id,
        created_tabs=list(plan.tabs_to_create),
        written_ranges=list(range_rows.keys()),
        skipped_chapters=list(plan.skipped_chapters),
    )


async def load_project_content(store: SpreadsheetStore, credential: Credential, project: Project) -> Project:
    """
    Populate a catalog stub from its spreadsheet:
    CONFIG -> placeholders, ESTRUCTURA -> chapters, chapter tabs -> documents.
    """
    sheet_id = _require_sheet(project)
    config_range = a1_range(CONFIG_TAB, "C", first_row=2)
    structure_range = a1_range(STRUCTURE_TAB, "C", first_row=2)

    base = await run_in_threadpool(store.read_ranges, credential, sheet_id, [config_range, structure_range])
    structure_rows = base.get(structure_range, [])

    tab_ranges = {tab: a1_range(tab, "B", first_row=2) for tab in structure_tab_names(structure_rows)}
    docs = {}
    if tab_ranges:
        read = await run_in_threadpool(store.read_ranges, credential, sheet_id, list(tab_ranges.values()))
        docs = {tab: read.get(r, []) for tab, r in tab_ranges.items()}

    project.placeholders = placeholders_from_rows(base.get(config_range, []))
    project.chapters = chapters_from_rows(structure_rows, docs)
    project.loaded = True
    logger.info(
        "Loaded project %s: %d chapter(s), %d placeholder(s)",
        project.id,
        len(project.chapters),
        len(project.placeholders),
    )
    return project
