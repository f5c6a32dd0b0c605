# services/api/core/registry.py
"""
Project registry: the master catalog of projects plus the per-project
spreadsheets it points to.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi.concurrency import run_in_threadpool

from adapters.base import ProjectCatalog, SpreadsheetStore
from core.credentials import Credential
from core.errors import ArchiSheetsError
from core.validation import require_title
from models.converters import project_from_catalog_row, project_to_catalog_row
from models.placeholder import PlaceholderSet
from models.project import CONFIG_TAB, STRUCTURE_TAB, Project

logger = logging.getLogger(__name__)

FolderResolver = Callable[[Credential], Optional[str]]


class ProjectRegistry:
    def __init__(
        self,
        catalog: ProjectCatalog,
        store: SpreadsheetStore,
        title_prefix: str = "ARCHI - ",
        folder_resolver: Optional[FolderResolver] = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.title_prefix = title_prefix
        self.folder_resolver = folder_resolver

    async def create(
        self,
        credential: Credential,
        name: str,
        description: str = "",
        template: Optional[Project] = None,
    ) -> Project:
        """
        Create the project spreadsheet, register it in the catalog and return
        the in-memory project.

        `template`, when given, must already be loaded: its chapters and
        placeholders are copied. Without one the default placeholders are seeded.
        The new project is not written to its sheet here; the first sync does it.
        """
        clean = require_title(name, "Project name")

        folder_id = None
        if self.folder_resolver is not None:
            folder_id = await run_in_threadpool(self.folder_resolver, credential)

        sheet_id = await run_in_threadpool(
            self.store.create_spreadsheet,
            credential,
            f"{self.title_prefix}{clean}",
            [CONFIG_TAB, STRUCTURE_TAB],
            folder_id,
        )

        project = Project(name=clean, description=(description or "").strip())
        project.attach_sheet(sheet_id)
        if template is not None:
            project.copy_content_from(template)
        else:
            project.placeholders = PlaceholderSet.defaults()

        await run_in_threadpool(self.catalog.append_row, credential, project_to_catalog_row(project))
        logger.info(
            "Created project %s '%s' (sheet=%s, template=%s)",
            project.id,
            clean,
            sheet_id,
            template.id if template is not None else "-",
        )
        return project

    async def list(self, credential: Credential) -> List[Project]:
        """Catalog stubs, in catalog order (content not loaded)."""
        rows = await run_in_threadpool(self.catalog.fetch_all, credential)
        projects = [project_from_catalog_row(r) for r in rows]
        return [p for p in projects if p.id]

    async def list_templates(self, credential: Credential) -> List[Project]:
        return [p for p in await self.list(credential) if p.is_template]

    async def reconcile(self, credential: Credential, sheet_id: str) -> Optional[Project]:
        """
        One catalog read after a create. The catalog is eventually consistent,
        so a missing row is reported to the caller rather than retried. A failed
        read counts as not listed: the sheet and catalog row already exist.
        """
        try:
            projects = await self.list(credential)
        except ArchiSheetsError as e:
            logger.warning("Catalog read after creating sheet %s failed: %s", sheet_id, e)
            return None
        for p in projects:
            if p.sheet_id == sheet_id:
                return p
        logger.info("Sheet %s not yet listed in the catalog", sheet_id)
        return None
