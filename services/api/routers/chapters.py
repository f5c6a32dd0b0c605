# services/api/routers/chapters.py
from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import APIRouter, status

from core.errors import DuplicateTabNameError, EmptyTitleError
from dependencies import AssistantDep, CredentialDep, RegistryDep, StoreDep, WorkspaceDep
from routers.projects import open_project
from schemas import (
    ChapterCreate,
    ChapterOut,
    ChapterSuggestIn,
    ChapterSuggestion,
    ChapterSuggestOut,
    ChapterUpdate,
    DocumentCreate,
    DocumentOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/chapters", tags=["chapters"])


def _chapter_out(chapter) -> ChapterOut:
    return ChapterOut(
        id=chapter.id,
        title=chapter.title,
        sheet_tab_name=chapter.resolved_tab_name,
        documents=[DocumentOut.model_validate(d) for d in chapter.documents],
    )


@router.post("", response_model=ChapterOut, status_code=status.HTTP_201_CREATED)
async def add_chapter(
    project_id: str,
    body: ChapterCreate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    return _chapter_out(project.add_chapter(body.title))


@router.post("/suggest", response_model=ChapterSuggestOut)
async def suggest_chapters(
    project_id: str,
    body: ChapterSuggestIn,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
    assistant: AssistantDep,
):
    """
    Chapter outline from the assistant. With `apply`, every suggestion that
    yields a usable, unused tab name is appended; the rest are listed in `rejected`.
    """
    project = await open_project(workspace, registry, store, credential, project_id)
    description = (body.description or project.description or project.name).strip()
    suggestions = await assistant.suggest_chapters(description)

    out = ChapterSuggestOut(suggestions=[ChapterSuggestion(**s) for s in suggestions])
    if body.apply:
        for s in suggestions:
            try:
                out.added.append(_chapter_out(project.add_chapter(s["title"])))
            except (EmptyTitleError, DuplicateTabNameError) as e:
                logger.info("Suggested chapter '%s' skipped: %s", s["title"], e.message)
                out.rejected.append(s["title"])
    return out


@router.patch("/{chapter_id}", response_model=ChapterOut)
async def rename_chapter(
    project_id: str,
    chapter_id: str,
    body: ChapterUpdate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    return _chapter_out(project.rename_chapter(chapter_id, body.title))


@router.delete("/{chapter_id}")
async def remove_chapter(
    project_id: str,
    chapter_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
) -> Dict[str, Any]:
    """Local removal. The chapter's tab stays in the spreadsheet."""
    project = await open_project(workspace, registry, store, credential, project_id)
    chapter = project.remove_chapter(chapter_id)
    return {"ok": True, "removed": chapter.id, "sheet_tab_kept": chapter.resolved_tab_name}


@router.post("/{chapter_id}/documents", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
async def add_document(
    project_id: str,
    chapter_id: str,
    body: DocumentCreate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    doc = project.add_document(chapter_id, body.title, url=body.url, doc_type=body.type)
    return DocumentOut.model_validate(doc)


@router.delete("/{chapter_id}/documents/{doc_id}")
async def remove_document(
    project_id: str,
    chapter_id: str,
    doc_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
) -> Dict[str, Any]:
    project = await open_project(workspace, registry, store, credential, project_id)
    doc = project.remove_document(chapter_id, doc_id)
    return {"ok": True, "removed": doc.id}
