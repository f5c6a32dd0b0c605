# services/api/routers/export.py
from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, status

from dependencies import CredentialDep, RegistryDep, StoreDep, WorkspaceDep
from routers.projects import open_project
from schemas import ExportDocumentOut, ExportOut, ExportStatusOut, ToggleOut

router = APIRouter(prefix="/projects/{project_id}/export", tags=["export"])


def _status_out(pipeline) -> ExportStatusOut:
    return ExportStatusOut(**pipeline.snapshot(), outputs=pipeline.outputs)


@router.get("", response_model=ExportOut)
async def export_console(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    selection = workspace.selection_for(project)
    documents = [
        ExportDocumentOut(
            id=d.id,
            title=d.title,
            chapter_title=c.title,
            type=d.type,
            selected=selection.is_selected(d.id),
        )
        for c in project.chapters
        for d in c.documents
    ]
    return ExportOut(
        project_id=project.id,
        documents=documents,
        selected_count=len(selection),
        placeholder_count=len(project.placeholders),
        status=_status_out(workspace.pipeline_for(project.id)),
    )


@router.post("/toggle/{doc_id}", response_model=ToggleOut)
async def toggle_document(
    project_id: str,
    doc_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    selection = workspace.selection_for(project)
    selected = selection.toggle(doc_id)
    return ToggleOut(doc_id=doc_id, selected=selected, selected_count=len(selection))


@router.post("/compile", response_model=ExportStatusOut, status_code=status.HTTP_202_ACCEPTED)
async def compile_export(
    project_id: str,
    background_tasks: BackgroundTasks,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """
    Start the compilation in the background; poll /status for progress.
    Rejected at once when nothing is selected or a run is in progress.
    """
    project = await open_project(workspace, registry, store, credential, project_id)
    pipeline = workspace.pipeline_for(project.id)
    pipeline.prepare(project, workspace.selection_for(project))
    background_tasks.add_task(pipeline.execute)
    return _status_out(pipeline)


@router.get("/status", response_model=ExportStatusOut)
async def export_status(project_id: str, workspace: WorkspaceDep):
    workspace.get_project(project_id)
    return _status_out(workspace.pipeline_for(project_id))
