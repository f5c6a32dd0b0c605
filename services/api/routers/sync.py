# services/api/routers/sync.py
from __future__ import annotations

from fastapi import APIRouter

from core.project_sync import build_plan, run_sync
from dependencies import CredentialDep, RegistryDep, StoreDep, WorkspaceDep
from routers.projects import open_project
from schemas import SyncPlanOut, SyncResultOut

router = APIRouter(prefix="/projects/{project_id}/sync", tags=["sync"])


@router.get("/plan", response_model=SyncPlanOut)
async def preview_sync(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """What a sync would do right now (reads tab titles, writes nothing)."""
    project = await open_project(workspace, registry, store, credential, project_id)
    return SyncPlanOut.from_plan(await build_plan(store, credential, project))


@router.post("", response_model=SyncResultOut)
async def sync_project(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """
    Push the project to its spreadsheet: missing tabs are created, then
    CONFIG, ESTRUCTURA and every chapter tab are overwritten.
    Concurrent syncs from other clients are last-write-wins.
    """
    project = await open_project(workspace, registry, store, credential, project_id)
    with workspace.busy(project.id, "sync"):
        result = await run_sync(store, credential, project)
    return SyncResultOut.from_result(result)
