# services/api/routers/projects.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Query, status

from adapters.base import SpreadsheetStore
from core.assistant import SUMMARY_FALLBACK
from core.credentials import Credential
from core.errors import ValidationError
from core.project_sync import load_project_content
from core.registry import ProjectRegistry
from core.session import View, Workspace
from dependencies import AssistantDep, CredentialDep, RegistryDep, StoreDep, WorkspaceDep
from models.project import Project
from schemas import (
    ProjectCreate,
    ProjectCreatedOut,
    ProjectOut,
    ProjectSummaryOut,
    SummaryOut,
    project_out,
    project_summary_out,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])


# ---------- Helpers ----------

async def open_project(
    workspace: Workspace,
    registry: ProjectRegistry,
    store: SpreadsheetStore,
    credential: Credential,
    project_id: str,
) -> Project:
    """
    Project from the workspace, with its content read from the sheet the first
    time it is opened. Unknown ids trigger one catalog listing.
    """
    if project_id not in workspace.projects:
        workspace.merge_listing(await registry.list(credential))
    project = workspace.get_project(project_id)
    if not project.loaded:
        await load_project_content(store, credential, project)
    return project


# ---------- Endpoints ----------

@router.get("", response_model=List[ProjectSummaryOut])
async def list_projects(
    workspace: WorkspaceDep,
    registry: RegistryDep,
    credential: CredentialDep,
    templates: bool = Query(False, description="Only projects flagged as templates"),
):
    if templates:
        projects = workspace.merge_listing(await registry.list_templates(credential))
    else:
        projects = workspace.merge_listing(await registry.list(credential))
    return [project_summary_out(p) for p in projects]


@router.post("", response_model=ProjectCreatedOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """
    Create the project sheet and catalog row, then check once whether the
    catalog lists it. A lagging catalog is reported through `listed`/`notice`.
    """
    with workspace.busy("", "create"):
        template = None
        if body.template_id:
            template = await open_project(workspace, registry, store, credential, body.template_id)
            if not template.is_template:
                raise ValidationError(
                    f"Project {template.id} is not a template",
                    code="NOT_A_TEMPLATE",
                )

        project = await registry.create(
            credential,
            body.name,
            description=body.description,
            template=template,
        )
        workspace.remember(project)
        listed = await registry.reconcile(credential, project.sheet_id) is not None

    workspace.navigate(View.PROJECT_EDITOR, project.id)
    return ProjectCreatedOut(
        project=project_out(project),
        listed=listed,
        notice=None if listed else "Project created but not listed in the catalog yet. Refresh in a moment.",
    )


@router.get("/{project_id}", response_model=ProjectOut)
async def get_project(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    return project_out(project)


@router.get("/{project_id}/summary", response_model=SummaryOut)
async def project_summary(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
    assistant: AssistantDep,
):
    """AI introduction for the final report (fallback text when unavailable)."""
    project = await open_project(workspace, registry, store, credential, project_id)
    text = await assistant.summarize(project)
    return SummaryOut(text=text, generated=text != SUMMARY_FALLBACK)
