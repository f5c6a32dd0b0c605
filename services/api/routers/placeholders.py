# services/api/routers/placeholders.py
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter

from core.errors import ValidationError
from dependencies import AssistantDep, CredentialDep, RegistryDep, StoreDep, WorkspaceDep
from routers.projects import open_project
from schemas import (
    PlaceholderCreate,
    PlaceholderOut,
    PlaceholderSuggestOut,
    PlaceholderUpdate,
    RenderIn,
    RenderOut,
    placeholders_out,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/placeholders", tags=["placeholders"])


@router.get("", response_model=List[PlaceholderOut])
async def list_placeholders(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    return placeholders_out(project.placeholders)


@router.post("", response_model=List[PlaceholderOut])
async def add_placeholder(
    project_id: str,
    body: PlaceholderCreate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """New keys go first in the list. Returns the whole list."""
    project = await open_project(workspace, registry, store, credential, project_id)
    if project.placeholders.add(body.key) is None:
        raise ValidationError("Placeholder key is empty", code="EMPTY_KEY")
    return placeholders_out(project.placeholders)


@router.post("/suggest", response_model=PlaceholderSuggestOut)
async def suggest_values(
    project_id: str,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
    assistant: AssistantDep,
):
    """Fill values with assistant suggestions. Keys are never added or removed."""
    project = await open_project(workspace, registry, store, credential, project_id)
    suggestions = await assistant.suggest_values_for_keys(
        project.name,
        project.description,
        project.placeholders.keys(),
    )
    applied = project.placeholders.bulk_apply_suggestions(suggestions)
    logger.info("Project %s: %d suggested value(s) applied", project.id, applied)
    return PlaceholderSuggestOut(
        applied=applied,
        suggestions=suggestions,
        placeholders=placeholders_out(project.placeholders),
    )


@router.post("/render", response_model=RenderOut)
async def render_text(
    project_id: str,
    body: RenderIn,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    """Substitute {{KEY}} tokens in `text` with the project's values."""
    project = await open_project(workspace, registry, store, credential, project_id)
    return RenderOut(
        text=project.placeholders.substitute(body.text),
        missing_keys=project.placeholders.missing_keys(body.text),
    )


@router.patch("/{index}", response_model=PlaceholderOut)
async def update_placeholder(
    project_id: str,
    index: int,
    body: PlaceholderUpdate,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    p = project.placeholders.update(index, body.field, body.value)
    return PlaceholderOut(index=index, key=p.key, value=p.value, description=p.description)


@router.delete("/{index}", response_model=List[PlaceholderOut])
async def remove_placeholder(
    project_id: str,
    index: int,
    workspace: WorkspaceDep,
    registry: RegistryDep,
    store: StoreDep,
    credential: CredentialDep,
):
    project = await open_project(workspace, registry, store, credential, project_id)
    project.placeholders.remove(index)
    return placeholders_out(project.placeholders)
