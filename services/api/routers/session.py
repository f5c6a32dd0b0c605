# services/api/routers/session.py
from __future__ import annotations

from fastapi import APIRouter

from core.credentials import credential_from_bearer
from core.session import View
from dependencies import WorkspaceDep
from schemas import NavigateIn, SessionOut, TokenIn

router = APIRouter(prefix="/session", tags=["session"])


@router.get("", response_model=SessionOut)
async def get_session(workspace: WorkspaceDep):
    return SessionOut.from_state(workspace.state)


@router.post("/token", response_model=SessionOut)
async def sign_in(body: TokenIn, workspace: WorkspaceDep):
    """Cache the Google access token obtained by the front end."""
    workspace.sign_in(credential_from_bearer(body.access_token))
    return SessionOut.from_state(workspace.state)


@router.post("/logout", response_model=SessionOut)
async def sign_out(workspace: WorkspaceDep):
    workspace.sign_out()
    return SessionOut.from_state(workspace.state)


@router.post("/navigate", response_model=SessionOut)
async def navigate(body: NavigateIn, workspace: WorkspaceDep):
    # only projects this workspace has seen can become active
    if body.view == View.PROJECT_EDITOR and body.project_id:
        workspace.get_project(body.project_id)
    workspace.navigate(body.view, body.project_id)
    return SessionOut.from_state(workspace.state)
