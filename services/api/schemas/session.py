"""
Pydantic schemas for the session resource.
"""
from typing import Optional
from pydantic import BaseModel, Field

from core.session import SessionState


class TokenIn(BaseModel):
    access_token: str = Field(..., min_length=1, description="Google OAuth access token")


class NavigateIn(BaseModel):
    view: str = Field(..., description="DASHBOARD, PROJECT_EDITOR, PLACEHOLDER_EDITOR, TEMPLATE_LIBRARY or EXPORT_VIEW")
    project_id: Optional[str] = None


class SessionOut(BaseModel):
    view: str
    active_project_id: Optional[str] = None
    signed_in: bool = False
    identity: Optional[str] = Field(None, description="Opaque id of the cached credential")

    @classmethod
    def from_state(cls, state: SessionState) -> "SessionOut":
        return cls(
            view=state.view,
            active_project_id=state.active_project_id,
            signed_in=state.signed_in,
            identity=state.credential.cache_key if state.credential is not None else None,
        )
