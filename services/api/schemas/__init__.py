"""
Pydantic schemas for API request/response validation.
"""
from typing import Optional

from pydantic import BaseModel

from .document import (
    ChapterCreate,
    ChapterOut,
    ChapterSuggestIn,
    ChapterSuggestion,
    ChapterSuggestOut,
    ChapterUpdate,
    DocumentCreate,
    DocumentOut,
)
from .export import ExportDocumentOut, ExportOut, ExportStatusOut, ToggleOut
from .placeholder import (
    PlaceholderCreate,
    PlaceholderOut,
    PlaceholderSuggestOut,
    PlaceholderUpdate,
    RenderIn,
    RenderOut,
    placeholders_out,
)
from .project import (
    ProjectCreate,
    ProjectCreatedOut,
    ProjectOut,
    ProjectSummaryOut,
    SummaryOut,
    project_out,
    project_summary_out,
)
from .session import NavigateIn, SessionOut, TokenIn
from .sync import RangeWriteOut, SyncPlanOut, SyncResultOut


# ============ Health Check ============


class HealthCheck(BaseModel):
    """Health check response."""
    ok: bool = True
    backend: Optional[str] = None
    assistant: bool = False


# Re-export all
__all__ = [
    "ChapterCreate",
    "ChapterOut",
    "ChapterSuggestIn",
    "ChapterSuggestion",
    "ChapterSuggestOut",
    "ChapterUpdate",
    "DocumentCreate",
    "DocumentOut",
    "ExportDocumentOut",
    "ExportOut",
    "ExportStatusOut",
    "ToggleOut",
    "PlaceholderCreate",
    "PlaceholderOut",
    "PlaceholderSuggestOut",
    "PlaceholderUpdate",
    "RenderIn",
    "RenderOut",
    "placeholders_out",
    "ProjectCreate",
    "ProjectCreatedOut",
    "ProjectOut",
    "ProjectSummaryOut",
    "SummaryOut",
    "project_out",
    "project_summary_out",
    "NavigateIn",
    "SessionOut",
    "TokenIn",
    "RangeWriteOut",
    "SyncPlanOut",
    "SyncResultOut",
    "HealthCheck",
]
