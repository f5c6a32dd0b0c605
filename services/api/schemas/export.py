"""
Pydantic schemas for the export console.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ExportDocumentOut(BaseModel):
    id: str
    title: str
    chapter_title: str
    type: str
    selected: bool


class ExportStatusOut(BaseModel):
    status: str = Field(..., description="idle, running, done or failed")
    label: str = ""
    completed: int = 0
    total: int = 0
    progress: float = Field(0.0, ge=0.0, le=1.0)
    selected_count: int = 0
    error: Optional[str] = None
    outputs: Dict[str, Any] = Field(default_factory=dict)


class ExportOut(BaseModel):
    project_id: str
    documents: List[ExportDocumentOut] = Field(default_factory=list)
    selected_count: int = 0
    placeholder_count: int = 0
    status: ExportStatusOut


class ToggleOut(BaseModel):
    doc_id: str
    selected: bool
    selected_count: int
