"""
Pydantic schemas for projects.
"""
from typing import List, Optional
from pydantic import BaseModel, Field

from models.project import Project

from .document import ChapterOut, DocumentOut
from .placeholder import PlaceholderOut, placeholders_out


class ProjectCreate(BaseModel):
    name: str = Field(..., max_length=200, description="Project name")
    description: str = Field("", max_length=5000)
    template_id: Optional[str] = Field(None, description="Copy chapters/placeholders from this template")


class ProjectSummaryOut(BaseModel):
    """Catalog-level view (content may not be loaded)."""
    id: str
    name: str
    sheet_id: Optional[str] = None
    created_at: str = ""
    is_template: bool = False
    loaded: bool = False
    chapter_count: int = 0
    document_count: int = 0


class ProjectOut(ProjectSummaryOut):
    description: str = ""
    chapters: List[ChapterOut] = Field(default_factory=list)
    placeholders: List[PlaceholderOut] = Field(default_factory=list)


class ProjectCreatedOut(BaseModel):
    project: ProjectOut
    listed: bool = Field(..., description="Whether the catalog already lists the new project")
    notice: Optional[str] = None


class SummaryOut(BaseModel):
    text: str
    generated: bool = Field(..., description="False when the fallback text was returned")


def project_summary_out(project: Project) -> ProjectSummaryOut:
    return ProjectSummaryOut(
        id=project.id,
        name=project.name,
        sheet_id=project.sheet_id,
        created_at=project.created_at,
        is_template=project.is_template,
        loaded=project.loaded,
        chapter_count=len(project.chapters),
        document_count=len(project.all_document_ids()),
    )


def project_out(project: Project) -> ProjectOut:
    return ProjectOut(
        **project_summary_out(project).model_dump(),
        description=project.description,
        chapters=[
            ChapterOut(
                id=c.id,
                title=c.title,
                sheet_tab_name=c.resolved_tab_name,
                documents=[DocumentOut.model_validate(d) for d in c.documents],
            )
            for c in project.chapters
        ],
        placeholders=placeholders_out(project.placeholders),
    )
