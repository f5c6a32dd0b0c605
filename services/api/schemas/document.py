"""
Pydantic schemas for chapters and the documents they hold.
"""
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class DocumentCreate(BaseModel):
    """Schema for attaching a document to a chapter."""
    title: str = Field(..., max_length=300, description="Document title (may contain {{KEY}} tokens)")
    url: str = Field("", max_length=2000, description="Drive/Docs/Sheets URL")
    type: Optional[str] = Field(
        None,
        description="DOC, SHEET, PDF or OTHER. Inferred from the URL when omitted.",
    )


class DocumentOut(BaseModel):
    """Schema for document output."""
    id: str
    title: str
    url: str = ""
    type: str = "OTHER"

    model_config = ConfigDict(from_attributes=True)


class ChapterCreate(BaseModel):
    title: str = Field(..., max_length=200, description="Chapter title")


class ChapterUpdate(BaseModel):
    """Rename only. The sheet tab keeps the name it was created with."""
    title: str = Field(..., max_length=200)


class ChapterOut(BaseModel):
    id: str
    title: str
    sheet_tab_name: Optional[str] = Field(None, description="Spreadsheet tab backing this chapter")
    documents: List[DocumentOut] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ChapterSuggestIn(BaseModel):
    """Ask the assistant for an outline; `apply` appends the suggested chapters."""
    description: Optional[str] = Field(None, description="Defaults to the project description")
    apply: bool = False


class ChapterSuggestion(BaseModel):
    title: str
    description: str = ""


class ChapterSuggestOut(BaseModel):
    suggestions: List[ChapterSuggestion] = Field(default_factory=list)
    added: List[ChapterOut] = Field(default_factory=list)
    rejected: List[str] = Field(default_factory=list, description="Titles that could not be added")
