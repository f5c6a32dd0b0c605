# services/api/models/project.py
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Iterator, List, Optional
from uuid import uuid4

from core.errors import DuplicateTabNameError, EmptyTitleError, NotFoundError, ValidationError
from core.validation import coerce_doc_type, derive_tab_name, require_title
from models.placeholder import PlaceholderSet

# Tabs every project spreadsheet owns; chapters may not map onto them.
CONFIG_TAB = "CONFIG"
STRUCTURE_TAB = "ESTRUCTURA"
RESERVED_TABS = (CONFIG_TAB, STRUCTURE_TAB)


def _gen_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:10]}"


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass
class Document:
    """Reference to an external file (Drive doc, sheet, PDF...) in a chapter."""
    title: str
    url: str = ""
    type: str = "OTHER"
    id: str = field(default_factory=lambda: _gen_id("d"))

    def to_row(self) -> List[str]:
        return [self.title, self.url]


@dataclass
class Chapter:
    """
    A named section of a project, mapped 1:1 to a spreadsheet tab.

    `sheet_tab_name` is computed once when the chapter is created and is not
    recomputed on rename, so a tab users already filled in never moves.
    """
    title: str
    sheet_tab_name: Optional[str] = None
    documents: List[Document] = field(default_factory=list)
    id: str = field(default_factory=lambda: _gen_id("c"))

    @property
    def resolved_tab_name(self) -> str:
        return self.sheet_tab_name or derive_tab_name(self.title)

    def find_document(self, doc_id: str) -> Document:
        for d in self.documents:
            if d.id == doc_id:
                return d
        raise NotFoundError(f"Document {doc_id} not found", code="DOCUMENT_NOT_FOUND")


@dataclass
class Project:
    """
    A unit of architectural work backed by one external spreadsheet.

    `loaded` is False for stubs read from the master catalog: their chapters
    and placeholders live in the project sheet until the project is opened.
    """
    name: str
    description: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: str = field(default_factory=utc_iso)
    is_template: bool = False
    sheet_id: Optional[str] = None
    chapters: List[Chapter] = field(default_factory=list)
    placeholders: PlaceholderSet = field(default_factory=PlaceholderSet)
    loaded: bool = True

    # ---------- external sheet ----------

    def attach_sheet(self, sheet_id: str) -> None:
        """Assign the external sheet id. It cannot change once set."""
        if not sheet_id:
            raise ValidationError("sheet_id must not be empty")
        if self.sheet_id and self.sheet_id != sheet_id:
            raise ValidationError(
                f"Project {self.id} is already linked to sheet {self.sheet_id}",
                code="SHEET_ID_IMMUTABLE",
            )
        self.sheet_id = sheet_id

    # ---------- chapters ----------

    def find_chapter(self, chapter_id: str) -> Chapter:
        for c in self.chapters:
            if c.id == chapter_id:
                return c
        raise NotFoundError(f"Chapter {chapter_id} not found", code="CHAPTER_NOT_FOUND")

    def add_chapter(self, title: str) -> Chapter:
        """
        Append a chapter and fix its tab name.

        Raises:
            EmptyTitleError: blank title, or a title with nothing usable as a tab name
            DuplicateTabNameError: the derived tab name is reserved or already used
        """
        clean = require_title(title, "Chapter title")
        tab = derive_tab_name(clean)
        if not tab.strip("_"):
            raise EmptyTitleError(f"Chapter title '{clean}' has no characters usable in a tab name")
        if tab in RESERVED_TABS:
            raise DuplicateTabNameError(f"Tab name '{tab}' is reserved for the project sheet")
        for c in self.chapters:
            if c.resolved_tab_name == tab:
                raise DuplicateTabNameError(
                    f"Tab name '{tab}' is already used by chapter '{c.title}'"
                )
        chapter = Chapter(title=clean, sheet_tab_name=tab)
        self.chapters.append(chapter)
        return chapter

    def rename_chapter(self, chapter_id: str, title: str) -> Chapter:
        chapter = self.find_chapter(chapter_id)
        chapter.title = require_title(title, "Chapter title")
        return chapter

    def remove_chapter(self, chapter_id: str) -> Chapter:
        """Remove locally. The chapter's tab in the external sheet is left alone."""
        chapter = self.find_chapter(chapter_id)
        self.chapters.remove(chapter)
        return chapter

    # ---------- documents ----------

    def add_document(
        self,
        chapter_id: str,
        title: str,
        url: str = "",
        doc_type: Optional[str] = None,
    ) -> Document:
        chapter = self.find_chapter(chapter_id)
        clean_url = (url or "").strip()
        doc = Document(
            title=require_title(title, "Document title"),
            url=clean_url,
            type=coerce_doc_type(doc_type, clean_url),
        )
        chapter.documents.append(doc)
        return doc

    def remove_document(self, chapter_id: str, doc_id: str) -> Document:
        chapter = self.find_chapter(chapter_id)
        doc = chapter.find_document(doc_id)
        chapter.documents.remove(doc)
        return doc

    def iter_documents(self) -> Iterator[Document]:
        for c in self.chapters:
            yield from c.documents

    def all_document_ids(self) -> List[str]:
        return [d.id for d in self.iter_documents()]

    # ---------- templates ----------

    def copy_content_from(self, template: "Project") -> None:
        """Copy chapters (fresh ids, same tab names) and placeholders from a template."""
        self.chapters = [
            Chapter(
                title=c.title,
                sheet_tab_name=c.resolved_tab_name,
                documents=[Document(title=d.title, url=d.url, type=d.type) for d in c.documents],
            )
            for c in template.chapters
        ]
        self.placeholders = template.placeholders.copy()
