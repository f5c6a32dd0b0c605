"""
Domain models for ArchiSheets: projects, chapters, documents, placeholders.
"""
from .placeholder import DEFAULT_PLACEHOLDERS, Placeholder, PlaceholderSet
from .project import (
    CONFIG_TAB,
    RESERVED_TABS,
    STRUCTURE_TAB,
    Chapter,
    Document,
    Project,
)

__all__ = [
    "DEFAULT_PLACEHOLDERS",
    "Placeholder",
    "PlaceholderSet",
    "CONFIG_TAB",
    "STRUCTURE_TAB",
    "RESERVED_TABS",
    "Chapter",
    "Document",
    "Project",
]
