"""
Validation and normalization utilities for ArchiSheets.
Keeps keys, titles and tab names in the shape Google Sheets accepts.
"""
import re
from typing import Iterable, Optional

from core.errors import EmptyTitleError

# Characters Google Sheets refuses in a tab title
FORBIDDEN_TAB_CHARS = re.compile(r"[\[\]\?\*/\\:]")
WHITESPACE_RUN = re.compile(r"\s+")

MAX_TAB_NAME_LENGTH = 30

DOC_TYPES = ("DOC", "SHEET", "PDF", "OTHER")


def normalize_placeholder_key(raw_key: Optional[str]) -> str:
    """
    Normalize a raw placeholder key.

    Rules:
    - surrounding whitespace is trimmed
    - letters are uppercased
    - every whitespace run becomes a single underscore

    "client nom" -> "CLIENT_NOM". An empty result means "no key".
    """
    if not raw_key:
        return ""
    return WHITESPACE_RUN.sub("_", raw_key.strip().upper())


def derive_tab_name(title: Optional[str]) -> str:
    """
    Map a human chapter title to a spreadsheet-legal tab name.

    1. uppercase
    2. drop [ ] ? * / \\ :
    3. whitespace runs -> "_"
    4. truncate to 30 characters

    Deterministic: the same title always yields the same tab name.
    """
    if not title:
        return ""
    name = FORBIDDEN_TAB_CHARS.sub("", title.upper())
    name = WHITESPACE_RUN.sub("_", name)
    return name[:MAX_TAB_NAME_LENGTH]


def require_title(title: Optional[str], what: str = "title") -> str:
    """
    Return the trimmed title or raise EmptyTitleError.

    Raises:
        EmptyTitleError: if nothing is left after trimming
    """
    cleaned = (title or "").strip()
    if not cleaned:
        raise EmptyTitleError(f"{what} must not be empty")
    return cleaned


def find_duplicates(values: Iterable[str]) -> list[str]:
    """Return the values that appear more than once, in first-seen order."""
    seen: set[str] = set()
    dupes: list[str] = []
    for v in values:
        if v in seen and v not in dupes:
            dupes.append(v)
        seen.add(v)
    return dupes


def coerce_doc_type(doc_type: Optional[str], url: str = "") -> str:
    """
    Coerce a document type tag to one of DOC, SHEET, PDF, OTHER.

    When no valid tag is given the type is inferred from the URL.
    """
    if doc_type:
        tag = doc_type.strip().upper()
        if tag in DOC_TYPES:
            return tag

    u = (url or "").strip().lower()
    if "docs.google.com/document" in u:
        return "DOC"
    if "docs.google.com/spreadsheets" in u:
        return "SHEET"
    if u.split("?", 1)[0].endswith(".pdf"):
        return "PDF"
    return "OTHER"
