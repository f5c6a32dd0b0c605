# services/api/models/placeholder.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from core.errors import DuplicateKeyError, NotFoundError, ValidationError
from core.validation import normalize_placeholder_key

# {{ KEY }} tokens inside document text
TOKEN_RE = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")

EDITABLE_FIELDS = ("value", "description")


@dataclass
class Placeholder:
    """
    A named substitution variable.

    `key` is normalized (uppercase, "_" for whitespace) and never changes
    after creation; value/description are free text.
    """
    key: str
    value: str = ""
    description: str = ""

    def to_row(self) -> List[str]:
        return [self.key, self.value, self.description]


DEFAULT_PLACEHOLDERS: List[Dict[str, str]] = [
    {"key": "PROJ_NOM", "value": "", "description": "Nom oficial del projecte"},
    {"key": "PROJ_ADRECA", "value": "", "description": "Ubicació de l'obra"},
    {"key": "CLIENT_NOM", "value": "", "description": "Nom del promotor"},
    {"key": "ARQUITECTE", "value": "", "description": "Equip redactor"},
    {"key": "DATA_PROJECTE", "value": "", "description": "Data de l'edició"},
]


class PlaceholderSet:
    """
    Ordered collection of placeholders with unique normalized keys.

    Indices are presentation-only: removing an entry shifts the ones after it
    and nothing outside this set refers to them.
    """

    def __init__(self, placeholders: Optional[Iterable[Placeholder]] = None) -> None:
        self._items: List[Placeholder] = []
        for p in placeholders or []:
            key = normalize_placeholder_key(p.key)
            if not key:
                continue
            if self._index_of(key) is not None:
                raise DuplicateKeyError(f"Placeholder key '{key}' already exists")
            self._items.append(Placeholder(key, p.value or "", p.description or ""))

    @classmethod
    def defaults(cls) -> "PlaceholderSet":
        return cls(Placeholder(**d) for d in DEFAULT_PLACEHOLDERS)

    # ---------- collection protocol ----------

    def __iter__(self) -> Iterator[Placeholder]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> Placeholder:
        return self._items[self._check_index(index)]

    def keys(self) -> List[str]:
        return [p.key for p in self._items]

    def as_dict(self) -> Dict[str, str]:
        return {p.key: p.value for p in self._items}

    def copy(self) -> "PlaceholderSet":
        return PlaceholderSet(Placeholder(p.key, p.value, p.description) for p in self._items)

    # ---------- mutations ----------

    def add(self, raw_key: Optional[str]) -> Optional[Placeholder]:
        """
        Normalize `raw_key` and prepend a new empty placeholder.

        Returns None (and changes nothing) when the key normalizes to "".

        Raises:
            DuplicateKeyError: if the normalized key already exists
        """
        key = normalize_placeholder_key(raw_key)
        if not key:
            return None
        if self._index_of(key) is not None:
            raise DuplicateKeyError(f"Placeholder key '{key}' already exists")
        placeholder = Placeholder(key=key)
        self._items.insert(0, placeholder)
        return placeholder

    def update(self, index: int, field: str, value: Any) -> Placeholder:
        """Replace `value` or `description` of the placeholder at `index`."""
        if field not in EDITABLE_FIELDS:
            raise ValidationError(
                f"Field '{field}' cannot be edited (allowed: {', '.join(EDITABLE_FIELDS)})",
                code="FIELD_NOT_EDITABLE",
            )
        placeholder = self._items[self._check_index(index)]
        setattr(placeholder, field, "" if value is None else str(value))
        return placeholder

    def remove(self, index: int) -> Placeholder:
        return self._items.pop(self._check_index(index))

    def bulk_apply_suggestions(self, suggestions: Optional[Mapping[str, Any]]) -> int:
        """
        Merge suggested values into existing placeholders.

        Keys absent from `suggestions` are left untouched and no key is ever
        added or removed. Empty suggestions keep the current value.

        Returns:
            Number of values replaced.
        """
        if not suggestions:
            return 0
        applied = 0
        for p in self._items:
            suggested = suggestions.get(p.key)
            if suggested is None or suggested == "":
                continue
            p.value = str(suggested)
            applied += 1
        return applied

    # ---------- substitution ----------

    def substitute(self, text: str) -> str:
        """
        Replace {{KEY}} tokens with placeholder values.
        Tokens without a matching placeholder are kept as-is.
        """
        values = self.as_dict()

        def _repl(m: re.Match) -> str:
            key = normalize_placeholder_key(m.group(1))
            if key in values:
                return values[key]
            return m.group(0)

        return TOKEN_RE.sub(_repl, text or "")

    def missing_keys(self, text: str) -> List[str]:
        """Tokens used in `text` that have no placeholder, in order of appearance."""
        known = set(self.keys())
        out: List[str] = []
        for m in TOKEN_RE.finditer(text or ""):
            key = normalize_placeholder_key(m.group(1))
            if key not in known and key not in out:
                out.append(key)
        return out

    # ---------- helpers ----------

    def _index_of(self, key: str) -> Optional[int]:
        for i, p in enumerate(self._items):
            if p.key == key:
                return i
        return None

    def _check_index(self, index: int) -> int:
        if not isinstance(index, int) or index < 0 or index >= len(self._items):
            raise NotFoundError(f"No placeholder at index {index}", code="PLACEHOLDER_NOT_FOUND")
        return index
