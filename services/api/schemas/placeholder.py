"""
Pydantic schemas for placeholders ({{KEY}} substitution variables).
"""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from models.placeholder import PlaceholderSet


class PlaceholderCreate(BaseModel):
    key: str = Field(..., max_length=100, description="Raw key, normalized server-side ('client nom' -> CLIENT_NOM)")


class PlaceholderUpdate(BaseModel):
    """Keys are immutable; only value/description can change."""
    field: Literal["value", "description"]
    value: Optional[str] = Field("", max_length=5000)


class PlaceholderOut(BaseModel):
    index: int = Field(..., ge=0, description="Position in the list (changes when entries are added/removed)")
    key: str
    value: str = ""
    description: str = ""


def placeholders_out(placeholders: PlaceholderSet) -> List[PlaceholderOut]:
    return [
        PlaceholderOut(index=i, key=p.key, value=p.value, description=p.description)
        for i, p in enumerate(placeholders)
    ]


class PlaceholderSuggestOut(BaseModel):
    applied: int = Field(0, description="Number of values replaced")
    suggestions: Optional[Dict[str, Any]] = None
    placeholders: List[PlaceholderOut] = Field(default_factory=list)


class RenderIn(BaseModel):
    text: str = Field(..., max_length=200_000)


class RenderOut(BaseModel):
    text: str
    missing_keys: List[str] = Field(default_factory=list)
