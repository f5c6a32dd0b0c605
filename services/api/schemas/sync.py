"""
Pydantic schemas for sheet synchronization.
"""
from typing import List
from pydantic import BaseModel, Field

from core.project_sync import SyncResult
from core.sync_planner import SyncPlan


class RangeWriteOut(BaseModel):
    range: str = Field(..., description="Quoted A1 range, e.g. 'CONFIG'!A1:C")
    tab: str
    row_count: int = Field(..., description="Rows written, header included")


class SyncPlanOut(BaseModel):
    tabs_to_create: List[str] = Field(default_factory=list)
    writes: List[RangeWriteOut] = Field(default_factory=list)
    skipped_chapters: List[str] = Field(default_factory=list)

    @classmethod
    def from_plan(cls, plan: SyncPlan) -> "SyncPlanOut":
        return cls(
            tabs_to_create=list(plan.tabs_to_create),
            writes=[RangeWriteOut(range=w.range, tab=w.tab, row_count=len(w.rows)) for w in plan.writes],
            skipped_chapters=list(plan.skipped_chapters),
        )


class SyncResultOut(BaseModel):
    sheet_id: str
    created_tabs: List[str] = Field(default_factory=list)
    written_ranges: List[str] = Field(default_factory=list)
    skipped_chapters: List[str] = Field(default_factory=list)
    synced_at: str

    @classmethod
    def from_result(cls, result: SyncResult) -> "SyncResultOut":
        return cls(
            sheet_id=result.sheet_id,
            created_tabs=result.created_tabs,
            written_ranges=result.written_ranges,
            skipped_chapters=result.skipped_chapters,
            synced_at=result.synced_at,
        )
