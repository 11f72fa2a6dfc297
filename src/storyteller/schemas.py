from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class EntityRecord(BaseModel):
    """A content-database page; ``properties`` is passed through as-is."""

    id: str
    properties: Dict[str, Any] = Field(default_factory=dict)


class TrackedEntity(BaseModel):
    record: EntityRecord
    group_id: str


class Snapshot(BaseModel):
    group_id: str
    business_date: str
    windows: Dict[str, Any]


class SavedSnapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    group_id: str = Field(alias="groupId")
    url: str


class JobResult(BaseModel):
    success: bool = True
    count: int = 0
    saved: List[SavedSnapshot] = Field(default_factory=list)

    def add(self, group_id: str, url: str) -> None:
        self.saved.append(SavedSnapshot(group_id=group_id, url=url))
        self.count = len(self.saved)


class ErrorResponse(BaseModel):
    error: str
