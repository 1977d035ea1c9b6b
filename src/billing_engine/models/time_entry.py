from __future__ import annotations

from datetime import date
from typing import Sequence

from pydantic import ConfigDict, Field, computed_field

from .base import CamelModel


class GroupingRefs(CamelModel):
    model_config = ConfigDict(frozen=True)

    project_ref: str
    task_ref: str | None = None


class TimeEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    duration_minutes: int = Field(default=0, ge=0)
    work_date: date
    owner_ref: str
    grouping_refs: GroupingRefs
    hourly_rate: float | None = Field(default=None, ge=0)
    owner_name: str | None = None
    project_name: str | None = None
    task_title: str | None = None
    notes: str | None = None


class AggregationGroup(CamelModel):
    key: str
    label: str
    total_minutes: int = 0
    total_hours: float = 0.0
    total_amount: float = 0.0
    entries: Sequence[TimeEntry] = Field(default_factory=list)

    @computed_field
    @property
    def entries_count(self) -> int:
        return len(self.entries)


class TimeEntrySummary(CamelModel):
    total_hours: float
    total_amount: float
    entries_count: int
    distinct_users_count: int
    distinct_projects_count: int
    distinct_tasks_count: int


__all__ = ["GroupingRefs", "TimeEntry", "AggregationGroup", "TimeEntrySummary"]
