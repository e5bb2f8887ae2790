from __future__ import annotations

from datetime import date, time
from typing import Optional, List, Dict, Any, Literal

from pydantic import BaseModel, Field


TaskTypeLiteral = Literal["recurring", "one_off"]
PriorityLiteral = Literal["none", "low", "medium", "high"]


class TemplateCreate(BaseModel):
    title: str = Field(..., min_length=1)
    category: str = "General"
    task_type: TaskTypeLiteral = "recurring"
    difficulty: int = Field(3, ge=1, le=5)
    priority: PriorityLiteral = "none"
    notes: Optional[str] = None
    url: Optional[str] = None
    details: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    list_name: Optional[str] = None
    recurrence_interval_days: Optional[int] = Field(None, ge=1)


class TemplatePatch(BaseModel):
    title: Optional[str] = None
    category: Optional[str] = None
    task_type: Optional[TaskTypeLiteral] = None
    difficulty: Optional[int] = Field(None, ge=1, le=5)
    priority: Optional[PriorityLiteral] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    details: Optional[str] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    list_name: Optional[str] = None
    recurrence_interval_days: Optional[int] = Field(None, ge=1)


class TemplateActivePayload(BaseModel):
    is_active: bool


class TemplateResponse(BaseModel):
    id: str
    user_id: str
    title: str
    category: str
    task_type: str
    difficulty: int
    priority: str
    notes: Optional[str] = None
    url: Optional[str] = None
    details: Optional[str] = None
    due_date: Optional[str] = None
    due_time: Optional[str] = None
    list_name: Optional[str] = None
    recurrence_interval_days: Optional[int] = None
    is_active: bool
    archived_at: Optional[str] = None
    created_at: str
    updated_at: str


class TemplateListResponse(BaseModel):
    items: List[TemplateResponse]


class UpcomingTask(BaseModel):
    id: str
    title: str
    category: str
    due_date: str
    due_time: Optional[str] = None


class UpcomingTasksResponse(BaseModel):
    start: str
    end: str
    items: List[UpcomingTask]


class ChecklistTogglePayload(BaseModel):
    checked: bool


class ChecklistItem(BaseModel):
    id: str
    title: str
    category: str
    task_type: str
    difficulty: int
    priority: str
    checked: bool
    completed_at: Optional[str] = None


class ChecklistResponse(BaseModel):
    date: str
    items: List[ChecklistItem]
    completed: List[ChecklistItem]


class MomentumDaySummary(BaseModel):
    date: str
    scheduled_effort: int
    completed_effort: int
    day_type: str
    daily_score: float


class SystemHealthResponse(BaseModel):
    percent: int
    breakdown: Dict[str, int]
    window: int
    today: str
    days: List[MomentumDaySummary]


class DailyRangeResponse(BaseModel):
    start: str
    end: str
    data: Dict[str, Any]
    has_more_past: bool


class MomentumThresholdPayload(BaseModel):
    momentum_threshold: float


class TimezonePayload(BaseModel):
    timezone: str = Field(..., min_length=1)
