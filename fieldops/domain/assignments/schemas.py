"""Assignment domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

TaskStatus = Literal["pending", "in_progress", "completed", "rescheduled", "cancelled", "on_hold"]


class AssignmentCreate(BaseModel):
    leadId: int
    scheduleId: int
    agentId: int
    notes: Optional[str] = None


class AssignmentStatusUpdate(BaseModel):
    status: TaskStatus
    reason: Optional[str] = None
    notes: Optional[str] = None
    completionImages: Optional[list[str]] = None

    @field_validator("completionImages")
    @classmethod
    def drop_blank_images(cls, v):
        if v is None:
            return v
        return [url.strip() for url in v if url and url.strip()]


class AssignmentScheduleSummary(BaseModel):
    id: int
    date: dt.date
    timeSlot: str
    duration: int
    isActive: bool


class AssignmentResponse(BaseModel):
    id: int
    leadId: int
    leadCompanyName: Optional[str] = None
    scheduleId: int
    schedule: Optional[AssignmentScheduleSummary] = None
    agentId: int
    status: str
    isActive: bool
    assignedBy: int
    assignedAt: dt.datetime
    startedAt: Optional[dt.datetime] = None
    completedAt: Optional[dt.datetime] = None
    notes: Optional[str] = None
    completionImages: list[str] = []


class AssignmentListResponse(BaseModel):
    items: list[AssignmentResponse]
    total: int
    page: int
    limit: int


class TaskLogResponse(BaseModel):
    id: int
    assignmentId: int
    fromStatus: Optional[str]
    toStatus: str
    changedBy: int
    reason: Optional[str]
    createdAt: Optional[dt.datetime] = None


class EligibleAgentsResponse(BaseModel):
    scheduleId: int
    agentIds: list[int]
