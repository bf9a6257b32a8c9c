"""Schedule domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import coerce_calendar_date


class ScheduleCreate(BaseModel):
    """Schema for booking a confirmed lead"""

    leadId: int
    date: dt.date
    timeSlot: str  # "9:00 AM"
    duration: int  # minutes
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def to_calendar_date(cls, v):
        return coerce_calendar_date(v)

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if v else v


class ScheduleUpdate(BaseModel):
    """Partial update; omitted fields keep their current values"""

    date: Optional[dt.date] = None
    timeSlot: Optional[str] = None
    duration: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def to_calendar_date(cls, v):
        return coerce_calendar_date(v)

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v):
        return v.strip() if v else v


class ScheduleResponse(BaseModel):
    id: int
    leadId: int
    leadCompanyName: Optional[str] = None
    date: dt.date
    timeSlot: str
    duration: int
    notes: Optional[str]
    isActive: bool
    version: int
    createdAt: Optional[dt.datetime] = None
    updatedAt: Optional[dt.datetime] = None


class ScheduleListResponse(BaseModel):
    items: list[ScheduleResponse]
    total: int
    page: int
    limit: int
