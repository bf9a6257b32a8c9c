"""Agent domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_phone

Availability = Literal["available", "busy", "off_duty"]
AgentStatus = Literal["active", "inactive"]


class AgentCreate(BaseModel):
    userId: int
    phone: Optional[str] = None
    skills: list[str] = []
    availability: Availability = "available"
    dailyCapacity: Optional[int] = None
    experience: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("dailyCapacity")
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and v < 1:
            raise ValueError("Daily capacity must be at least 1")
        return v


class AgentUpdate(BaseModel):
    phone: Optional[str] = None
    skills: Optional[list[str]] = None
    availability: Optional[Availability] = None
    dailyCapacity: Optional[int] = None
    experience: Optional[str] = None
    status: Optional[AgentStatus] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("dailyCapacity")
    @classmethod
    def validate_capacity(cls, v):
        if v is not None and v < 1:
            raise ValueError("Daily capacity must be at least 1")
        return v


class AgentResponse(BaseModel):
    id: int
    userId: int
    fullName: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str]
    skills: list[str]
    availability: str
    dailyCapacity: int
    experience: Optional[str]
    status: str
    createdAt: Optional[datetime] = None


class AvailableUserResponse(BaseModel):
    """Agent-role user that can still be given a profile"""

    id: int
    fullName: Optional[str] = None
    email: str
