"""Lead domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone

LeadStatus = Literal["created", "in_progress", "confirm", "follow_up", "completed", "cancelled", "draft"]
SLAPriority = Literal["low", "medium", "high", "urgent"]
LeadType = Literal[
    "facebook", "instagram", "google", "website", "referral", "walk_in", "phone_call", "email", "other"
]


class LeadCreate(BaseModel):
    """Schema for creating a new lead"""

    companyName: str
    contactPerson: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: str
    state: Optional[str] = None
    pincode: Optional[str] = None
    cleaningType: str
    category: str
    areaSize: Optional[str] = None
    rooms: Optional[int] = None
    washrooms: Optional[int] = None
    frequency: Optional[str] = None
    slaPriority: SLAPriority = "medium"
    leadType: Optional[LeadType] = None
    quotedAmount: Optional[float] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if v:
            return validate_email(v)
        return v

    @field_validator("companyName", "contactPerson", "city", "cleaningType", "category")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be blank")
        return v


class LeadUpdate(BaseModel):
    """Schema for updating an existing lead; status changes go through LeadStatusUpdate"""

    companyName: Optional[str] = None
    contactPerson: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    cleaningType: Optional[str] = None
    category: Optional[str] = None
    areaSize: Optional[str] = None
    rooms: Optional[int] = None
    washrooms: Optional[int] = None
    frequency: Optional[str] = None
    slaPriority: Optional[SLAPriority] = None
    leadType: Optional[LeadType] = None
    quotedAmount: Optional[float] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        if v:
            return validate_email(v)
        return v


class LeadStatusUpdate(BaseModel):
    status: LeadStatus
    confirmedAmount: Optional[float] = None

    @field_validator("confirmedAmount")
    @classmethod
    def validate_amount(cls, v):
        if v is not None and v < 0:
            raise ValueError("Confirmed amount cannot be negative")
        return v


class LeadResponse(BaseModel):
    """Schema for lead response"""

    id: int
    companyName: str
    contactPerson: str
    phone: Optional[str]
    email: Optional[str]
    address: Optional[str]
    city: str
    state: Optional[str]
    pincode: Optional[str]
    cleaningType: str
    category: str
    areaSize: Optional[str]
    rooms: Optional[int]
    washrooms: Optional[int]
    frequency: Optional[str]
    slaPriority: str
    leadType: Optional[str]
    status: str
    scheduleStatus: str
    assignmentStatus: str
    quotedAmount: Optional[float]
    confirmedAmount: Optional[float]
    createdBy: int
    createdAt: Optional[datetime] = None


class LeadListResponse(BaseModel):
    items: list[LeadResponse]
    total: int
    page: int
    limit: int
