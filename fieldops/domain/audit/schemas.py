"""Audit domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class AuditLogResponse(BaseModel):
    id: int
    userId: int
    action: str
    resource: str
    resourceId: Optional[str] = None
    details: Optional[dict] = None
    createdAt: Optional[datetime] = None


class AuditLogListResponse(BaseModel):
    items: list[AuditLogResponse]
    total: int
    page: int
    limit: int
