"""Audit router - read-only access to the audit trail"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import AuditLog, User
from ...shared.pagination import MAX_PAGE_SIZE
from .schemas import AuditLogListResponse, AuditLogResponse
from .service import AuditService

router = APIRouter(prefix="/audit-logs", tags=["Audit"])


def get_audit_service(db: Session = Depends(get_db)) -> AuditService:
    """Dependency injection for AuditService"""
    return AuditService(db)


def audit_log_to_response(entry: AuditLog) -> AuditLogResponse:
    return AuditLogResponse(
        id=entry.id,
        userId=entry.user_id,
        action=entry.action,
        resource=entry.resource,
        resourceId=entry.resource_id,
        details=entry.details,
        createdAt=entry.created_at,
    )


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    userId: Optional[int] = Query(None),
    resource: Optional[str] = Query(None),
    resourceId: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_admin),
    service: AuditService = Depends(get_audit_service),
):
    """Audit trail, newest first"""
    result = service.list_audit_logs(userId, resource, resourceId, action, page, limit)
    return AuditLogListResponse(
        items=[audit_log_to_response(e) for e in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
    )
