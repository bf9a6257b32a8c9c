"""Audit service - records who changed what"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import AuditLog
from ...shared.pagination import normalize_pagination
from .repository import AuditRepository

logger = logging.getLogger(__name__)


class AuditService:
    """Service layer for audit logging"""

    def __init__(self, db: Session, repo: Optional[AuditRepository] = None):
        self.db = db
        self.repo = repo or AuditRepository()

    def record(
        self,
        actor_id: int,
        action: str,
        resource: str,
        resource_id: Any = None,
        details: Optional[dict] = None,
    ) -> AuditLog:
        """Add an audit entry; it is committed together with the caller's changes"""
        entry = self.repo.add_entry(
            self.db,
            user_id=actor_id,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=details,
        )
        logger.debug(f"📝 Audit {action} {resource}:{resource_id} by user {actor_id}")
        return entry

    def list_audit_logs(
        self,
        user_id: Optional[int] = None,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        page, limit, offset = normalize_pagination(page, limit)
        items, total = self.repo.search_entries(
            self.db, user_id, resource, resource_id, action, offset, limit
        )
        return {"items": items, "total": total, "page": page, "limit": limit}
