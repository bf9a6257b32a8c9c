"""Audit repository - Database operations for audit logs"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from ...models import AuditLog


class AuditRepository:
    """Repository for audit log database operations"""

    @staticmethod
    def add_entry(db: Session, **entry_data) -> AuditLog:
        """Stage an audit entry in the caller's transaction"""
        entry = AuditLog(**entry_data)
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def search_entries(
        db: Session,
        user_id: Optional[int] = None,
        resource: Optional[str] = None,
        resource_id: Optional[str] = None,
        action: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[AuditLog], int]:
        """Filtered audit entries, newest first, with the total match count"""
        query = db.query(AuditLog)
        filters: dict[str, Any] = {
            "user_id": user_id,
            "resource": resource,
            "resource_id": resource_id,
            "action": action,
        }
        for column, value in filters.items():
            if value is not None:
                query = query.filter(getattr(AuditLog, column) == value)

        total = query.count()
        items = (
            query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total
