"""Lead repository - Database operations for leads"""

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Assignment, Lead, Schedule


class LeadRepository:
    """Repository for lead database operations"""

    @staticmethod
    def get_lead_by_id(db: Session, lead_id: int, include_deleted: bool = False) -> Optional[Lead]:
        """Get a lead by ID; soft-deleted leads are hidden unless asked for"""
        query = db.query(Lead).filter(Lead.id == lead_id)
        if not include_deleted:
            query = query.filter(Lead.deleted_at.is_(None))
        return query.first()

    @staticmethod
    def search_leads(
        db: Session,
        status: Optional[str] = None,
        schedule_status: Optional[str] = None,
        assignment_status: Optional[str] = None,
        search: Optional[str] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[Lead], int]:
        """Filtered, non-deleted leads (newest first) and the total match count"""
        query = db.query(Lead).filter(Lead.deleted_at.is_(None))

        if status:
            query = query.filter(Lead.status == status)
        if schedule_status:
            query = query.filter(Lead.schedule_status == schedule_status)
        if assignment_status:
            query = query.filter(Lead.assignment_status == assignment_status)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Lead.company_name.ilike(pattern),
                    Lead.contact_person.ilike(pattern),
                    Lead.city.ilike(pattern),
                )
            )

        total = query.count()
        items = query.order_by(Lead.created_at.desc(), Lead.id.desc()).offset(offset).limit(limit).all()
        return items, total

    @staticmethod
    def create_lead(db: Session, created_by: int, **lead_data) -> Lead:
        """Create a new lead"""
        lead = Lead(created_by=created_by, **lead_data)
        db.add(lead)
        db.flush()
        return lead

    @staticmethod
    def update_lead(db: Session, lead: Lead, **updates) -> Lead:
        """Update a lead with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(lead, key):
                setattr(lead, key, value)
        db.flush()
        return lead

    @staticmethod
    def cancel_assignments(db: Session, lead_id: int) -> int:
        """Deactivate and cancel every assignment of a lead"""
        assignments = db.query(Assignment).filter(Assignment.lead_id == lead_id).all()
        for assignment in assignments:
            assignment.is_active = False
            assignment.status = "cancelled"
        db.flush()
        return len(assignments)

    @staticmethod
    def has_schedules_or_assignments(db: Session, lead_id: int) -> bool:
        has_schedules = db.query(Schedule.id).filter(Schedule.lead_id == lead_id).first() is not None
        has_assignments = (
            db.query(Assignment.id).filter(Assignment.lead_id == lead_id).first() is not None
        )
        return has_schedules or has_assignments

    @staticmethod
    def soft_delete_lead(db: Session, lead: Lead) -> None:
        lead.deleted_at = datetime.now()
        db.flush()
