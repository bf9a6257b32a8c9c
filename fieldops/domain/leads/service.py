"""Lead service - Business logic for lead operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Lead, User
from ...shared.errors import InvalidStateError, NotFoundError
from ...shared.pagination import normalize_pagination
from ...shared.transactions import unit_of_work
from ..audit.service import AuditService
from .repository import LeadRepository
from .schemas import LeadCreate, LeadStatusUpdate, LeadUpdate

logger = logging.getLogger(__name__)

# API field name -> column name
LEAD_FIELDS = {
    "companyName": "company_name",
    "contactPerson": "contact_person",
    "phone": "phone",
    "email": "email",
    "address": "address",
    "city": "city",
    "state": "state",
    "pincode": "pincode",
    "cleaningType": "cleaning_type",
    "category": "category",
    "areaSize": "area_size",
    "rooms": "rooms",
    "washrooms": "washrooms",
    "frequency": "frequency",
    "slaPriority": "sla_priority",
    "leadType": "lead_type",
    "quotedAmount": "quoted_amount",
}


class LeadService:
    """Service layer for lead business logic"""

    def __init__(
        self,
        db: Session,
        repo: Optional[LeadRepository] = None,
        audit: Optional[AuditService] = None,
    ):
        self.db = db
        self.repo = repo or LeadRepository()
        self.audit = audit or AuditService(db)

    def get_lead(self, lead_id: int) -> Lead:
        lead = self.repo.get_lead_by_id(self.db, lead_id)
        if not lead:
            raise NotFoundError("Lead not found")
        return lead

    def list_leads(
        self,
        status: Optional[str] = None,
        schedule_status: Optional[str] = None,
        assignment_status: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        page, limit, offset = normalize_pagination(page, limit)
        items, total = self.repo.search_leads(
            self.db, status, schedule_status, assignment_status, search, offset, limit
        )
        return {"items": items, "total": total, "page": page, "limit": limit}

    def create_lead(self, data: LeadCreate, user: User) -> Lead:
        """Create a lead in the created / not_scheduled / not_assigned state"""
        lead_data = {
            column: getattr(data, field)
            for field, column in LEAD_FIELDS.items()
        }
        lead_data.update(
            status="created",
            schedule_status="not_scheduled",
            assignment_status="not_assigned",
        )

        with unit_of_work(self.db):
            lead = self.repo.create_lead(self.db, user.id, **lead_data)
            self.audit.record(
                user.id, "create", "lead", lead.id, {"companyName": data.companyName}
            )

        logger.info(f"✅ Lead {lead.id} created by user {user.id}")
        return lead

    def update_lead(self, lead_id: int, data: LeadUpdate, user: User) -> Lead:
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        with unit_of_work(self.db):
            lead = self.get_lead(lead_id)
            if lead.status == "cancelled":
                raise InvalidStateError("Cannot update a cancelled lead")

            updates = {LEAD_FIELDS[field]: value for field, value in changes.items()}
            self.repo.update_lead(self.db, lead, **updates)
            self.audit.record(user.id, "update", "lead", lead.id, changes)

        return lead

    def update_lead_status(self, lead_id: int, data: LeadStatusUpdate, user: User) -> Lead:
        """Move a lead through its workflow; cancellation goes through cancel_lead"""
        if data.status == "cancelled":
            return self.cancel_lead(lead_id, user)

        with unit_of_work(self.db):
            lead = self.get_lead(lead_id)
            if lead.status == "cancelled":
                raise InvalidStateError("Cannot change the status of a cancelled lead")

            from_status = lead.status
            updates = {"status": data.status}
            if data.status == "confirm" and data.confirmedAmount is not None:
                updates["confirmed_amount"] = data.confirmedAmount

            self.repo.update_lead(self.db, lead, **updates)
            self.audit.record(
                user.id,
                "update_status",
                "lead",
                lead.id,
                {"fromStatus": from_status, "toStatus": data.status},
            )

        logger.info(f"✅ Lead {lead.id} moved {from_status} → {data.status}")
        return lead

    def cancel_lead(self, lead_id: int, user: User) -> Lead:
        """Cancel a lead and every assignment attached to it"""
        with unit_of_work(self.db):
            lead = self.get_lead(lead_id)
            if lead.status == "cancelled":
                raise InvalidStateError("Lead is already cancelled")

            self.repo.update_lead(self.db, lead, status="cancelled")
            cancelled = self.repo.cancel_assignments(self.db, lead.id)
            self.audit.record(user.id, "cancel", "lead", lead.id, {})

        logger.info(f"✅ Lead {lead.id} cancelled ({cancelled} assignment(s) closed)")
        return lead

    def delete_lead(self, lead_id: int, user: User) -> dict:
        with unit_of_work(self.db):
            lead = self.get_lead(lead_id)
            if self.repo.has_schedules_or_assignments(self.db, lead.id):
                raise InvalidStateError("Cannot delete lead with existing schedules or assignments")

            self.repo.soft_delete_lead(self.db, lead)
            self.audit.record(user.id, "delete", "lead", lead.id)

        return {"deleted": True}
