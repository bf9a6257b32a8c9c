"""
Schedule service - booking rules for confirmed leads

Creating a schedule only checks the lead and the proposed slot; no agent is
attached yet, so the same-day buffer is enforced when an assignment is created
(see assignments/service.py) and when an assigned job is rescheduled here.
"""

import logging
from datetime import date
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...models import Schedule, User
from ...shared.errors import ConflictError, InvalidStateError, NotFoundError
from ...shared.pagination import normalize_pagination
from ...shared.transactions import unit_of_work
from ..assignments.repository import AssignmentRepository
from ..audit.service import AuditService
from ..leads.repository import LeadRepository
from ..scheduling import compute_window, find_buffer_conflict, parse_time_slot, validate_time_slot_format
from .repository import ScheduleRepository
from .schemas import ScheduleCreate, ScheduleUpdate

logger = logging.getLogger(__name__)

RESCHEDULE_CONFLICT_MESSAGE = (
    "This reschedule would conflict with another job for the same agent on that day. "
    "A minimum 2-hour gap is required."
)


class ScheduleService:
    """Service layer for schedule business logic"""

    def __init__(
        self,
        db: Session,
        repo: Optional[ScheduleRepository] = None,
        lead_repo: Optional[LeadRepository] = None,
        assignment_repo: Optional[AssignmentRepository] = None,
        audit: Optional[AuditService] = None,
        today: Callable[[], date] = date.today,
    ):
        self.db = db
        self.repo = repo or ScheduleRepository()
        self.lead_repo = lead_repo or LeadRepository()
        self.assignment_repo = assignment_repo or AssignmentRepository()
        self.audit = audit or AuditService(db)
        self.today = today

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _ensure_future_date(self, service_date: date) -> None:
        # Same-day bookings are not allowed
        if service_date <= self.today():
            raise InvalidStateError("Service date must be in the future")

    @staticmethod
    def _ensure_positive_duration(duration: int) -> None:
        if duration <= 0:
            raise InvalidStateError("Estimated duration must be greater than zero")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule:
            raise NotFoundError("Schedule not found")
        return schedule

    def get_schedules_for_lead(self, lead_id: int) -> list[Schedule]:
        return self.repo.get_schedules_by_lead(self.db, lead_id)

    def list_schedules(
        self,
        lead_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        active_only: bool = True,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        page, limit, offset = normalize_pagination(page, limit)
        items, total = self.repo.search_schedules(
            self.db, lead_id, from_date, to_date, active_only, offset, limit
        )
        return {"items": items, "total": total, "page": page, "limit": limit}

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_schedule(self, data: ScheduleCreate, user: User) -> Schedule:
        """
        Book a confirmed lead.

        An existing active schedule of an already scheduled lead is deactivated
        and the new one replaces it (audited as a reschedule).
        """
        with unit_of_work(self.db):
            lead = self.lead_repo.get_lead_by_id(self.db, data.leadId)
            if not lead:
                raise NotFoundError("Lead not found")
            if lead.status == "cancelled":
                raise InvalidStateError("Cannot schedule a cancelled lead")
            if lead.status != "confirm":
                raise InvalidStateError("Lead must be in confirm status to be scheduled")

            self._ensure_future_date(data.date)
            self._ensure_positive_duration(data.duration)
            time_slot = validate_time_slot_format(data.timeSlot)

            existing_active = self.repo.get_active_by_lead(self.db, lead.id)
            if existing_active and lead.schedule_status == "not_scheduled":
                # Active row without the scheduled flag: inconsistent data, refuse to guess
                logger.warning(
                    f"⚠️ Lead {lead.id} has active schedule {existing_active.id} but is marked not_scheduled"
                )
                raise InvalidStateError("Lead must not already be scheduled")
            if existing_active:
                self.repo.deactivate_by_lead(self.db, lead.id)

            schedule = self.repo.create_schedule(
                self.db,
                lead_id=lead.id,
                date=data.date,
                time_slot=time_slot,
                start_minute=parse_time_slot(time_slot),
                duration_minutes=data.duration,
                notes=data.notes,
                is_active=True,
            )
            if lead.schedule_status == "not_scheduled":
                self.lead_repo.update_lead(self.db, lead, schedule_status="scheduled")

            self.audit.record(
                user.id,
                "reschedule" if existing_active else "create",
                "schedule",
                schedule.id,
                {"leadId": lead.id, "date": data.date.isoformat()},
            )

        logger.info(f"✅ Schedule {schedule.id} created for lead {data.leadId} on {data.date} {time_slot}")
        return self.get_schedule(schedule.id)

    def update_schedule(self, schedule_id: int, data: ScheduleUpdate, user: User) -> Schedule:
        """
        Edit a schedule.

        Unassigned leads get a free-form edit of the changed fields. Once an
        active assignment exists the change is a reschedule: it is refused for
        completed jobs and must keep the agent's same-day buffer.
        """
        with unit_of_work(self.db):
            schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
            if not schedule:
                raise NotFoundError("Schedule not found")
            lead = schedule.lead
            if not lead:
                raise NotFoundError("Lead not found")

            assignment = None
            if lead.assignment_status == "assigned":
                assignment = self.assignment_repo.get_active_for_schedule(self.db, schedule.id)

            updates = {}
            if assignment:
                updates = self._validate_reschedule(schedule, assignment, data)
            else:
                if data.date is not None:
                    self._ensure_future_date(data.date)
                    updates["date"] = data.date
                if data.duration is not None:
                    self._ensure_positive_duration(data.duration)
                    updates["duration_minutes"] = data.duration
                if data.timeSlot is not None:
                    updates["time_slot"] = validate_time_slot_format(data.timeSlot)
                    updates["start_minute"] = parse_time_slot(updates["time_slot"])
            if data.notes is not None:
                updates["notes"] = data.notes

            self.repo.update_schedule(self.db, schedule, **updates)
            self.audit.record(
                user.id,
                "update",
                "schedule",
                schedule.id,
                data.model_dump(mode="json", exclude_unset=True),
            )

        logger.info(f"✅ Schedule {schedule_id} updated by user {user.id}")
        return self.get_schedule(schedule_id)

    def _validate_reschedule(self, schedule: Schedule, assignment, data: ScheduleUpdate) -> dict:
        """Checks for moving an assigned job; returns the column updates"""
        if assignment.status == "completed":
            raise InvalidStateError("Cannot reschedule: this job is already completed.")

        new_date = data.date if data.date is not None else schedule.date
        new_time_slot = data.timeSlot if data.timeSlot is not None else schedule.time_slot
        new_duration = data.duration if data.duration is not None else schedule.duration_minutes

        self._ensure_future_date(new_date)
        self._ensure_positive_duration(new_duration)
        time_slot = validate_time_slot_format(new_time_slot)
        window = compute_window(time_slot, new_duration)

        # Hold the agent row so a parallel booking for the same agent waits for us
        self.assignment_repo.lock_agent(self.db, assignment.agent_id)
        others = self.assignment_repo.get_agent_active_schedules(
            self.db, assignment.agent_id, exclude_schedule_id=schedule.id
        )
        clash = find_buffer_conflict(window, new_date, others)
        if clash is not None:
            logger.warning(
                f"⚠️ Reschedule of schedule {schedule.id} to {new_date} {time_slot} clashes with "
                f"schedule {clash.id} for agent {assignment.agent_id}"
            )
            raise ConflictError(RESCHEDULE_CONFLICT_MESSAGE)

        return {
            "date": new_date,
            "time_slot": time_slot,
            "start_minute": window.start_minutes,
            "duration_minutes": new_duration,
        }

    def delete_schedule(self, schedule_id: int, user: User) -> dict:
        """Delete a schedule that no assignment has ever referenced"""
        with unit_of_work(self.db):
            schedule = self.repo.get_schedule_by_id(self.db, schedule_id)
            if not schedule:
                raise NotFoundError("Schedule not found")
            if self.assignment_repo.count_for_schedule(self.db, schedule.id) > 0:
                raise InvalidStateError("Cannot delete schedule with assignments")

            lead = schedule.lead
            was_active = schedule.is_active
            self.repo.delete_schedule(self.db, schedule)

            if lead and was_active and not self.repo.get_active_by_lead(self.db, lead.id):
                self.lead_repo.update_lead(self.db, lead, schedule_status="not_scheduled")

            self.audit.record(user.id, "delete", "schedule", schedule_id)

        logger.info(f"🗑️ Schedule {schedule_id} deleted by user {user.id}")
        return {"deleted": True}
