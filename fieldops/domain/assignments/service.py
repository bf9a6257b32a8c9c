"""
Assignment service - hands scheduled jobs to field agents

Booking an agent checks the daily job limit and the same-day buffer against
the agent's other active jobs while holding the agent row lock.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...auth import is_admin
from ...models import Assignment, TaskLog, User
from ...shared.errors import (
    AccessDeniedError,
    ConflictError,
    InvalidFormatError,
    InvalidStateError,
    NotFoundError,
)
from ...shared.pagination import normalize_pagination
from ...shared.transactions import unit_of_work
from ..agents.repository import AgentRepository
from ..audit.service import AuditService
from ..leads.repository import LeadRepository
from ..schedules.repository import ScheduleRepository
from ..scheduling import compute_window, find_buffer_conflict
from .repository import AssignmentRepository
from .schemas import AssignmentCreate, AssignmentStatusUpdate

logger = logging.getLogger(__name__)

SAME_DAY_CONFLICT_MESSAGE = (
    "This agent already has a job on the same day. A minimum 2-hour gap between jobs is required."
)

# Moves an agent may make on their own task; admins can set any status
AGENT_TRANSITIONS = {
    "pending": ("in_progress", "cancelled"),
    "in_progress": ("completed", "cancelled"),
}


class AssignmentService:
    """Service layer for assignment business logic"""

    def __init__(
        self,
        db: Session,
        repo: Optional[AssignmentRepository] = None,
        lead_repo: Optional[LeadRepository] = None,
        schedule_repo: Optional[ScheduleRepository] = None,
        agent_repo: Optional[AgentRepository] = None,
        audit: Optional[AuditService] = None,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.db = db
        self.repo = repo or AssignmentRepository()
        self.lead_repo = lead_repo or LeadRepository()
        self.schedule_repo = schedule_repo or ScheduleRepository()
        self.agent_repo = agent_repo or AgentRepository()
        self.audit = audit or AuditService(db)
        self.now = now

    def _today_bounds(self) -> tuple[datetime, datetime]:
        start = self.now().replace(hour=0, minute=0, second=0, microsecond=0)
        return start, start + timedelta(days=1)

    def _has_capacity(self, agent) -> bool:
        start, end = self._today_bounds()
        assigned_today = self.repo.count_assigned_between(self.db, agent.id, start, end)
        return assigned_today < agent.daily_capacity

    def _own_agent_id(self, user: User) -> int:
        agent = self.agent_repo.get_agent_by_user_id(self.db, user.id)
        if not agent:
            raise AccessDeniedError("Agent profile not found for this user")
        return agent.id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_assignment(self, assignment_id: int) -> Assignment:
        assignment = self.repo.get_assignment_by_id(self.db, assignment_id)
        if not assignment:
            raise NotFoundError("Assignment not found")
        return assignment

    def list_assignments(
        self,
        lead_id: Optional[int] = None,
        agent_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        status: Optional[str] = None,
        is_active: Optional[bool] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        page, limit, offset = normalize_pagination(page, limit)
        items, total = self.repo.search_assignments(
            self.db,
            lead_id=lead_id,
            agent_id=agent_id,
            schedule_id=schedule_id,
            status=status,
            is_active=is_active,
            from_date=from_date,
            to_date=to_date,
            offset=offset,
            limit=limit,
        )
        return {"items": items, "total": total, "page": page, "limit": limit}

    def get_agent_tasks(
        self,
        user: User,
        status: Optional[str] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict:
        """Active assignments of the signed-in agent"""
        agent = self.agent_repo.get_agent_by_user_id(self.db, user.id)
        if not agent:
            raise NotFoundError("Agent profile not found")
        return self.list_assignments(
            agent_id=agent.id,
            status=status,
            is_active=True,
            from_date=from_date,
            to_date=to_date,
            page=page,
            limit=limit,
        )

    def get_task_logs(self, assignment_id: int, user: User) -> list[TaskLog]:
        assignment = self.get_assignment(assignment_id)
        if not is_admin(user) and assignment.agent_id != self._own_agent_id(user):
            raise AccessDeniedError("You can only view logs of your own tasks")
        return self.repo.get_task_logs(self.db, assignment.id)

    def get_eligible_agent_ids(self, schedule_id: int) -> list[int]:
        """
        Agents that could take a schedule right now.

        Active, available, under their daily limit and with every same-day job
        at least the buffer away. Nothing is eligible when the schedule's own
        slot cannot be parsed.
        """
        schedule = self.schedule_repo.get_schedule_by_id(self.db, schedule_id)
        if not schedule or not schedule.is_active:
            raise NotFoundError("Schedule not found or not active")

        try:
            window = compute_window(schedule.time_slot, schedule.duration_minutes)
        except InvalidFormatError:
            logger.warning(f"⚠️ Schedule {schedule.id} has unparsable time slot {schedule.time_slot!r}")
            return []

        eligible = []
        for agent in self.agent_repo.get_agents(self.db, status="active", availability="available"):
            if not self._has_capacity(agent):
                continue
            others = self.repo.get_agent_active_schedules(
                self.db, agent.id, exclude_schedule_id=schedule.id
            )
            if find_buffer_conflict(window, schedule.date, others) is None:
                eligible.append(agent.id)
        return eligible

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_assignment(self, data: AssignmentCreate, user: User) -> Assignment:
        with unit_of_work(self.db):
            lead = self.lead_repo.get_lead_by_id(self.db, data.leadId)
            if not lead:
                raise NotFoundError("Lead not found")
            if lead.status == "cancelled":
                raise InvalidStateError("Cannot assign a cancelled lead")
            if lead.schedule_status != "scheduled":
                raise InvalidStateError("Lead must be scheduled first")
            if lead.assignment_status == "assigned":
                raise InvalidStateError("Lead already has an active assignment")
            if self.repo.get_active_for_lead(self.db, lead.id):
                raise InvalidStateError("Lead must not already have an active assignment")

            schedule = self.schedule_repo.get_schedule_by_id(self.db, data.scheduleId)
            if not schedule or schedule.lead_id != lead.id or not schedule.is_active:
                raise NotFoundError("Schedule not found or not active for this lead")

            # Row lock on the agent serializes concurrent bookings for them
            agent = self.repo.lock_agent(self.db, data.agentId)
            if not agent:
                raise NotFoundError("Agent not found")
            if agent.status != "active":
                raise InvalidStateError("Agent must be active")
            if not self._has_capacity(agent):
                raise InvalidStateError("Agent has exceeded daily job limit")

            try:
                window = compute_window(schedule.time_slot, schedule.duration_minutes)
            except InvalidFormatError as e:
                raise InvalidFormatError("Invalid schedule time slot format") from e

            others = self.repo.get_agent_active_schedules(self.db, agent.id, exclude_schedule_id=schedule.id)
            clash = find_buffer_conflict(window, schedule.date, others)
            if clash is not None:
                logger.warning(
                    f"⚠️ Agent {agent.id} cannot take schedule {schedule.id}: clashes with schedule {clash.id}"
                )
                raise ConflictError(SAME_DAY_CONFLICT_MESSAGE)

            assignment = self.repo.create_assignment(
                self.db,
                lead_id=lead.id,
                schedule_id=schedule.id,
                agent_id=agent.id,
                status="pending",
                is_active=True,
                assigned_by=user.id,
                assigned_at=self.now(),
                notes=data.notes,
            )
            self.lead_repo.update_lead(self.db, lead, assignment_status="assigned")
            self.audit.record(
                user.id,
                "create",
                "assignment",
                assignment.id,
                {"leadId": lead.id, "scheduleId": schedule.id, "agentId": agent.id},
            )

        logger.info(f"✅ Assignment {assignment.id} created: lead {lead.id} -> agent {agent.id}")
        return self.get_assignment(assignment.id)

    def update_assignment_status(
        self, assignment_id: int, data: AssignmentStatusUpdate, user: User
    ) -> Assignment:
        """
        Move an assignment to a new status and log the transition.

        Agents may only advance their own tasks along AGENT_TRANSITIONS and
        must attach completion images to finish one.
        """
        with unit_of_work(self.db):
            assignment = self.get_assignment(assignment_id)
            if not assignment.is_active:
                raise InvalidStateError("Cannot update an inactive assignment")

            from_status = assignment.status
            to_status = data.status

            if not is_admin(user):
                if assignment.agent_id != self._own_agent_id(user):
                    raise AccessDeniedError("You can only update your own tasks")
                if from_status == "completed":
                    raise InvalidStateError("Completed task cannot be edited")
                allowed = AGENT_TRANSITIONS.get(from_status, ())
                if to_status not in allowed:
                    raise InvalidStateError(f"Cannot change task status from {from_status} to {to_status}")
                if to_status == "completed" and not data.completionImages:
                    raise InvalidStateError("Completion images are required to complete a task")

            now = self.now()
            updates = {"status": to_status, "notes": data.notes}
            if to_status == "in_progress" and assignment.started_at is None:
                updates["started_at"] = now
            if to_status == "completed":
                updates["completed_at"] = now
            if data.completionImages:
                updates["completion_images"] = data.completionImages
            if to_status == "cancelled":
                updates["is_active"] = False
            self.repo.update_assignment(self.db, assignment, **updates)

            self.repo.add_task_log(
                self.db,
                assignment_id=assignment.id,
                from_status=from_status,
                to_status=to_status,
                changed_by=user.id,
                reason=data.reason,
            )

            lead = assignment.lead
            if lead and to_status == "completed":
                self.lead_repo.update_lead(self.db, lead, status="completed")
            if lead and to_status == "cancelled":
                self.lead_repo.update_lead(self.db, lead, assignment_status="not_assigned")

            self.audit.record(
                user.id,
                "update_status",
                "assignment",
                assignment.id,
                {"from": from_status, "to": to_status, "reason": data.reason},
            )

        logger.info(f"✅ Assignment {assignment_id}: {from_status} -> {to_status} by user {user.id}")
        return self.get_assignment(assignment_id)

    def delete_assignment(self, assignment_id: int, user: User) -> dict:
        with unit_of_work(self.db):
            assignment = self.get_assignment(assignment_id)
            lead = assignment.lead
            if lead and assignment.is_active:
                self.lead_repo.update_lead(self.db, lead, assignment_status="not_assigned")
            self.repo.delete_assignment(self.db, assignment)
            self.audit.record(user.id, "delete", "assignment", assignment_id)

        logger.info(f"🗑️ Assignment {assignment_id} deleted by user {user.id}")
        return {"deleted": True}
