"""Assignment repository - Database operations for assignments and task logs"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Agent, Assignment, Schedule, TaskLog


class AssignmentRepository:
    """Repository for assignment database operations"""

    @staticmethod
    def get_assignment_by_id(db: Session, assignment_id: int) -> Optional[Assignment]:
        return (
            db.query(Assignment)
            .options(
                joinedload(Assignment.schedule),
                joinedload(Assignment.lead),
                joinedload(Assignment.agent),
            )
            .filter(Assignment.id == assignment_id)
            .first()
        )

    @staticmethod
    def get_active_for_schedule(db: Session, schedule_id: int) -> Optional[Assignment]:
        return (
            db.query(Assignment)
            .filter(Assignment.schedule_id == schedule_id, Assignment.is_active.is_(True))
            .first()
        )

    @staticmethod
    def get_active_for_lead(db: Session, lead_id: int) -> Optional[Assignment]:
        return (
            db.query(Assignment)
            .filter(Assignment.lead_id == lead_id, Assignment.is_active.is_(True))
            .first()
        )

    @staticmethod
    def count_for_schedule(db: Session, schedule_id: int) -> int:
        """Assignments of any status, active or not, that reference a schedule"""
        return db.query(Assignment).filter(Assignment.schedule_id == schedule_id).count()

    @staticmethod
    def count_for_agent(db: Session, agent_id: int, active_only: bool = False) -> int:
        query = db.query(Assignment).filter(Assignment.agent_id == agent_id)
        if active_only:
            query = query.filter(Assignment.is_active.is_(True))
        return query.count()

    @staticmethod
    def count_assigned_between(db: Session, agent_id: int, start: datetime, end: datetime) -> int:
        """Active assignments handed to an agent in [start, end)"""
        return (
            db.query(Assignment)
            .filter(
                Assignment.agent_id == agent_id,
                Assignment.is_active.is_(True),
                Assignment.assigned_at >= start,
                Assignment.assigned_at < end,
            )
            .count()
        )

    @staticmethod
    def get_agent_active_schedules(
        db: Session, agent_id: int, exclude_schedule_id: Optional[int] = None
    ) -> list[Schedule]:
        """Schedules behind every active assignment of an agent"""
        query = (
            db.query(Schedule)
            .join(Assignment, Assignment.schedule_id == Schedule.id)
            .filter(Assignment.agent_id == agent_id, Assignment.is_active.is_(True))
        )
        if exclude_schedule_id is not None:
            query = query.filter(Schedule.id != exclude_schedule_id)
        return query.all()

    @staticmethod
    def lock_agent(db: Session, agent_id: int) -> Optional[Agent]:
        """
        Load an agent row with SELECT ... FOR UPDATE.

        Holding the lock until commit serializes bookings for one agent on
        stores that support row locks; SQLite ignores it.
        """
        return db.query(Agent).filter(Agent.id == agent_id).with_for_update().first()

    @staticmethod
    def search_assignments(
        db: Session,
        lead_id: Optional[int] = None,
        agent_id: Optional[int] = None,
        schedule_id: Optional[int] = None,
        status: Optional[str] = None,
        is_active: Optional[bool] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[Assignment], int]:
        query = db.query(Assignment).join(Schedule, Assignment.schedule_id == Schedule.id)

        if lead_id:
            query = query.filter(Assignment.lead_id == lead_id)
        if agent_id:
            query = query.filter(Assignment.agent_id == agent_id)
        if schedule_id:
            query = query.filter(Assignment.schedule_id == schedule_id)
        if status:
            query = query.filter(Assignment.status == status)
        if is_active is not None:
            query = query.filter(Assignment.is_active.is_(is_active))
        if from_date:
            query = query.filter(Schedule.date >= from_date)
        if to_date:
            query = query.filter(Schedule.date <= to_date)

        total = query.count()
        items = (
            query.options(
                joinedload(Assignment.schedule),
                joinedload(Assignment.lead),
                joinedload(Assignment.agent),
            )
            .order_by(Schedule.date.asc(), Assignment.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def create_assignment(db: Session, **assignment_data) -> Assignment:
        assignment = Assignment(**assignment_data)
        db.add(assignment)
        db.flush()
        return assignment

    @staticmethod
    def update_assignment(db: Session, assignment: Assignment, **updates) -> Assignment:
        """Update an assignment with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(assignment, key):
                setattr(assignment, key, value)
        db.flush()
        return assignment

    @staticmethod
    def delete_assignment(db: Session, assignment: Assignment) -> None:
        db.delete(assignment)
        db.flush()

    @staticmethod
    def add_task_log(db: Session, **log_data) -> TaskLog:
        entry = TaskLog(**log_data)
        db.add(entry)
        db.flush()
        return entry

    @staticmethod
    def get_task_logs(db: Session, assignment_id: int) -> list[TaskLog]:
        return (
            db.query(TaskLog)
            .filter(TaskLog.assignment_id == assignment_id)
            .order_by(TaskLog.created_at.asc(), TaskLog.id.asc())
            .all()
        )
