"""Schedule repository - Database operations for schedules"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Schedule


class ScheduleRepository:
    """Repository for schedule database operations"""

    @staticmethod
    def get_schedule_by_id(db: Session, schedule_id: int) -> Optional[Schedule]:
        """Get a schedule with its lead"""
        return (
            db.query(Schedule)
            .options(joinedload(Schedule.lead))
            .filter(Schedule.id == schedule_id)
            .first()
        )

    @staticmethod
    def get_schedules_by_lead(db: Session, lead_id: int) -> list[Schedule]:
        """All schedules of a lead, active or not, by date"""
        return (
            db.query(Schedule)
            .options(joinedload(Schedule.lead))
            .filter(Schedule.lead_id == lead_id)
            .order_by(Schedule.date.asc(), Schedule.id.asc())
            .all()
        )

    @staticmethod
    def search_schedules(
        db: Session,
        lead_id: Optional[int] = None,
        from_date: Optional[date] = None,
        to_date: Optional[date] = None,
        active_only: bool = True,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[list[Schedule], int]:
        query = db.query(Schedule)

        if lead_id:
            query = query.filter(Schedule.lead_id == lead_id)
        if active_only:
            query = query.filter(Schedule.is_active.is_(True))
        if from_date:
            query = query.filter(Schedule.date >= from_date)
        if to_date:
            query = query.filter(Schedule.date <= to_date)

        total = query.count()
        items = (
            query.options(joinedload(Schedule.lead))
            .order_by(Schedule.date.asc(), Schedule.start_minute.asc(), Schedule.id.asc())
            .offset(offset)
            .limit(limit)
            .all()
        )
        return items, total

    @staticmethod
    def get_active_by_lead(db: Session, lead_id: int) -> Optional[Schedule]:
        return (
            db.query(Schedule)
            .filter(Schedule.lead_id == lead_id, Schedule.is_active.is_(True))
            .first()
        )

    @staticmethod
    def deactivate_by_lead(db: Session, lead_id: int) -> int:
        """Mark every active schedule of a lead inactive"""
        schedules = (
            db.query(Schedule)
            .filter(Schedule.lead_id == lead_id, Schedule.is_active.is_(True))
            .all()
        )
        for schedule in schedules:
            schedule.is_active = False
        db.flush()
        return len(schedules)

    @staticmethod
    def create_schedule(db: Session, **schedule_data) -> Schedule:
        schedule = Schedule(**schedule_data)
        db.add(schedule)
        db.flush()
        return schedule

    @staticmethod
    def update_schedule(db: Session, schedule: Schedule, **updates) -> Schedule:
        """Update a schedule with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(schedule, key):
                setattr(schedule, key, value)
        db.flush()
        return schedule

    @staticmethod
    def delete_schedule(db: Session, schedule: Schedule) -> None:
        db.delete(schedule)
        db.flush()
