from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .config import DEFAULT_DAILY_CAPACITY
from .database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default="agent", nullable=False)  # super_admin, admin, agent
    status = Column(String(20), default="active", nullable=False)  # active, inactive, suspended

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    agent = relationship("Agent", back_populates="user", uselist=False)


class Agent(Base):
    """Field agent profile attached to a user with the agent role"""

    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    phone = Column(String(50), nullable=True)
    skills = Column(JSON, nullable=True)  # list of skill names
    availability = Column(String(20), default="available", nullable=False)  # available, busy, off_duty
    daily_capacity = Column(Integer, default=DEFAULT_DAILY_CAPACITY, nullable=False)
    experience = Column(String(255), nullable=True)
    status = Column(String(20), default="active", nullable=False, index=True)  # active, inactive

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="agent")
    assignments = relationship("Assignment", back_populates="agent")


class Lead(Base):
    """A prospective cleaning job"""

    __tablename__ = "leads"

    id = Column(Integer, primary_key=True, index=True)

    # Client contact
    company_name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)

    # Location
    address = Column(String(500), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=True)
    pincode = Column(String(20), nullable=True)

    # Cleaning details
    cleaning_type = Column(String(100), nullable=False)
    category = Column(String(100), nullable=False)
    area_size = Column(String(100), nullable=True)
    rooms = Column(Integer, nullable=True)
    washrooms = Column(Integer, nullable=True)
    frequency = Column(String(50), nullable=True)

    sla_priority = Column(String(20), default="medium", nullable=False)  # low, medium, high, urgent
    lead_type = Column(String(50), nullable=True)  # facebook, website, referral, ...

    # Workflow: created → in_progress → confirm → completed (or cancelled/follow_up/draft)
    status = Column(String(20), default="created", nullable=False, index=True)
    schedule_status = Column(String(20), default="not_scheduled", nullable=False)
    assignment_status = Column(String(20), default="not_assigned", nullable=False)

    quoted_amount = Column(Float, nullable=True)
    confirmed_amount = Column(Float, nullable=True)  # Set when the lead is confirmed

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    schedules = relationship("Schedule", back_populates="lead")
    assignments = relationship("Assignment", back_populates="lead")


class Schedule(Base):
    """One calendar booking (date + time slot + duration) for a lead"""

    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    time_slot = Column(String(20), nullable=False)  # "9:00 AM" format
    start_minute = Column(Integer, nullable=True)  # parsed time_slot, for chronological ordering
    duration_minutes = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Optimistic concurrency counter, bumped by SQLAlchemy on every UPDATE
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    lead = relationship("Lead", back_populates="schedules")
    assignments = relationship("Assignment", back_populates="schedule")

    __mapper_args__ = {"version_id_col": version}


class Assignment(Base):
    """Binds a schedule to a field agent"""

    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True, index=True)
    lead_id = Column(Integer, ForeignKey("leads.id"), nullable=False, index=True)
    schedule_id = Column(Integer, ForeignKey("schedules.id"), nullable=False, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=False, index=True)

    # pending, in_progress, completed, rescheduled, cancelled, on_hold
    status = Column(String(20), default="pending", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    assigned_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_at = Column(DateTime, nullable=False)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    completion_images = Column(JSON, nullable=True)  # URLs of proof-of-work photos

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    lead = relationship("Lead", back_populates="assignments")
    schedule = relationship("Schedule", back_populates="assignments")
    agent = relationship("Agent", back_populates="assignments")
    task_logs = relationship("TaskLog", back_populates="assignment", cascade="all, delete-orphan")


class TaskLog(Base):
    """Status transition history for an assignment"""

    __tablename__ = "task_logs"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(Integer, ForeignKey("assignments.id"), nullable=False, index=True)
    from_status = Column(String(20), nullable=True)
    to_status = Column(String(20), nullable=False)
    changed_by = Column(Integer, ForeignKey("users.id"), nullable=False)
    reason = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    assignment = relationship("Assignment", back_populates="task_logs")


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action = Column(String(50), nullable=False)  # create, update, delete, reschedule, ...
    resource = Column(String(50), nullable=False, index=True)  # lead, schedule, assignment, agent
    resource_id = Column(String(50), nullable=True, index=True)
    details = Column(JSON, nullable=True)
    ip = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)

    created_at = Column(DateTime, server_default=func.now(), index=True)
