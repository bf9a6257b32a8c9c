import os
from datetime import date, datetime, timedelta

# Point the app at an in-memory database before fieldops.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from fieldops.database import Base, get_db
from fieldops.main import app
from fieldops.models import Agent, Assignment, Lead, Schedule, User
from fieldops.security_utils import create_access_token

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def days_from_today(days: int) -> date:
    return date.today() + timedelta(days=days)


@pytest.fixture
def db():
    """Fresh schema for every test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def _add(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def admin_user(db):
    return _add(db, User(email="admin@example.com", full_name="Office Admin", role="admin", status="active"))


@pytest.fixture
def agent_user(db):
    return _add(db, User(email="ravi@example.com", full_name="Ravi Kumar", role="agent", status="active"))


@pytest.fixture
def agent(db, agent_user):
    return _add(db, Agent(user_id=agent_user.id, phone="+919876543210", daily_capacity=5, status="active"))


@pytest.fixture
def make_agent(db):
    """Extra agents with their own user rows"""
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        user = _add(
            db,
            User(email=f"agent{counter['n']}@example.com", full_name=f"Agent {counter['n']}", role="agent"),
        )
        fields = {"user_id": user.id, "daily_capacity": 5, "status": "active", "availability": "available"}
        fields.update(overrides)
        return _add(db, Agent(**fields))

    return _make


@pytest.fixture
def admin_headers(admin_user):
    token = create_access_token(admin_user.id, admin_user.email, admin_user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def agent_headers(agent_user):
    token = create_access_token(agent_user.id, agent_user.email, agent_user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_lead(db, admin_user):
    def _make(**overrides):
        fields = {
            "company_name": "Sunrise Apartments",
            "contact_person": "Meera Nair",
            "city": "Bengaluru",
            "cleaning_type": "deep_cleaning",
            "category": "residential",
            "status": "confirm",
            "schedule_status": "not_scheduled",
            "assignment_status": "not_assigned",
            "created_by": admin_user.id,
        }
        fields.update(overrides)
        return _add(db, Lead(**fields))

    return _make


@pytest.fixture
def make_schedule(db):
    def _make(lead, service_date=None, time_slot="9:00 AM", duration=60, is_active=True, mark_lead=True):
        schedule = _add(
            db,
            Schedule(
                lead_id=lead.id,
                date=service_date or days_from_today(3),
                time_slot=time_slot,
                duration_minutes=duration,
                is_active=is_active,
            ),
        )
        if mark_lead and is_active:
            lead.schedule_status = "scheduled"
            db.commit()
        return schedule

    return _make


@pytest.fixture
def make_assignment(db, admin_user):
    def _make(schedule, agent, status="pending", is_active=True, assigned_at=None):
        assignment = _add(
            db,
            Assignment(
                lead_id=schedule.lead_id,
                schedule_id=schedule.id,
                agent_id=agent.id,
                status=status,
                is_active=is_active,
                assigned_by=admin_user.id,
                assigned_at=assigned_at or datetime.now(),
            ),
        )
        if is_active:
            lead = db.get(Lead, schedule.lead_id)
            lead.assignment_status = "assigned"
            db.commit()
        return assignment

    return _make


@pytest.fixture
def booked_job(make_lead, make_schedule, make_assignment, agent):
    """A confirmed lead scheduled three days out at 9:00 AM for 60 minutes, assigned to `agent`"""
    lead = make_lead()
    schedule = make_schedule(lead, days_from_today(3), "9:00 AM", 60)
    assignment = make_assignment(schedule, agent)
    return lead, schedule, assignment
