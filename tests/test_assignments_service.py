"""Tests for assigning jobs to agents and moving them through their statuses."""

from datetime import date, datetime, timedelta

import pytest

from fieldops.domain.assignments.schemas import AssignmentCreate, AssignmentStatusUpdate
from fieldops.domain.assignments.service import AssignmentService
from fieldops.models import Assignment, AuditLog, Lead, TaskLog
from fieldops.shared.errors import (
    AccessDeniedError,
    ConflictError,
    InvalidFormatError,
    InvalidStateError,
    NotFoundError,
)


def in_days(days):
    return date.today() + timedelta(days=days)


@pytest.fixture
def service(db):
    return AssignmentService(db)


@pytest.fixture
def scheduled_lead(make_lead, make_schedule):
    lead = make_lead()
    schedule = make_schedule(lead, in_days(3), "9:00 AM", 60)
    return lead, schedule


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


def test_create_assignment(db, service, scheduled_lead, agent, admin_user):
    lead, schedule = scheduled_lead

    assignment = service.create_assignment(
        AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id, notes="Gate code 4411"),
        admin_user,
    )

    assert assignment.status == "pending"
    assert assignment.is_active is True
    assert assignment.assigned_by == admin_user.id
    assert assignment.notes == "Gate code 4411"
    db.refresh(lead)
    assert lead.assignment_status == "assigned"
    assert db.query(AuditLog).filter_by(resource="assignment", action="create").count() == 1


def test_create_requires_scheduled_lead(service, make_lead, make_schedule, agent, admin_user):
    lead = make_lead()
    schedule = make_schedule(lead, in_days(3), mark_lead=False)

    with pytest.raises(InvalidStateError, match="scheduled first"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
        )


def test_create_rejects_cancelled_lead(service, make_lead, make_schedule, agent, admin_user):
    lead = make_lead(status="cancelled")
    schedule = make_schedule(lead, in_days(3))

    with pytest.raises(InvalidStateError, match="cancelled"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
        )


def test_create_rejects_second_active_assignment(service, booked_job, make_agent, admin_user):
    lead, schedule, _ = booked_job

    with pytest.raises(InvalidStateError, match="active assignment"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=make_agent().id), admin_user
        )


def test_create_rejects_schedule_of_other_lead(service, scheduled_lead, make_lead, make_schedule, agent, admin_user):
    lead, _ = scheduled_lead
    foreign = make_schedule(make_lead(company_name="Elsewhere"), in_days(4))

    with pytest.raises(NotFoundError, match="Schedule"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=foreign.id, agentId=agent.id), admin_user
        )


def test_create_rejects_missing_or_inactive_agent(service, scheduled_lead, make_agent, admin_user):
    lead, schedule = scheduled_lead

    with pytest.raises(NotFoundError, match="Agent"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=999), admin_user
        )

    inactive = make_agent(status="inactive")
    with pytest.raises(InvalidStateError, match="active"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=inactive.id), admin_user
        )


def test_create_enforces_daily_capacity(
    db, service, make_lead, make_schedule, make_assignment, make_agent, admin_user
):
    agent = make_agent(daily_capacity=1)
    earlier = make_schedule(make_lead(company_name="Earlier"), in_days(7), "9:00 AM", 60)
    make_assignment(earlier, agent)

    lead = make_lead()
    schedule = make_schedule(lead, in_days(3), "9:00 AM", 60)

    with pytest.raises(InvalidStateError, match="daily job limit"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
        )


def test_capacity_only_counts_todays_assignments(
    db, service, make_lead, make_schedule, make_assignment, make_agent, admin_user
):
    agent = make_agent(daily_capacity=1)
    yesterday = datetime.now() - timedelta(days=1)
    earlier = make_schedule(make_lead(company_name="Earlier"), in_days(7), "9:00 AM", 60)
    make_assignment(earlier, agent, assigned_at=yesterday)

    lead = make_lead()
    schedule = make_schedule(lead, in_days(3), "9:00 AM", 60)

    assignment = service.create_assignment(
        AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
    )
    assert assignment.agent_id == agent.id


def test_create_rejects_same_day_clash(db, service, booked_job, make_lead, make_schedule, agent, admin_user):
    _, existing, _ = booked_job
    lead = make_lead(company_name="Second Site")
    # 10:30 AM starts only 30 minutes after the 9:00-10:00 job ends
    schedule = make_schedule(lead, existing.date, "10:30 AM", 60)

    with pytest.raises(ConflictError, match="2-hour gap"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
        )

    assert db.query(Assignment).filter_by(lead_id=lead.id).count() == 0
    db.refresh(lead)
    assert lead.assignment_status == "not_assigned"


def test_create_allows_two_hour_gap(service, booked_job, make_lead, make_schedule, agent, admin_user):
    _, existing, _ = booked_job
    lead = make_lead(company_name="Second Site")
    schedule = make_schedule(lead, existing.date, "12:00 PM", 60)

    assignment = service.create_assignment(
        AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
    )
    assert assignment.status == "pending"


def test_create_rejects_unparsable_schedule_slot(service, make_lead, make_schedule, agent, admin_user):
    lead = make_lead()
    schedule = make_schedule(lead, in_days(3), "after lunch", 60)

    with pytest.raises(InvalidFormatError, match="Invalid schedule time slot format"):
        service.create_assignment(
            AssignmentCreate(leadId=lead.id, scheduleId=schedule.id, agentId=agent.id), admin_user
        )


# ---------------------------------------------------------------------------
# eligible agents
# ---------------------------------------------------------------------------


def test_eligible_agents(service, booked_job, make_lead, make_schedule, make_assignment, make_agent, agent):
    _, existing, _ = booked_job
    free = make_agent()
    make_agent(availability="off_duty")
    make_agent(status="inactive")
    full = make_agent(daily_capacity=1)
    make_assignment(make_schedule(make_lead(company_name="Full"), in_days(9)), full)

    target = make_schedule(make_lead(company_name="Target"), existing.date, "10:00 AM", 60)

    # `agent` already works 9:00-10:00 that day
    assert service.get_eligible_agent_ids(target.id) == [free.id]


def test_eligible_agents_empty_for_unparsable_slot(service, make_lead, make_schedule, agent):
    schedule = make_schedule(make_lead(), in_days(3), "sometime", 60)

    assert service.get_eligible_agent_ids(schedule.id) == []


def test_eligible_agents_unknown_schedule(service):
    with pytest.raises(NotFoundError):
        service.get_eligible_agent_ids(31337)


# ---------------------------------------------------------------------------
# status updates
# ---------------------------------------------------------------------------


def test_agent_starts_and_completes_own_task(db, service, booked_job, agent_user):
    lead, _, assignment = booked_job

    started = service.update_assignment_status(
        assignment.id, AssignmentStatusUpdate(status="in_progress"), agent_user
    )
    assert started.status == "in_progress"
    assert started.started_at is not None

    done = service.update_assignment_status(
        assignment.id,
        AssignmentStatusUpdate(
            status="completed", reason="All rooms done", completionImages=["https://img.example/1.jpg"]
        ),
        agent_user,
    )
    assert done.status == "completed"
    assert done.completed_at is not None
    assert done.completion_images == ["https://img.example/1.jpg"]

    db.refresh(lead)
    assert lead.status == "completed"

    logs = service.get_task_logs(assignment.id, agent_user)
    assert [(log.from_status, log.to_status) for log in logs] == [
        ("pending", "in_progress"),
        ("in_progress", "completed"),
    ]
    assert logs[1].reason == "All rooms done"


def test_agent_must_attach_images_to_complete(service, make_lead, make_schedule, make_assignment, agent, agent_user):
    schedule = make_schedule(make_lead(), in_days(3))
    assignment = make_assignment(schedule, agent, status="in_progress")

    with pytest.raises(InvalidStateError, match="images"):
        service.update_assignment_status(
            assignment.id, AssignmentStatusUpdate(status="completed", completionImages=["  "]), agent_user
        )


def test_agent_cannot_skip_steps(service, booked_job, agent_user):
    _, _, assignment = booked_job

    with pytest.raises(InvalidStateError):
        service.update_assignment_status(
            assignment.id,
            AssignmentStatusUpdate(status="completed", completionImages=["https://img.example/1.jpg"]),
            agent_user,
        )
    with pytest.raises(InvalidStateError):
        service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="on_hold"), agent_user)


def test_agent_cannot_edit_completed_task(service, make_lead, make_schedule, make_assignment, agent, agent_user):
    assignment = make_assignment(make_schedule(make_lead(), in_days(3)), agent, status="completed")

    with pytest.raises(InvalidStateError, match="Completed task cannot be edited"):
        service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="cancelled"), agent_user)


def test_agent_cannot_touch_other_agents_task(
    service, make_lead, make_schedule, make_assignment, make_agent, agent, agent_user
):
    assignment = make_assignment(make_schedule(make_lead(), in_days(3)), make_agent())

    with pytest.raises(AccessDeniedError):
        service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="in_progress"), agent_user)
    with pytest.raises(AccessDeniedError):
        service.get_task_logs(assignment.id, agent_user)


def test_admin_cancel_frees_the_lead(db, service, booked_job, admin_user):
    lead, _, assignment = booked_job

    cancelled = service.update_assignment_status(
        assignment.id, AssignmentStatusUpdate(status="cancelled", reason="Client asked"), admin_user
    )
    assert cancelled.is_active is False

    db.refresh(lead)
    assert lead.assignment_status == "not_assigned"

    with pytest.raises(InvalidStateError, match="inactive"):
        service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="pending"), admin_user)


def test_admin_may_set_any_status(service, booked_job, admin_user):
    _, _, assignment = booked_job

    held = service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="on_hold"), admin_user)
    assert held.status == "on_hold"
    assert held.is_active is True


# ---------------------------------------------------------------------------
# queries and delete
# ---------------------------------------------------------------------------


def test_agent_tasks_lists_only_active_own_assignments(
    service, booked_job, make_lead, make_schedule, make_assignment, make_agent, agent, agent_user
):
    _, _, mine = booked_job
    make_assignment(make_schedule(make_lead(company_name="Old"), in_days(4)), agent, status="cancelled", is_active=False)
    make_assignment(make_schedule(make_lead(company_name="Theirs"), in_days(4)), make_agent())

    result = service.get_agent_tasks(agent_user)
    assert [a.id for a in result["items"]] == [mine.id]
    assert result["total"] == 1


def test_agent_tasks_without_profile(service, admin_user):
    with pytest.raises(NotFoundError):
        service.get_agent_tasks(admin_user)


def test_list_assignments_filters(service, booked_job, make_lead, make_schedule, make_assignment, make_agent):
    lead, _, assignment = booked_job
    make_assignment(make_schedule(make_lead(company_name="Other"), in_days(5)), make_agent())

    assert service.list_assignments()["total"] == 2
    by_lead = service.list_assignments(lead_id=lead.id)
    assert [a.id for a in by_lead["items"]] == [assignment.id]
    assert service.list_assignments(from_date=in_days(4))["total"] == 1


def test_delete_active_assignment_resets_lead(db, service, booked_job, agent_user, admin_user):
    lead, _, assignment = booked_job
    service.update_assignment_status(assignment.id, AssignmentStatusUpdate(status="in_progress"), agent_user)

    assert service.delete_assignment(assignment.id, admin_user) == {"deleted": True}

    assert db.query(Assignment).count() == 0
    assert db.query(TaskLog).count() == 0
    assert db.get(Lead, lead.id).assignment_status == "not_assigned"
