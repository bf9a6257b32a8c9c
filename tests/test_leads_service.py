"""Tests for the lead workflow."""

import pytest
from pydantic import ValidationError

from fieldops.domain.agents.schemas import AgentCreate
from fieldops.domain.agents.service import AgentService
from fieldops.domain.leads.schemas import LeadCreate, LeadStatusUpdate, LeadUpdate
from fieldops.domain.leads.service import LeadService
from fieldops.models import AuditLog
from fieldops.shared.errors import InvalidStateError, NotFoundError


@pytest.fixture
def service(db):
    return LeadService(db)


def new_lead(**overrides):
    fields = {
        "companyName": "Lakeview Offices",
        "contactPerson": "Arjun Rao",
        "phone": "+91 98450-12345",
        "email": "Arjun@Lakeview.example",
        "city": "Pune",
        "cleaningType": "office_cleaning",
        "category": "commercial",
    }
    fields.update(overrides)
    return LeadCreate(**fields)


def test_create_lead_defaults(db, service, admin_user):
    lead = service.create_lead(new_lead(), admin_user)

    assert lead.status == "created"
    assert lead.schedule_status == "not_scheduled"
    assert lead.assignment_status == "not_assigned"
    assert lead.phone == "+919845012345"
    assert lead.email == "arjun@lakeview.example"
    assert lead.created_by == admin_user.id
    assert db.query(AuditLog).filter_by(resource="lead", action="create").count() == 1


def test_create_lead_validates_fields():
    with pytest.raises(ValidationError):
        new_lead(phone="123")
    with pytest.raises(ValidationError):
        new_lead(email="not-an-email")
    with pytest.raises(ValidationError):
        new_lead(companyName="   ")


def test_confirm_sets_amount(service, admin_user):
    lead = service.create_lead(new_lead(), admin_user)

    confirmed = service.update_lead_status(
        lead.id, LeadStatusUpdate(status="confirm", confirmedAmount=4500), admin_user
    )
    assert confirmed.status == "confirm"
    assert confirmed.confirmed_amount == 4500


def test_cancel_closes_assignments(db, service, booked_job, admin_user):
    lead, _, assignment = booked_job

    service.update_lead_status(lead.id, LeadStatusUpdate(status="cancelled"), admin_user)

    db.refresh(assignment)
    assert assignment.status == "cancelled"
    assert assignment.is_active is False
    with pytest.raises(InvalidStateError, match="already cancelled"):
        service.cancel_lead(lead.id, admin_user)
    with pytest.raises(InvalidStateError):
        service.update_lead(lead.id, LeadUpdate(city="Mumbai"), admin_user)
    with pytest.raises(InvalidStateError):
        service.update_lead_status(lead.id, LeadStatusUpdate(status="confirm"), admin_user)


def test_delete_lead_is_soft_and_guarded(service, make_lead, make_schedule, admin_user):
    scheduled = make_lead()
    make_schedule(scheduled)
    with pytest.raises(InvalidStateError):
        service.delete_lead(scheduled.id, admin_user)

    bare = service.create_lead(new_lead(), admin_user)
    assert service.delete_lead(bare.id, admin_user) == {"deleted": True}
    with pytest.raises(NotFoundError):
        service.get_lead(bare.id)
    assert service.list_leads()["total"] == 1


def test_list_leads_search_and_pagination(service, admin_user):
    for city in ("Pune", "Chennai", "Pune"):
        service.create_lead(new_lead(city=city), admin_user)

    result = service.list_leads(search="pune", limit=1)
    assert result["total"] == 2
    assert len(result["items"]) == 1
    assert service.list_leads(limit=500)["limit"] == 100


def test_agent_profile_requires_agent_role(db, admin_user, agent_user):
    service = AgentService(db)

    with pytest.raises(InvalidStateError, match="agent role"):
        service.create_agent(AgentCreate(userId=admin_user.id), admin_user)

    agent = service.create_agent(AgentCreate(userId=agent_user.id, skills=["deep_cleaning"]), admin_user)
    assert agent.daily_capacity == 5
    assert service.get_agent_by_user(agent_user).id == agent.id

    with pytest.raises(InvalidStateError, match="already exists"):
        service.create_agent(AgentCreate(userId=agent_user.id), admin_user)


def test_agent_with_assignments_cannot_be_deleted(db, booked_job, agent, admin_user):
    service = AgentService(db)

    with pytest.raises(InvalidStateError, match="inactive"):
        service.delete_agent(agent.id, admin_user)
