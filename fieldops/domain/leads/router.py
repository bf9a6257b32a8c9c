"""Lead router - FastAPI endpoints for lead operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Lead, User
from ...shared.pagination import MAX_PAGE_SIZE
from .schemas import LeadCreate, LeadListResponse, LeadResponse, LeadStatusUpdate, LeadUpdate
from .service import LeadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/leads", tags=["Leads"])


def get_lead_service(db: Session = Depends(get_db)) -> LeadService:
    """Dependency injection for LeadService"""
    return LeadService(db)


def lead_to_response(lead: Lead) -> LeadResponse:
    return LeadResponse(
        id=lead.id,
        companyName=lead.company_name,
        contactPerson=lead.contact_person,
        phone=lead.phone,
        email=lead.email,
        address=lead.address,
        city=lead.city,
        state=lead.state,
        pincode=lead.pincode,
        cleaningType=lead.cleaning_type,
        category=lead.category,
        areaSize=lead.area_size,
        rooms=lead.rooms,
        washrooms=lead.washrooms,
        frequency=lead.frequency,
        slaPriority=lead.sla_priority,
        leadType=lead.lead_type,
        status=lead.status,
        scheduleStatus=lead.schedule_status,
        assignmentStatus=lead.assignment_status,
        quotedAmount=lead.quoted_amount,
        confirmedAmount=lead.confirmed_amount,
        createdBy=lead.created_by,
        createdAt=lead.created_at,
    )


@router.get("", response_model=LeadListResponse)
async def list_leads(
    status: Optional[str] = Query(None),
    scheduleStatus: Optional[str] = Query(None),
    assignmentStatus: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    """List leads with optional filters"""
    result = service.list_leads(status, scheduleStatus, assignmentStatus, search, page, limit)
    return LeadListResponse(
        items=[lead_to_response(lead) for lead in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
    )


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: int,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    return lead_to_response(service.get_lead(lead_id))


@router.post("", response_model=LeadResponse, status_code=201)
async def create_lead(
    data: LeadCreate,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    """Create a new lead"""
    return lead_to_response(service.create_lead(data, current_user))


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: int,
    data: LeadUpdate,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    return lead_to_response(service.update_lead(lead_id, data, current_user))


@router.patch("/{lead_id}/status", response_model=LeadResponse)
async def update_lead_status(
    lead_id: int,
    data: LeadStatusUpdate,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    """Move a lead through its workflow (e.g. to confirm before scheduling)"""
    return lead_to_response(service.update_lead_status(lead_id, data, current_user))


@router.post("/{lead_id}/cancel", response_model=LeadResponse)
async def cancel_lead(
    lead_id: int,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    """Cancel a lead and close its assignments"""
    return lead_to_response(service.cancel_lead(lead_id, current_user))


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: int,
    current_user: User = Depends(get_current_admin),
    service: LeadService = Depends(get_lead_service),
):
    return service.delete_lead(lead_id, current_user)
