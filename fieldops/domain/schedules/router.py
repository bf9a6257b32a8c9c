"""Schedule router - FastAPI endpoints for schedule operations"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Schedule, User
from ...shared.pagination import MAX_PAGE_SIZE
from .schemas import ScheduleCreate, ScheduleListResponse, ScheduleResponse, ScheduleUpdate
from .service import ScheduleService

router = APIRouter(prefix="/schedules", tags=["Schedules"])


def get_schedule_service(db: Session = Depends(get_db)) -> ScheduleService:
    """Dependency injection for ScheduleService"""
    return ScheduleService(db)


def schedule_to_response(schedule: Schedule) -> ScheduleResponse:
    return ScheduleResponse(
        id=schedule.id,
        leadId=schedule.lead_id,
        leadCompanyName=schedule.lead.company_name if schedule.lead else None,
        date=schedule.date,
        timeSlot=schedule.time_slot,
        duration=schedule.duration_minutes,
        notes=schedule.notes,
        isActive=schedule.is_active,
        version=schedule.version,
        createdAt=schedule.created_at,
        updatedAt=schedule.updated_at,
    )


@router.get("", response_model=ScheduleListResponse)
async def list_schedules(
    leadId: Optional[int] = Query(None),
    fromDate: Optional[date] = Query(None),
    toDate: Optional[date] = Query(None),
    activeOnly: bool = Query(True),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    """List schedules ordered by date and time slot"""
    result = service.list_schedules(leadId, fromDate, toDate, activeOnly, page, limit)
    return ScheduleListResponse(
        items=[schedule_to_response(s) for s in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
    )


@router.get("/lead/{lead_id}", response_model=list[ScheduleResponse])
async def get_schedules_for_lead(
    lead_id: int,
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Schedule history of one lead, including replaced bookings"""
    return [schedule_to_response(s) for s in service.get_schedules_for_lead(lead_id)]


@router.get("/{schedule_id}", response_model=ScheduleResponse)
async def get_schedule(
    schedule_id: int,
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    return schedule_to_response(service.get_schedule(schedule_id))


@router.post("", response_model=ScheduleResponse, status_code=201)
async def create_schedule(
    data: ScheduleCreate,
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Book a confirmed lead into a date and time slot"""
    return schedule_to_response(service.create_schedule(data, current_user))


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
async def update_schedule(
    schedule_id: int,
    data: ScheduleUpdate,
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    """Edit or reschedule a booking"""
    return schedule_to_response(service.update_schedule(schedule_id, data, current_user))


@router.delete("/{schedule_id}")
async def delete_schedule(
    schedule_id: int,
    current_user: User = Depends(get_current_admin),
    service: ScheduleService = Depends(get_schedule_service),
):
    return service.delete_schedule(schedule_id, current_user)
