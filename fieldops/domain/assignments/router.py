"""Assignment router - FastAPI endpoints for assignments and agent tasks"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_user
from ...database import get_db
from ...models import Assignment, TaskLog, User
from ...shared.pagination import MAX_PAGE_SIZE
from .schemas import (
    AssignmentCreate,
    AssignmentListResponse,
    AssignmentResponse,
    AssignmentScheduleSummary,
    AssignmentStatusUpdate,
    EligibleAgentsResponse,
    TaskLogResponse,
)
from .service import AssignmentService

router = APIRouter(prefix="/assignments", tags=["Assignments"])


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    """Dependency injection for AssignmentService"""
    return AssignmentService(db)


def assignment_to_response(assignment: Assignment) -> AssignmentResponse:
    schedule = assignment.schedule
    return AssignmentResponse(
        id=assignment.id,
        leadId=assignment.lead_id,
        leadCompanyName=assignment.lead.company_name if assignment.lead else None,
        scheduleId=assignment.schedule_id,
        schedule=AssignmentScheduleSummary(
            id=schedule.id,
            date=schedule.date,
            timeSlot=schedule.time_slot,
            duration=schedule.duration_minutes,
            isActive=schedule.is_active,
        )
        if schedule
        else None,
        agentId=assignment.agent_id,
        status=assignment.status,
        isActive=assignment.is_active,
        assignedBy=assignment.assigned_by,
        assignedAt=assignment.assigned_at,
        startedAt=assignment.started_at,
        completedAt=assignment.completed_at,
        notes=assignment.notes,
        completionImages=assignment.completion_images or [],
    )


def task_log_to_response(entry: TaskLog) -> TaskLogResponse:
    return TaskLogResponse(
        id=entry.id,
        assignmentId=entry.assignment_id,
        fromStatus=entry.from_status,
        toStatus=entry.to_status,
        changedBy=entry.changed_by,
        reason=entry.reason,
        createdAt=entry.created_at,
    )


def _list_response(result: dict) -> AssignmentListResponse:
    return AssignmentListResponse(
        items=[assignment_to_response(a) for a in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
    )


@router.get("", response_model=AssignmentListResponse)
async def list_assignments(
    leadId: Optional[int] = Query(None),
    agentId: Optional[int] = Query(None),
    scheduleId: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    isActive: Optional[bool] = Query(None),
    fromDate: Optional[date] = Query(None),
    toDate: Optional[date] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_admin),
    service: AssignmentService = Depends(get_assignment_service),
):
    result = service.list_assignments(
        leadId, agentId, scheduleId, status, isActive, fromDate, toDate, page, limit
    )
    return _list_response(result)


@router.get("/my-tasks", response_model=AssignmentListResponse)
async def get_my_tasks(
    status: Optional[str] = Query(None),
    fromDate: Optional[date] = Query(None),
    toDate: Optional[date] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Active tasks of the signed-in agent"""
    return _list_response(service.get_agent_tasks(current_user, status, fromDate, toDate, page, limit))


@router.get("/eligible-agents/{schedule_id}", response_model=EligibleAgentsResponse)
async def get_eligible_agents(
    schedule_id: int,
    current_user: User = Depends(get_current_admin),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Agents that can take this schedule without breaking capacity or the same-day gap"""
    return EligibleAgentsResponse(scheduleId=schedule_id, agentIds=service.get_eligible_agent_ids(schedule_id))


@router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int,
    current_user: User = Depends(get_current_admin),
    service: AssignmentService = Depends(get_assignment_service),
):
    return assignment_to_response(service.get_assignment(assignment_id))


@router.get("/{assignment_id}/logs", response_model=list[TaskLogResponse])
async def get_task_logs(
    assignment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return [task_log_to_response(e) for e in service.get_task_logs(assignment_id, current_user)]


@router.post("", response_model=AssignmentResponse, status_code=201)
async def create_assignment(
    data: AssignmentCreate,
    current_user: User = Depends(get_current_admin),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Assign a scheduled lead to an agent"""
    return assignment_to_response(service.create_assignment(data, current_user))


@router.patch("/{assignment_id}/status", response_model=AssignmentResponse)
async def update_assignment_status(
    assignment_id: int,
    data: AssignmentStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return assignment_to_response(service.update_assignment_status(assignment_id, data, current_user))


@router.delete("/{assignment_id}")
async def delete_assignment(
    assignment_id: int,
    current_user: User = Depends(get_current_admin),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.delete_assignment(assignment_id, current_user)
