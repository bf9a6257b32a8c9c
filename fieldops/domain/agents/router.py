"""Agent router - FastAPI endpoints for agent profiles"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin, get_current_user
from ...database import get_db
from ...models import Agent, User
from .schemas import AgentCreate, AgentResponse, AgentUpdate, AvailableUserResponse
from .service import AgentService

router = APIRouter(prefix="/agents", tags=["Agents"])


def get_agent_service(db: Session = Depends(get_db)) -> AgentService:
    """Dependency injection for AgentService"""
    return AgentService(db)


def agent_to_response(agent: Agent) -> AgentResponse:
    return AgentResponse(
        id=agent.id,
        userId=agent.user_id,
        fullName=agent.user.full_name if agent.user else None,
        email=agent.user.email if agent.user else None,
        phone=agent.phone,
        skills=agent.skills or [],
        availability=agent.availability,
        dailyCapacity=agent.daily_capacity,
        experience=agent.experience,
        status=agent.status,
        createdAt=agent.created_at,
    )


@router.get("", response_model=list[AgentResponse])
async def list_agents(
    status: Optional[str] = Query(None),
    availability: Optional[str] = Query(None),
    current_user: User = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service),
):
    return [agent_to_response(a) for a in service.list_agents(status, availability)]


@router.get("/available-users", response_model=list[AvailableUserResponse])
async def list_available_users(
    current_user: User = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service),
):
    """Agent-role users without a profile, for the create-agent form"""
    return [
        AvailableUserResponse(id=u.id, fullName=u.full_name, email=u.email)
        for u in service.list_available_users()
    ]


@router.get("/me", response_model=AgentResponse)
async def get_my_agent_profile(
    current_user: User = Depends(get_current_user),
    service: AgentService = Depends(get_agent_service),
):
    """Agent profile of the signed-in user"""
    return agent_to_response(service.get_agent_by_user(current_user))


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(
    agent_id: int,
    current_user: User = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service),
):
    return agent_to_response(service.get_agent(agent_id))


@router.post("", response_model=AgentResponse, status_code=201)
async def create_agent(
    data: AgentCreate,
    current_user: User = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service),
):
    return agent_to_response(service.create_agent(data, current_user))


@router.patch("/{agent_id}", response_model=AgentResponse)
async def update_agent(
    agent_id: int,
    data: AgentUpdate,
    current_user: User = Depends(get_current_user),
    service: AgentService = Depends(get_agent_service),
):
    """Admins edit any profile; agents may only set their own availability"""
    return agent_to_response(service.update_agent(agent_id, data, current_user))


@router.delete("/{agent_id}")
async def delete_agent(
    agent_id: int,
    current_user: User = Depends(get_current_admin),
    service: AgentService = Depends(get_agent_service),
):
    return service.delete_agent(agent_id, current_user)
