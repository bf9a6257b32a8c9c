"""Agent service - Business logic for field agent profiles"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import is_admin
from ...config import DEFAULT_DAILY_CAPACITY
from ...models import Agent, User
from ...shared.errors import AccessDeniedError, InvalidStateError, NotFoundError
from ...shared.transactions import unit_of_work
from ..assignments.repository import AssignmentRepository
from ..audit.service import AuditService
from .repository import AgentRepository
from .schemas import AgentCreate, AgentUpdate

logger = logging.getLogger(__name__)

AGENT_FIELDS = {
    "phone": "phone",
    "skills": "skills",
    "availability": "availability",
    "dailyCapacity": "daily_capacity",
    "experience": "experience",
    "status": "status",
}

# Fields an agent may change on their own profile
AGENT_SELF_FIELDS = ("availability",)


class AgentService:
    """Service layer for agent business logic"""

    def __init__(
        self,
        db: Session,
        repo: Optional[AgentRepository] = None,
        assignment_repo: Optional[AssignmentRepository] = None,
        audit: Optional[AuditService] = None,
    ):
        self.db = db
        self.repo = repo or AgentRepository()
        self.assignment_repo = assignment_repo or AssignmentRepository()
        self.audit = audit or AuditService(db)

    def get_agent(self, agent_id: int) -> Agent:
        agent = self.repo.get_agent_by_id(self.db, agent_id)
        if not agent:
            raise NotFoundError("Agent not found")
        return agent

    def get_agent_by_user(self, user: User) -> Agent:
        agent = self.repo.get_agent_by_user_id(self.db, user.id)
        if not agent:
            raise NotFoundError("Agent profile not found")
        return agent

    def list_agents(self, status: Optional[str] = None, availability: Optional[str] = None) -> list[Agent]:
        return self.repo.get_agents(self.db, status, availability)

    def create_agent(self, data: AgentCreate, user: User) -> Agent:
        """Attach an agent profile to a user with the agent role"""
        with unit_of_work(self.db):
            if self.repo.get_agent_by_user_id(self.db, data.userId):
                raise InvalidStateError("Agent profile already exists for this user")
            target = self.repo.get_user_by_id(self.db, data.userId)
            if not target or target.role != "agent":
                raise InvalidStateError("User must have agent role")

            agent = self.repo.create_agent(
                self.db,
                user_id=data.userId,
                phone=data.phone,
                skills=data.skills,
                availability=data.availability,
                daily_capacity=data.dailyCapacity or DEFAULT_DAILY_CAPACITY,
                experience=data.experience,
                status="active",
            )
            self.audit.record(user.id, "create", "agent", agent.id, {"userId": data.userId})

        logger.info(f"✅ Agent {agent.id} created for user {data.userId}")
        return self.get_agent(agent.id)

    def list_available_users(self) -> list[User]:
        return self.repo.get_users_without_profile(self.db)

    def update_agent(self, agent_id: int, data: AgentUpdate, user: User) -> Agent:
        """
        Admins may change any field. An agent may only change the availability
        of their own profile; other fields they send are ignored.
        """
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        with unit_of_work(self.db):
            agent = self.get_agent(agent_id)
            if not is_admin(user):
                if agent.user_id != user.id:
                    logger.warning(f"⚠️ User {user.id} tried to update agent profile {agent_id}")
                    raise AccessDeniedError("You can only update your own agent profile")
                changes = {k: v for k, v in changes.items() if k in AGENT_SELF_FIELDS}
            updates = {AGENT_FIELDS[field]: value for field, value in changes.items()}
            self.repo.update_agent(self.db, agent, **updates)
            self.audit.record(user.id, "update", "agent", agent.id, changes)
        return agent

    def delete_agent(self, agent_id: int, user: User) -> dict:
        with unit_of_work(self.db):
            agent = self.get_agent(agent_id)
            # Assignment rows keep a foreign key to the agent, active or not
            if self.assignment_repo.count_for_agent(self.db, agent.id) > 0:
                raise InvalidStateError("Cannot delete agent with assignments; set status to inactive instead")
            self.repo.delete_agent(self.db, agent)
            self.audit.record(user.id, "delete", "agent", agent_id)

        logger.info(f"🗑️ Agent {agent_id} deleted by user {user.id}")
        return {"deleted": True}
