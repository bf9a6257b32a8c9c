"""Agent repository - Database operations for agents"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Agent, User


class AgentRepository:
    """Repository for agent database operations"""

    @staticmethod
    def get_agent_by_id(db: Session, agent_id: int) -> Optional[Agent]:
        return (
            db.query(Agent)
            .options(joinedload(Agent.user))
            .filter(Agent.id == agent_id)
            .first()
        )

    @staticmethod
    def get_agent_by_user_id(db: Session, user_id: int) -> Optional[Agent]:
        return db.query(Agent).filter(Agent.user_id == user_id).first()

    @staticmethod
    def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_users_without_profile(db: Session) -> list[User]:
        """Users with the agent role that have no agent row yet"""
        return (
            db.query(User)
            .outerjoin(Agent, Agent.user_id == User.id)
            .filter(User.role == "agent", Agent.id.is_(None))
            .order_by(User.id.asc())
            .all()
        )

    @staticmethod
    def get_agents(
        db: Session, status: Optional[str] = None, availability: Optional[str] = None
    ) -> list[Agent]:
        query = db.query(Agent).options(joinedload(Agent.user))
        if status:
            query = query.filter(Agent.status == status)
        if availability:
            query = query.filter(Agent.availability == availability)
        return query.order_by(Agent.id.asc()).all()

    @staticmethod
    def create_agent(db: Session, **agent_data) -> Agent:
        agent = Agent(**agent_data)
        db.add(agent)
        db.flush()
        return agent

    @staticmethod
    def update_agent(db: Session, agent: Agent, **updates) -> Agent:
        """Update an agent with provided fields"""
        for key, value in updates.items():
            if value is not None and hasattr(agent, key):
                setattr(agent, key, value)
        db.flush()
        return agent

    @staticmethod
    def delete_agent(db: Session, agent: Agent) -> None:
        db.delete(agent)
        db.flush()
