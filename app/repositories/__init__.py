"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains business logic.
"""

from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository

__all__ = [
    "AgentRepository",
    "DealRepository",
]
