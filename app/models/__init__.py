from app.models.base import Base
from app.models.agent import Agent
from app.models.deal import Deal

# Import event listeners to register them
from app.models import listeners  # noqa: F401

__all__ = [
    "Base",
    "Agent",
    "Deal",
]
