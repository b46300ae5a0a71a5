from enum import Enum
from pydantic import BaseModel


class AgentRole(str, Enum):
    admin = "admin"
    contributor = "contributor"


class DealStage(str, Enum):
    lead = "lead"
    qualification = "qualification"
    proposal = "proposal"
    negotiation = "negotiation"
    won = "won"
    lost = "lost"


class SuccessResponse(BaseModel):
    """Generic success response base."""

    success: bool = True
