"""Rating and ranking schemas for the performance endpoints."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import SuccessResponse


class AgentRatingResult(BaseModel):
    """One agent's outcome from a batch recalculation."""

    agent_id: UUID
    rating: float = Field(..., ge=1.0, le=5.0)
    total_won_value: float = Field(..., ge=0)
    won_deals_count: int = Field(..., ge=0)


class RecalculationResponse(SuccessResponse):
    """Response body for POST /api/v1/performance/ratings/recalculate."""

    agents_rated: int
    ratings: List[AgentRatingResult]


class AgentRatingResponse(SuccessResponse):
    """Response body for a single-agent recalculation."""

    agent_id: UUID
    rating: float = Field(..., ge=1.0, le=5.0)


class RankedAgentOut(BaseModel):
    id: UUID
    name: str
    email: str


class AgentRanking(BaseModel):
    rank: int = Field(..., ge=1)
    agent: RankedAgentOut
    rating: float
    total_deals: int
    successful_deals: int


class AgentPerformanceStats(BaseModel):
    """Deal statistics for one agent, straight from the deal ledger."""

    agent_id: UUID
    successful_deals: int
    failed_deals: int
    pending_deals: int
    total_deals: int
    total_won_value: float
    success_rate: float = Field(..., description="Won deals as % of all deals")
    average_deal_value: float
    rating: float
    last_rank_update: Optional[datetime] = None
    monthly_goal: Optional[float] = None
    progress: Optional[int] = Field(
        None, description="Won value as % of monthly_goal, null without a goal"
    )


class TopPerformer(BaseModel):
    agent: RankedAgentOut
    rating: float
    total_deals: int
    successful_deals: int
    success_rate: float


class OverallPerformance(BaseModel):
    """Team-wide report for GET /api/v1/performance/overall."""

    total_agents: int
    total_deals: int
    total_successful: int
    total_failed: int
    total_won_value: float
    overall_success_rate: float
    top_performers: List[TopPerformer]
