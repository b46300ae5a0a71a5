"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    AgentRole as AgentRole,
    DealStage as DealStage,
    SuccessResponse as SuccessResponse,
)

# Rating / ranking schemas
from app.schemas.performance import (
    AgentRatingResult as AgentRatingResult,
    RecalculationResponse as RecalculationResponse,
    AgentRatingResponse as AgentRatingResponse,
    RankedAgentOut as RankedAgentOut,
    AgentRanking as AgentRanking,
    AgentPerformanceStats as AgentPerformanceStats,
    TopPerformer as TopPerformer,
    OverallPerformance as OverallPerformance,
)

# Deal schemas
from app.schemas.deal import (
    DealCreate as DealCreate,
    DealStageUpdate as DealStageUpdate,
    DealOut as DealOut,
    DealStageUpdateResponse as DealStageUpdateResponse,
)
