from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from app.core.rate_limit import limiter
from app.schemas.performance import (
    AgentPerformanceStats,
    AgentRanking,
    AgentRatingResponse,
    OverallPerformance,
    RecalculationResponse,
)
from app.services.agent_performance import (
    get_agent_performance,
    get_overall_performance,
)
from app.services.rating_engine import AgentRatingEngine
from app.services.rating_scheduler import RatingRecalculationJob
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.api.deps import (
    get_agent_repo,
    get_deal_repo,
    get_rating_engine,
    get_rating_job,
)

router = APIRouter(prefix="/performance", tags=["Performance"])


@router.post("/ratings/recalculate", response_model=RecalculationResponse)
@limiter.limit("5/minute")
async def recalculate_ratings(
    request: Request,
    job: RatingRecalculationJob = Depends(get_rating_job),
) -> RecalculationResponse:
    """Re-rate every active contributor now.

    If a scheduled run is already in progress this call waits for it
    and returns its results instead of starting another.
    """
    ratings = await job.run_once()
    return RecalculationResponse(agents_rated=len(ratings), ratings=ratings)


@router.post("/agents/{agent_id}/rating", response_model=AgentRatingResponse)
async def recalculate_agent_rating(
    agent_id: UUID,
    engine: AgentRatingEngine = Depends(get_rating_engine),
    agent_repo: AgentRepository = Depends(get_agent_repo),
    deal_repo: DealRepository = Depends(get_deal_repo),
) -> AgentRatingResponse:
    """Re-rate one agent against the current population."""
    rating = await engine.recalculate_one_agent(agent_id, agent_repo, deal_repo)
    await agent_repo.commit()
    await engine.invalidate_rankings()
    return AgentRatingResponse(agent_id=agent_id, rating=rating)


@router.get("/rankings", response_model=List[AgentRanking])
async def get_rankings(
    engine: AgentRatingEngine = Depends(get_rating_engine),
    agent_repo: AgentRepository = Depends(get_agent_repo),
    deal_repo: DealRepository = Depends(get_deal_repo),
) -> List[AgentRanking]:
    """Rank active contributors by their last persisted rating."""
    rankings = await engine.get_rankings(agent_repo, deal_repo)
    return [AgentRanking(**entry) for entry in rankings]


@router.get("/agents/{agent_id}", response_model=AgentPerformanceStats)
async def get_agent_stats(
    agent_id: UUID,
    agent_repo: AgentRepository = Depends(get_agent_repo),
    deal_repo: DealRepository = Depends(get_deal_repo),
) -> AgentPerformanceStats:
    """Deal statistics and stored rating for one agent."""
    stats = await get_agent_performance(agent_id, agent_repo, deal_repo)
    return AgentPerformanceStats(**stats)


@router.get("/overall", response_model=OverallPerformance)
async def get_overall_stats(
    agent_repo: AgentRepository = Depends(get_agent_repo),
    deal_repo: DealRepository = Depends(get_deal_repo),
) -> OverallPerformance:
    """Team-wide deal totals and the top five rated agents."""
    report = await get_overall_performance(agent_repo, deal_repo)
    return OverallPerformance(**report)
