import logging
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from redis.asyncio import Redis

from app.core.cache import create_redis_client
from app.core.database import get_db
from app.services.rating_engine import AgentRatingEngine
from app.services.rating_scheduler import RatingRecalculationJob

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client():
    """Yield a per-request Redis client, or ``None`` when Redis is down."""
    client: Optional[Redis] = await create_redis_client()
    try:
        yield client
    finally:
        if client is not None:
            await client.aclose()


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_agent_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.agent_repository import AgentRepository

    return AgentRepository(db)


async def get_deal_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.deal_repository import DealRepository

    return DealRepository(db)


# ---------------------------------------------------------------------------
# Cache service factory
# ---------------------------------------------------------------------------


async def get_cache_service(
    redis_client: Redis = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the request's Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_rating_engine(
    cache=Depends(get_cache_service),
) -> AgentRatingEngine:
    return AgentRatingEngine(cache=cache)


async def get_deal_service(
    rating_engine: AgentRatingEngine = Depends(get_rating_engine),
):
    """Build a :class:`DealService` with injected dependencies."""
    from app.services.deal_service import DealService

    return DealService(rating_engine=rating_engine)


def get_rating_job(request: Request) -> RatingRecalculationJob:
    """Return the process-wide recalculation job owned by the app."""
    return request.app.state.rating_job
