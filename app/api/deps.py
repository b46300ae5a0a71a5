"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.dependencies import (
    # Repository factories
    get_agent_repo,
    get_deal_repo,
    # Service factories
    get_rating_engine,
    get_deal_service,
    get_rating_job,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_agent_repo",
    "get_deal_repo",
    "get_rating_engine",
    "get_deal_service",
    "get_rating_job",
    "get_redis_client",
    "get_cache_service",
]
