from types import SimpleNamespace
from typing import TYPE_CHECKING, AsyncGenerator, Iterable, List
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from app.core.cache import CacheService

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.core.rate_limit import limiter
from app.main import app


def make_agent(
    agent_id: UUID | None = None,
    *,
    name: str = "Test Agent",
    role: str = "contributor",
    is_active: bool = True,
    performance_score: float = 0.0,
    monthly_goal=None,
):
    """Return a lightweight stand-in for an ``Agent`` row."""
    agent_id = agent_id or uuid4()
    return SimpleNamespace(
        agent_id=agent_id,
        full_name=name,
        email=f"{str(agent_id)[:8]}@example.com",
        phone="+15550100",
        role=role,
        is_active=is_active,
        performance_score=performance_score,
        last_rank_update=None,
        monthly_goal=monthly_goal,
    )


def make_won_deals(total: float, count: int) -> List[SimpleNamespace]:
    """Return *count* won deals whose values sum exactly to *total*."""
    if count == 0:
        return []
    deals = [SimpleNamespace(value=Decimal(str(total)), stage="won")]
    deals += [SimpleNamespace(value=Decimal("0"), stage="won") for _ in range(count - 1)]
    return deals


def make_repos(agents: Iterable, won: dict):
    """Build mocked agent/deal repositories over an in-memory population.

    *won* maps ``agent_id`` to ``(total_won_value, won_deals_count)``.
    """
    agents = list(agents)
    by_id = {a.agent_id: a for a in agents}
    deals = {aid: make_won_deals(*won.get(aid, (0, 0))) for aid in by_id}

    agent_repo = AsyncMock()
    agent_repo.get_by_id = AsyncMock(side_effect=lambda aid: by_id.get(aid))
    agent_repo.find_eligible_agents = AsyncMock(
        side_effect=lambda: [
            a for a in agents if a.role == "contributor" and a.is_active
        ]
    )
    agent_repo.write_rating = AsyncMock()

    deal_repo = AsyncMock()
    deal_repo.find_won_deals_by_agent = AsyncMock(
        side_effect=lambda aid: deals.get(aid, [])
    )
    return agent_repo, deal_repo


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    """Start every test with an empty slowapi bucket."""
    limiter.reset()
    yield


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    yield
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client() -> AsyncGenerator[AsyncClient, None]:
    """Yield an ``httpx.AsyncClient`` wired to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_redis() -> AsyncMock:
    """Return an ``AsyncMock`` that behaves like ``redis.asyncio.Redis``."""
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock()
    redis.setex = AsyncMock()
    redis.delete = AsyncMock()
    redis.ping = AsyncMock()
    return redis


@pytest.fixture
def mock_cache(mock_redis) -> "CacheService":
    """Return a ``CacheService`` backed by the mock Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=mock_redis)


class FakeRedis:
    """Dict-backed stand-in for ``redis.asyncio.Redis`` that keeps values."""

    def __init__(self) -> None:
        self.store: dict = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value):
        self.store[key] = value

    async def setex(self, key, ttl, value):
        self.store[key] = value

    async def delete(self, key):
        self.store.pop(key, None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()
