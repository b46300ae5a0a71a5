from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select, update

from app.core.constants import RATED_ROLE
from app.models.agent import Agent
from app.repositories.base import BaseRepository


class AgentRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``agents`` table."""

    @staticmethod
    def _eligible():
        return select(Agent).where(
            Agent.role == RATED_ROLE,
            Agent.is_active.is_(True),
        )

    async def get_by_id(self, agent_id: UUID) -> Optional[Agent]:
        """Return a single agent by primary key, or ``None``."""
        result = await self._db.execute(select(Agent).where(Agent.agent_id == agent_id))
        return result.scalar_one_or_none()

    async def find_eligible_agents(self) -> List[Agent]:
        """Return active contributors in a stable order.

        Ordering by ``created_at`` then ``agent_id`` makes ranking ties
        resolve the same way on every run.
        """
        result = await self._db.execute(
            self._eligible().order_by(Agent.created_at, Agent.agent_id)
        )
        return list(result.scalars().all())

    async def get_ranked_agents(self, limit: Optional[int] = None) -> List[Agent]:
        """Return active contributors ordered by stored score, best first."""
        query = self._eligible().order_by(
            Agent.performance_score.desc(), Agent.full_name, Agent.agent_id
        )
        if limit is not None:
            query = query.limit(limit)
        result = await self._db.execute(query)
        return list(result.scalars().all())

    async def count_eligible(self) -> int:
        """Return the number of active contributors."""
        query = select(func.count()).select_from(self._eligible().subquery())
        return (await self._db.execute(query)).scalar_one()

    async def write_rating(
        self, agent_id: UUID, rating: float, rated_at: datetime
    ) -> None:
        """Persist a rating inside a SAVEPOINT.

        A failed write rolls back only its own savepoint, so a batch can
        keep going with the remaining agents.
        """
        async with self._db.begin_nested():
            await self._db.execute(
                update(Agent)
                .where(Agent.agent_id == agent_id)
                .values(performance_score=rating, last_rank_update=rated_at)
            )
