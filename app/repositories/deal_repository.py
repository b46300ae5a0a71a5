from typing import Any, Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select, func

from app.models.deal import Deal
from app.repositories.base import BaseRepository
from app.schemas.common import DealStage


class DealRepository(BaseRepository):
    """Encapsulates every SQL query that touches the ``deals`` table."""

    async def get_by_id(self, deal_id: UUID) -> Optional[Deal]:
        """Return a single deal by primary key, or ``None``."""
        result = await self._db.execute(select(Deal).where(Deal.deal_id == deal_id))
        return result.scalar_one_or_none()

    async def create(self, **kwargs: Any) -> Deal:
        """Insert a new deal and return it with server defaults loaded."""
        deal = Deal(**kwargs)
        self._db.add(deal)
        await self._db.flush()
        await self._db.refresh(deal)
        return deal

    async def update_stage(self, deal: Deal, new_stage: str) -> None:
        """Update the stage column on an existing deal instance.

        ``closed_at`` is maintained by the ``Deal`` before-update listener.
        """
        deal.stage = new_stage

    async def find_won_deals_by_agent(self, agent_id: UUID) -> List[Deal]:
        """Return every won deal owned by *agent_id*."""
        result = await self._db.execute(
            select(Deal).where(
                Deal.agent_id == agent_id,
                Deal.stage == DealStage.won.value,
            )
        )
        return list(result.scalars().all())

    async def get_deal_counts(
        self, agent_ids: Iterable[UUID]
    ) -> Dict[UUID, Tuple[int, int]]:
        """Return ``{agent_id: (total_deals, won_deals)}`` in one query.

        Agents without any deal are absent from the mapping.
        """
        ids = list(agent_ids)
        if not ids:
            return {}
        query = (
            select(
                Deal.agent_id,
                func.count(Deal.deal_id),
                func.count(Deal.deal_id).filter(Deal.stage == DealStage.won.value),
            )
            .where(Deal.agent_id.in_(ids))
            .group_by(Deal.agent_id)
        )
        rows = (await self._db.execute(query)).all()
        return {row[0]: (int(row[1]), int(row[2])) for row in rows}

    async def get_stage_summary(
        self, agent_id: Optional[UUID] = None
    ) -> Dict[str, Tuple[int, float]]:
        """Return ``{stage: (deal_count, total_value)}``.

        Scoped to one agent when *agent_id* is given, else the whole ledger.
        """
        query = select(
            Deal.stage,
            func.count(Deal.deal_id),
            func.coalesce(func.sum(Deal.value), 0),
        ).group_by(Deal.stage)
        if agent_id is not None:
            query = query.where(Deal.agent_id == agent_id)
        rows = (await self._db.execute(query)).all()
        return {row[0]: (int(row[1]), float(row[2])) for row in rows}
