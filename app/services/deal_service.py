import logging
from typing import Any, Dict
from uuid import UUID

from app.core.constants import CLOSED_STAGES
from app.core.exceptions import AgentNotFoundError, DealNotFoundError
from app.models.deal import Deal
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.schemas.common import DealStage
from app.schemas.deal import DealCreate
from app.services.rating_engine import AgentRatingEngine, is_eligible

logger = logging.getLogger(__name__)


class DealService:
    """Deal ledger writes that keep the owner's rating current.

    Closing a deal (or reopening a closed one) re-rates the owning agent
    through the single-agent path; the rest of the population keeps its
    stored scores until the next batch.
    """

    def __init__(self, rating_engine: AgentRatingEngine) -> None:
        self._rating_engine = rating_engine

    async def create_deal(
        self,
        deal_in: DealCreate,
        deal_repo: DealRepository,
        agent_repo: AgentRepository,
    ) -> Deal:
        agent = await agent_repo.get_by_id(deal_in.agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent {deal_in.agent_id} not found")

        data = deal_in.model_dump()
        data["stage"] = deal_in.stage.value
        deal = await deal_repo.create(**data)

        rerated = False
        if deal.stage in CLOSED_STAGES and is_eligible(agent):
            await self._rating_engine.recalculate_one_agent(
                agent.agent_id, agent_repo, deal_repo
            )
            rerated = True

        await deal_repo.commit()
        if rerated:
            await self._rating_engine.invalidate_rankings()
        logger.info("Deal %s created for agent %s", deal.deal_id, agent.agent_id)
        return deal

    async def update_stage(
        self,
        deal_id: UUID,
        new_stage: DealStage,
        deal_repo: DealRepository,
        agent_repo: AgentRepository,
    ) -> Dict[str, Any]:
        """Move a deal to *new_stage*.

        Returns the deal and, when the owner was re-rated, the new rating.
        """
        deal = await deal_repo.get_by_id(deal_id)
        if deal is None:
            raise DealNotFoundError(f"Deal {deal_id} not found")

        previous = deal.stage
        if previous == new_stage.value:
            return {"deal": deal, "agent_rating": None}

        await deal_repo.update_stage(deal, new_stage.value)
        await deal_repo.flush()

        rating = None
        if previous in CLOSED_STAGES or new_stage.value in CLOSED_STAGES:
            agent = await agent_repo.get_by_id(deal.agent_id)
            if agent is not None and is_eligible(agent):
                rating = await self._rating_engine.recalculate_one_agent(
                    agent.agent_id, agent_repo, deal_repo
                )

        await deal_repo.commit()
        if rating is not None:
            await self._rating_engine.invalidate_rankings()

        logger.info("Deal %s moved %s → %s", deal_id, previous, new_stage.value)
        return {"deal": deal, "agent_rating": rating}
