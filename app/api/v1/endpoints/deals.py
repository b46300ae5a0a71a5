from uuid import UUID

from fastapi import APIRouter, Depends

from app.schemas.deal import (
    DealCreate,
    DealOut,
    DealStageUpdate,
    DealStageUpdateResponse,
)
from app.services.deal_service import DealService
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.api.deps import get_agent_repo, get_deal_repo, get_deal_service

router = APIRouter(prefix="/deals", tags=["Deals"])


@router.post("", response_model=DealOut, status_code=201)
async def create_deal(
    deal_in: DealCreate,
    service: DealService = Depends(get_deal_service),
    deal_repo: DealRepository = Depends(get_deal_repo),
    agent_repo: AgentRepository = Depends(get_agent_repo),
) -> DealOut:
    """Record a new deal for an existing agent."""
    deal = await service.create_deal(deal_in, deal_repo, agent_repo)
    return DealOut.model_validate(deal)


@router.patch("/{deal_id}/stage", response_model=DealStageUpdateResponse)
async def update_deal_stage(
    deal_id: UUID,
    update: DealStageUpdate,
    service: DealService = Depends(get_deal_service),
    deal_repo: DealRepository = Depends(get_deal_repo),
    agent_repo: AgentRepository = Depends(get_agent_repo),
) -> DealStageUpdateResponse:
    """Move a deal through the pipeline.

    Closing (or reopening) a deal re-rates its owner when the owner is
    an active contributor; ``agent_rating`` carries the new score.
    """
    result = await service.update_stage(deal_id, update.stage, deal_repo, agent_repo)
    return DealStageUpdateResponse(
        deal=DealOut.model_validate(result["deal"]),
        agent_rating=result["agent_rating"],
    )
