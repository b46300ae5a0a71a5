"""Deal ledger request/response schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.common import DealStage


class DealCreate(BaseModel):
    """Request body for POST /api/v1/deals."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    agent_id: UUID
    value: float = Field(..., ge=0, le=9_999_999_999_999.99)
    stage: DealStage = DealStage.lead
    probability: int = Field(0, ge=0, le=100)
    expected_close_date: Optional[datetime] = None


class DealStageUpdate(BaseModel):
    """Request body for PATCH /api/v1/deals/{deal_id}/stage."""

    stage: DealStage


class DealOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    deal_id: UUID
    title: str
    agent_id: UUID
    value: float
    stage: DealStage
    probability: int
    closed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class DealStageUpdateResponse(BaseModel):
    """Stage change result, including the owner's refreshed rating if any."""

    success: bool = True
    deal: DealOut
    agent_rating: Optional[float] = None
