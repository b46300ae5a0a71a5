from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func

from app.core.constants import STAGE_CHECK_CLAUSE


class Deal(Base):
    """A sales opportunity owned by one agent.

    ``stage`` moves through the pipeline (lead → qualification →
    proposal → negotiation) and closes as ``won`` or ``lost``.  Only won
    deals count towards an agent's rating; the engine never writes here.
    """

    __tablename__ = "deals"
    deal_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    title = Column(String(200), nullable=False)
    description = Column(Text)
    agent_id = Column(
        UUID(as_uuid=True),
        ForeignKey("agents.agent_id", ondelete="CASCADE"),
        nullable=False,
    )
    value = Column(Numeric(15, 2), nullable=False)
    stage = Column(String(20), nullable=False, server_default="lead")
    probability = Column(Integer, nullable=False, server_default=text("0"))
    expected_close_date = Column(DateTime(timezone=True))
    closed_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    agent = relationship("Agent", back_populates="deals")

    __table_args__ = (
        # Rating reads filter on (agent_id, stage = 'won')
        Index("idx_deals_agent_stage", "agent_id", "stage"),
        CheckConstraint(STAGE_CHECK_CLAUSE, name="ck_deal_stage"),
        CheckConstraint("value >= 0", name="ck_deal_value_nonneg"),
        CheckConstraint("probability BETWEEN 0 AND 100", name="ck_deal_probability"),
    )
