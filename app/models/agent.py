from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Index,
    Numeric,
    String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.models.base import Base
from sqlalchemy.sql import func, expression

from app.core.constants import ROLE_CHECK_CLAUSE


class Agent(Base):
    """CRM user who owns deals and is rated on closed-deal performance.

    Only active contributors are rated.  The rating engine writes
    ``performance_score`` and ``last_rank_update`` and nothing else;
    onboarding and offboarding happen elsewhere.
    """

    __tablename__ = "agents"
    agent_id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    full_name = Column(String(200), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    phone = Column(String(20))
    role = Column(String(20), nullable=False, server_default="contributor")
    is_active = Column(Boolean, nullable=False, server_default=expression.true())
    performance_score = Column(Float, nullable=False, server_default="0")
    last_rank_update = Column(DateTime(timezone=True))
    monthly_goal = Column(Numeric(15, 2))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    deals = relationship("Deal", back_populates="agent", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint(ROLE_CHECK_CLAUSE, name="ck_agent_role"),
        CheckConstraint(
            "performance_score BETWEEN 0 AND 5", name="ck_performance_score_range"
        ),
        CheckConstraint("monthly_goal > 0", name="ck_monthly_goal_positive"),
        Index("idx_agents_role_active", "role", "is_active"),
    )
