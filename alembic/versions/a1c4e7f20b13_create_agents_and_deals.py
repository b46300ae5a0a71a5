"""create agents and deals tables

Revision ID: a1c4e7f20b13
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "a1c4e7f20b13"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "agents",
        sa.Column(
            "agent_id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("full_name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(20)),
        sa.Column("role", sa.String(20), nullable=False, server_default="contributor"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("performance_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("last_rank_update", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("role IN ('admin', 'contributor')", name="ck_agent_role"),
        sa.CheckConstraint(
            "performance_score BETWEEN 0 AND 5", name="ck_performance_score_range"
        ),
    )
    op.create_index("idx_agents_role_active", "agents", ["role", "is_active"])

    op.create_table(
        "deals",
        sa.Column(
            "deal_id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            primary_key=True,
        ),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column(
            "agent_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("agents.agent_id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("value", sa.Numeric(15, 2), nullable=False),
        sa.Column("stage", sa.String(20), nullable=False, server_default="lead"),
        sa.Column("probability", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("expected_close_date", sa.DateTime(timezone=True)),
        sa.Column("closed_at", sa.DateTime(timezone=True)),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint(
            "stage IN ('lead', 'qualification', 'proposal', 'negotiation', 'won', 'lost')",
            name="ck_deal_stage",
        ),
        sa.CheckConstraint("value >= 0", name="ck_deal_value_nonneg"),
        sa.CheckConstraint("probability BETWEEN 0 AND 100", name="ck_deal_probability"),
    )
    op.create_index("idx_deals_agent_stage", "deals", ["agent_id", "stage"])


def downgrade() -> None:
    op.drop_index("idx_deals_agent_stage", table_name="deals")
    op.drop_table("deals")
    op.drop_index("idx_agents_role_active", table_name="agents")
    op.drop_table("agents")
