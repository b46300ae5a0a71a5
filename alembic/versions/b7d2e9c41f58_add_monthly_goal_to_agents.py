"""add monthly goal to agents

Revision ID: b7d2e9c41f58
Revises: a1c4e7f20b13
Create Date: 2026-10-19 10:30:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7d2e9c41f58"
down_revision: Union[str, None] = "a1c4e7f20b13"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "agents",
        sa.Column("monthly_goal", sa.Numeric(15, 2), nullable=True),
    )
    op.create_check_constraint(
        "ck_monthly_goal_positive", "agents", "monthly_goal > 0"
    )


def downgrade() -> None:
    op.drop_constraint("ck_monthly_goal_positive", "agents", type_="check")
    op.drop_column("agents", "monthly_goal")
