from typing import FrozenSet, Tuple

from app.schemas.common import AgentRole, DealStage

DEAL_STAGES: FrozenSet[str] = frozenset(s.value for s in DealStage)

ROLE_CHECK_CLAUSE: str = f"role IN ({', '.join(repr(r.value) for r in AgentRole)})"
STAGE_CHECK_CLAUSE: str = (
    f"stage IN ({', '.join(repr(s.value) for s in DealStage)})"
)

# Closing stages — entering one of these stamps closed_at
CLOSED_STAGES: FrozenSet[str] = frozenset(
    {DealStage.won.value, DealStage.lost.value}
)
PENDING_STAGES: FrozenSet[str] = DEAL_STAGES - CLOSED_STAGES

# Only this role takes part in rating and ranking
RATED_ROLE: str = AgentRole.contributor.value

MIN_RATING: float = 1.0
MAX_RATING: float = 5.0

# (minimum value ratio, base rating), checked top-down
BASE_RATING_THRESHOLDS: Tuple[Tuple[float, int], ...] = (
    (0.9, 5),
    (0.7, 4),
    (0.5, 3),
    (0.3, 2),
)

# (minimum won deals, bonus), checked top-down
VOLUME_BONUS_TIERS: Tuple[Tuple[int, float], ...] = (
    (10, 0.5),
    (5, 0.25),
)

# (multiple of the population average, bonus), strictly greater, top-down
QUALITY_BONUS_TIERS: Tuple[Tuple[float, float], ...] = (
    (1.5, 0.5),
    (1.2, 0.25),
)
