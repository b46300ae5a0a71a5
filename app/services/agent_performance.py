import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

from app.core.constants import PENDING_STAGES
from app.core.exceptions import AgentNotFoundError
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.schemas.common import DealStage

logger = logging.getLogger(__name__)

TOP_PERFORMERS_LIMIT = 5


def _percent(part: float, whole: float) -> float:
    return round(part / whole * 100, 1) if whole else 0.0


def _goal_progress(won_value: float, goal: Optional[Decimal]) -> Optional[int]:
    """Whole-percent progress towards *goal*, rounded half-up."""
    if not goal:
        return None
    ratio = Decimal(str(won_value)) / Decimal(goal) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _split_summary(
    summary: Dict[str, Tuple[int, float]],
) -> Tuple[int, float, int, int, int]:
    won_count, won_value = summary.get(DealStage.won.value, (0, 0.0))
    lost_count, _ = summary.get(DealStage.lost.value, (0, 0.0))
    pending_count = sum(summary.get(s, (0, 0.0))[0] for s in PENDING_STAGES)
    total = sum(count for count, _ in summary.values())
    return won_count, won_value, lost_count, pending_count, total


async def get_agent_performance(
    agent_id: UUID,
    agent_repo: AgentRepository,
    deal_repo: DealRepository,
) -> Dict[str, Any]:
    """Summarise one agent's deal ledger alongside their stored rating.

    Any agent can be inspected, eligible or not.  ``success_rate`` is the
    share of *all* deals that were won, as a percentage with one decimal.
    ``progress`` is won value against ``monthly_goal`` and is ``None``
    when no goal is set.
    """
    agent = await agent_repo.get_by_id(agent_id)
    if agent is None:
        raise AgentNotFoundError(f"Agent {agent_id} not found")

    summary = await deal_repo.get_stage_summary(agent_id)
    won_count, won_value, lost_count, pending_count, total = _split_summary(summary)
    goal = agent.monthly_goal

    return {
        "agent_id": agent.agent_id,
        "successful_deals": won_count,
        "failed_deals": lost_count,
        "pending_deals": pending_count,
        "total_deals": total,
        "total_won_value": won_value,
        "success_rate": _percent(won_count, total),
        "average_deal_value": round(won_value / won_count, 2) if won_count else 0.0,
        "rating": float(agent.performance_score or 0),
        "last_rank_update": agent.last_rank_update,
        "monthly_goal": float(goal) if goal else None,
        "progress": _goal_progress(won_value, goal),
    }


async def get_overall_performance(
    agent_repo: AgentRepository,
    deal_repo: DealRepository,
) -> Dict[str, Any]:
    """Team-wide deal totals plus the top rated active contributors.

    Deal totals cover the whole ledger.  ``top_performers`` uses the same
    ordering as the rankings: stored score, then name, then id.
    """
    summary = await deal_repo.get_stage_summary()
    won_count, won_value, lost_count, _, total = _split_summary(summary)

    total_agents = await agent_repo.count_eligible()
    top = await agent_repo.get_ranked_agents(limit=TOP_PERFORMERS_LIMIT)
    counts = await deal_repo.get_deal_counts(a.agent_id for a in top)

    top_performers = []
    for agent in top:
        agent_total, agent_won = counts.get(agent.agent_id, (0, 0))
        top_performers.append(
            {
                "agent": {
                    "id": agent.agent_id,
                    "name": agent.full_name,
                    "email": agent.email,
                },
                "rating": float(agent.performance_score or 0),
                "total_deals": agent_total,
                "successful_deals": agent_won,
                "success_rate": _percent(agent_won, agent_total),
            }
        )

    logger.debug(
        "Overall performance: %d agent(s), %d deal(s)", total_agents, total
    )
    return {
        "total_agents": total_agents,
        "total_deals": total,
        "total_successful": won_count,
        "total_failed": lost_count,
        "total_won_value": won_value,
        "overall_success_rate": _percent(won_count, total),
        "top_performers": top_performers,
    }
