import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.core.cache import CacheService, RANKINGS_CACHE_KEY
from app.core.config import settings
from app.core.constants import (
    BASE_RATING_THRESHOLDS,
    MAX_RATING,
    MIN_RATING,
    QUALITY_BONUS_TIERS,
    RATED_ROLE,
    VOLUME_BONUS_TIERS,
)
from app.core.exceptions import AgentNotEligibleError, AgentNotFoundError
from app.models.agent import Agent
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentDealStats:
    """Won-deal totals for one agent."""

    agent_id: UUID
    total_won_value: float
    won_deals_count: int

    @classmethod
    def from_deals(
        cls, agent_id: UUID, won_deals: Sequence[Any]
    ) -> "AgentDealStats":
        total = sum(
            (Decimal(str(deal.value or 0)) for deal in won_deals), Decimal("0")
        )
        return cls(
            agent_id=agent_id,
            total_won_value=float(total),
            won_deals_count=len(won_deals),
        )

    @property
    def avg_deal_value(self) -> float:
        if self.won_deals_count == 0:
            return 0.0
        return self.total_won_value / self.won_deals_count


@dataclass(frozen=True)
class RatingBaseline:
    """Population figures every agent in one run is compared against."""

    max_value: float
    avg_value: float

    @classmethod
    def from_stats(cls, stats: Sequence[AgentDealStats]) -> "RatingBaseline":
        if not stats:
            return cls(max_value=0.0, avg_value=0.0)
        totals = [s.total_won_value for s in stats]
        return cls(max_value=max(totals), avg_value=sum(totals) / len(totals))


def is_eligible(agent: Agent) -> bool:
    """Only active contributors are rated and ranked."""
    return agent.role == RATED_ROLE and bool(agent.is_active)


def value_ratio(total_won_value: float, baseline: RatingBaseline) -> float:
    # Nobody has won anything yet: everyone sits at the bottom tier
    if baseline.max_value <= 0:
        return 0.0
    return total_won_value / baseline.max_value


def base_rating(ratio: float) -> int:
    for threshold, rating in BASE_RATING_THRESHOLDS:
        if ratio >= threshold:
            return rating
    return int(MIN_RATING)


def volume_bonus(won_deals_count: int) -> float:
    for minimum, bonus in VOLUME_BONUS_TIERS:
        if won_deals_count >= minimum:
            return bonus
    return 0.0


def quality_bonus(avg_deal_value: float, avg_value: float) -> float:
    for multiple, bonus in QUALITY_BONUS_TIERS:
        if avg_deal_value > avg_value * multiple:
            return bonus
    return 0.0


def round_rating(value: float) -> float:
    """Round half-up to one decimal place (1.25 → 1.3, not 1.2)."""
    rounded = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(rounded)


def compute_rating(stats: AgentDealStats, baseline: RatingBaseline) -> float:
    """Return the capped, rounded 1.0–5.0 rating for one agent."""
    rating = base_rating(value_ratio(stats.total_won_value, baseline))
    rating += volume_bonus(stats.won_deals_count)
    rating += quality_bonus(stats.avg_deal_value, baseline.avg_value)
    return round_rating(min(MAX_RATING, rating))


class AgentRatingEngine:
    """Rate agents from their won deals and report the resulting ranking.

    A rating starts from a base tier (1–5) given by the agent's total won
    value as a fraction of the best agent's, then earns up to +0.5 for
    deal volume and up to +0.5 for average deal size relative to the
    population mean.  The sum is capped at 5.0.

    ``recalculate_one_agent`` compares the agent against the live
    population but writes only that agent, so its score can drift from
    what a full batch would assign until the next batch runs.  That is
    accepted; do not turn single-agent updates into batch runs.
    """

    def __init__(self, cache: Optional[CacheService] = None) -> None:
        self._cache: CacheService = cache or CacheService()

    async def _collect_stats(
        self, agents: Sequence[Agent], deal_repo: DealRepository
    ) -> List[AgentDealStats]:
        stats: List[AgentDealStats] = []
        for agent in agents:
            won_deals = await deal_repo.find_won_deals_by_agent(agent.agent_id)
            stats.append(AgentDealStats.from_deals(agent.agent_id, won_deals))
        return stats

    async def recalculate_all_ratings(
        self,
        agent_repo: AgentRepository,
        deal_repo: DealRepository,
    ) -> List[Dict[str, Any]]:
        """Rate every eligible agent and persist the scores.

        The baseline is computed once from the snapshot read at the
        start, so writes made during the run never shift other agents'
        ratios.  A write that fails is logged and skipped.

        Returns one entry per persisted rating, best total first.
        """
        agents = await agent_repo.find_eligible_agents()
        if not agents:
            logger.info("No eligible agents – skipping rating recalculation")
            return []

        stats = await self._collect_stats(agents, deal_repo)
        baseline = RatingBaseline.from_stats(stats)
        # sorted() is stable, so equal totals keep repository order
        ranked = sorted(stats, key=lambda s: s.total_won_value, reverse=True)

        rated_at = datetime.now(timezone.utc)
        results: List[Dict[str, Any]] = []
        for agent_stats in ranked:
            rating = compute_rating(agent_stats, baseline)
            try:
                await agent_repo.write_rating(agent_stats.agent_id, rating, rated_at)
            except SQLAlchemyError:
                logger.warning(
                    "Failed to persist rating for agent %s",
                    agent_stats.agent_id,
                    exc_info=True,
                )
                continue
            results.append(
                {
                    "agent_id": agent_stats.agent_id,
                    "rating": rating,
                    "total_won_value": agent_stats.total_won_value,
                    "won_deals_count": agent_stats.won_deals_count,
                }
            )

        logger.info(
            "Rated %d of %d eligible agent(s) (max=%.2f, avg=%.2f)",
            len(results),
            len(agents),
            baseline.max_value,
            baseline.avg_value,
        )
        return results

    async def recalculate_one_agent(
        self,
        agent_id: UUID,
        agent_repo: AgentRepository,
        deal_repo: DealRepository,
    ) -> float:
        """Re-rate a single agent against the current population."""
        agent = await agent_repo.get_by_id(agent_id)
        if agent is None:
            raise AgentNotFoundError(f"Agent {agent_id} not found")
        if not is_eligible(agent):
            raise AgentNotEligibleError(
                f"Agent {agent_id} is not an active contributor"
            )

        population = await agent_repo.find_eligible_agents()
        stats = await self._collect_stats(population, deal_repo)
        target = next((s for s in stats if s.agent_id == agent_id), None)
        if target is None:
            # Deactivated between the two reads
            raise AgentNotEligibleError(
                f"Agent {agent_id} is not an active contributor"
            )

        rating = compute_rating(target, RatingBaseline.from_stats(stats))
        await agent_repo.write_rating(agent_id, rating, datetime.now(timezone.utc))
        logger.info("Agent %s re-rated: %.1f", agent_id, rating)
        return rating

    async def get_rankings(
        self,
        agent_repo: AgentRepository,
        deal_repo: DealRepository,
    ) -> List[Dict[str, Any]]:
        """Return eligible agents ranked by their stored score.

        Never recomputes.  Results are cached for ``REDIS_CACHE_TTL``
        seconds and dropped by :meth:`invalidate_rankings`.
        """
        cached = await self._cache.get_json(RANKINGS_CACHE_KEY)
        if cached is not None:
            return cached

        agents = await agent_repo.get_ranked_agents()
        counts = await deal_repo.get_deal_counts(a.agent_id for a in agents)

        rankings: List[Dict[str, Any]] = []
        for rank, agent in enumerate(agents, start=1):
            total_deals, successful_deals = counts.get(agent.agent_id, (0, 0))
            rankings.append(
                {
                    "rank": rank,
                    "agent": {
                        "id": str(agent.agent_id),
                        "name": agent.full_name,
                        "email": agent.email,
                    },
                    "rating": float(agent.performance_score or 0),
                    "total_deals": total_deals,
                    "successful_deals": successful_deals,
                }
            )

        await self._cache.set_json(
            RANKINGS_CACHE_KEY, rankings, ttl=settings.REDIS_CACHE_TTL
        )
        return rankings

    async def invalidate_rankings(self) -> None:
        """Drop cached rankings; call after committing new ratings."""
        await self._cache.delete(RANKINGS_CACHE_KEY)
