from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from app.core.exceptions import AgentNotFoundError
from app.services.agent_performance import (
    get_agent_performance,
    get_overall_performance,
)
from conftest import make_agent


def _repos(agent, summary):
    agent_repo = AsyncMock()
    agent_repo.get_by_id = AsyncMock(return_value=agent)
    deal_repo = AsyncMock()
    deal_repo.get_stage_summary = AsyncMock(return_value=summary)
    return agent_repo, deal_repo


class TestGetAgentPerformance:
    @pytest.mark.asyncio
    async def test_summarises_the_ledger(self):
        agent = make_agent(performance_score=3.8)
        agent.last_rank_update = datetime(2024, 5, 1, tzinfo=timezone.utc)
        agent_repo, deal_repo = _repos(
            agent,
            {
                "won": (3, 1000.0),
                "lost": (2, 400.0),
                "lead": (1, 50.0),
                "negotiation": (1, 75.0),
            },
        )

        stats = await get_agent_performance(agent.agent_id, agent_repo, deal_repo)

        assert stats["successful_deals"] == 3
        assert stats["failed_deals"] == 2
        assert stats["pending_deals"] == 2
        assert stats["total_deals"] == 7
        assert stats["total_won_value"] == 1000.0
        assert stats["success_rate"] == 42.9
        assert stats["average_deal_value"] == 333.33
        assert stats["rating"] == 3.8
        assert stats["last_rank_update"] == agent.last_rank_update
        assert stats["monthly_goal"] is None
        assert stats["progress"] is None

    @pytest.mark.asyncio
    async def test_agent_without_deals(self):
        agent = make_agent()
        agent_repo, deal_repo = _repos(agent, {})

        stats = await get_agent_performance(agent.agent_id, agent_repo, deal_repo)

        assert stats["total_deals"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["average_deal_value"] == 0.0
        assert stats["rating"] == 0.0

    @pytest.mark.asyncio
    async def test_ineligible_agents_can_be_inspected(self):
        admin = make_agent(role="admin", performance_score=0.0)
        agent_repo, deal_repo = _repos(admin, {"won": (1, 10.0)})

        stats = await get_agent_performance(admin.agent_id, agent_repo, deal_repo)

        assert stats["successful_deals"] == 1

    @pytest.mark.asyncio
    async def test_unknown_agent_raises(self):
        agent_repo, deal_repo = _repos(None, {})

        with pytest.raises(AgentNotFoundError):
            await get_agent_performance(uuid4(), agent_repo, deal_repo)

        deal_repo.get_stage_summary.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_progress_against_monthly_goal(self):
        agent = make_agent(monthly_goal=Decimal("8000.00"))
        agent_repo, deal_repo = _repos(agent, {"won": (2, 1000.0)})

        stats = await get_agent_performance(agent.agent_id, agent_repo, deal_repo)

        assert stats["monthly_goal"] == 8000.0
        # 12.5% rounds half-up
        assert stats["progress"] == 13


class TestGetOverallPerformance:
    @pytest.mark.asyncio
    async def test_team_report(self):
        top = make_agent(name="Ada", performance_score=4.5)
        runner_up = make_agent(name="Ben", performance_score=2.0)
        agent_repo = AsyncMock()
        agent_repo.count_eligible = AsyncMock(return_value=3)
        agent_repo.get_ranked_agents = AsyncMock(return_value=[top, runner_up])
        deal_repo = AsyncMock()
        deal_repo.get_stage_summary = AsyncMock(
            return_value={"won": (3, 1500.0), "lost": (1, 200.0), "lead": (4, 900.0)}
        )
        deal_repo.get_deal_counts = AsyncMock(return_value={top.agent_id: (4, 3)})

        report = await get_overall_performance(agent_repo, deal_repo)

        deal_repo.get_stage_summary.assert_awaited_once_with()
        agent_repo.get_ranked_agents.assert_awaited_once_with(limit=5)
        assert report["total_agents"] == 3
        assert report["total_deals"] == 8
        assert report["total_successful"] == 3
        assert report["total_failed"] == 1
        assert report["total_won_value"] == 1500.0
        assert report["overall_success_rate"] == 37.5
        assert [p["agent"]["name"] for p in report["top_performers"]] == ["Ada", "Ben"]
        assert report["top_performers"][0]["success_rate"] == 75.0
        assert report["top_performers"][1]["total_deals"] == 0
        assert report["top_performers"][1]["success_rate"] == 0.0

    @pytest.mark.asyncio
    async def test_empty_ledger(self):
        agent_repo = AsyncMock()
        agent_repo.count_eligible = AsyncMock(return_value=0)
        agent_repo.get_ranked_agents = AsyncMock(return_value=[])
        deal_repo = AsyncMock()
        deal_repo.get_stage_summary = AsyncMock(return_value={})
        deal_repo.get_deal_counts = AsyncMock(return_value={})

        report = await get_overall_performance(agent_repo, deal_repo)

        assert report["total_deals"] == 0
        assert report["overall_success_rate"] == 0.0
        assert report["top_performers"] == []
