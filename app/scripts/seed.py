"""Sample agents and deals for local development."""

import asyncio
import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import func, select, text

from app.core.config import settings
from app.models import Agent, Deal
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.schemas.common import AgentRole, DealStage
from app.services.rating_engine import AgentRatingEngine

AGENTS = [
    ("Sara Haddad", "sara.haddad@example.com", AgentRole.contributor, True),
    ("Omar Farouk", "omar.farouk@example.com", AgentRole.contributor, True),
    ("Lina Park", "lina.park@example.com", AgentRole.contributor, True),
    ("Daniel Reyes", "daniel.reyes@example.com", AgentRole.contributor, True),
    ("Amira Nasser", "amira.nasser@example.com", AgentRole.contributor, False),
    ("System Administrator", "admin@example.com", AgentRole.admin, True),
]

# Won-deal count per contributor, spread so every rating tier shows up
WON_DEALS = [12, 6, 3, 1, 4]
STAGES = [s.value for s in DealStage]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    rng = random.Random(42)

    async with session_maker() as session:
        print("Seeding sample agents and deals")

        await session.execute(text("TRUNCATE TABLE deals, agents CASCADE"))
        await session.commit()
        print("Cleared existing data")

        agents = []
        for name, email, role, active in AGENTS:
            agent = Agent(
                full_name=name,
                email=email,
                role=role.value,
                is_active=active,
                monthly_goal=(
                    Decimal("750000") if role == AgentRole.contributor else None
                ),
            )
            session.add(agent)
            agents.append(agent)
        await session.flush()
        print(f"Created {len(agents)} agents")

        now = datetime.now(timezone.utc)
        deal_count = 0
        for agent, won in zip(agents, WON_DEALS):
            for i in range(won):
                session.add(
                    Deal(
                        title=f"{agent.full_name.split()[0]} deal #{i + 1}",
                        agent_id=agent.agent_id,
                        value=Decimal(rng.randrange(5_000, 250_000, 500)),
                        stage=DealStage.won.value,
                        probability=100,
                        closed_at=now - timedelta(days=rng.randint(1, 180)),
                    )
                )
                deal_count += 1
            # A few open and lost deals so stats endpoints have variety
            for _ in range(rng.randint(1, 4)):
                session.add(
                    Deal(
                        title=f"{agent.full_name.split()[0]} prospect",
                        agent_id=agent.agent_id,
                        value=Decimal(rng.randrange(5_000, 250_000, 500)),
                        stage=rng.choice([s for s in STAGES if s != "won"]),
                        probability=rng.randint(0, 90),
                    )
                )
                deal_count += 1
        await session.commit()
        print(f"Created {deal_count} deals")

        results = await AgentRatingEngine().recalculate_all_ratings(
            AgentRepository(session), DealRepository(session)
        )
        await session.commit()
        print(f"Rated {len(results)} agents")

        # Validation
        total_deals = (await session.execute(select(func.count(Deal.deal_id)))).scalar()
        print("\nValidation:")
        print(f"  Agents: {len(agents)}")
        print(f"  Deals: {total_deals}")
        for row in results:
            print(f"  {row['agent_id']}: {row['rating']}")
        print("Seeding complete")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
