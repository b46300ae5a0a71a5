import asyncio
import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.cache import CacheService, create_redis_client
from app.core.config import settings
from app.core.exceptions import RatingRecalculationTimeoutError
from app.core.single_flight import SingleFlight
from app.repositories.agent_repository import AgentRepository
from app.repositories.deal_repository import DealRepository
from app.services.rating_engine import AgentRatingEngine

logger = logging.getLogger(__name__)


class RatingRecalculationJob:
    """Owns the periodic batch re-rating of all agents.

    ``start()`` schedules the background loop (first run immediately
    unless ``run_on_startup`` is off) and ``stop()`` cancels it.  Both
    the loop and manual triggers go through :meth:`run_once`, which
    coalesces overlapping calls into a single run.

    Parameters:
        session_factory: An async context-manager callable that yields
            an ``AsyncSession`` (e.g. ``AsyncSessionLocal``).
    """

    def __init__(
        self,
        session_factory: Callable[..., AsyncSession],
        *,
        interval_seconds: Optional[int] = None,
        timeout_seconds: Optional[int] = None,
        run_on_startup: Optional[bool] = None,
    ) -> None:
        self._session_factory = session_factory
        self._interval = (
            interval_seconds
            if interval_seconds is not None
            else settings.RATING_RECALC_INTERVAL_HOURS * 3600
        )
        self._timeout = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.RATING_RECALC_TIMEOUT_SECONDS
        )
        self._run_on_startup = (
            run_on_startup
            if run_on_startup is not None
            else settings.RATING_RECALC_ON_STARTUP
        )
        self._flight: SingleFlight[List[Dict[str, Any]]] = SingleFlight(
            "Rating recalculation"
        )
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> List[Dict[str, Any]]:
        """Recalculate every rating, joining a run already in progress."""
        return await self._flight.run(self._recalculate)

    async def _recalculate(self) -> List[Dict[str, Any]]:
        redis_client = await create_redis_client()
        engine = AgentRatingEngine(cache=CacheService(redis_client))
        try:
            async with self._session_factory() as session:
                try:
                    results = await asyncio.wait_for(
                        self._recalculate_and_commit(engine, session),
                        timeout=self._timeout,
                    )
                except asyncio.TimeoutError:
                    await session.rollback()
                    logger.error(
                        "Rating recalculation exceeded %ds and was rolled back",
                        self._timeout,
                    )
                    raise RatingRecalculationTimeoutError(
                        f"Rating recalculation exceeded {self._timeout} seconds"
                    )
            await engine.invalidate_rankings()
            return results
        finally:
            if redis_client is not None:
                await redis_client.aclose()

    @staticmethod
    async def _recalculate_and_commit(
        engine: AgentRatingEngine, session: AsyncSession
    ) -> List[Dict[str, Any]]:
        results = await engine.recalculate_all_ratings(
            agent_repo=AgentRepository(session),
            deal_repo=DealRepository(session),
        )
        await session.commit()
        return results

    async def _loop(self) -> None:
        logger.info(
            "Rating recalculation task started (interval=%ds, timeout=%ds)",
            self._interval,
            self._timeout,
        )
        if not self._run_on_startup:
            await asyncio.sleep(self._interval)
        while True:
            try:
                results = await self.run_once()
                logger.info(
                    "Scheduled rating recalculation complete: %d agent(s)",
                    len(results),
                )
            except Exception:
                logger.error("Scheduled rating recalculation failed", exc_info=True)
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        """Schedule the background loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop())

    async def stop(self) -> None:
        """Cancel the background loop and any run it started."""
        if self._task is None:
            return
        self._task.cancel()
        self._flight.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Rating recalculation task stopped")
        self._task = None
