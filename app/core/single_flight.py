import asyncio
import logging
from typing import Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Coalesce overlapping calls into one in-flight execution.

    While a call is running, further callers await the same task and
    receive its result (or its exception) instead of starting a second
    run.  Once the task settles the next call starts a fresh one.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._task: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, func: Callable[[], Awaitable[T]]) -> T:
        if self.in_flight:
            logger.info("%s already running, joining in-flight run", self._name)
        else:
            self._task = asyncio.ensure_future(func())
        # Shield so a cancelled waiter does not cancel the shared run
        return await asyncio.shield(self._task)

    def cancel(self) -> None:
        """Cancel the in-flight run, if any."""
        if self.in_flight:
            self._task.cancel()
