import asyncio
import logging
from typing import Optional

from config import settings
from .async_resource import AsyncResource
from .state_models import FetchState

logger = logging.getLogger(__name__)


class PollingResource(AsyncResource):
    """
    AsyncResource that re-fetches on a fixed interval once activated.

    The poll task is owned by the container: started by activate(), cancelled
    by close(). Leaving an `async with` block, normally or through an
    exception, always cancels it.
    """

    def __init__(self, *args, interval: Optional[float] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.interval = settings.PRICE_POLL_INTERVAL if interval is None else interval
        self._poll_task: Optional[asyncio.Task] = None
        self.poll_count = 0

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def activate(self) -> FetchState:
        if self._active or self._closed:
            return self._state
        started_at = asyncio.get_running_loop().time()
        state = await super().activate()
        if not self._closed and self._poll_task is None:
            self._poll_task = asyncio.create_task(self._poll_loop(started_at))
            logger.info(f"[{self.name}] Polling every {self.interval}s")
        return state

    async def _poll_loop(self, started_at: float):
        # Ticks are anchored to activation, so fetch latency does not delay the next tick
        loop = asyncio.get_running_loop()
        next_tick = started_at
        while not self._closed:
            next_tick += self.interval
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
            if self._closed:
                break
            self.poll_count += 1
            logger.info(f"[{self.name}] Poll #{self.poll_count}")
            await self._run_fetch()

            behind = loop.time() - next_tick
            if self.interval > 0 and behind >= self.interval:
                skipped = int(behind // self.interval)
                logger.warning(f"[{self.name}] Fetch overran the poll interval, skipping {skipped} tick(s)")
                next_tick += skipped * self.interval

    async def close(self) -> None:
        await super().close()
        task, self._poll_task = self._poll_task, None
        if task is None:
            return

        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info(f"[{self.name}] Polling stopped after {self.poll_count} polls")
