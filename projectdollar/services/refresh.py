# projectdollar/services/refresh.py
"""
Periodic background jobs (price refresh).

schedule_periodic() starts an asyncio task that runs a coroutine function
every `interval` seconds and returns a RefreshHandle to stop it. Ticks are
independent: an exception in one tick is logged and the next tick still
runs. Stopping cancels the task, so nothing updates state after teardown.

Usage:
    handle = schedule_periodic(refresh_prices, interval=120, name="price-refresh")
    ...
    await handle.stop()
"""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable

from projectdollar.services.constants import REFRESH_PRICE_MAX_AGE_SECONDS
from projectdollar.services.market_data.price_provider import PriceProvider

logger = logging.getLogger(__name__)


class RefreshHandle:
    """
    Controls one periodic task.

    Attributes:
        name: Task name used in logs
        ticks: Completed ticks (successful or not)
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.ticks = 0
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def cancel(self) -> None:
        """Request cancellation without waiting for it."""
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def stop(self) -> None:
        """Cancel the task and wait until it has finished."""
        if self._task is None:
            return
        self.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        logger.info(f"Periodic task '{self.name}' stopped after {self.ticks} ticks")


def schedule_periodic(
        callback: Callable[[], Awaitable[object]],
        interval: float,
        name: str = "periodic",
        run_immediately: bool = True,
) -> RefreshHandle:
    """
    Run `callback` every `interval` seconds on the running event loop.

    Args:
        callback: Coroutine function taking no arguments
        interval: Seconds between the end of one tick and the start of the next
        name: Used in logs and as the asyncio task name
        run_immediately: Run the first tick now instead of after one interval

    Returns:
        RefreshHandle for stopping the task

    Raises:
        ValueError: If interval is not positive
        RuntimeError: If called outside a running event loop
    """
    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")

    handle = RefreshHandle(name)

    async def _loop() -> None:
        if not run_immediately:
            await asyncio.sleep(interval)
        while True:
            try:
                await callback()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception(f"Periodic task '{name}' tick failed")
            handle.ticks += 1
            await asyncio.sleep(interval)

    handle._task = asyncio.get_running_loop().create_task(_loop(), name=name)
    logger.info(f"Periodic task '{name}' started (every {interval}s)")
    return handle


def refresh_max_age(cache_ttl: float, interval: float) -> float:
    """
    Oldest quote a refresh tick may keep.

    A quote older than `cache_ttl - interval` would expire before the next
    tick, so the tick refetches it. Never negative.
    """
    return max(cache_ttl - interval, 0.0)


def make_price_refresh(
        provider: PriceProvider,
        symbols: Callable[[], Iterable[str]],
        max_age: float = REFRESH_PRICE_MAX_AGE_SECONDS,
) -> Callable[[], Awaitable[dict]]:
    """
    Build the tick callback that warms the price cache for held symbols.

    Uses the sequential fetch so the refresh stays under free-tier source
    rate limits; symbols fresher than `max_age` are served from cache. Pass
    refresh_max_age(cache_ttl, interval) so valuations keep hitting a warm cache.
    """

    async def _refresh() -> dict:
        held = list(symbols())
        if not held:
            return {}
        prices = await provider.fetch_prices_sequential(held, max_age=max_age)
        logger.info(f"Background refresh: {len(prices)}/{len(held)} prices")
        return prices

    return _refresh
