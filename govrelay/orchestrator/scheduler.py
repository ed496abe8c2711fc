"""Absolute-deadline waits for the orchestrator."""
import asyncio
import time
from typing import Awaitable, Callable, Optional

from govrelay.config import common_settings as settings
from govrelay.utils.logger import logger


class DeadlineTimer:
    """
    Waits until a wall-clock deadline.

    The deadline is kept as an absolute timestamp and the wait is re-armed in
    chunks of at most `max_delay` seconds, so far-away deadlines never need a
    single huge delay and clock adjustments are picked up at each re-arm.

    Usage:
        timer = DeadlineTimer()
        await timer.wait_until(proposal.deadline)
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        max_delay: Optional[float] = None,
    ):
        self.clock = clock
        self.sleep = sleep
        self.max_delay = settings.MAX_TIMER_DELAY_SECONDS if max_delay is None else max_delay
        if self.max_delay <= 0:
            raise ValueError("max_delay must be positive")

    def delay_until(self, deadline: float) -> float:
        """Seconds left until `deadline`, clamped to zero."""
        return max(0.0, deadline - self.clock())

    async def wait_until(self, deadline: float) -> None:
        while True:
            delay = self.delay_until(deadline)
            if delay <= self.max_delay:
                await self.sleep(delay)
                return
            logger.debug(f"[DeadlineTimer] {delay:.0f}s left, re-arming after {self.max_delay:.0f}s")
            await self.sleep(self.max_delay)
