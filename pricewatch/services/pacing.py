# pricewatch/services/pacing.py

"""Fixed inter-domain pacing against the price site."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

logger = logging.getLogger("pricewatch.pacing")


class PacingPolicy:
    """Waits a fixed delay between consecutive domains.

    The sleep function is injectable so a whole run can be driven in
    tests without wall-clock waits.
    """

    def __init__(
        self,
        delay: float,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self.delay = delay
        self._sleep = sleep or asyncio.sleep

    async def wait(self) -> None:
        if self.delay <= 0:
            return
        logger.debug("Pacing for %.1fs before next domain", self.delay)
        await self._sleep(self.delay)
