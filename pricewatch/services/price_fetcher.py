# pricewatch/services/price_fetcher.py

"""Retry-governed price fetching around a single scrape capability."""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from pricewatch.config.settings import Settings
from pricewatch.errors import FrameDetachedError
from pricewatch.models.results import FetchResult
from pricewatch.scrapers.base_scraper import BaseScraper

logger = logging.getLogger("pricewatch.fetcher")

Sleep = Callable[[float], Awaitable[None]]


class PriceFetcher:
    """Fetch one domain's price with a bounded retry policy.

    Each attempt runs :meth:`BaseScraper.scrape` under a hard timeout.
    Only a detached navigation frame is retried (after ``RETRY_DELAY``
    seconds, while attempts remain); every other error ends the fetch
    for that domain at once.
    """

    def __init__(
        self,
        scraper: BaseScraper,
        settings: Settings,
        sleep: Sleep | None = None,
    ) -> None:
        self.scraper = scraper
        self.settings = settings
        self._sleep: Sleep = sleep or asyncio.sleep

    def is_transient(self, exc: BaseException) -> bool:
        """Return True if *exc* is the retryable detached-frame error."""
        if isinstance(exc, FrameDetachedError):
            return True
        message = str(exc).lower()
        return any(
            marker in message
            for marker in self.settings.TRANSIENT_ERROR_MARKERS
        )

    async def _attempt(self, domain: str) -> FetchResult:
        text = await asyncio.wait_for(
            self.scraper.scrape(domain),
            timeout=self.settings.ATTEMPT_TIMEOUT,
        )
        price = self.scraper.parse_price(text)
        return FetchResult(domain=domain, price=price)

    async def fetch(self, domain: str) -> FetchResult:
        """Return the current price for *domain* or a failed result."""
        logger.info("Checking price for %s", domain)
        max_attempts = self.settings.MAX_ATTEMPTS

        for attempt in range(1, max_attempts + 1):
            logger.debug("Attempt %d for %s", attempt, domain)
            try:
                result = await self._attempt(domain)
            except Exception as exc:
                logger.warning(
                    "Attempt %d failed for %s: %s",
                    attempt,
                    domain,
                    str(exc) or type(exc).__name__,
                )
                if self.is_transient(exc) and attempt < max_attempts:
                    logger.info(
                        "Retrying %s in %.0f seconds",
                        domain,
                        self.settings.RETRY_DELAY,
                    )
                    await self._sleep(self.settings.RETRY_DELAY)
                    continue
                logger.error(
                    "Giving up on %s after %d attempt(s)",
                    domain,
                    attempt,
                    exc_info=exc,
                )
                return FetchResult(
                    domain=domain,
                    error=str(exc) or type(exc).__name__,
                    attempts=attempt,
                )

            logger.info("Current price for %s: $%s", domain, result.price)
            return FetchResult(
                domain=domain, price=result.price, attempts=attempt,
            )

        # Only reachable with MAX_ATTEMPTS < 1
        return FetchResult(
            domain=domain,
            error=f"No attempts made ({max_attempts=})",
            attempts=0,
        )
