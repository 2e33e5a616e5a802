# pricewatch/scrapers/base_scraper.py

"""Abstract base class for price page scrapers."""

import logging
import re
from abc import ABC, abstractmethod
from decimal import Decimal

from pricewatch.config.settings import Settings
from pricewatch.errors import PriceParseError

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")
_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


class BaseScraper(ABC):
    """Abstract base class for price page scrapers.

    A scraper is the single external capability the fetcher drives: one
    call to :meth:`scrape` opens a browser session, reads the raw price
    text, and releases the session on every exit path.
    """

    def __init__(self, source_name: str, settings: Settings) -> None:
        self.source_name = source_name
        self.settings = settings
        self.logger = logging.getLogger(
            f"pricewatch.scraper.{source_name}"
        )

    @staticmethod
    def parse_price(text: str | None) -> Decimal:
        """Parse a price such as ``'$1,299.00 /yr'`` into a Decimal.

        Every character other than a digit or ``.`` is stripped first,
        so the result is never negative.  The longest leading number of
        what remains is used; trailing dots and digits after a second
        dot are ignored (``'$9.99 / yr.'`` reads as ``9.99``).
        """
        cleaned = _NON_NUMERIC_RE.sub("", text or "")
        match = _LEADING_NUMBER_RE.match(cleaned)
        if match is None:
            msg = f"Unparseable price text: {text!r}"
            raise PriceParseError(msg)
        return Decimal(match.group())

    @abstractmethod
    def page_url(self, domain: str) -> str:
        """Return the page that publishes the price for *domain*."""
        ...

    @abstractmethod
    async def scrape(self, domain: str) -> str:
        """Return the raw price text published for *domain*."""
        ...
