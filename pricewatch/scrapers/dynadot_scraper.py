# pricewatch/scrapers/dynadot_scraper.py

"""Scraper for the Dynadot domain search page (JavaScript-rendered)."""

from bs4 import BeautifulSoup
from playwright.async_api import Browser, async_playwright
from playwright.async_api import Error as PlaywrightError

from pricewatch.config.settings import Settings
from pricewatch.errors import FrameDetachedError, ScrapeError
from pricewatch.scrapers.base_scraper import BaseScraper


class DynadotScraper(BaseScraper):
    """Reads the listed registration price for a domain on Dynadot.

    The search page renders prices client side, so each scrape launches
    a headless Chromium, waits for the price element and then reads it
    from the rendered HTML.  The browser lives exactly as long as one
    call to :meth:`scrape`.
    """

    def __init__(self, settings: Settings) -> None:
        super().__init__("dynadot", settings)

    def page_url(self, domain: str) -> str:
        return self.settings.SEARCH_URL.format(domain=domain)

    async def scrape(self, domain: str) -> str:
        """Render the search page for *domain* and return the price text."""
        url = self.page_url(domain)
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(
                headless=self.settings.HEADLESS,
                args=list(self.settings.BROWSER_ARGS),
            )
            try:
                html = await self._render(browser, url)
            except PlaywrightError as exc:
                if self._is_detached(exc):
                    raise FrameDetachedError(str(exc)) from exc
                msg = f"[{self.source_name}] {domain}: {exc}"
                raise ScrapeError(msg) from exc
            finally:
                await self._close_browser(browser)

        return self.extract_price_text(html)

    async def _render(self, browser: Browser, url: str) -> str:
        page = await browser.new_page()
        self.logger.debug("[%s] Navigating to %s", self.source_name, url)
        await page.goto(
            url,
            wait_until="networkidle",
            timeout=self.settings.NAVIGATION_TIMEOUT_MS,
        )
        await page.wait_for_selector(
            self.settings.PRICE_SELECTOR,
            timeout=self.settings.SELECTOR_TIMEOUT_MS,
        )
        return await page.content()

    async def _close_browser(self, browser: Browser) -> None:
        """Close the browser; a failing close must not mask the result."""
        try:
            await browser.close()
        except Exception as exc:
            self.logger.error(
                "[%s] Error closing browser: %s",
                self.source_name,
                exc,
                exc_info=True,
            )

    def _is_detached(self, exc: BaseException) -> bool:
        message = str(exc).lower()
        return any(
            marker in message
            for marker in self.settings.TRANSIENT_ERROR_MARKERS
        )

    def extract_price_text(self, html: str) -> str:
        """Return the stripped text of the price element in *html*."""
        soup = BeautifulSoup(html, "lxml")
        element = soup.select_one(self.settings.PRICE_SELECTOR)
        if element is None:
            msg = (
                f"[{self.source_name}] Price element "
                f"'{self.settings.PRICE_SELECTOR}' not found"
            )
            raise ScrapeError(msg)
        return element.get_text(strip=True)
