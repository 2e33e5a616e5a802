# pricewatch/services/price_check_orchestrator.py

"""Drives one sequential price-check run over all tracked domains."""

import asyncio
import logging
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum

from pricewatch.config.settings import Settings
from pricewatch.models.check_outcome import CheckOutcome
from pricewatch.models.observation import PriceStore
from pricewatch.models.results import FetchResult, RunSummary
from pricewatch.notifiers.notifier import Notifier
from pricewatch.services.change_detector import ChangeDetector
from pricewatch.services.pacing import PacingPolicy
from pricewatch.services.price_fetcher import PriceFetcher
from pricewatch.storage.history_store import HistoryStore

logger = logging.getLogger("pricewatch.orchestrator")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunState(Enum):
    """Where the orchestrator is within a run."""

    IDLE = "idle"
    LOADING = "loading"
    FETCHING = "fetching"
    RECORDING = "recording"
    SKIPPING = "skipping"
    NOTIFYING = "notifying"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class PriceCheckOrchestrator:
    """Coordinates fetch, record, detect, notify and persist.

    Domains are processed strictly one after another, in the configured
    order, with a pacing delay between them.  The store is loaded once
    and saved once per run; if an error escapes the loop the store is
    still saved (best effort) before the error propagates.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: PriceFetcher,
        history: HistoryStore,
        notifier: Notifier,
        pacer: PacingPolicy | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self.history = history
        self.notifier = notifier
        self.pacer = pacer or PacingPolicy(settings.PACING_DELAY)
        self.clock = clock
        self.state = RunState.IDLE

    def _enter(self, state: RunState, domain: str | None = None) -> None:
        self.state = state
        if domain is None:
            logger.debug("Run state -> %s", state.value)
        else:
            logger.debug("Run state -> %s (%s)", state.value, domain)

    # ── Per-domain step ──────────────────────────────────

    async def _check_domain(
        self, store: PriceStore, domain: str, summary: RunSummary,
    ) -> None:
        self._enter(RunState.FETCHING, domain)
        result: FetchResult = await self.fetcher.fetch(domain)
        summary.checked += 1

        if result.price is None:
            self._enter(RunState.SKIPPING, domain)
            logger.error(
                "Failed to retrieve current price for %s: %s",
                domain,
                result.error,
            )
            summary.failed += 1
            summary.outcomes.append(
                (domain, CheckOutcome.fetch_failed())
            )
            self._enter(RunState.NOTIFYING, domain)
            await self.notifier.notify_fetch_failure(domain)
            return

        self._enter(RunState.RECORDING, domain)
        _, prior = self.history.record_observation(
            store, domain, result.price, self.clock(),
        )
        outcome = ChangeDetector.classify(result.price, prior)
        summary.succeeded += 1
        summary.outcomes.append((domain, outcome))

        self._enter(RunState.NOTIFYING, domain)
        await self.notifier.notify_check(domain, result.price, outcome)

        if prior is not None and outcome.is_change:
            summary.changed += 1
            await self.notifier.notify_change(
                domain, prior.price, result.price, outcome,
            )
        elif prior is not None:
            logger.info(
                "No price change for %s since last check (%s)",
                domain,
                prior.timestamp.date().isoformat(),
            )
        else:
            logger.info(
                "First price check recorded for %s. "
                "No previous data to compare.",
                domain,
            )

    # ── Run ──────────────────────────────────────────────

    async def run(self) -> RunSummary:
        """Check every configured domain once and persist the history.

        Returns an informational :class:`RunSummary`.  Any exception that
        escapes the domain loop is re-raised after the store is saved.
        """
        domains = self.settings.domains
        logger.info("Starting price check for %d domain(s)", len(domains))
        summary = RunSummary()

        self._enter(RunState.LOADING)
        store = await asyncio.to_thread(self.history.load)

        try:
            for index, domain in enumerate(domains):
                if index > 0:
                    await self.pacer.wait()
                await self._check_domain(store, domain, summary)
        except Exception:
            self._enter(RunState.FAILED)
            logger.error(
                "Run aborted after %d of %d domain(s); saving history",
                summary.checked,
                len(domains),
            )
            summary.persisted = await asyncio.to_thread(
                self.history.save, store,
            )
            raise

        self._enter(RunState.PERSISTING)
        summary.persisted = await asyncio.to_thread(self.history.save, store)
        self._enter(RunState.DONE)
        logger.info(
            "Price check finished: %d ok, %d failed, %d changed",
            summary.succeeded,
            summary.failed,
            summary.changed,
        )
        return summary
