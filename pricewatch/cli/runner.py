# pricewatch/cli/runner.py

"""Headless run entry points: price check, test push, history view."""

import logging

from rich.console import Console
from rich.table import Table

from pricewatch.config.settings import Settings
from pricewatch.notifiers.notifier import Notifier
from pricewatch.scrapers.base_scraper import BaseScraper
from pricewatch.scrapers.dynadot_scraper import DynadotScraper
from pricewatch.services.price_check_orchestrator import (
    PriceCheckOrchestrator,
)
from pricewatch.services.price_fetcher import PriceFetcher
from pricewatch.storage.history_store import HistoryStore

logger = logging.getLogger("pricewatch.cli")

# Stderr console for status messages
_err = Console(stderr=True)


def build_orchestrator(
    settings: Settings,
    notifier: Notifier,
    scraper: BaseScraper | None = None,
) -> PriceCheckOrchestrator:
    """Wire the run components from *settings*."""
    fetcher = PriceFetcher(scraper or DynadotScraper(settings), settings)
    return PriceCheckOrchestrator(
        settings=settings,
        fetcher=fetcher,
        history=HistoryStore(settings.data_path),
        notifier=notifier,
    )


async def run_price_check(
    settings: Settings,
    notifier: Notifier | None = None,
    orchestrator: PriceCheckOrchestrator | None = None,
) -> int:
    """Run one check over all domains and return an exit code (0=ok, 1=fail)."""
    notifier = notifier or Notifier.from_settings(settings)
    orchestrator = orchestrator or build_orchestrator(settings, notifier)

    _err.print(
        f"[bold]Checking {len(settings.domains)} domain(s)[/bold] "
        f"[dim]{', '.join(settings.domains)}[/dim]"
    )
    try:
        summary = await orchestrator.run()
    except Exception as exc:
        logger.critical(
            "An error occurred during the price check", exc_info=True,
        )
        _err.print(f"[red]Price check failed: {exc}[/red]")
        await notifier.notify_run_error(exc)
        return 1
    finally:
        notifier.close()

    for domain, outcome in summary.outcomes:
        _err.print(f"[dim]{domain}: {outcome.label}[/dim]")
    if summary.persisted is not None and not summary.persisted.ok:
        _err.print(
            f"[yellow]History not saved: {summary.persisted.error}[/yellow]"
        )
    _err.print(
        f"[green]✓ Price check completed: {summary.succeeded} ok, "
        f"{summary.failed} failed, {summary.changed} changed[/green]"
    )
    return 0


async def run_test_notification(settings: Settings) -> int:
    """Send a single test push and report the result."""
    notifier = Notifier.from_settings(settings)
    _err.print("[bold]Sending test notification...[/bold]")
    try:
        result = await notifier.send_test_notification()
    finally:
        notifier.close()
    if result.skipped:
        _err.print("[yellow]Pushover notifications are disabled.[/yellow]")
        return 1
    if not result.success:
        _err.print(f"[red]Test failed: {result.error}[/red]")
        return 1
    _err.print("[green]✓ Test notification sent[/green]")
    return 0


def show_history(settings: Settings) -> int:
    """Print the stored price history as a Rich table."""
    store = HistoryStore(settings.data_path).load()
    if not store.domains:
        _err.print(
            f"[yellow]No price history at {settings.data_path}[/yellow]"
        )
        return 0

    table = Table(
        title="Domain Price History",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Domain", style="bold")
    table.add_column("Checks", justify="right")
    table.add_column("Last Price", justify="right", style="green")
    table.add_column("Last Checked", style="dim")

    for domain, history in store.domains.items():
        last = history.last
        table.add_row(
            domain,
            str(len(history)),
            f"${last.price:.2f}" if last else "—",
            last.timestamp.isoformat(timespec="seconds") if last else "—",
        )

    Console().print(table)
    return 0
