# pricewatch/models/results.py

"""Explicit stage results passed between pipeline steps."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from pricewatch.models.check_outcome import CheckOutcome


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching one domain's price (with retries)."""

    domain: str
    price: Decimal | None = None
    error: str | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.price is not None


@dataclass(frozen=True)
class PersistResult:
    """Outcome of writing the store to disk."""

    path: Path
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class NotifyResult:
    """Outcome of one delivery attempt on one channel.

    A disabled channel reports ``success=True`` with ``skipped=True``.
    """

    channel: str
    success: bool
    skipped: bool = False
    error: str | None = None


@dataclass
class RunSummary:
    """Tally of a completed check run (informational only)."""

    checked: int = 0
    succeeded: int = 0
    failed: int = 0
    changed: int = 0
    outcomes: list[tuple[str, CheckOutcome]] = field(
        default_factory=lambda: list[tuple[str, CheckOutcome]]()
    )
    persisted: PersistResult | None = None
