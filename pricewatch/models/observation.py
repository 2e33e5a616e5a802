# pricewatch/models/observation.py

"""Price observation and per-domain history models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Observation:
    """A single price reading for a domain at a point in time."""

    timestamp: datetime
    price: Decimal


@dataclass
class DomainHistory:
    """Append-only, chronological price readings for one domain.

    ``extra`` keeps keys found on disk that this version does not know
    about, so that a rewrite does not drop them.
    """

    observations: list[Observation] = field(
        default_factory=lambda: list[Observation]()
    )
    extra: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    @property
    def last(self) -> Observation | None:
        """The most recent observation, if any."""
        return self.observations[-1] if self.observations else None

    def append(self, observation: Observation) -> None:
        self.observations.append(observation)

    def __len__(self) -> int:
        return len(self.observations)


@dataclass
class PriceStore:
    """Mapping of domain name to its price history."""

    domains: dict[str, DomainHistory] = field(
        default_factory=lambda: dict[str, DomainHistory]()
    )
    extra: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )

    def history_for(self, domain: str) -> DomainHistory:
        """Return the history for *domain*, creating an empty one lazily."""
        history = self.domains.get(domain)
        if history is None:
            history = DomainHistory()
            self.domains[domain] = history
        return history
