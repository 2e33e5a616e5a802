# pricewatch/storage/history_store.py

"""JSON-file price history store.

Document layout (unknown keys at the top level and per domain are kept
as-is on rewrite)::

    {
      "domains": {
        "example.com": {
          "priceHistory": [
            {"date": "2026-01-01T09:00:00.000Z", "price": 9.99}
          ]
        }
      }
    }
"""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, cast

from pricewatch.models.observation import (
    DomainHistory,
    Observation,
    PriceStore,
)
from pricewatch.models.results import PersistResult

logger = logging.getLogger("pricewatch.history")

_DOMAINS_KEY = "domains"
_HISTORY_KEY = "priceHistory"


def format_timestamp(ts: datetime) -> str:
    """Render *ts* as UTC ISO-8601 with milliseconds and a ``Z`` suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    utc = ts.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO-8601 string; naive values are taken as UTC."""
    ts = datetime.fromisoformat(raw)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _parse_entry(raw: object) -> Observation:
    if not isinstance(raw, dict):
        msg = f"History entry must be an object, got {type(raw).__name__}"
        raise ValueError(msg)
    entry = cast(dict[str, Any], raw)
    price = entry["price"]
    if isinstance(price, bool) or not isinstance(
        price, (int, Decimal, str)
    ):
        msg = f"Invalid price value: {price!r}"
        raise ValueError(msg)
    return Observation(
        timestamp=parse_timestamp(str(entry["date"])),
        price=Decimal(str(price)),
    )


def _parse_domain(raw: object) -> DomainHistory:
    if not isinstance(raw, dict):
        msg = f"Domain record must be an object, got {type(raw).__name__}"
        raise ValueError(msg)
    record = dict(cast(dict[str, Any], raw))
    entries = record.pop(_HISTORY_KEY, [])
    if not isinstance(entries, list):
        msg = f"'{_HISTORY_KEY}' must be a list"
        raise ValueError(msg)
    return DomainHistory(
        observations=[_parse_entry(e) for e in cast(list[object], entries)],
        extra=record,
    )


def store_from_document(document: object) -> PriceStore:
    """Build a :class:`PriceStore` from a decoded JSON document."""
    if not isinstance(document, dict):
        msg = "History document must be a JSON object"
        raise ValueError(msg)
    top = dict(cast(dict[str, Any], document))
    domains = top.pop(_DOMAINS_KEY, None) or {}
    if not isinstance(domains, dict):
        msg = f"'{_DOMAINS_KEY}' must be an object"
        raise ValueError(msg)
    return PriceStore(
        domains={
            str(name): _parse_domain(record)
            for name, record in cast(dict[str, Any], domains).items()
        },
        extra=top,
    )


def store_to_document(store: PriceStore) -> dict[str, Any]:
    """Serialise *store* to a JSON-ready dict, preserving entry order."""
    domains: dict[str, Any] = {}
    for name, history in store.domains.items():
        domains[name] = {
            **history.extra,
            _HISTORY_KEY: [
                {
                    "date": format_timestamp(obs.timestamp),
                    "price": float(obs.price),
                }
                for obs in history.observations
            ],
        }
    return {**store.extra, _DOMAINS_KEY: domains}


class HistoryStore:
    """Loads and saves the full domain price history file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> PriceStore:
        """Read the history file.

        A missing file, an unreadable file or a malformed document all
        yield an empty store; the error is logged, never raised.
        """
        if not self.path.exists():
            logger.info(
                "No history at %s, starting empty", self.path,
            )
            return PriceStore()
        try:
            with open(self.path, encoding="utf-8") as f:
                document = json.load(f, parse_float=Decimal)
            store = store_from_document(document)
        except (
            OSError, ValueError, KeyError, TypeError, InvalidOperation,
        ) as exc:
            logger.error(
                "Error loading price history from %s: %s",
                self.path,
                exc,
                exc_info=True,
            )
            return PriceStore()
        logger.debug(
            "Loaded history for %d domain(s) from %s",
            len(store.domains),
            self.path,
        )
        return store

    def save(self, store: PriceStore) -> PersistResult:
        """Overwrite the history file with *store*.

        The document is written to a temporary sibling and then renamed
        over the target.  Failures are logged and reported, not raised.
        """
        try:
            document = store_to_document(store)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                dir=self.path.parent,
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2)
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except (OSError, ValueError, TypeError) as exc:
            logger.error(
                "Error saving price history to %s: %s",
                self.path,
                exc,
                exc_info=True,
            )
            return PersistResult(path=self.path, ok=False, error=str(exc))

        logger.info("Price history saved to %s", self.path)
        return PersistResult(path=self.path, ok=True)

    @staticmethod
    def record_observation(
        store: PriceStore,
        domain: str,
        price: Decimal,
        timestamp: datetime,
    ) -> tuple[PriceStore, Observation | None]:
        """Append a reading for *domain* and return the prior last one.

        The prior observation is captured before the append so callers
        compare against the previous state.
        """
        history = store.history_for(domain)
        prior = history.last
        history.append(Observation(timestamp=timestamp, price=price))
        return store, prior
