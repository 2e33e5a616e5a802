# tests/test_history_store.py

"""Tests for the JSON price history store."""

import json
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any
from unittest.mock import patch

from pricewatch.models.observation import PriceStore
from pricewatch.storage.history_store import (
    HistoryStore,
    format_timestamp,
    parse_timestamp,
)

T0 = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


class TestTimestamps(unittest.TestCase):
    """ISO-8601 helpers."""

    def test_format_utc_z_suffix(self) -> None:
        """Timestamps are written in UTC with milliseconds and 'Z'."""
        self.assertEqual(format_timestamp(T0), "2026-03-01T09:30:00.000Z")

    def test_format_converts_offsets(self) -> None:
        """Non-UTC instants are converted to UTC."""
        plus_two = timezone(timedelta(hours=2))
        ts = datetime(2026, 3, 1, 11, 30, tzinfo=plus_two)
        self.assertEqual(format_timestamp(ts), "2026-03-01T09:30:00.000Z")

    def test_parse_z_suffix(self) -> None:
        """Timestamps written by older checkers parse as UTC."""
        self.assertEqual(parse_timestamp("2026-03-01T09:30:00.000Z"), T0)

    def test_parse_naive_as_utc(self) -> None:
        """Naive timestamps are assumed to be UTC."""
        self.assertEqual(parse_timestamp("2026-03-01T09:30:00"), T0)


class TestHistoryStore(unittest.TestCase):
    """Load / save / record behaviour."""

    def setUp(self) -> None:
        """Point the store at a fresh temp directory."""
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.path = self.tmp_dir / "history.json"
        self.store = HistoryStore(self.path)

    def _write(self, document: Any) -> None:
        self.path.write_text(json.dumps(document), encoding="utf-8")

    # ── load ─────────────────────────────────────────────

    def test_load_missing_file_is_empty(self) -> None:
        """A missing file yields an empty store."""
        loaded = self.store.load()
        self.assertEqual(loaded.domains, {})

    def test_load_corrupt_json_is_empty(self) -> None:
        """Malformed JSON is logged and yields an empty store."""
        self.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("pricewatch.history", level="ERROR"):
            loaded = self.store.load()
        self.assertEqual(loaded.domains, {})

    def test_load_wrong_shape_is_empty(self) -> None:
        """A document whose domains is not an object yields empty."""
        self._write({"domains": ["a.test"]})
        with self.assertLogs("pricewatch.history", level="ERROR"):
            loaded = self.store.load()
        self.assertEqual(loaded.domains, {})

    def test_load_bad_entry_is_empty(self) -> None:
        """An entry without a date is a parse error."""
        self._write(
            {"domains": {"a.test": {"priceHistory": [{"price": 1}]}}}
        )
        with self.assertLogs("pricewatch.history", level="ERROR"):
            loaded = self.store.load()
        self.assertEqual(loaded.domains, {})

    def test_load_without_domains_key(self) -> None:
        """A document without 'domains' loads as an empty mapping."""
        self._write({"version": 2})
        loaded = self.store.load()
        self.assertEqual(loaded.domains, {})
        self.assertEqual(loaded.extra, {"version": 2})

    def test_load_existing_history(self) -> None:
        """Entries load in file order with exact decimal prices."""
        self.path.write_text(
            '{"domains": {"a.test": {"priceHistory": ['
            '{"date": "2026-03-01T09:30:00.000Z", "price": 9.99},'
            '{"date": "2026-03-02T09:30:00.000Z", "price": 12}'
            "]}}}",
            encoding="utf-8",
        )
        loaded = self.store.load()
        history = loaded.domains["a.test"]
        self.assertEqual(
            [o.price for o in history.observations],
            [Decimal("9.99"), Decimal("12")],
        )
        self.assertEqual(history.observations[0].timestamp, T0)
        self.assertIsInstance(history.observations[0].price, Decimal)

    # ── record_observation ───────────────────────────────

    def test_record_creates_history_lazily(self) -> None:
        """The first reading creates the domain with one entry."""
        store = PriceStore()
        store, prior = HistoryStore.record_observation(
            store, "a.test", Decimal("10.00"), T0,
        )
        self.assertIsNone(prior)
        self.assertEqual(len(store.domains["a.test"]), 1)

    def test_record_returns_prior_before_append(self) -> None:
        """The returned prior is the previous last, not the new one."""
        store = PriceStore()
        HistoryStore.record_observation(store, "a.test", Decimal("5"), T0)
        _, prior = HistoryStore.record_observation(
            store, "a.test", Decimal("7.5"), T0 + timedelta(days=1),
        )
        self.assertIsNotNone(prior)
        assert prior is not None
        self.assertEqual(prior.price, Decimal("5"))
        self.assertEqual(store.domains["a.test"].last.price, Decimal("7.5"))  # type: ignore[union-attr]

    def test_record_is_append_only(self) -> None:
        """Each reading adds exactly one entry and keeps earlier ones."""
        store = PriceStore()
        prices = ["3", "4", "4", "2"]
        for i, price in enumerate(prices):
            HistoryStore.record_observation(
                store, "a.test", Decimal(price), T0 + timedelta(days=i),
            )
            self.assertEqual(len(store.domains["a.test"]), i + 1)
        self.assertEqual(
            [str(o.price) for o in store.domains["a.test"].observations],
            prices,
        )

    # ── save ─────────────────────────────────────────────

    def test_round_trip_preserves_order(self) -> None:
        """load(save(S)).domains matches S for recorded observations."""
        store = PriceStore()
        for i, price in enumerate(["10.00", "7.50", "12.25"]):
            HistoryStore.record_observation(
                store, "a.test", Decimal(price), T0 + timedelta(hours=i),
            )
        HistoryStore.record_observation(store, "b.test", Decimal("1"), T0)

        result = self.store.save(store)
        self.assertTrue(result.ok)
        reloaded = self.store.load()

        self.assertEqual(list(reloaded.domains), ["a.test", "b.test"])
        for name, history in store.domains.items():
            self.assertEqual(
                reloaded.domains[name].observations,
                history.observations,
            )

    def test_saved_document_format(self) -> None:
        """The file is pretty-printed with date strings and numbers."""
        store = PriceStore()
        HistoryStore.record_observation(
            store, "a.test", Decimal("10.00"), T0,
        )
        self.store.save(store)

        text = self.path.read_text(encoding="utf-8")
        self.assertIn('\n  "domains"', text)
        document = json.loads(text)
        entry = document["domains"]["a.test"]["priceHistory"][0]
        self.assertEqual(entry["date"], "2026-03-01T09:30:00.000Z")
        self.assertEqual(entry["price"], 10.0)

    def test_unknown_keys_survive_rewrite(self) -> None:
        """Extra top-level and per-domain keys are written back."""
        self._write({
            "generator": "legacy",
            "domains": {
                "a.test": {
                    "note": "keep me",
                    "priceHistory": [
                        {"date": "2026-03-01T09:30:00.000Z", "price": 5},
                    ],
                },
            },
        })
        loaded = self.store.load()
        HistoryStore.record_observation(
            loaded, "a.test", Decimal("6"), T0 + timedelta(days=1),
        )
        self.store.save(loaded)

        document = json.loads(self.path.read_text(encoding="utf-8"))
        self.assertEqual(document["generator"], "legacy")
        self.assertEqual(document["domains"]["a.test"]["note"], "keep me")
        self.assertEqual(
            [e["price"] for e in document["domains"]["a.test"]["priceHistory"]],
            [5, 6],
        )

    def test_save_failure_is_reported_not_raised(self) -> None:
        """A write error returns a failed PersistResult."""
        with patch(
            "pricewatch.storage.history_store.os.replace",
            side_effect=OSError("disk full"),
        ), self.assertLogs("pricewatch.history", level="ERROR"):
            result = self.store.save(PriceStore())
        self.assertFalse(result.ok)
        self.assertIn("disk full", result.error or "")
        self.assertFalse(self.path.exists())
        self.assertEqual(list(self.tmp_dir.iterdir()), [])

    def test_save_creates_parent_directory(self) -> None:
        """Saving into a missing directory creates it."""
        nested = HistoryStore(self.tmp_dir / "data" / "history.json")
        result = nested.save(PriceStore())
        self.assertTrue(result.ok)
        self.assertTrue(nested.path.exists())


if __name__ == "__main__":
    unittest.main()
