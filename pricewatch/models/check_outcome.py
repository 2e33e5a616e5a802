# pricewatch/models/check_outcome.py

"""Classification of a single price check."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OutcomeKind(Enum):
    """What a check found compared to the previous reading."""

    FIRST_OBSERVATION = "first-observation"
    UNCHANGED = "unchanged"
    INCREASED = "increased"
    DECREASED = "decreased"
    FETCH_FAILED = "fetch-failed"


@dataclass(frozen=True)
class CheckOutcome:
    """Result of comparing a fresh price with the last stored one.

    ``delta`` is the non-negative magnitude of the change and is only
    set for ``INCREASED`` and ``DECREASED``.
    """

    kind: OutcomeKind
    delta: Decimal | None = None

    @classmethod
    def first_observation(cls) -> "CheckOutcome":
        return cls(OutcomeKind.FIRST_OBSERVATION)

    @classmethod
    def unchanged(cls) -> "CheckOutcome":
        return cls(OutcomeKind.UNCHANGED)

    @classmethod
    def increased(cls, delta: Decimal) -> "CheckOutcome":
        return cls(OutcomeKind.INCREASED, delta)

    @classmethod
    def decreased(cls, delta: Decimal) -> "CheckOutcome":
        return cls(OutcomeKind.DECREASED, delta)

    @classmethod
    def fetch_failed(cls) -> "CheckOutcome":
        return cls(OutcomeKind.FETCH_FAILED)

    @property
    def is_change(self) -> bool:
        """True for an increase or a decrease."""
        return self.kind in (OutcomeKind.INCREASED, OutcomeKind.DECREASED)

    @property
    def formatted_delta(self) -> str:
        """Delta magnitude with two decimals (``"0.00"`` when unset)."""
        return f"{self.delta or Decimal(0):.2f}"

    @property
    def label(self) -> str:
        """Short human-readable summary used in status messages."""
        if self.kind is OutcomeKind.FIRST_OBSERVATION:
            return "No previous data"
        if self.is_change:
            return f"{self.kind.value} by ${self.formatted_delta}"
        return self.kind.value
