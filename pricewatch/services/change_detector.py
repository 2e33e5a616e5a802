# pricewatch/services/change_detector.py

"""Classifies a fresh price against the previous observation."""

from decimal import Decimal

from pricewatch.models.check_outcome import CheckOutcome
from pricewatch.models.observation import Observation


class ChangeDetector:
    """Stateless comparison of a new price with the prior reading."""

    @staticmethod
    def classify(
        new_price: Decimal, prior: Observation | None,
    ) -> CheckOutcome:
        """Return the outcome of *new_price* relative to *prior*."""
        if prior is None:
            return CheckOutcome.first_observation()
        delta = new_price - prior.price
        if delta == 0:
            return CheckOutcome.unchanged()
        if delta > 0:
            return CheckOutcome.increased(delta)
        return CheckOutcome.decreased(-delta)
