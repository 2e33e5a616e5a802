# pricewatch/notifiers/base.py

"""Base class for notification transports."""

import logging
from abc import ABC, abstractmethod


class NotificationChannel(ABC):
    """A single delivery transport (push, email, ...).

    Implementations raise :class:`~pricewatch.errors.NotificationError`
    when a delivery fails; whether that error is absorbed or propagated
    is decided by :class:`~pricewatch.notifiers.notifier.Notifier`.
    """

    name: str = "channel"

    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled
        self.logger = logging.getLogger(f"pricewatch.notify.{self.name}")

    def close(self) -> None:
        """Release transport resources; a no-op by default."""

    @abstractmethod
    async def send(self, subject: str, body: str, **kwargs: object) -> None:
        """Deliver one message; raise ``NotificationError`` on failure."""
        ...
