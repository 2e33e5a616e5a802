# pricewatch/notifiers/pushover.py

"""Pushover push-notification transport."""

import asyncio
from typing import Any

from curl_cffi import requests as curl_requests

from pricewatch.config.settings import PushoverSettings
from pricewatch.errors import NotificationError
from pricewatch.notifiers.base import NotificationChannel


class PushoverChannel(NotificationChannel):
    """Sends status messages through the Pushover message API."""

    name = "pushover"

    def __init__(self, settings: PushoverSettings) -> None:
        super().__init__(settings.enabled)
        self.settings = settings
        self.session = curl_requests.Session()

    def _payload(
        self, title: str, message: str, priority: int,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "token": self.settings.token,
            "user": self.settings.user,
            "title": title,
            "message": message,
            "priority": priority,
        }
        if self.settings.device:
            payload["device"] = self.settings.device
        if self.settings.sound:
            payload["sound"] = self.settings.sound
        return payload

    def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = self.session.post(
                self.settings.api_url,
                data=payload,
                timeout=self.settings.timeout,
            )
        except Exception as exc:
            msg = f"Pushover request failed: {exc}"
            raise NotificationError(msg) from exc

        try:
            decoded = resp.json()
        except ValueError:
            decoded = None
        body: dict[str, Any] = decoded if isinstance(decoded, dict) else {}
        if resp.status_code != 200 or body.get("status") != 1:
            errors = body.get("errors") or [resp.text[:200]]
            if not isinstance(errors, list):
                errors = [errors]
            msg = (
                f"Pushover rejected message (HTTP {resp.status_code}): "
                f"{'; '.join(str(e) for e in errors)}"
            )
            raise NotificationError(msg)
        return body

    async def send(
        self,
        subject: str,
        body: str,
        priority: int | None = None,
        **kwargs: object,
    ) -> None:
        """Push *body* titled *subject* at *priority* (default from settings)."""
        level = self.settings.priority if priority is None else priority
        self.logger.debug(
            "Sending Pushover notification: title=%r priority=%d",
            subject,
            level,
        )
        result = await asyncio.to_thread(
            self._post, self._payload(subject, body, level),
        )
        self.logger.info(
            "Pushover notification sent: %s (request=%s)",
            subject,
            result.get("request", "?"),
        )

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()
