# pricewatch/notifiers/notifier.py

"""Status and alert notifications for price checks.

The :class:`Notifier` is built once from settings and handed to the
orchestrator.  Every check produces one status push; a failed fetch
produces one error push; an actual price change additionally produces
one email alert.

Delivery failures are always logged.  Email failures are absorbed.
Push failures follow ``PUSHOVER_FAILURE_POLICY``: ``"absorb"`` reports
them in the returned :class:`NotifyResult`, ``"raise"`` re-raises the
:class:`NotificationError` to the caller (which aborts the run).
"""

import logging
from decimal import Decimal

from pricewatch.config.settings import Settings
from pricewatch.errors import NotificationError
from pricewatch.models.check_outcome import CheckOutcome
from pricewatch.models.results import NotifyResult
from pricewatch.notifiers.base import NotificationChannel
from pricewatch.notifiers.email_channel import EmailChannel
from pricewatch.notifiers.pushover import PushoverChannel

logger = logging.getLogger("pricewatch.notifier")

CHECK_TITLE = "Domain Price Check"
ERROR_TITLE = "Price Check Error"
TEST_TITLE = "Test from pricewatch"
RUN_ERROR_PRIORITY = 1


def format_status_message(
    domain: str, price: Decimal, outcome: CheckOutcome,
) -> str:
    """``'example.com - $9.99 - increased by $1.00'``"""
    return f"{domain} - ${price:.2f} - {outcome.label}"


def build_alert_subject(
    prefix: str, domain: str, outcome: CheckOutcome,
) -> str:
    return (
        f"{prefix}{domain} {outcome.kind.value} "
        f"by ${outcome.formatted_delta}"
    )


def build_alert_html(
    domain: str,
    old_price: Decimal,
    new_price: Decimal,
    outcome: CheckOutcome,
    page_url: str,
) -> str:
    direction = outcome.kind.value
    signed = new_price - old_price
    return (
        "<h2>Domain Price Alert</h2>"
        f"<p>The price for <strong>{domain}</strong> has {direction}.</p>"
        "<p>"
        f"Old Price: ${old_price:.2f}<br>"
        f"New Price: ${new_price:.2f}<br>"
        f"Difference: {signed:+.2f} ({direction})"
        "</p>"
        f'<p>Check it out at: <a href="{page_url}">{page_url}</a></p>'
    )


class Notifier:
    """Routes check results to the push and email channels."""

    def __init__(
        self,
        push: NotificationChannel,
        email: NotificationChannel,
        *,
        push_failure_policy: str = "absorb",
        subject_prefix: str = "",
        page_url_template: str = "{domain}",
    ) -> None:
        self.push = push
        self.email = email
        self.push_failure_policy = push_failure_policy
        self.subject_prefix = subject_prefix
        self.page_url_template = page_url_template

    @classmethod
    def from_settings(cls, settings: Settings) -> "Notifier":
        """Build the notifier and both channels from *settings*."""
        return cls(
            push=PushoverChannel(settings.pushover),
            email=EmailChannel(settings.email),
            push_failure_policy=settings.pushover.failure_policy,
            subject_prefix=settings.email.subject_prefix,
            page_url_template=settings.SEARCH_URL,
        )

    def close(self) -> None:
        """Release both channels."""
        self.push.close()
        self.email.close()

    # ── Delivery helpers ─────────────────────────────────

    async def _push(
        self,
        title: str,
        message: str,
        priority: int | None = None,
        *,
        propagate: bool | None = None,
    ) -> NotifyResult:
        if not self.push.enabled:
            logger.info(
                "Pushover notifications are disabled; skipping '%s'",
                title,
            )
            return NotifyResult(self.push.name, success=True, skipped=True)
        if propagate is None:
            propagate = self.push_failure_policy == "raise"
        try:
            await self.push.send(title, message, priority=priority)
        except NotificationError as exc:
            logger.error(
                "Error sending Pushover notification '%s': %s",
                title,
                exc,
                exc_info=True,
            )
            if propagate:
                raise
            return NotifyResult(
                self.push.name, success=False, error=str(exc),
            )
        return NotifyResult(self.push.name, success=True)

    async def _email(self, subject: str, html_body: str) -> NotifyResult:
        if not self.email.enabled:
            logger.debug("Email alerts are disabled; skipping '%s'", subject)
            return NotifyResult(self.email.name, success=True, skipped=True)
        try:
            await self.email.send(subject, html_body)
        except NotificationError as exc:
            logger.error(
                "Error sending email alert '%s': %s",
                subject,
                exc,
                exc_info=True,
            )
            return NotifyResult(
                self.email.name, success=False, error=str(exc),
            )
        return NotifyResult(self.email.name, success=True)

    # ── Public API ───────────────────────────────────────

    async def notify_check(
        self, domain: str, price: Decimal, outcome: CheckOutcome,
    ) -> NotifyResult:
        """Push the status line for a successful check."""
        return await self._push(
            CHECK_TITLE, format_status_message(domain, price, outcome),
        )

    async def notify_fetch_failure(self, domain: str) -> NotifyResult:
        """Push the error line for a domain whose price could not be read."""
        return await self._push(
            ERROR_TITLE, f"Failed to check price for {domain}.",
        )

    async def notify_change(
        self,
        domain: str,
        old_price: Decimal,
        new_price: Decimal,
        outcome: CheckOutcome,
    ) -> NotifyResult:
        """Email an alert for an increase or decrease."""
        if not outcome.is_change:
            msg = f"No alert for outcome {outcome.kind.value!r}"
            raise ValueError(msg)
        logger.info(
            "Price change detected for %s! Old: $%s, New: $%s",
            domain,
            old_price,
            new_price,
        )
        subject = build_alert_subject(self.subject_prefix, domain, outcome)
        html = build_alert_html(
            domain,
            old_price,
            new_price,
            outcome,
            self.page_url_template.format(domain=domain),
        )
        return await self._email(subject, html)

    async def notify_run_error(self, exc: BaseException) -> NotifyResult:
        """Best-effort push about a run that died; never raises."""
        try:
            return await self._push(
                ERROR_TITLE,
                f"An error occurred: {exc}",
                RUN_ERROR_PRIORITY,
                propagate=False,
            )
        except Exception as send_exc:
            logger.error(
                "Could not report run error: %s", send_exc, exc_info=True,
            )
            return NotifyResult(
                self.push.name, success=False, error=str(send_exc),
            )

    async def send_test_notification(self) -> NotifyResult:
        """Push a fixed test message, always reporting failures."""
        return await self._push(
            TEST_TITLE,
            "This is a test notification from the domain price checker.",
            propagate=False,
        )
