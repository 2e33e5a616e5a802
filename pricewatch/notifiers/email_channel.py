# pricewatch/notifiers/email_channel.py

"""Email transport via SMTP.

Supports STARTTLS (587) or SSL (465).  Alerts are sent as HTML with a
plain-text alternative derived from the same markup.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

from bs4 import BeautifulSoup

from pricewatch.config.settings import EmailSettings
from pricewatch.errors import NotificationError
from pricewatch.notifiers.base import NotificationChannel


def html_to_text(html: str) -> str:
    """Flatten an HTML body into readable plain text."""
    text = BeautifulSoup(html, "lxml").get_text("\n")
    lines = (line.strip() for line in text.splitlines())
    return "\n".join(line for line in lines if line)


class EmailChannel(NotificationChannel):
    """Sends price-change alerts to a single recipient."""

    name = "email"

    def __init__(self, settings: EmailSettings) -> None:
        super().__init__(settings.enabled)
        self.settings = settings

    def build_message(self, subject: str, html_body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.settings.sender
        msg["To"] = self.settings.recipient
        msg.set_content(html_to_text(html_body))
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        host, port = self.settings.smtp_host, self.settings.smtp_port
        context = ssl.create_default_context()
        try:
            if self.settings.use_tls and port != 465:
                with smtplib.SMTP(
                    host, port, timeout=self.settings.timeout,
                ) as s:
                    s.ehlo()
                    s.starttls(context=context)
                    s.login(self.settings.sender, self.settings.password)
                    s.send_message(msg)
            else:
                with smtplib.SMTP_SSL(
                    host,
                    port,
                    context=context,
                    timeout=self.settings.timeout,
                ) as s:
                    s.login(self.settings.sender, self.settings.password)
                    s.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            err = f"SMTP delivery to {self.settings.recipient} failed: {exc}"
            raise NotificationError(err) from exc

    async def send(self, subject: str, body: str, **kwargs: object) -> None:
        """Email the HTML *body* with *subject* to the configured recipient."""
        msg = self.build_message(subject, body)
        await asyncio.to_thread(self._deliver, msg)
        self.logger.info(
            "Email sent to %s (subject=%s)",
            self.settings.recipient,
            subject,
        )
