# pricewatch/config/settings.py

"""Central configuration for the domain price checker.

Settings are read once at process entry (``Settings.from_env``) and then
handed to every component explicitly.  The dataclasses are frozen; command
line overrides build a new value with :func:`dataclasses.replace`.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar

from dotenv import load_dotenv

from pricewatch.errors import ConfigError

load_dotenv()

FAILURE_POLICIES: frozenset[str] = frozenset({"absorb", "raise"})


def _get_env(name: str, default: str = "") -> str:
    return os.environ.get(name, default).strip()


def _parse_bool(value: str, default: bool = False) -> bool:
    if not value:
        return default
    return value.lower() in ("1", "true", "yes", "on")


def _parse_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        msg = f"{name} must be an integer, got {raw!r}"
        raise ConfigError(msg) from exc


def _parse_list(value: str) -> tuple[str, ...]:
    return tuple(
        item.strip() for item in value.split(",") if item.strip()
    )


@dataclass(frozen=True)
class PushoverSettings:
    """Push (status) channel settings."""

    enabled: bool = False
    user: str = ""
    token: str = ""
    priority: int = 0
    device: str = ""
    sound: str = "pushover"
    failure_policy: str = "absorb"  # "absorb" or "raise"
    api_url: str = "https://api.pushover.net/1/messages.json"
    timeout: int = 15


@dataclass(frozen=True)
class EmailSettings:
    """Email (alert) channel settings."""

    enabled: bool = False
    sender: str = ""
    password: str = ""
    recipient: str = ""
    subject_prefix: str = "Domain Price Alert: "
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587               # 587 (STARTTLS) or 465 (SSL)
    use_tls: bool = True
    timeout: int = 20


@dataclass(frozen=True)
class Settings:
    """Central configuration for the domain price checker."""

    # --- Tracked identifiers (order-significant) ---
    domains: tuple[str, ...] = ()

    # --- Durable store ---
    data_path: Path = Path("domain-price-history.json")

    # --- Fetching ---
    MAX_ATTEMPTS: int = 3               # Scrape attempts per domain
    RETRY_DELAY: float = 5.0            # Seconds before retrying a detached frame
    ATTEMPT_TIMEOUT: float = 120.0      # Hard cap per attempt, in seconds
    NAVIGATION_TIMEOUT_MS: int = 60000  # Owned by the browser session
    SELECTOR_TIMEOUT_MS: int = 30000    # Owned by the browser session
    TRANSIENT_ERROR_MARKERS: tuple[str, ...] = (
        "navigating frame was detached",
        "frame was detached",
    )

    # --- Pacing ---
    PACING_DELAY: float = 5.0           # Seconds between domains

    # --- Page ---
    SEARCH_URL: str = "https://www.dynadot.com/domain/search?domain={domain}"
    PRICE_SELECTOR: str = ".domain-price"
    HEADLESS: bool = True
    BROWSER_ARGS: tuple[str, ...] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
    )

    # --- Channels ---
    pushover: PushoverSettings = field(default_factory=PushoverSettings)
    email: EmailSettings = field(default_factory=EmailSettings)

    # --- Paths ---
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: ClassVar[Path] = BASE_DIR / "logs"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables (and ``.env``)."""
        data_path = _get_env("PRICEWATCH_DATA_PATH")
        pushover = PushoverSettings(
            enabled=_parse_bool(_get_env("PUSHOVER_ENABLED")),
            user=_get_env("PUSHOVER_USER"),
            token=_get_env("PUSHOVER_TOKEN"),
            priority=_parse_int("PUSHOVER_PRIORITY", 0),
            device=_get_env("PUSHOVER_DEVICE"),
            sound=_get_env("PUSHOVER_SOUND", "pushover"),
            failure_policy=(
                _get_env("PUSHOVER_FAILURE_POLICY", "absorb").lower()
            ),
        )
        email = EmailSettings(
            enabled=_parse_bool(_get_env("EMAIL_ENABLED")),
            sender=_get_env("EMAIL_FROM"),
            password=_get_env("EMAIL_PASSWORD"),
            recipient=_get_env("EMAIL_TO"),
            subject_prefix=os.environ.get(
                "EMAIL_SUBJECT_PREFIX", "Domain Price Alert: "
            ),
            smtp_host=_get_env("EMAIL_SMTP_HOST", "smtp.gmail.com"),
            smtp_port=_parse_int("EMAIL_SMTP_PORT", 587),
            use_tls=_parse_bool(_get_env("EMAIL_USE_TLS"), True),
        )
        return cls(
            domains=_parse_list(_get_env("PRICEWATCH_DOMAINS")),
            data_path=(
                Path(data_path) if data_path
                else cls.BASE_DIR / "domain-price-history.json"
            ),
            pushover=pushover,
            email=email,
        )

    def validate(self) -> None:
        """Raise :class:`ConfigError` if the settings cannot drive a run."""
        if not self.domains:
            msg = "No domains configured; set PRICEWATCH_DOMAINS"
            raise ConfigError(msg)
        blank = [d for d in self.domains if not d.strip()]
        if blank:
            msg = "Domain names must be non-empty strings"
            raise ConfigError(msg)
        if self.pushover.failure_policy not in FAILURE_POLICIES:
            msg = (
                "PUSHOVER_FAILURE_POLICY must be one of "
                f"{sorted(FAILURE_POLICIES)}, got "
                f"{self.pushover.failure_policy!r}"
            )
            raise ConfigError(msg)
        if self.pushover.enabled and not (
            self.pushover.user and self.pushover.token
        ):
            msg = "Pushover enabled; set PUSHOVER_USER and PUSHOVER_TOKEN"
            raise ConfigError(msg)
        if self.email.enabled and not (
            self.email.sender
            and self.email.password
            and self.email.recipient
        ):
            msg = (
                "Email enabled; set EMAIL_FROM, EMAIL_PASSWORD "
                "and EMAIL_TO"
            )
            raise ConfigError(msg)
