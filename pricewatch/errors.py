# pricewatch/errors.py

"""Custom exceptions for clearer error handling across the checker."""


class PriceWatchError(Exception):
    """Base exception for all pricewatch errors."""


class ConfigError(PriceWatchError):
    """Raised when environment configuration is invalid or missing."""


class ScrapeError(PriceWatchError):
    """Raised when the price page cannot be rendered or read."""


class FrameDetachedError(ScrapeError):
    """The browser reported that the navigating frame was detached."""


class PriceParseError(ScrapeError):
    """Raised when the extracted price text holds no usable number."""


class NotificationError(PriceWatchError):
    """Raised when a notification transport rejects or fails a delivery."""
