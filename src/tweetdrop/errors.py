"""Custom exceptions for the airdrop collection domain."""


class TweetdropError(Exception):
    """Base exception for this project."""


class ConfigError(TweetdropError):
    """Raised when required runtime configuration is missing or invalid."""


class FetchError(TweetdropError):
    """Raised when the Twitter API cannot return a page."""


class OutputError(TweetdropError):
    """Raised when batch or JSON output cannot be written."""
