"""Custom exceptions for TimedLyrics."""


class TimedLyricsError(Exception):
    """Base exception for TimedLyrics."""
    pass


class PayloadError(TimedLyricsError):
    """Provider payload has an unusable shape."""
    pass


class ProviderError(TimedLyricsError):
    """Error fetching aligned lyrics from the provider."""
    pass


class ValidationError(TimedLyricsError):
    """Invalid input parameters."""
    pass


class ConfigError(TimedLyricsError):
    """Invalid configuration value."""
    pass


class CacheError(TimedLyricsError):
    """Error with cache operations."""
    pass
