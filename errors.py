"""Custom exceptions for the wallet milestone tracker."""


class TrackerError(Exception):
    """Base exception for tracker errors."""
    pass


class ConfigurationError(TrackerError):
    """Raised when configuration is invalid."""
    pass


class HoldingsFetchError(TrackerError):
    """Raised when the wallet's token accounts cannot be fetched."""
    pass


class EnrichmentFetchError(TrackerError):
    """Raised when market data for a mint cannot be fetched."""

    def __init__(self, mint: str, message: str):
        super().__init__(f"{mint}: {message}")
        self.mint = mint


class NotificationDispatchError(TrackerError):
    """Raised when a notification cannot be delivered."""
    pass


class UnhandledCycleError(TrackerError):
    """Wraps an unexpected error that abandoned a polling cycle."""

    def __init__(self, cause: BaseException):
        super().__init__(str(cause) or type(cause).__name__)
        self.cause = cause
