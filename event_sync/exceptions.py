"""Error taxonomy for event synchronization.

Every failure that aborts a run derives from ``EventSyncError`` so the CLI can
turn it into a single diagnostic line and a non-zero exit status.
"""


class EventSyncError(Exception):
    """Base class for all fatal synchronization errors."""

    pass


class ConfigurationError(EventSyncError):
    """Raised when configuration or credentials are invalid or missing."""

    pass


class TransportError(EventSyncError):
    """Raised when the remote feed cannot be reached or answers with an error status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(TransportError):
    """Raised when the remote feed refuses a request because of rate limiting."""

    pass


class DataError(EventSyncError):
    """Raised when the event log or a fetched page contains malformed data."""

    pass


class StorageError(EventSyncError):
    """Raised when the event log cannot be read or written."""

    pass
