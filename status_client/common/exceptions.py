"""Exception hierarchy for the status watch client."""


class StatusClientError(Exception):
    """Base class for all errors raised by the status watch client."""

    pass


class ConfigurationError(StatusClientError, ValueError):
    """Raised when a watch configuration is missing or invalid."""

    pass


class UsageError(StatusClientError, RuntimeError):
    """Raised when a watcher is driven outside its lifecycle."""

    pass


class AlreadyStartedError(UsageError):
    """Raised when start() is called on a watcher that is already running."""

    def __init__(self, message: str = "Watcher is already running."):
        super().__init__(message)


class AlreadyFinishedError(UsageError):
    """Raised when start() is called on a watcher whose session has finished."""

    def __init__(
        self, message: str = "Cannot start after completion. Create a new instance."
    ):
        super().__init__(message)


class InvalidMessageError(StatusClientError):
    """Raised when a status payload cannot be decoded."""

    def __init__(self, message: str = "Invalid message format."):
        super().__init__(message)


class MaxRetriesReachedError(StatusClientError):
    """Raised when polling exhausts its retry budget on a pending status."""

    def __init__(self, message: str = "Max retries reached."):
        super().__init__(message)


class WatchTimeoutError(StatusClientError):
    """Raised by watch_status() when the session deadline elapses."""

    def __init__(self, message: str = "Operation timed out."):
        super().__init__(message)


class DisconnectedError(StatusClientError):
    """Raised by watch_status() when the push connection closes early."""

    def __init__(
        self, message: str = "Connection closed before a terminal status."
    ):
        super().__init__(message)
