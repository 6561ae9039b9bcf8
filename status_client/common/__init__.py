"""Shared exceptions and logging setup."""

from status_client.common.exceptions import (
    AlreadyFinishedError,
    AlreadyStartedError,
    ConfigurationError,
    DisconnectedError,
    InvalidMessageError,
    MaxRetriesReachedError,
    StatusClientError,
    UsageError,
    WatchTimeoutError,
)

__all__ = [
    "AlreadyFinishedError",
    "AlreadyStartedError",
    "ConfigurationError",
    "DisconnectedError",
    "InvalidMessageError",
    "MaxRetriesReachedError",
    "StatusClientError",
    "UsageError",
    "WatchTimeoutError",
]
