"""
Watch configuration.

All durations except request_timeout are in milliseconds, matching the
status service's own conventions.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from dotenv import load_dotenv

from status_client.common.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PollingMethod(str, Enum):
    """Backoff policy used between polls."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"
    ADAPTIVE = "adaptive"


@dataclass(frozen=True)
class WatchConfig:
    """Configuration for one watch session."""

    server_url: str
    use_websocket: bool = True
    polling_method: str = PollingMethod.FIXED.value
    initial_delay: int = 1000  # 1 second
    max_delay: int = 10000  # 10 seconds
    max_retries: int = 50
    timeout: int = 60000  # 60 seconds - overall session deadline

    # HTTP settings for the poll transport (seconds)
    request_timeout: float = 30.0
    status_path: str = "/status"

    def __post_init__(self) -> None:
        if not self.server_url:
            raise ConfigurationError("serverUrl is required.")

        method = self.polling_method
        if isinstance(method, PollingMethod):
            object.__setattr__(self, "polling_method", method.value)
        elif method not in {m.value for m in PollingMethod}:
            logger.warning(f"Unknown polling method {method!r}, using fixed delays")

        for name in ("initial_delay", "max_delay", "max_retries", "timeout"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

    @property
    def timeout_seconds(self) -> float:
        return self.timeout / 1000

    @classmethod
    def from_options(cls, **options: Any) -> "WatchConfig":
        """Create configuration from keyword options, ignoring unset (None) values."""
        return cls(**{k: v for k, v in options.items() if v is not None})

    @classmethod
    def from_env(cls, server_url: Optional[str] = None) -> "WatchConfig":
        """Create configuration from environment variables (and a .env file)."""
        load_dotenv()
        return cls(
            server_url=server_url or os.getenv("STATUS_SERVER_URL", ""),
            use_websocket=os.getenv("STATUS_USE_WEBSOCKET", "true").lower() == "true",
            polling_method=os.getenv("STATUS_POLLING_METHOD", PollingMethod.FIXED.value),
            initial_delay=int(os.getenv("STATUS_INITIAL_DELAY", 1000)),
            max_delay=int(os.getenv("STATUS_MAX_DELAY", 10000)),
            max_retries=int(os.getenv("STATUS_MAX_RETRIES", 50)),
            timeout=int(os.getenv("STATUS_TIMEOUT", 60000)),
            request_timeout=float(os.getenv("STATUS_REQUEST_TIMEOUT", 30.0)),
            status_path=os.getenv("STATUS_PATH", "/status"),
        )
