"""Watch configuration."""

from status_client.config.watch_config import PollingMethod, WatchConfig

__all__ = ["PollingMethod", "WatchConfig"]
