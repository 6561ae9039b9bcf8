"""
Status watch client.

Watches a remote long-running operation over a WebSocket or by polling its
status endpoint until it reaches a terminal state or a deadline expires.
"""

from status_client.config import WatchConfig
from status_client.models import Status
from status_client.services.watcher import WatchEvent, Watcher, watch_status

__all__ = ["Status", "WatchConfig", "WatchEvent", "Watcher", "watch_status"]
