"""Status watcher: push/poll strategies and the session state machine."""

from status_client.services.watcher.awaitable import watch_status
from status_client.services.watcher.backoff import calculate_next_delay, next_delay
from status_client.services.watcher.notifications import WatchEvent, WatchNotifier
from status_client.services.watcher.poll_strategy import PollStrategy
from status_client.services.watcher.push_strategy import PushStrategy, to_websocket_url
from status_client.services.watcher.session import SessionState, WatchSession
from status_client.services.watcher.watcher import Watcher

__all__ = [
    "PollStrategy",
    "PushStrategy",
    "SessionState",
    "WatchEvent",
    "WatchNotifier",
    "WatchSession",
    "Watcher",
    "calculate_next_delay",
    "next_delay",
    "to_websocket_url",
    "watch_status",
]
