"""
Notification plumbing for watch sessions.

WatchNotifier is the outbound channel callers subscribe to. TransportSink is
the inbound path from a strategy to its Watcher; it can be detached so that
callbacks arriving after teardown are dropped.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from status_client.models.status_models import Status

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class WatchEvent(str, Enum):
    """Notification kinds raised by a Watcher."""

    CONNECTED = "connected"
    STATUS_UPDATE = "status_update"
    FINISHED = "finished"
    ERROR = "error"
    TIMEOUT = "timeout"
    DISCONNECTED = "disconnected"


TERMINAL_EVENTS = frozenset({WatchEvent.FINISHED, WatchEvent.ERROR, WatchEvent.TIMEOUT})


class WatchNotifier:
    """Callback set per notification kind, delivered in registration order."""

    def __init__(self):
        self._listeners: dict[WatchEvent, list[Listener]] = {
            event: [] for event in WatchEvent
        }
        self._closed = False

    def on(self, event: WatchEvent | str, listener: Listener) -> None:
        """Register a listener for one notification kind."""
        self._listeners[WatchEvent(event)].append(listener)

    def off(self, event: WatchEvent | str, listener: Listener) -> None:
        """Remove a previously registered listener; unknown listeners are ignored."""
        listeners = self._listeners[WatchEvent(event)]
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event: WatchEvent | str) -> int:
        return len(self._listeners[WatchEvent(event)])

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Stop delivering notifications. Registered listeners are kept."""
        self._closed = True

    def emit(self, event: WatchEvent, *args: Any) -> None:
        """Deliver a notification to every listener of its kind.

        A failing listener is logged and does not prevent delivery to the rest.
        """
        if self._closed:
            logger.debug(f"Dropping {event.value} notification on closed channel")
            return

        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception as e:
                logger.error(
                    f"Listener for {event.value} notification failed: {e}",
                    exc_info=True,
                )


class TransportHandler(Protocol):
    """Receiver of transport-level callbacks (implemented by Watcher)."""

    def handle_connected(self) -> None: ...

    def handle_status(self, status: Status) -> None: ...

    def handle_transport_error(self, error: BaseException) -> None: ...

    def handle_disconnected(self) -> None: ...


class TransportSink:
    """Detachable bridge from a strategy to its Watcher."""

    def __init__(self, handler: TransportHandler):
        self._handler: Optional[TransportHandler] = handler

    @property
    def attached(self) -> bool:
        return self._handler is not None

    def detach(self) -> None:
        self._handler = None

    def connected(self) -> None:
        if self._handler:
            self._handler.handle_connected()

    def status(self, status: Status) -> None:
        if self._handler:
            self._handler.handle_status(status)

    def error(self, error: BaseException) -> None:
        if self._handler:
            self._handler.handle_transport_error(error)

    def disconnected(self) -> None:
        if self._handler:
            self._handler.handle_disconnected()
