"""
Watcher: the state machine behind one watch session.

IDLE -> RUNNING on start(); RUNNING -> FINISHED on finished, error, timeout,
disconnect or stop(). FINISHED is absorbing: nothing is emitted afterwards and
the instance cannot be restarted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Union

from status_client.common.exceptions import AlreadyFinishedError, AlreadyStartedError
from status_client.config.watch_config import WatchConfig
from status_client.models.status_models import Status
from status_client.services.watcher.notifications import (
    Listener,
    TransportSink,
    WatchEvent,
    WatchNotifier,
)
from status_client.services.watcher.poll_strategy import ClientFactory, PollStrategy
from status_client.services.watcher.push_strategy import PushStrategy, SessionFactory
from status_client.services.watcher.session import SessionState, WatchSession

logger = logging.getLogger(__name__)

Transport = Union[PushStrategy, PollStrategy]


class Watcher:
    """Watches one remote operation until it completes, fails or times out.

    Exactly one of finished/error/timeout is emitted per session, after which
    every timer is cancelled and the transport is closed. Listeners are plain
    callables run on the event loop thread.

    Example:
        >>> watcher = Watcher(WatchConfig(server_url="http://localhost:3000"))
        >>> watcher.on(WatchEvent.FINISHED, lambda status: print(status))
        >>> watcher.start()
    """

    def __init__(
        self,
        config: WatchConfig,
        *,
        http_client_factory: Optional[ClientFactory] = None,
        ws_session_factory: Optional[SessionFactory] = None,
    ):
        self.config = config
        self.session = WatchSession(config)
        self._notifier = WatchNotifier()
        self._http_client_factory = http_client_factory
        self._ws_session_factory = ws_session_factory
        self._released: list[Transport] = []

    @classmethod
    def from_options(cls, **options: Any) -> "Watcher":
        """Create a watcher from keyword options (server_url, use_websocket, ...)."""
        return cls(WatchConfig.from_options(**options))

    # ── Listener registration ────────────────────────────────────────────────

    def on(self, event: WatchEvent | str, listener: Listener) -> "Watcher":
        self._notifier.on(event, listener)
        return self

    def off(self, event: WatchEvent | str, listener: Listener) -> "Watcher":
        self._notifier.off(event, listener)
        return self

    # ── Lifecycle ────────────────────────────────────────────────────────────

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def finished(self) -> bool:
        return self.session.finished

    @property
    def transport(self) -> Optional[Transport]:
        return self.session.active_transport

    def start(self) -> None:
        """Begin watching. Returns immediately; results arrive as notifications.

        Raises:
            AlreadyFinishedError: If this session has already finished
            AlreadyStartedError: If this session is already running
            RuntimeError: If called outside a running event loop
        """
        session = self.session
        if session.finished:
            raise AlreadyFinishedError()
        if session.started:
            raise AlreadyStartedError()

        loop = asyncio.get_running_loop()
        session.started = True
        logger.info(
            f"Watching {self.config.server_url} "
            f"via {'websocket' if self.config.use_websocket else 'polling'} "
            f"(timeout={self.config.timeout}ms)"
        )

        if self.config.use_websocket:
            self._start_push()
        else:
            self._start_poll()

        # A listener may have stopped the session during a synchronous failure
        if not session.finished:
            session.deadline_timer = loop.call_later(
                self.config.timeout_seconds, self._on_deadline
            )

    def stop(self) -> None:
        """Finish the session without emitting anything. Safe to call repeatedly."""
        if not self.session.finished:
            logger.info(f"Stopping watch of {self.config.server_url}")
            self.session.finished = True
        self._notifier.close()
        self._teardown()

    async def wait_closed(self) -> None:
        """Wait until every transport released by teardown has fully closed."""
        for transport in list(self._released):
            await transport.wait_closed()

    # ── Strategy selection ───────────────────────────────────────────────────

    def _start_push(self) -> None:
        strategy = PushStrategy(
            self.session, TransportSink(self), session_factory=self._ws_session_factory
        )
        try:
            strategy.open(self.config.server_url)
        except ValueError as e:
            # Degraded mode: the socket could not even be attempted, poll instead
            logger.warning(f"WebSocket unavailable ({e}), falling back to polling")
            strategy.close()
            self._notifier.emit(WatchEvent.ERROR, e)
            if not self.session.finished:
                self._start_poll()
            return

        self.session.active_transport = strategy

    def _start_poll(self) -> None:
        strategy = PollStrategy(
            self.session, TransportSink(self), client_factory=self._http_client_factory
        )
        self.session.active_transport = strategy
        strategy.start()

    # ── Transport callbacks (via TransportSink) ──────────────────────────────

    def handle_connected(self) -> None:
        if self.session.finished:
            return
        logger.info(f"Connected to {self.config.server_url}")
        self._notifier.emit(WatchEvent.CONNECTED)

    def handle_status(self, status: Status) -> None:
        if self.session.finished:
            return
        self.session.status = status
        self._notifier.emit(WatchEvent.STATUS_UPDATE, status)

        if status.is_terminal:
            logger.info(f"Operation finished with status {status.value}")
            self._finish(WatchEvent.FINISHED, status)

    def handle_transport_error(self, error: BaseException) -> None:
        if self.session.finished:
            return
        logger.error(f"Watch of {self.config.server_url} failed: {error}")
        self._finish(WatchEvent.ERROR, error)

    def handle_disconnected(self) -> None:
        if self.session.finished:
            return
        logger.warning(
            f"Connection to {self.config.server_url} closed before a terminal status"
        )
        self._finish(WatchEvent.DISCONNECTED)

    def _on_deadline(self) -> None:
        self.session.deadline_timer = None
        if self.session.finished:
            return
        logger.warning(
            f"Watch of {self.config.server_url} timed out after {self.config.timeout}ms"
        )
        self._finish(WatchEvent.TIMEOUT)

    # ── Terminal resolution ──────────────────────────────────────────────────

    def _finish(self, event: WatchEvent, *args: Any) -> None:
        """Claim the session's single ending, release resources, then notify."""
        if self.session.finished:
            return
        self.session.finished = True
        self._teardown()
        self._notifier.emit(event, *args)
        self._notifier.close()

    def _teardown(self) -> None:
        session = self.session

        if session.deadline_timer is not None:
            session.deadline_timer.cancel()
            session.deadline_timer = None

        transport = session.active_transport
        session.active_transport = None
        if transport is not None:
            transport.close()
            self._released.append(transport)
