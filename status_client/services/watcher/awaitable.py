"""Awaitable wrapper around a Watcher."""

from __future__ import annotations

import asyncio
from typing import Optional

from status_client.common.exceptions import DisconnectedError, WatchTimeoutError
from status_client.config.watch_config import WatchConfig
from status_client.models.status_models import Status
from status_client.services.watcher.notifications import WatchEvent
from status_client.services.watcher.poll_strategy import ClientFactory
from status_client.services.watcher.push_strategy import SessionFactory
from status_client.services.watcher.watcher import Watcher


async def watch_status(
    config: WatchConfig,
    *,
    http_client_factory: Optional[ClientFactory] = None,
    ws_session_factory: Optional[SessionFactory] = None,
) -> Status:
    """Watch an operation and return its terminal status.

    Args:
        config: Watch configuration
        http_client_factory: Optional factory for the polling HTTP client
        ws_session_factory: Optional factory for the WebSocket client session

    Returns:
        The terminal status (completed or error) reported by the service

    Raises:
        WatchTimeoutError: If the deadline elapsed first
        DisconnectedError: If the push connection closed before a terminal status
        MaxRetriesReachedError: If polling exhausted its retry budget
        Exception: The transport or protocol error that ended the session

    Example:
        >>> status = await watch_status(WatchConfig(server_url="http://localhost:3000"))
    """
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[Status] = loop.create_future()
    watcher = Watcher(
        config,
        http_client_factory=http_client_factory,
        ws_session_factory=ws_session_factory,
    )

    def resolve(status: Status) -> None:
        if not outcome.done():
            outcome.set_result(status)

    def reject(error: BaseException) -> None:
        if not outcome.done():
            outcome.set_exception(error)

    def on_error(error: BaseException) -> None:
        # The WebSocket fallback reports an error but keeps the session running
        if watcher.finished:
            reject(error)

    watcher.on(WatchEvent.FINISHED, resolve)
    watcher.on(WatchEvent.ERROR, on_error)
    watcher.on(WatchEvent.TIMEOUT, lambda: reject(WatchTimeoutError()))
    watcher.on(WatchEvent.DISCONNECTED, lambda: reject(DisconnectedError()))

    watcher.start()
    try:
        return await outcome
    finally:
        watcher.stop()
        await watcher.wait_closed()
