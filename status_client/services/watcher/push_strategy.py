"""WebSocket transport: the service pushes status envelopes as they change."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Callable, Optional
from urllib.parse import urlsplit

import aiohttp

from status_client.common.exceptions import InvalidMessageError
from status_client.models.status_models import parse_status_payload
from status_client.services.watcher.notifications import TransportSink
from status_client.services.watcher.session import WatchSession

logger = logging.getLogger(__name__)

WEBSOCKET_SCHEMES = ("ws", "wss")

SessionFactory = Callable[[], aiohttp.ClientSession]


def to_websocket_url(server_url: str) -> str:
    """Derive the WebSocket URL from the service URL (http -> ws, https -> wss).

    Raises:
        ValueError: If the result is not a usable ws:// or wss:// URL
    """
    ws_url = re.sub(r"^http", "ws", server_url)
    parts = urlsplit(ws_url)
    if parts.scheme not in WEBSOCKET_SCHEMES:
        raise ValueError(f"Unsupported WebSocket URL scheme in {ws_url!r}")
    if not parts.hostname:
        raise ValueError(f"WebSocket URL {ws_url!r} has no host")
    return ws_url


class PushStrategy:
    """Reads status envelopes from a WebSocket and reports them to the sink.

    The connection lives in a reader task. close() detaches the sink before
    the socket is closed, so a close frame that arrives during teardown is
    never reported.
    """

    def __init__(
        self,
        session: WatchSession,
        sink: TransportSink,
        session_factory: Optional[SessionFactory] = None,
    ):
        self._session = session
        self._sink = sink
        self._session_factory = session_factory or aiohttp.ClientSession
        self._task: Optional[asyncio.Task] = None
        self.url: Optional[str] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def open(self, server_url: str) -> None:
        """Start connecting to the service.

        URL problems are raised synchronously; connection failures are
        reported to the sink once the attempt completes.

        Raises:
            ValueError: If no WebSocket URL can be derived from server_url
        """
        self.url = to_websocket_url(server_url)
        logger.info(f"Opening WebSocket connection to {self.url}")
        self._task = asyncio.get_running_loop().create_task(
            self._run(self.url), name=f"status-push:{self.url}"
        )

    async def _run(self, ws_url: str) -> None:
        async with self._session_factory() as http:
            try:
                ws = await http.ws_connect(ws_url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                logger.error(f"WebSocket connection to {ws_url} failed: {e}")
                self._sink.error(e)
                return

            try:
                await self._read(ws)
            finally:
                await ws.close()
                logger.debug(f"WebSocket connection to {ws_url} closed")

    async def _read(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._sink.connected()

        try:
            async for msg in ws:
                if not self._sink.attached:
                    return

                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    self._handle_message(msg.data)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    error = ws.exception() or aiohttp.ClientError("WebSocket error")
                    logger.error(f"WebSocket error: {error}")
                    self._sink.error(error)
                    return

                if not self._sink.attached:
                    return
        except aiohttp.ClientError as e:
            logger.error(f"WebSocket receive failed: {e}")
            self._sink.error(e)
            return

        if self._sink.attached:
            logger.info(f"WebSocket closed by server (code={ws.close_code})")
            self._sink.disconnected()

    def _handle_message(self, data: str | bytes) -> None:
        try:
            status = parse_status_payload(data)
        except InvalidMessageError as e:
            logger.warning(f"Discarding malformed status message: {data!r:.200}")
            self._sink.error(e)
            return
        logger.debug(f"Pushed status: {status.value}")
        self._sink.status(status)

    def close(self) -> None:
        """Detach from the watcher and shut the connection down."""
        self._sink.detach()
        task = self._task
        # Inside the reader task the loop exits on its own once detached
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the reader task has closed the socket and HTTP session."""
        if self._task is not None:
            await asyncio.wait({self._task})
