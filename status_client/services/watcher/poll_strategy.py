"""Polling transport: query the status endpoint on a backoff schedule."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

import httpx

from status_client.common.exceptions import InvalidMessageError, MaxRetriesReachedError
from status_client.config.watch_config import WatchConfig
from status_client.models.status_models import parse_status_payload
from status_client.services.watcher.backoff import next_delay
from status_client.services.watcher.notifications import TransportSink
from status_client.services.watcher.session import WatchSession

logger = logging.getLogger(__name__)

ClientFactory = Callable[[WatchConfig], httpx.AsyncClient]


def default_client_factory(config: WatchConfig) -> httpx.AsyncClient:
    """Build the HTTP client used to poll the status service."""
    return httpx.AsyncClient(
        base_url=config.server_url,
        timeout=config.request_timeout,
        headers={"Accept": "application/json"},
    )


class PollStrategy:
    """Issues status requests until a terminal status or the retry budget runs out.

    Only a successfully observed pending status is retried. Request failures,
    non-2xx responses and malformed bodies are reported as errors at once.
    """

    def __init__(
        self,
        session: WatchSession,
        sink: TransportSink,
        client_factory: Optional[ClientFactory] = None,
    ):
        self._session = session
        self._sink = sink
        self._client_factory = client_factory or default_client_factory
        self._client: Optional[httpx.AsyncClient] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._request_task: Optional[asyncio.Task] = None
        self._release_task: Optional[asyncio.Task] = None

    @property
    def poll_scheduled(self) -> bool:
        return self._timer is not None

    def start(self) -> None:
        """Create the HTTP client and issue the first request immediately."""
        config = self._session.config
        try:
            self._client = self._client_factory(config)
        except (httpx.InvalidURL, ValueError) as e:
            logger.error(f"Cannot poll {config.server_url}: {e}")
            self._sink.error(e)
            return
        logger.info(
            f"Polling {config.server_url}{config.status_path} "
            f"({config.polling_method}, max_retries={config.max_retries})"
        )
        self._launch()

    def _launch(self) -> None:
        self._timer = None
        self._request_task = asyncio.get_running_loop().create_task(
            self.poll_once(), name="status-poll"
        )

    async def poll_once(self) -> None:
        """Issue one status request and act on the result."""
        session = self._session
        if session.finished or not self._sink.attached or self._client is None:
            return

        try:
            response = await self._client.get(session.config.status_path)
            response.raise_for_status()
            status = parse_status_payload(response.content)
        except (httpx.HTTPError, httpx.InvalidURL, InvalidMessageError) as e:
            logger.error(f"Status request failed: {e}")
            self._sink.error(e)
            return

        logger.debug(f"Polled status: {status.value} (retry {session.retry_count})")
        self._sink.status(status)

        # Terminal statuses (or a listener calling stop()) end the session
        if session.finished or not self._sink.attached:
            return

        if session.retry_count >= session.config.max_retries:
            logger.warning(
                f"Status still pending after {session.retry_count} retries, giving up"
            )
            self._sink.error(MaxRetriesReachedError())
            return

        session.retry_count += 1
        delay = next_delay(session)
        self._timer = asyncio.get_running_loop().call_later(delay / 1000, self._launch)

    def close(self) -> None:
        """Detach from the watcher, cancel pending work and release the client."""
        self._sink.detach()

        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

        task = self._request_task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

        if self._client is not None:
            client, self._client = self._client, None
            self._release_task = asyncio.get_running_loop().create_task(
                self._release(client, task), name="status-poll-release"
            )

    async def _release(
        self, client: httpx.AsyncClient, task: Optional[asyncio.Task]
    ) -> None:
        if task is not None:
            await asyncio.wait({task})
        await client.aclose()
        logger.debug("Poll client closed")

    async def wait_closed(self) -> None:
        """Wait until the in-flight request has ended and the client is closed."""
        if self._release_task is not None:
            await asyncio.wait({self._release_task})
