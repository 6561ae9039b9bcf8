"""Unit tests for watching a status endpoint by polling."""

import asyncio

import httpx
import pytest

from status_client.common.exceptions import InvalidMessageError, MaxRetriesReachedError
from status_client.models import Status
from status_client.services.watcher import PollStrategy, WatchEvent, Watcher
from tests.fixtures.watcher_fixtures import EventRecorder, StatusResponder, make_poll_config


def _watch(responder, **overrides):
    watcher = Watcher(make_poll_config(**overrides), http_client_factory=responder.client_factory)
    return watcher, EventRecorder(watcher)


class TestPollingOutcomes:
    """Test terminal outcomes reached by polling."""

    @pytest.mark.asyncio
    async def test_pending_then_completed_finishes(self):
        """Pending polls are retried until the service reports completion."""
        responder = StatusResponder("pending", "pending", "completed")
        watcher, recorder = _watch(responder)

        watcher.start()
        await recorder.wait()
        await watcher.wait_closed()

        assert recorder.kinds == [
            WatchEvent.STATUS_UPDATE,
            WatchEvent.STATUS_UPDATE,
            WatchEvent.STATUS_UPDATE,
            WatchEvent.FINISHED,
        ]
        assert [args[0] for args in recorder.args_for(WatchEvent.STATUS_UPDATE)] == [
            Status.PENDING,
            Status.PENDING,
            Status.COMPLETED,
        ]
        assert recorder.args_for(WatchEvent.FINISHED) == [(Status.COMPLETED,)]
        assert len(responder.requests) == 3
        assert responder.requests[0].url.path == "/status"
        assert watcher.session.retry_count == 2
        assert watcher.session.status == Status.COMPLETED

    @pytest.mark.asyncio
    async def test_error_status_is_a_finish(self):
        """An 'error' status from the service is a finished outcome, not an error."""
        responder = StatusResponder("error")
        watcher, recorder = _watch(responder)

        watcher.start()
        await recorder.wait()

        assert recorder.args_for(WatchEvent.FINISHED) == [(Status.ERROR,)]
        assert recorder.count(WatchEvent.ERROR) == 0

    @pytest.mark.asyncio
    async def test_max_retries_reached(self):
        """Always-pending service exhausts the retry budget with one error."""
        responder = StatusResponder("pending")
        watcher, recorder = _watch(responder, max_retries=2)

        watcher.start()
        await recorder.wait()
        await asyncio.sleep(0.05)

        errors = recorder.args_for(WatchEvent.ERROR)
        assert len(errors) == 1
        assert isinstance(errors[0][0], MaxRetriesReachedError)
        assert str(errors[0][0]) == "Max retries reached."
        assert recorder.count(WatchEvent.FINISHED) == 0
        assert recorder.count(WatchEvent.STATUS_UPDATE) == 3
        assert recorder.kinds[-1] == WatchEvent.ERROR
        # Initial poll plus two scheduled retries
        assert len(responder.requests) == 3
        assert watcher.session.retry_count == 2

    @pytest.mark.asyncio
    async def test_zero_retries_fails_after_first_pending(self):
        """max_retries=0 gives up after the initial request."""
        responder = StatusResponder("pending")
        watcher, recorder = _watch(responder, max_retries=0)

        watcher.start()
        await recorder.wait()

        assert recorder.kinds == [WatchEvent.STATUS_UPDATE, WatchEvent.ERROR]
        assert len(responder.requests) == 1

    @pytest.mark.asyncio
    async def test_timeout_while_pending(self):
        """The deadline wins against a service that never resolves."""
        responder = StatusResponder("pending")
        watcher, recorder = _watch(responder, timeout=100, initial_delay=20)

        watcher.start()
        await recorder.wait()
        await watcher.wait_closed()
        requests_at_timeout = len(responder.requests)
        await asyncio.sleep(0.1)

        assert recorder.count(WatchEvent.TIMEOUT) == 1
        assert recorder.count(WatchEvent.FINISHED) == 0
        assert recorder.count(WatchEvent.ERROR) == 0
        assert recorder.kinds[-1] == WatchEvent.TIMEOUT
        assert len(responder.requests) == requests_at_timeout

    @pytest.mark.asyncio
    async def test_exponential_backoff_schedule(self):
        """Exponential polling grows the delay up to max_delay."""
        responder = StatusResponder("pending")
        watcher, recorder = _watch(
            responder, polling_method="exponential", max_retries=3, initial_delay=10, max_delay=25
        )

        watcher.start()
        await recorder.wait()

        assert watcher.session.last_delay == 25
        assert watcher.session.retry_count == 3
        assert len(responder.requests) == 4


class TestPollingFailures:
    """Test that request failures end the session without retrying."""

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Transport errors are reported immediately."""
        failure = httpx.ConnectError("connection refused")
        responder = StatusResponder(failure, "completed")
        watcher, recorder = _watch(responder)

        watcher.start()
        await recorder.wait()
        await asyncio.sleep(0.05)

        assert recorder.kinds == [WatchEvent.ERROR]
        assert recorder.args_for(WatchEvent.ERROR) == [(failure,)]
        assert len(responder.requests) == 1

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        """Non-2xx responses are errors."""
        responder = StatusResponder(httpx.Response(503, text="unavailable"))
        watcher, recorder = _watch(responder)

        watcher.start()
        await recorder.wait()

        assert recorder.kinds == [WatchEvent.ERROR]
        error = recorder.args_for(WatchEvent.ERROR)[0][0]
        assert isinstance(error, httpx.HTTPStatusError)
        assert error.response.status_code == 503

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"state": "pending"}),
            httpx.Response(200, json={"result": "running"}),
        ],
    )
    async def test_malformed_body(self, response):
        """Bodies without a valid status are protocol errors."""
        responder = StatusResponder(response)
        watcher, recorder = _watch(responder)

        watcher.start()
        await recorder.wait()

        assert recorder.kinds == [WatchEvent.ERROR]
        assert isinstance(recorder.args_for(WatchEvent.ERROR)[0][0], InvalidMessageError)


class TestPollingTeardown:
    """Test resource release for the poll transport."""

    @pytest.mark.asyncio
    async def test_stop_before_first_response(self):
        """stop() right after start() cancels the request and emits nothing."""
        responder = StatusResponder("completed")
        watcher, recorder = _watch(responder)

        watcher.start()
        transport = watcher.transport
        watcher.stop()
        await watcher.wait_closed()
        await asyncio.sleep(0.05)

        assert isinstance(transport, PollStrategy)
        assert recorder.events == []
        assert responder.requests == []
        assert watcher.transport is None
        assert watcher.session.deadline_timer is None
        assert not transport.poll_scheduled

    @pytest.mark.asyncio
    async def test_stop_from_status_listener(self):
        """Stopping while pending cancels the scheduled poll."""
        responder = StatusResponder("pending")
        watcher = Watcher(make_poll_config(), http_client_factory=responder.client_factory)
        updates = []

        def on_update(status):
            updates.append(status)
            watcher.stop()

        watcher.on(WatchEvent.STATUS_UPDATE, on_update)
        watcher.start()
        transport = watcher.transport
        await asyncio.sleep(0.1)
        await watcher.wait_closed()

        assert updates == [Status.PENDING]
        assert len(responder.requests) == 1
        assert watcher.session.retry_count == 0
        assert not transport.poll_scheduled

    @pytest.mark.asyncio
    async def test_poll_once_after_finish_is_noop(self):
        """poll_once does not issue requests for a finished session."""
        responder = StatusResponder("pending")
        watcher, recorder = _watch(responder)

        watcher.start()
        transport = watcher.transport
        watcher.stop()
        await transport.poll_once()
        await watcher.wait_closed()

        assert responder.requests == []
        assert recorder.events == []
