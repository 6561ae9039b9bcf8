"""Delay calculation between successive status polls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from status_client.config.watch_config import PollingMethod

if TYPE_CHECKING:
    from status_client.services.watcher.session import WatchSession

logger = logging.getLogger(__name__)

# Adaptive policy tiers (retry counts) and the fixed middle-tier step (ms)
ADAPTIVE_STEADY_RETRIES = 5
ADAPTIVE_RAMP_RETRIES = 10
ADAPTIVE_STEP_MS = 1000


def calculate_next_delay(
    method: str,
    retry_count: int,
    last_delay: int,
    initial_delay: int,
    max_delay: int,
) -> int:
    """Compute the delay before the next poll.

    Args:
        method: Polling method name (fixed, exponential, adaptive)
        retry_count: Number of polls already retried in this session
        last_delay: Previously computed delay in ms
        initial_delay: Configured seed delay in ms
        max_delay: Configured ceiling in ms

    Returns:
        Next delay in milliseconds. Unknown methods behave as fixed.
    """
    if method == PollingMethod.EXPONENTIAL.value:
        if retry_count == 0:
            return initial_delay
        return min(last_delay * 2, max_delay)

    if method == PollingMethod.ADAPTIVE.value:
        # Poll briskly at first, ramp up while the operation stays pending,
        # then settle at the ceiling
        if retry_count < ADAPTIVE_STEADY_RETRIES:
            return initial_delay
        if retry_count < ADAPTIVE_RAMP_RETRIES:
            return last_delay + ADAPTIVE_STEP_MS
        return max_delay

    return initial_delay


def next_delay(session: WatchSession) -> int:
    """Compute the next poll delay for a session and record it as last_delay."""
    config = session.config
    delay = calculate_next_delay(
        config.polling_method,
        session.retry_count,
        session.last_delay,
        config.initial_delay,
        config.max_delay,
    )
    session.last_delay = delay
    logger.debug(
        f"Next poll in {delay}ms ({config.polling_method}, retry {session.retry_count})"
    )
    return delay
