"""Mutable state of a single watch session."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

from status_client.config.watch_config import WatchConfig
from status_client.models.status_models import Status

if TYPE_CHECKING:
    from status_client.services.watcher.poll_strategy import PollStrategy
    from status_client.services.watcher.push_strategy import PushStrategy


class SessionState(str, Enum):
    """Lifecycle state of a watch session."""

    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


@dataclass
class WatchSession:
    """State owned by exactly one Watcher.

    The session is never reused: once finished is set it stays set.
    """

    config: WatchConfig
    status: Optional[Status] = None
    retry_count: int = 0
    last_delay: int = field(init=False)
    started: bool = False
    finished: bool = False
    active_transport: Optional[Union[PushStrategy, PollStrategy]] = None
    deadline_timer: Optional[asyncio.TimerHandle] = None

    def __post_init__(self) -> None:
        self.last_delay = self.config.initial_delay

    @property
    def state(self) -> SessionState:
        if self.finished:
            return SessionState.FINISHED
        if self.started:
            return SessionState.RUNNING
        return SessionState.IDLE
