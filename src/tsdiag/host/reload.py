"""Debounced project reload on manifest changes.

Content changes to a manifest arrive in bursts (editor saves, package
installs). They are coalesced: each change re-arms a single timer, and
one full re-diagnosis runs once the window passes without another
change. Creation and deletion change the project structure and are
handled immediately.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

import structlog

from tsdiag.config.constants import RELOAD_DEBOUNCE_SEC

logger = structlog.get_logger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Anything with asyncio's ``call_later``; an event loop qualifies."""

    def call_later(self, delay: float, callback: Callable[[], object]) -> TimerHandle: ...


class ReloadState(Enum):
    IDLE = "idle"
    PENDING = "pending"


@dataclass
class DebouncedReloadTrigger:
    """Two-state machine (IDLE, PENDING) owning at most one armed timer."""

    on_quiet: Callable[[], None]
    on_structural: Callable[[], None]
    window: float = RELOAD_DEBOUNCE_SEC
    scheduler: Scheduler | None = None

    _state: ReloadState = field(default=ReloadState.IDLE, init=False)
    _timer: TimerHandle | None = field(default=None, init=False)
    _burst: int = field(default=0, init=False)

    @property
    def state(self) -> ReloadState:
        return self._state

    def content_changed(self) -> None:
        """Manifest content changed: (re)arm the quiet-window timer."""
        self._cancel_timer()
        scheduler = self.scheduler or asyncio.get_running_loop()
        self._timer = scheduler.call_later(self.window, self._fire)
        self._state = ReloadState.PENDING
        self._burst += 1
        logger.debug("reload_debounced", window=self.window, burst=self._burst)

    def structure_changed(self) -> None:
        """Manifest created or deleted: reload now, superseding any pending timer."""
        superseded = self._cancel_timer()
        self._state = ReloadState.IDLE
        self._burst = 0
        logger.info("project_structure_changed", superseded_pending=superseded)
        self.on_structural()

    def dispose(self) -> None:
        self._cancel_timer()
        self._state = ReloadState.IDLE
        self._burst = 0

    def _cancel_timer(self) -> bool:
        if self._timer is None:
            return False
        self._timer.cancel()
        self._timer = None
        return True

    def _fire(self) -> None:
        burst = self._burst
        self._timer = None
        self._state = ReloadState.IDLE
        self._burst = 0
        logger.info("reload_window_elapsed", coalesced=burst)
        self.on_quiet()
