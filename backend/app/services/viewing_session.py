"""Viewing Session — imperative shell around the viewing stage machine.

Invariants:
    - State changes only through viewing_machine.transition (single logical thread)
    - Every timer the machine requests is scheduled; Restart cancels all pending timers first
    - close() cancels all pending timers; dispatches after close are ignored
    - Timer actions (Tick, SparkleExpired, BalloonsComplete) only enter through scheduled timers
    - A timer that has fired or been cancelled is no longer pending

Design Decisions:
    - Scheduler is injected: AsyncioScheduler in production, a virtual clock in tests
"""

import asyncio
import logging
from typing import Callable, Protocol

from app.core.viewing_machine import (
    Action,
    ScheduleTimer,
    Transition,
    ViewingState,
    is_timer_action,
    start,
    transition,
)

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on the running event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000, callback)


class ViewingSession:
    """Owns the view state of one rendered viewing page."""

    def __init__(self, photo_count: int, scheduler: Scheduler):
        self._scheduler = scheduler
        self._pending: dict[int, TimerHandle] = {}
        self._next_timer_id = 0
        self._closed = False
        initial = start(photo_count)
        self.state: ViewingState = initial.state
        self._schedule(initial.timers)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_timers(self) -> int:
        return len(self._pending)

    def dispatch(self, action: Action) -> bool:
        """Apply a user action. Returns whether the machine accepted it."""
        if is_timer_action(action):
            logger.debug(f"Rejected timer-only action {type(action).__name__} from caller")
            return False
        return self._apply(action)

    def close(self) -> None:
        """Tear down: no timer may fire against this session afterwards."""
        self._cancel_all()
        self._closed = True

    def _apply(self, action: Action) -> bool:
        if self._closed:
            return False
        result: Transition = transition(self.state, action)
        if not result.accepted:
            logger.debug(
                f"Ignored {type(action).__name__} in stage {self.state.stage_name.value}",
            )
            return False
        if result.cancel_timers:
            self._cancel_all()
        self.state = result.state
        self._schedule(result.timers)
        return True

    def _schedule(self, timers: tuple[ScheduleTimer, ...]) -> None:
        for timer in timers:
            timer_id = self._next_timer_id
            self._next_timer_id += 1
            self._pending[timer_id] = self._scheduler.call_later(
                timer.delay_ms, self._make_callback(timer_id, timer.action),
            )

    def _make_callback(self, timer_id: int, action: Action) -> Callable[[], None]:
        def fire() -> None:
            if self._pending.pop(timer_id, None) is None:
                return
            self._apply(action)
        return fire

    def _cancel_all(self) -> None:
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
