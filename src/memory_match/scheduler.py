# memory_match/scheduler.py
"""
Schedule-once / schedule-periodic / cancel.

The engine only ever talks to a Scheduler, so the same game logic runs on
a fake clock in tests, on an asyncio loop in the simulation, and on timer
threads behind the HTTP server.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import heapq
import itertools
import threading
from typing import Callable, List, Optional, Tuple

Callback = Callable[[], None]


class Handle:
    """Returned by every schedule call; cancel() is idempotent."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class Scheduler(ABC):
    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> Handle:
        """Run callback once, delay seconds from now."""

    @abstractmethod
    def call_every(self, interval: float, callback: Callback) -> Handle:
        """Run callback every interval seconds until the handle is cancelled."""


# ----- fake clock -----

class ManualScheduler(Scheduler):
    """
    Scheduler driven by advance(); nothing fires on its own.

    Due callbacks fire in due-time order, ties in scheduling order.
    Exceptions raised by a callback propagate out of advance().
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, Handle, Callback, Optional[float]]] = []

    def call_later(self, delay: float, callback: Callback) -> Handle:
        return self._push(self.now + delay, Handle(), callback, None)

    def call_every(self, interval: float, callback: Callback) -> Handle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        return self._push(self.now + interval, Handle(), callback, interval)

    def _push(self, due: float, handle: Handle, callback: Callback,
              interval: Optional[float]) -> Handle:
        heapq.heappush(self._queue, (due, next(self._seq), handle, callback, interval))
        return handle

    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("cannot move the clock backwards")
        target = self.now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, callback, interval = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self.now = due
            if interval is not None:
                self._push(due + interval, handle, callback, interval)
            callback()
        self.now = target


# ----- asyncio loop -----

class _LoopHandle(Handle):
    def __init__(self) -> None:
        super().__init__()
        self.timer: Optional[asyncio.TimerHandle] = None

    def cancel(self) -> None:
        super().cancel()
        if self.timer is not None:
            self.timer.cancel()


class AsyncioScheduler(Scheduler):
    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def call_later(self, delay: float, callback: Callback) -> Handle:
        handle = _LoopHandle()

        def fire() -> None:
            if not handle.cancelled:
                callback()

        handle.timer = self.loop.call_later(delay, fire)
        return handle

    def call_every(self, interval: float, callback: Callback) -> Handle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = _LoopHandle()
        loop = self.loop

        def fire() -> None:
            if handle.cancelled:
                return
            handle.timer = loop.call_later(interval, fire)
            callback()

        handle.timer = loop.call_later(interval, fire)
        return handle


# ----- timer threads -----

class _ThreadHandle(Handle):
    def __init__(self) -> None:
        super().__init__()
        self._lock = threading.Lock()
        self.timer: Optional[threading.Timer] = None

    def cancel(self) -> None:
        with self._lock:
            super().cancel()
            if self.timer is not None:
                self.timer.cancel()

    def arm(self, delay: float, fire: Callback) -> None:
        with self._lock:
            if self._cancelled:
                return
            self.timer = threading.Timer(delay, fire)
            self.timer.daemon = True
            self.timer.start()


class ThreadingScheduler(Scheduler):
    """
    Callbacks run on daemon timer threads.

    A callback may still be entered just after cancel() returns; callers
    serialize against it with their own lock and re-check their state.
    """

    def call_later(self, delay: float, callback: Callback) -> Handle:
        handle = _ThreadHandle()

        def fire() -> None:
            if not handle.cancelled:
                callback()

        handle.arm(delay, fire)
        return handle

    def call_every(self, interval: float, callback: Callback) -> Handle:
        if interval <= 0:
            raise ValueError("interval must be positive")
        handle = _ThreadHandle()

        def fire() -> None:
            if handle.cancelled:
                return
            handle.arm(interval, fire)
            callback()

        handle.arm(interval, fire)
        return handle
