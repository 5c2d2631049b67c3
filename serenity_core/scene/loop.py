"""
Frame scheduling.

``FrameScheduler`` is a cooperative, single-threaded stand-in for the
display's frame callback: callbacks requested while a tick is running are
queued for the next tick. ``AnimationLoop`` re-requests a frame after each
callback and hands out an ``AnimationHandle``; stopping the handle cancels
the pending frame so nothing touches the field after teardown.
"""
from __future__ import annotations

import itertools
import logging
import time
from typing import Callable, Dict, Optional

_LOGGER = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]

DEFAULT_FPS = 60.0


class FrameScheduler:
    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self._running: Dict[int, FrameCallback] = {}
        self.ticks = 0

    def request_frame(self, callback: FrameCallback) -> int:
        frame_id = next(self._ids)
        self._pending[frame_id] = callback
        return frame_id

    def cancel_frame(self, frame_id: int) -> bool:
        if self._pending.pop(frame_id, None) is not None:
            return True
        return self._running.pop(frame_id, None) is not None

    @property
    def pending(self) -> int:
        return len(self._pending)

    def tick(self, now: float) -> int:
        """Run every callback requested before this tick. Returns the count run."""
        self._running, self._pending = self._pending, {}
        self.ticks += 1
        ran = 0
        try:
            while self._running:
                frame_id = next(iter(self._running))
                callback = self._running.pop(frame_id)
                ran += 1
                try:
                    callback(now)
                except Exception:
                    _LOGGER.exception("Frame callback %d failed", frame_id)
        finally:
            self._running = {}
        return ran

    def run(
        self,
        duration: float,
        fps: float = DEFAULT_FPS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """Drive the scheduler in real time for ``duration`` seconds.

        Stops early once nothing is pending. Returns the number of ticks.
        """
        interval = 1.0 / max(fps, 1.0)
        start = clock()
        ticks = 0
        while self._pending:
            now = clock()
            if now - start >= duration:
                break
            self.tick(now)
            ticks += 1
            remaining = interval - (clock() - now)
            if remaining > 0:
                sleep(remaining)
        return ticks


class AnimationClock:
    """Monotonic elapsed-seconds accumulator."""

    def __init__(self):
        self.elapsed = 0.0

    def advance(self, delta: float) -> float:
        if delta > 0:
            self.elapsed += delta
        return self.elapsed

    def reset(self) -> None:
        self.elapsed = 0.0


class AnimationHandle:
    """Owned handle for a running loop; ``stop`` must be called exactly once.

    Stopping twice is harmless. Works as a context manager.
    """

    def __init__(self, loop: "AnimationLoop"):
        self._loop = loop
        self.active = True

    def stop(self) -> None:
        if not self.active:
            return
        self.active = False
        self._loop._stop(self)

    def __enter__(self) -> "AnimationHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


class AnimationLoop:
    def __init__(
        self,
        scheduler: FrameScheduler,
        on_frame: Callable[[float], None],
        clock: Optional[AnimationClock] = None,
    ):
        self.scheduler = scheduler
        self.on_frame = on_frame
        self.clock = clock or AnimationClock()
        self.frames = 0
        self._handle: Optional[AnimationHandle] = None
        self._frame_id: Optional[int] = None
        self._last_now: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> AnimationHandle:
        if self.running:
            raise RuntimeError("Animation loop is already running")
        self._handle = AnimationHandle(self)
        self._last_now = None
        self._frame_id = self.scheduler.request_frame(self._tick)
        return self._handle

    def _tick(self, now: float) -> None:
        handle = self._handle
        self._frame_id = None
        if handle is None or not handle.active:
            return
        if self._last_now is not None:
            self.clock.advance(now - self._last_now)
        self._last_now = now
        self.frames += 1
        self.on_frame(self.clock.elapsed)
        # on_frame may have stopped the loop
        if handle.active and self._handle is handle:
            self._frame_id = self.scheduler.request_frame(self._tick)

    def _stop(self, handle: AnimationHandle) -> None:
        if handle is not self._handle:
            return
        if self._frame_id is not None:
            self.scheduler.cancel_frame(self._frame_id)
            self._frame_id = None
        self._handle = None
        self._last_now = None
