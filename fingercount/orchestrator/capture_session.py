"""
Camera lifecycle and capture cadence.

CaptureSession owns at most one stream and at most one timer handle. Each
handle is tagged with the generation current when it was armed; reset() and
release() cancel it regardless of tag, and a handle that fires under a
different generation does nothing.
"""
import asyncio
from typing import Awaitable, Callable, Optional

from fingercount.adapters.camera.base import CameraDevice, VideoSource

FACING_MODE = "user"
IDEAL_WIDTH = 640
IDEAL_HEIGHT = 480


class CaptureSession:
    def __init__(self, camera: CameraDevice, status_store,
                 width: int = IDEAL_WIDTH, height: int = IDEAL_HEIGHT):
        self.camera = camera
        self.status = status_store
        self.width = width
        self.height = height
        self.generation = 0
        self.stream: Optional[VideoSource] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._tasks: set[asyncio.Task] = set()

    # ── lifecycle ───────────────────────────────────────────────────────────

    def reset(self, generation: int):
        """Adopt a new generation, dropping the old stream and timer."""
        self.release()
        self.generation = generation

    async def acquire(self) -> Optional[VideoSource]:
        """
        Open the camera. Raises CameraUnavailable.
        Returns None if the session moved to another generation while the
        device was opening; the late stream is stopped on arrival.
        """
        if self.stream is not None:
            self.release()
        generation = self.generation
        self.status.log(f"capture_session: acquiring camera gen={generation}")
        source = await asyncio.to_thread(self.camera.open, FACING_MODE, self.width, self.height)
        if generation != self.generation:
            self.status.log(f"capture_session: camera arrived for stale gen={generation}, releasing")
            source.stop()
            return None
        self.stream = source
        return source

    def release(self):
        self.cancel_timer()
        if self.stream is not None:
            self.stream.stop()
            self.stream = None
            self.status.log(f"capture_session: stream released gen={self.generation}")

    async def aclose(self):
        """Teardown: release everything and cancel tracked tasks."""
        self.release()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ── timers ──────────────────────────────────────────────────────────────

    def cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None

    def _arm(self, delay: float, callback: Callable[[], None]):
        self.cancel_timer()
        generation = self.generation

        def fire():
            if self._timer is handle:
                self._timer = None
            if generation != self.generation:
                return
            callback()

        handle = asyncio.get_running_loop().call_later(delay, fire)
        self._timer = handle

    def spawn(self, coro: Awaitable) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            self.status.log(f"capture_session: tick crashed: {type(exc).__name__}: {exc}")

    def schedule_once(self, delay: float, callback: Callable[[], None]):
        self._arm(delay, callback)

    def schedule_countdown(self, seconds: int, on_tick: Callable[[int], None],
                           on_complete: Callable[[], None], step: float = 1.0):
        """on_tick(seconds) now, then one tick per `step` down to 1, then on_complete."""
        def tick(remaining: int):
            if remaining <= 0:
                on_complete()
                return
            on_tick(remaining)
            self._arm(step, lambda: tick(remaining - 1))

        tick(seconds)

    def schedule_repeating(self, interval: float, on_tick: Callable[[], Awaitable[None]],
                           first_delay: Optional[float] = None):
        """
        Run on_tick after first_delay, then `interval` after each run settles.
        The gap is measured from completion, so a slow tick never overlaps the next.
        """
        generation = self.generation

        def fire():
            task = self.spawn(on_tick())
            task.add_done_callback(lambda _t: rearm())

        def rearm():
            if generation == self.generation and self.stream is not None:
                self._arm(interval, fire)

        self._arm(interval if first_delay is None else first_delay, fire)
