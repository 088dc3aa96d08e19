"""Shared fakes for the camera and vision adapters."""
import asyncio
import time

import numpy as np
import pytest

from fingercount.adapters.camera.base import CameraDevice, VideoSource
from fingercount.adapters.camera.frame_capture import FrameCapture
from fingercount.adapters.vision.base import VisionAdapter, parse_count
from fingercount.orchestrator.capture_session import CaptureSession
from fingercount.orchestrator.contracts import InferenceResult, SessionTimings
from fingercount.orchestrator.errors import CameraUnavailable
from fingercount.orchestrator.state_machine import FingerCounter
from fingercount.services.status_store import StatusStore

FAST = SessionTimings(
    countdown_s=3,
    countdown_step_s=0.01,
    warmup_s=0.01,
    interval_s=0.02,
    frame_retry_s=0.005,
    frame_retries=3,
)


class FakeSource(VideoSource):
    def __init__(self, blank_reads: int = 0):
        self.blank_reads = blank_reads   # -1: never decodes a frame
        self.reads = 0
        self.stops = 0

    @property
    def stopped(self) -> bool:
        return self.stops > 0

    def read(self):
        self.reads += 1
        if self.blank_reads < 0 or self.reads <= self.blank_reads:
            return None
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        frame[:, :, 2] = 200
        return frame

    def stop(self):
        self.stops += 1


class FakeCamera(CameraDevice):
    def __init__(self, available: bool = True, open_delay: float = 0.0, blank_reads: int = 0,
                 open_error: Exception | None = None):
        self.available = available
        self.open_error = open_error
        self.open_delay = open_delay
        self.blank_reads = blank_reads
        self.opened: list[FakeSource] = []
        self.requests: list[tuple] = []

    def open(self, facing: str, width: int, height: int) -> VideoSource:
        self.requests.append((facing, width, height))
        if self.open_delay:
            time.sleep(self.open_delay)
        if self.open_error is not None:
            raise self.open_error
        if not self.available:
            raise CameraUnavailable("permission denied")
        source = FakeSource(self.blank_reads)
        self.opened.append(source)
        return source


class ScriptedVision(VisionAdapter):
    """
    Replies in order from `replies`: a str is parsed like model text, an
    InferenceResult is returned as is, an Exception is raised. Once the
    script runs out it keeps answering `default`. With `gated=True` each call
    waits for release() before answering.
    """
    name = "scripted"

    def __init__(self, replies=None, ready: bool = True, delay: float = 0.0,
                 gated: bool = False, default: str = "2"):
        self.replies = list(replies or [])
        self._ready = ready
        self.delay = delay
        self.gated = gated
        self.default = default
        self.calls = []
        self.active = 0
        self.max_active = 0
        self.gates: list[asyncio.Event] = []
        self.closed = False

    @property
    def ready(self) -> bool:
        return self._ready

    def release(self, index: int = -1):
        self.gates[index].set()

    async def classify(self, frame):
        self.calls.append(frame)
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gated:
                gate = asyncio.Event()
                self.gates.append(gate)
                await gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            reply = self.replies.pop(0) if self.replies else self.default
        finally:
            self.active -= 1
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, InferenceResult):
            return reply
        return parse_count(reply)

    async def aclose(self):
        self.closed = True


async def wait_until(predicate, timeout: float = 2.0, interval: float = 0.002):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(interval)


def make_counter(camera=None, vision=None, timings=FAST, status=None) -> FingerCounter:
    status = status or StatusStore()
    return FingerCounter(
        session=CaptureSession(camera or FakeCamera(), status),
        frames=FrameCapture(status),
        vision=vision or ScriptedVision(),
        status_store=status,
        timings=timings,
    )


@pytest.fixture
def status():
    return StatusStore()
