import asyncio
import random
from fingercount.adapters.vision.base import VisionAdapter, parse_count
from fingercount.orchestrator.contracts import CapturedFrame, InferenceResult


class MockVision(VisionAdapter):
    """Offline stand-in: ignores the image and answers with a random digit."""
    name = "mock"

    def __init__(self, status_store, latency_s: float = 0.3, rng: random.Random | None = None):
        self.status = status_store
        self.latency_s = latency_s
        self._rng = rng or random.Random()

    async def classify(self, frame: CapturedFrame) -> InferenceResult:
        await asyncio.sleep(self.latency_s)
        raw = str(self._rng.randint(0, 5))
        self.status.log(f"mock_vision: {raw} ({len(frame.data)} bytes)")
        return parse_count(raw)
