"""
Adapter selection from environment.

VISION_ADAPTER: gemini | claude | mock   (default: gemini)
CAMERA_ADAPTER: cv2 | mock               (default: cv2)
"""
import os

from fingercount.adapters.camera.frame_capture import FrameCapture
from fingercount.orchestrator.capture_session import CaptureSession
from fingercount.orchestrator.contracts import SessionTimings
from fingercount.orchestrator.state_machine import FingerCounter


def build_vision(status, name: str | None = None):
    name = (name or os.getenv("VISION_ADAPTER", "gemini")).lower()
    if name == "claude":
        from fingercount.adapters.vision.claude_vision import ClaudeVision
        vision = ClaudeVision.from_env(status)
    elif name == "mock":
        from fingercount.adapters.vision.mock_vision import MockVision
        vision = MockVision(status)
    else:
        from fingercount.adapters.vision.gemini_vision import GeminiVision
        vision = GeminiVision.from_env(status)
    status.log(f"vision adapter: {type(vision).__name__}")
    return vision


def build_camera(status, name: str | None = None):
    name = (name or os.getenv("CAMERA_ADAPTER", "cv2")).lower()
    if name == "mock":
        from fingercount.adapters.camera.mock_camera import MockCamera
        camera = MockCamera(status, images_dir=os.getenv("MOCK_CAMERA_DIR"))
    else:
        from fingercount.adapters.camera.cv2_camera import CV2Camera
        camera = CV2Camera(status)
    status.log(f"camera adapter: {type(camera).__name__}")
    return camera


def build_counter(status, camera=None, vision=None, timings: SessionTimings | None = None) -> FingerCounter:
    camera = camera or build_camera(status)
    vision = vision or build_vision(status)
    return FingerCounter(
        session=CaptureSession(camera, status),
        frames=FrameCapture(status),
        vision=vision,
        status_store=status,
        timings=timings or SessionTimings.from_env(),
    )
