"""Mock camera: serves synthetic frames, or images from a directory if given."""
import random
from pathlib import Path

import cv2
import numpy as np

from fingercount.adapters.camera.base import CameraDevice, VideoSource
from fingercount.orchestrator.errors import CameraUnavailable


class MockSource(VideoSource):
    def __init__(self, status_store, width: int, height: int, images: list[Path]):
        self.status = status_store
        self._width = width
        self._height = height
        self._images = images
        self.stopped = False

    def read(self):
        if self.stopped:
            return None
        if self._images:
            chosen = random.choice(self._images)
            return cv2.imread(str(chosen), cv2.IMREAD_COLOR)
        frame = np.zeros((self._height, self._width, 3), dtype=np.uint8)
        frame[:, :, 1] = 96
        return frame

    def stop(self):
        if not self.stopped:
            self.stopped = True
            self.status.log("mock_camera: released")


class MockCamera(CameraDevice):
    def __init__(self, status_store, images_dir: str | None = None, available: bool = True):
        self.status = status_store
        self.available = available
        self._images = sorted(Path(images_dir).glob("*.jpg")) if images_dir else []
        self.opened: list[MockSource] = []

    def open(self, facing: str, width: int, height: int) -> VideoSource:
        if not self.available:
            self.status.log("mock_camera: unavailable")
            raise CameraUnavailable("mock camera marked unavailable")
        source = MockSource(self.status, width, height, self._images)
        self.opened.append(source)
        self.status.log(f"mock_camera: opened facing={facing} {width}x{height} images={len(self._images)}")
        return source
