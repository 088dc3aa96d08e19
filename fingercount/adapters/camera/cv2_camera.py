"""
OpenCV webcam adapter.
CAMERA_INDEX env var (default 0) selects the webcam device. OpenCV has no
notion of facing mode, so `facing` is only logged.
"""
import os
import cv2
from fingercount.adapters.camera.base import CameraDevice, VideoSource
from fingercount.orchestrator.errors import CameraUnavailable


class CV2Source(VideoSource):
    def __init__(self, cap, status_store):
        self._cap = cap
        self.status = status_store

    def read(self):
        if self._cap is None or not self._cap.isOpened():
            return None
        ret, frame = self._cap.read()
        if not ret or frame is None:
            return None
        return frame

    def stop(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            self.status.log("cv2_camera: released")


class CV2Camera(CameraDevice):
    def __init__(self, status_store, index: int | None = None):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))

    def open(self, facing: str, width: int, height: int) -> VideoSource:
        cap = cv2.VideoCapture(self._index)
        if not cap.isOpened():
            cap.release()
            self.status.log(f"cv2_camera: failed to open device {self._index}")
            raise CameraUnavailable(f"camera device {self._index} could not be opened")
        # ideal resolution only; the driver may pick something else
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, height)
        self.status.log(f"cv2_camera: opened device {self._index} facing={facing} ideal={width}x{height}")
        return CV2Source(cap, self.status)
