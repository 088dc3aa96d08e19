"""Still-frame encoding for inference. No mirroring: that is a display concern."""
import cv2

from fingercount.adapters.camera.base import VideoSource
from fingercount.orchestrator.contracts import CapturedFrame

JPEG_QUALITY = 80


class FrameCapture:
    def __init__(self, status_store, quality: int = JPEG_QUALITY):
        self.status = status_store
        self.quality = quality

    def capture(self, source: VideoSource, generation: int) -> CapturedFrame | None:
        """Encode the latest frame, or return None if the source has not decoded one yet."""
        frame = source.read()
        if frame is None or frame.ndim < 2 or frame.shape[0] == 0 or frame.shape[1] == 0:
            return None
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self.quality])
        if not ok:
            self.status.log("frame_capture: jpeg encode failed")
            return None
        height, width = frame.shape[:2]
        return CapturedFrame(data=buf.tobytes(), generation=generation, width=width, height=height)
