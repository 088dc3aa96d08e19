from abc import ABC, abstractmethod


class VideoSource(ABC):
    @abstractmethod
    def read(self):
        """Latest decoded frame as a BGR ndarray, or None if nothing decoded yet."""
        ...

    @abstractmethod
    def stop(self):
        """Stop all tracks. Must be safe to call more than once."""
        ...


class CameraDevice(ABC):
    @abstractmethod
    def open(self, facing: str, width: int, height: int) -> VideoSource:
        """Open a live stream. Raises CameraUnavailable."""
        ...
