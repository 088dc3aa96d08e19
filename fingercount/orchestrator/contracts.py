import os
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional


class Mode(str, Enum):
    SINGLE_SHOT = "single"
    CONTINUOUS = "continuous"


class Phase(str, Enum):
    IDLE = "idle"
    ACQUIRING_CAMERA = "acquiring_camera"
    COUNTING_DOWN = "counting_down"
    LIVE = "live"                       # continuous: camera on, waiting for next tick
    CAPTURING = "capturing"
    AWAITING_INFERENCE = "awaiting_inference"
    HAS_RESULT = "has_result"
    FAILED = "failed"


ResultKind = Literal["count", "unrecognized", "failed"]


@dataclass(frozen=True)
class CapturedFrame:
    data: bytes
    generation: int
    width: int
    height: int
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class InferenceResult:
    kind: ResultKind
    value: Optional[str] = None     # digit string, only for kind == "count"
    raw: Optional[str] = None       # model text as received
    error: Optional[str] = None

    @property
    def count(self) -> Optional[int]:
        return int(self.value) if self.kind == "count" else None

    @classmethod
    def counted(cls, value: str, raw: str | None = None) -> "InferenceResult":
        return cls(kind="count", value=value, raw=raw)

    @classmethod
    def unrecognized(cls, raw: str | None) -> "InferenceResult":
        return cls(kind="unrecognized", raw=raw)

    @classmethod
    def failed(cls, error: str) -> "InferenceResult":
        return cls(kind="failed", error=error)


@dataclass(frozen=True)
class SessionSnapshot:
    phase: Phase
    mode: Optional[Mode]
    generation: int
    countdown: Optional[int] = None
    result: Optional[str] = None
    error: Optional[str] = None
    live: bool = False

    @property
    def processing(self) -> bool:
        return self.phase == Phase.AWAITING_INFERENCE


@dataclass(frozen=True)
class StartResult:
    ok: bool
    generation: int
    error_code: Optional[str] = None


@dataclass(frozen=True)
class SessionTimings:
    countdown_s: int = 3
    countdown_step_s: float = 1.0
    warmup_s: float = 1.0
    interval_s: float = 1.5        # measured from the end of one inference call
    frame_retry_s: float = 0.2     # single-shot retry delay when no frame is decoded yet
    frame_retries: int = 10

    @classmethod
    def from_env(cls) -> "SessionTimings":
        return cls(
            countdown_s=int(os.getenv("COUNTDOWN_S", "3")),
            warmup_s=float(os.getenv("WARMUP_S", "1.0")),
            interval_s=float(os.getenv("CAPTURE_INTERVAL_S", "1.5")),
        )
