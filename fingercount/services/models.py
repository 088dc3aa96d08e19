from pydantic import BaseModel
from typing import Literal, Optional

from fingercount.orchestrator.contracts import SessionSnapshot


class StartRequest(BaseModel):
    mode: Literal["single", "continuous"] = "single"


class SessionOut(BaseModel):
    phase: str
    mode: Optional[Literal["single", "continuous"]] = None
    generation: int
    countdown: Optional[int] = None
    result: Optional[str] = None   # digit string as returned by the model, e.g. "3"
    error: Optional[str] = None
    live: bool = False
    processing: bool = False       # inference call in flight

    @classmethod
    def from_snapshot(cls, snap: SessionSnapshot) -> "SessionOut":
        return cls(
            phase=snap.phase.value,
            mode=snap.mode.value if snap.mode else None,
            generation=snap.generation,
            countdown=snap.countdown,
            result=snap.result,
            error=snap.error,
            live=snap.live,
            processing=snap.processing,
        )


class StartResponse(BaseModel):
    ok: bool
    error_code: Optional[str] = None
    state: SessionOut


class StopResponse(BaseModel):
    ok: bool
    state: SessionOut


class StatusResponse(BaseModel):
    state: SessionOut
    logs: list[str]


class HealthResponse(BaseModel):
    api: bool
    camera_adapter: str
    vision_adapter: str
    credential_ok: bool
