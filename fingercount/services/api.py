"""
HTTP surface for the finger counter.

  uvicorn fingercount.services.api:app
  uvicorn fingercount.services.api:create_app --factory

POST /start {"mode": "single"|"continuous"}, POST /stop, GET /status, GET /health.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from dotenv import load_dotenv

from fingercount.orchestrator.contracts import Mode
from fingercount.orchestrator.state_machine import FingerCounter
from fingercount.services.factory import build_counter
from fingercount.services.models import (
    StartRequest, StartResponse, StopResponse, StatusResponse, HealthResponse, SessionOut,
)
from fingercount.services.status_store import StatusStore


def create_app(counter: FingerCounter | None = None, status: StatusStore | None = None) -> FastAPI:
    status = status or StatusStore()
    if counter is None:
        load_dotenv(override=False)
        counter = build_counter(status)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        status.log("shutdown: releasing camera")
        await counter.aclose()

    app = FastAPI(title="fingercount", lifespan=lifespan)
    app.state.counter = counter
    app.state.status = status

    def _state() -> SessionOut:
        return SessionOut.from_snapshot(counter.state.snapshot())

    @app.post("/start", response_model=StartResponse)
    async def start(req: StartRequest):
        status.log(f"START mode={req.mode}")
        res = await counter.start(Mode(req.mode))
        return StartResponse(ok=res.ok, error_code=res.error_code, state=_state())

    @app.post("/stop", response_model=StopResponse)
    async def stop():
        status.log("STOP")
        counter.stop()
        return StopResponse(ok=True, state=_state())

    @app.get("/status", response_model=StatusResponse)
    async def get_status():
        return StatusResponse(state=_state(), logs=status.tail())

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            api=True,
            camera_adapter=type(counter.session.camera).__name__,
            vision_adapter=type(counter.vision).__name__,
            credential_ok=counter.vision.ready,
        )

    return app


_app: FastAPI | None = None


def __getattr__(name: str):
    # `app` is built on first access
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main():
    import os
    import uvicorn
    load_dotenv(override=False)
    uvicorn.run(create_app(), host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "8000")))


if __name__ == "__main__":
    main()
