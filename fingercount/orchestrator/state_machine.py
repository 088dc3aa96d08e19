from fingercount.adapters.camera.frame_capture import FrameCapture
from fingercount.adapters.vision.base import VisionAdapter
from fingercount.orchestrator import errors
from fingercount.orchestrator.capture_session import CaptureSession
from fingercount.orchestrator.contracts import InferenceResult, Mode, Phase, SessionTimings, StartResult
from fingercount.orchestrator.session_state import SessionState


class FingerCounter:
    """
    Drives one session at a time:

      single:     acquire -> countdown -> capture -> classify -> result, release
      continuous: acquire -> warm-up -> [capture -> classify -> wait interval]*

    Only the tick that belongs to the current generation may touch state.
    """

    def __init__(self, session: CaptureSession, frames: FrameCapture, vision: VisionAdapter,
                 status_store, timings: SessionTimings | None = None):
        self.session = session
        self.frames = frames
        self.vision = vision
        self.status = status_store
        self.timings = timings or SessionTimings()
        self.state = SessionState()
        self.inflight = 0
        self.max_inflight = 0
        self._frame_attempts = 0

    async def start(self, mode: Mode) -> StartResult:
        if not self.state.can_start:
            self.status.log(f"start rejected: busy ({self.state.phase.value})")
            return StartResult(ok=False, generation=self.state.generation, error_code=errors.ERR_BUSY)

        # credential is checked before the camera is requested
        try:
            self.vision.ensure_ready()
        except errors.CredentialMissing as e:
            self.status.log(f"start: {e}")
            self.state.reject(mode, errors.ERR_CREDENTIAL_MISSING)
            return StartResult(ok=False, generation=self.state.generation,
                               error_code=errors.ERR_CREDENTIAL_MISSING)

        generation = self.state.begin(mode)
        self.session.reset(generation)
        self._frame_attempts = 0
        self.status.log(f"start: mode={mode.value} gen={generation}")

        try:
            source = await self.session.acquire()
        except Exception as e:
            if self.state.is_current(generation):
                self.status.log(f"start: camera unavailable: {type(e).__name__}: {e}")
                self.state.fail(errors.ERR_CAMERA_UNAVAILABLE)
            return StartResult(ok=False, generation=generation, error_code=errors.ERR_CAMERA_UNAVAILABLE)

        if source is None or not self.state.is_current(generation):
            self.status.log(f"start: gen={generation} superseded during acquisition")
            return StartResult(ok=False, generation=generation)

        self.state.camera_ready(self.timings.countdown_s)
        if mode == Mode.SINGLE_SHOT:
            self.session.schedule_countdown(
                self.timings.countdown_s,
                on_tick=self.state.tick_countdown,
                on_complete=self._fire_single,
                step=self.timings.countdown_step_s,
            )
        else:
            self.session.schedule_repeating(
                self.timings.interval_s, lambda: self._tick(generation),
                first_delay=self.timings.warmup_s,
            )
        return StartResult(ok=True, generation=generation)

    def stop(self) -> bool:
        stopped = self.state.stop()
        self.session.reset(self.state.generation)
        if stopped:
            self.status.log(f"stop: now gen={self.state.generation}")
        return stopped

    async def aclose(self):
        self.stop()
        await self.session.aclose()
        await self.vision.aclose()

    # ── ticks ───────────────────────────────────────────────────────────────

    def _fire_single(self):
        generation = self.state.generation
        self.session.spawn(self._tick(generation))

    async def _tick(self, generation: int):
        try:
            await self._run_tick(generation)
        except Exception as e:
            self.status.log(f"tick: crashed: {type(e).__name__}: {e}")
            if self.state.is_current(generation):
                self._recover()

    def _recover(self):
        """Put the session back in a state the next tick (or the user) can leave."""
        phase = self.state.phase
        if self.state.mode == Mode.CONTINUOUS:
            if phase == Phase.CAPTURING:
                self.state.skip_tick()
            elif phase == Phase.AWAITING_INFERENCE:
                self.state.keep_previous()
            return
        if phase in (Phase.IDLE, Phase.FAILED) or not self.state.live:
            return
        kind = errors.ERR_CAMERA_UNAVAILABLE if phase == Phase.CAPTURING else errors.ERR_INFERENCE
        self.state.fail(kind)
        self.session.release()

    async def _run_tick(self, generation: int):
        source = self.session.stream
        if source is None or not self.state.is_current(generation):
            return

        self.state.capturing()
        frame = self.frames.capture(source, generation)
        if frame is None:
            self._no_frame()
            return
        self._frame_attempts = 0

        self.state.awaiting_inference()
        self.inflight += 1
        self.max_inflight = max(self.max_inflight, self.inflight)
        try:
            result = await self.vision.classify(frame)
        except Exception as e:
            result = InferenceResult.failed(f"{type(e).__name__}: {e}")
        finally:
            self.inflight -= 1

        if not self.state.is_current(frame.generation):
            self.status.log(f"tick: dropped {result.kind} from stale gen={frame.generation}")
            return
        self._apply(result)

    def _no_frame(self):
        if self.state.mode == Mode.CONTINUOUS:
            self.status.log("tick: no frame decoded yet, skipping")
            self.state.skip_tick()
            return
        self._frame_attempts += 1
        if self._frame_attempts > self.timings.frame_retries:
            self.status.log("tick: camera produced no frames, giving up")
            self.state.fail(errors.ERR_CAMERA_UNAVAILABLE)
            self.session.release()
            return
        self.status.log(f"tick: no frame yet, retry {self._frame_attempts}/{self.timings.frame_retries}")
        self.session.schedule_once(self.timings.frame_retry_s, self._fire_single)

    def _apply(self, result: InferenceResult):
        single = self.state.mode == Mode.SINGLE_SHOT
        if result.kind == "count":
            self.status.log(f"tick: count={result.value}")
            self.state.show_result(result.value)
            if single:
                self.session.release()
            return

        if result.kind == "unrecognized":
            self.status.log(f"tick: unrecognized reply {result.raw!r}")
        else:
            self.status.log(f"tick: inference failed: {result.error}")

        if single:
            self.state.fail(errors.ERR_INFERENCE)
            self.session.release()
        else:
            self.state.keep_previous()
