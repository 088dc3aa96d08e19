"""
Observable session state machine.

    IDLE -> ACQUIRING_CAMERA -> COUNTING_DOWN(n) -> CAPTURING          (single)
                             -> LIVE -> CAPTURING                      (continuous)
    CAPTURING -> AWAITING_INFERENCE -> HAS_RESULT | FAILED
    continuous: HAS_RESULT / LIVE -> CAPTURING on the next tick
    any non-idle state -> IDLE via stop()

Every start and every stop bumps `generation`. Asynchronous work carries the
generation it was scheduled under and is dropped if it no longer matches.
"""
from typing import Callable, List, Optional

from fingercount.orchestrator.contracts import Mode, Phase, SessionSnapshot
from fingercount.orchestrator.errors import IllegalTransition

Listener = Callable[[SessionSnapshot], None]


class SessionState:
    def __init__(self):
        self.phase = Phase.IDLE
        self.mode: Optional[Mode] = None
        self.generation = 0
        self.countdown: Optional[int] = None
        self.result: Optional[str] = None
        self.error: Optional[str] = None
        self.live = False   # camera stream held for this session
        self._listeners: List[Listener] = []

    # ── observation ─────────────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            phase=self.phase,
            mode=self.mode,
            generation=self.generation,
            countdown=self.countdown,
            result=self.result,
            error=self.error,
            live=self.live,
        )

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    @property
    def can_start(self) -> bool:
        if self.phase in (Phase.IDLE, Phase.FAILED):
            return True
        # a single-shot session that showed its result is terminal
        return self.phase == Phase.HAS_RESULT and not self.live

    # ── transitions ─────────────────────────────────────────────────────────

    def begin(self, mode: Mode) -> int:
        self._require(self.can_start, "begin")
        self.mode = mode
        self.generation += 1
        self.result = None
        self.error = None
        self.countdown = None
        self.live = False
        self._enter(Phase.ACQUIRING_CAMERA)
        return self.generation

    def reject(self, mode: Mode, kind: str):
        """Configuration failure detected before the camera is requested."""
        self._require(self.can_start, "reject")
        self.mode = mode
        self.result = None
        self.countdown = None
        self.live = False
        self.error = kind
        self._enter(Phase.FAILED)

    def camera_ready(self, countdown: int):
        self._require(self.phase == Phase.ACQUIRING_CAMERA, "camera_ready")
        self.live = True
        if self.mode == Mode.SINGLE_SHOT:
            self.countdown = countdown
            self._enter(Phase.COUNTING_DOWN)
        else:
            self._enter(Phase.LIVE)

    def tick_countdown(self, remaining: int):
        self._require(self.phase == Phase.COUNTING_DOWN, "tick_countdown")
        if remaining == self.countdown:
            return
        self.countdown = remaining
        self._enter(Phase.COUNTING_DOWN)

    def capturing(self):
        allowed = (Phase.COUNTING_DOWN, Phase.LIVE, Phase.CAPTURING)
        ok = self.phase in allowed or (self.phase == Phase.HAS_RESULT and self.live)
        self._require(ok, "capturing")
        self.countdown = None
        self._enter(Phase.CAPTURING)

    def skip_tick(self):
        self._require(self.phase == Phase.CAPTURING, "skip_tick")
        self._enter(Phase.HAS_RESULT if self.result is not None else Phase.LIVE)

    def awaiting_inference(self):
        self._require(self.phase == Phase.CAPTURING, "awaiting_inference")
        self._enter(Phase.AWAITING_INFERENCE)

    def show_result(self, value: str):
        self._require(self.phase == Phase.AWAITING_INFERENCE, "show_result")
        self.result = value
        if self.mode == Mode.SINGLE_SHOT:
            self.live = False
        self._enter(Phase.HAS_RESULT)

    def keep_previous(self):
        """Continuous mode: a failed or unreadable tick leaves the display as it was."""
        self._require(
            self.phase == Phase.AWAITING_INFERENCE and self.mode == Mode.CONTINUOUS,
            "keep_previous",
        )
        self._enter(Phase.HAS_RESULT if self.result is not None else Phase.LIVE)

    def fail(self, kind: str):
        self._require(self.phase not in (Phase.IDLE, Phase.FAILED), "fail")
        self.error = kind
        self.countdown = None
        self.live = False
        self._enter(Phase.FAILED)

    def stop(self) -> bool:
        if self.phase == Phase.IDLE:
            return False
        self.generation += 1
        self.countdown = None
        self.result = None
        self.error = None
        self.live = False
        self._enter(Phase.IDLE)
        return True

    # ── internals ───────────────────────────────────────────────────────────

    def _require(self, ok: bool, name: str):
        if not ok:
            raise IllegalTransition(f"{name} not allowed from {self.phase.value}")

    def _enter(self, phase: Phase):
        self.phase = phase
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
