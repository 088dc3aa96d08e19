"""
Terminal runner: count fingers from the local webcam without the HTTP server.

Usage:
    python -m fingercount.scripts.run_counter --mode single
    python -m fingercount.scripts.run_counter --mode continuous     (Ctrl-C to stop)
    CAMERA_ADAPTER=mock VISION_ADAPTER=mock python -m fingercount.scripts.run_counter
"""
import argparse
import asyncio

from dotenv import load_dotenv

from fingercount.orchestrator.contracts import Mode, Phase, SessionSnapshot
from fingercount.services.factory import build_counter
from fingercount.services.status_store import StatusStore


def render(snap: SessionSnapshot) -> str | None:
    if snap.phase == Phase.COUNTING_DOWN:
        return f"  ⏳ {snap.countdown}"
    if snap.phase == Phase.AWAITING_INFERENCE:
        return "  … analyzing frame"
    if snap.phase == Phase.HAS_RESULT:
        return f"  ✋ count = {snap.result}"
    if snap.phase == Phase.FAILED:
        return f"  ❌ {snap.error}"
    return None


async def run(mode: Mode, verbose: bool) -> int:
    status = StatusStore(echo=verbose)
    counter = build_counter(status)
    done = asyncio.Event()

    def on_change(snap: SessionSnapshot):
        line = render(snap)
        if line:
            print(line, flush=True)
        if snap.phase == Phase.FAILED or (snap.phase == Phase.HAS_RESULT and not snap.live):
            done.set()

    counter.state.subscribe(on_change)
    try:
        res = await counter.start(mode)
        if not res.ok:
            return 1
        await done.wait()
        return 0 if counter.state.phase == Phase.HAS_RESULT else 1
    finally:
        await counter.aclose()


def main():
    parser = argparse.ArgumentParser(description="Count fingers held up to the webcam.")
    parser.add_argument("--mode", choices=[m.value for m in Mode], default=Mode.SINGLE_SHOT.value)
    parser.add_argument("-v", "--verbose", action="store_true", help="print the status log")
    args = parser.parse_args()

    load_dotenv(override=False)
    try:
        code = asyncio.run(run(Mode(args.mode), args.verbose))
    except KeyboardInterrupt:
        print("\nstopped")
        code = 0
    raise SystemExit(code)


if __name__ == "__main__":
    main()
