import re
from fingercount.orchestrator.contracts import CapturedFrame, InferenceResult
from fingercount.orchestrator.errors import CredentialMissing

FINGER_PROMPT = (
    "Analyze this image and count the number of fingers held up. "
    "Return ONLY a single digit number (e.g., 0, 1, 2, 3, 4, 5). "
    "If no hand is clearly visible, return 0."
)

_DIGITS = re.compile(r"[0-9]+")
_PLACEHOLDER_KEYS = {"", "undefined", "null", "none"}


def parse_count(text: str | None) -> InferenceResult:
    """Accept the reply only if it is nothing but digits once trimmed."""
    cleaned = (text or "").strip()
    if _DIGITS.fullmatch(cleaned):
        return InferenceResult.counted(cleaned, raw=text)
    return InferenceResult.unrecognized(text)


def usable_key(key: str | None) -> bool:
    return key is not None and key.strip().lower() not in _PLACEHOLDER_KEYS


class VisionAdapter:
    name = "base"

    def ensure_ready(self):
        """Raise CredentialMissing if classify() cannot possibly succeed."""
        if not self.ready:
            raise CredentialMissing(f"{self.name}: credential not configured")

    @property
    def ready(self) -> bool:
        return True

    async def classify(self, frame: CapturedFrame) -> InferenceResult:
        raise NotImplementedError

    async def aclose(self):
        pass
