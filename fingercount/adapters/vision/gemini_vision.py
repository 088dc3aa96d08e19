"""
Gemini finger counter over the REST generateContent endpoint.
Requires GEMINI_API_KEY in .env or the environment; GEMINI_MODEL overrides
the model. One request per frame, no retry here: the orchestrator owns the
retry cadence.
"""
import base64
import os
import httpx
from fingercount.adapters.vision.base import FINGER_PROMPT, VisionAdapter, parse_count, usable_key
from fingercount.orchestrator.contracts import CapturedFrame, InferenceResult

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-3-flash-preview"
DEFAULT_TIMEOUT_S = 15.0


class GeminiVision(VisionAdapter):
    name = "gemini"

    def __init__(self, status_store, api_key: str | None, model: str = DEFAULT_MODEL,
                 timeout: float = DEFAULT_TIMEOUT_S, client: httpx.AsyncClient | None = None):
        self.status = status_store
        self._api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        if self.ready:
            self.status.log(f"gemini_vision: ready (model={model})")
        else:
            self.status.log("gemini_vision: GEMINI_API_KEY not set")

    @classmethod
    def from_env(cls, status_store) -> "GeminiVision":
        return cls(
            status_store,
            api_key=os.getenv("GEMINI_API_KEY"),
            model=os.getenv("GEMINI_MODEL", DEFAULT_MODEL),
            timeout=float(os.getenv("INFERENCE_TIMEOUT_S", str(DEFAULT_TIMEOUT_S))),
        )

    @property
    def ready(self) -> bool:
        return usable_key(self._api_key)

    def _payload(self, frame: CapturedFrame) -> dict:
        b64 = base64.standard_b64encode(frame.data).decode("utf-8")
        return {
            "contents": [
                {
                    "parts": [
                        {"inline_data": {"mime_type": frame.mime_type, "data": b64}},
                        {"text": FINGER_PROMPT},
                    ]
                }
            ]
        }

    async def classify(self, frame: CapturedFrame) -> InferenceResult:
        self.ensure_ready()
        url = f"{GEMINI_API_BASE}/models/{self.model}:generateContent"
        headers = {"x-goog-api-key": self._api_key, "Content-Type": "application/json"}
        try:
            resp = await self._client.post(url, json=self._payload(frame), headers=headers,
                                           timeout=self.timeout)
        except httpx.TimeoutException:
            self.status.log(f"gemini_vision: timed out after {self.timeout}s")
            return InferenceResult.failed("timeout")
        except httpx.HTTPError as e:
            self.status.log(f"gemini_vision: request error: {e}")
            return InferenceResult.failed(str(e))

        if not resp.is_success:
            self.status.log(f"gemini_vision: HTTP {resp.status_code}: {resp.text[:300]}")
            return InferenceResult.failed(f"HTTP {resp.status_code}")

        try:
            parts = resp.json()["candidates"][0]["content"]["parts"]
            raw = "".join(p.get("text", "") for p in parts)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            self.status.log(f"gemini_vision: malformed response: {e!r}")
            return InferenceResult.failed("malformed response")

        self.status.log(f"gemini_vision: raw='{raw.strip()}'")
        return parse_count(raw)

    async def aclose(self):
        await self._client.aclose()
