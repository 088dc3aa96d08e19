"""
Claude finger counter through the anthropic SDK.
Requires ANTHROPIC_API_KEY; CLAUDE_MODEL overrides the model.
"""
import base64
import os
import anthropic
from fingercount.adapters.vision.base import FINGER_PROMPT, VisionAdapter, parse_count, usable_key
from fingercount.orchestrator.contracts import CapturedFrame, InferenceResult

DEFAULT_MODEL = "claude-haiku-4-5-20251001"
DEFAULT_TIMEOUT_S = 15.0


class ClaudeVision(VisionAdapter):
    name = "claude"

    def __init__(self, status_store, api_key: str | None, model: str = DEFAULT_MODEL,
                 timeout: float = DEFAULT_TIMEOUT_S):
        self.status = status_store
        self.model = model
        self._client = None
        if usable_key(api_key):
            # max_retries=0: one round trip per frame
            self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
            self.status.log(f"claude_vision: ready ({model})")
        else:
            self.status.log("claude_vision: ANTHROPIC_API_KEY not set")

    @classmethod
    def from_env(cls, status_store) -> "ClaudeVision":
        return cls(
            status_store,
            api_key=os.getenv("ANTHROPIC_API_KEY"),
            model=os.getenv("CLAUDE_MODEL", DEFAULT_MODEL),
            timeout=float(os.getenv("INFERENCE_TIMEOUT_S", str(DEFAULT_TIMEOUT_S))),
        )

    @property
    def ready(self) -> bool:
        return self._client is not None

    async def classify(self, frame: CapturedFrame) -> InferenceResult:
        self.ensure_ready()
        b64 = base64.standard_b64encode(frame.data).decode("utf-8")
        try:
            message = await self._client.messages.create(
                model=self.model,
                max_tokens=16,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": frame.mime_type,
                                    "data": b64,
                                },
                            },
                            {"type": "text", "text": FINGER_PROMPT},
                        ],
                    }
                ],
            )
        except anthropic.APIError as e:
            self.status.log(f"claude_vision: API error: {e}")
            return InferenceResult.failed(str(e))

        raw = "".join(block.text for block in message.content if block.type == "text")
        self.status.log(f"claude_vision: raw='{raw.strip()}'")
        return parse_count(raw)

    async def aclose(self):
        if self._client is not None:
            await self._client.close()
