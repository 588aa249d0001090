"""Google Gemini generateContent provider."""

from typing import Any, Dict

from study_assistant.schemas.providers import (
    ProviderKind,
    ProviderRequest,
    ProviderResponse,
    TokenUsage,
)
from .base import AiProvider


class GeminiProvider(AiProvider):
    """Gemini has no separate system turn here; both prompts go in one user message."""

    kind = ProviderKind.GEMINI

    def build_call(self, request: ProviderRequest) -> Dict[str, Any]:
        full_prompt = f"{request.system_prompt}\n\n{request.user_prompt}"
        return {
            "url": f"{self.base_url}/v1beta/models/{self.model}:generateContent",
            "params": {"key": self.api_key},
            "headers": {"content-type": "application/json"},
            "json": {
                "contents": [{"role": "user", "parts": [{"text": full_prompt}]}],
                "generationConfig": {
                    "temperature": request.temperature,
                    "maxOutputTokens": request.max_tokens or self.max_tokens,
                },
            },
        }

    def parse_response(self, body: Dict[str, Any]) -> ProviderResponse:
        candidate = body["candidates"][0]
        parts = (candidate.get("content") or {}).get("parts", [])
        text = "".join(part.get("text", "") for part in parts)
        usage = body.get("usageMetadata") or {}
        return ProviderResponse(
            id=body.get("responseId", ""),
            text=text,
            usage=TokenUsage(
                input_tokens=usage.get("promptTokenCount") or 0,
                output_tokens=usage.get("candidatesTokenCount") or 0,
                cache_read_tokens=usage.get("cachedContentTokenCount") or 0,
            ),
            model=body.get("modelVersion", self.model),
            provider=self.kind,
            stop_reason=candidate.get("finishReason"),
        )
