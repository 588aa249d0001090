"""Anthropic Messages API provider."""

from typing import Any, Dict

from study_assistant.schemas.providers import (
    ProviderKind,
    ProviderRequest,
    ProviderResponse,
    TokenUsage,
)
from .base import AiProvider

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(AiProvider):
    kind = ProviderKind.ANTHROPIC

    def build_call(self, request: ProviderRequest) -> Dict[str, Any]:
        system_block: Dict[str, Any] = {"type": "text", "text": request.system_prompt}
        if request.enable_caching:
            system_block["cache_control"] = {"type": "ephemeral"}

        return {
            "url": f"{self.base_url}/v1/messages",
            "headers": {
                "x-api-key": self.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
            "json": {
                "model": self.model,
                "max_tokens": request.max_tokens or self.max_tokens,
                "temperature": request.temperature,
                "system": [system_block],
                "messages": [{"role": "user", "content": request.user_prompt}],
            },
        }

    def parse_response(self, body: Dict[str, Any]) -> ProviderResponse:
        text = "".join(
            block.get("text", "")
            for block in body.get("content", [])
            if block.get("type") == "text"
        )
        usage = body.get("usage") or {}
        return ProviderResponse(
            id=body.get("id", ""),
            text=text,
            usage=TokenUsage(
                input_tokens=usage.get("input_tokens") or 0,
                output_tokens=usage.get("output_tokens") or 0,
                cache_read_tokens=usage.get("cache_read_input_tokens") or 0,
                cache_creation_tokens=usage.get("cache_creation_input_tokens") or 0,
            ),
            model=body.get("model", self.model),
            provider=self.kind,
            stop_reason=body.get("stop_reason"),
        )
