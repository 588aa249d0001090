"""Generation provider implementations."""
from typing import List

from study_assistant.core.config import settings
from .base import AiProvider
from .anthropic_provider import AnthropicProvider
from .gemini_provider import GeminiProvider


def build_providers() -> List[AiProvider]:
    """Create every known provider from settings; unconfigured ones are kept for reporting."""
    return [
        AnthropicProvider(
            api_key=settings.ANTHROPIC_API_KEY,
            model=settings.ANTHROPIC_MODEL,
            max_tokens=settings.ANTHROPIC_MAX_TOKENS,
            base_url=settings.ANTHROPIC_BASE_URL,
            timeout=settings.AI_REQUEST_TIMEOUT,
        ),
        GeminiProvider(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            max_tokens=settings.GEMINI_MAX_TOKENS,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.AI_REQUEST_TIMEOUT,
        ),
    ]


__all__ = ["AiProvider", "AnthropicProvider", "GeminiProvider", "build_providers"]
