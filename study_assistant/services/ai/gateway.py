"""
Provider selection and fallback for generation calls.

The preferred provider comes from configuration; fallback order is the
configured priority list, never the order providers were registered in.
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from study_assistant.core.config import settings
from study_assistant.core.exceptions import ProviderError, ProviderUnavailableError
from study_assistant.schemas.providers import ProviderKind, ProviderRequest, ProviderResponse
from .providers import AiProvider, build_providers

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = ProviderKind.ANTHROPIC


def parse_provider_kind(value: Optional[str]) -> Optional[ProviderKind]:
    if not value:
        return None
    try:
        return ProviderKind(value.strip().lower())
    except ValueError:
        return None


class AiGateway:
    """Sends provider requests through the preferred provider, falling back on failure"""

    def __init__(
        self,
        providers: Iterable[AiProvider],
        preferred: Optional[str] = None,
        priority: Optional[List[str]] = None,
        timeout: Optional[float] = None,
    ):
        self._providers: Dict[ProviderKind, AiProvider] = {p.kind: p for p in providers}
        self.timeout = timeout if timeout is not None else settings.AI_REQUEST_TIMEOUT

        configured = preferred if preferred is not None else settings.AI_PROVIDER
        kind = parse_provider_kind(configured)
        if kind is None:
            logger.warning(f"Invalid AI provider '{configured}' in configuration, using {DEFAULT_PROVIDER.value}")
            kind = DEFAULT_PROVIDER
        self.preferred = kind

        order = [self.preferred]
        for name in priority if priority is not None else settings.AI_PROVIDER_PRIORITY:
            parsed = parse_provider_kind(name)
            if parsed is None:
                logger.warning(f"Ignoring unknown provider '{name}' in priority list")
            elif parsed not in order:
                order.append(parsed)
        # Providers missing from the priority list go last, in enum order.
        order.extend(k for k in ProviderKind if k not in order)
        self.order = order

    def candidates(self) -> List[AiProvider]:
        """Configured providers in fallback order."""
        return [
            self._providers[kind]
            for kind in self.order
            if kind in self._providers and self._providers[kind].is_configured()
        ]

    def select_provider(self, kind: Optional[ProviderKind] = None) -> AiProvider:
        """Pick the provider to use.

        An explicit kind bypasses fallback and fails if that provider is not
        configured.
        """
        if kind is not None:
            provider = self._providers.get(kind)
            if provider is None or not provider.is_configured():
                raise ProviderUnavailableError(f"AI provider '{kind.value}' is not configured")
            return provider

        available = self.candidates()
        if not available:
            raise ProviderUnavailableError(
                "No AI provider is configured. Set ANTHROPIC_API_KEY or GEMINI_API_KEY."
            )
        selected = available[0]
        if selected.kind != self.preferred:
            logger.warning(
                f"Preferred provider {self.preferred.value} is not configured, "
                f"falling back to {selected.kind.value}"
            )
        return selected

    async def send(self, request: ProviderRequest, kind: Optional[ProviderKind] = None) -> ProviderResponse:
        providers = [self.select_provider(kind)] if kind is not None else self.candidates()
        if not providers:
            raise ProviderUnavailableError(
                "No AI provider is configured. Set ANTHROPIC_API_KEY or GEMINI_API_KEY."
            )

        failures = []
        for provider in providers:
            try:
                return await asyncio.wait_for(provider.send(request), timeout=self.timeout)
            except asyncio.TimeoutError:
                logger.warning(f"Provider {provider.kind.value} timed out after {self.timeout}s")
                failures.append(f"{provider.kind.value}: timed out")
            except ProviderError as e:
                logger.warning(f"Provider {provider.kind.value} failed: {e}")
                failures.append(str(e))

        raise ProviderUnavailableError(f"All AI providers failed ({'; '.join(failures)})")


_gateway: Optional[AiGateway] = None


def get_ai_gateway() -> AiGateway:
    """Get or create the global gateway from settings."""
    global _gateway
    if _gateway is None:
        _gateway = AiGateway(build_providers())
    return _gateway
