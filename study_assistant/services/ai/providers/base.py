"""Common HTTP handling for generation providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from study_assistant.core.exceptions import ProviderError
from study_assistant.schemas.providers import ProviderKind, ProviderRequest, ProviderResponse

logger = logging.getLogger(__name__)


class AiProvider(ABC):
    """One hosted model endpoint.

    Subclasses own request marshaling and response parsing; this base class
    owns transport and turns every transport, status or decoding failure into
    ``ProviderError`` so the gateway can fall back.
    """

    kind: ProviderKind

    def __init__(
        self,
        api_key: str,
        model: str,
        max_tokens: int,
        base_url: str,
        timeout: float = 120.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.max_tokens = max_tokens
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @abstractmethod
    def build_call(self, request: ProviderRequest) -> Dict[str, Any]:
        """Return keyword arguments for ``httpx.AsyncClient.post``."""

    @abstractmethod
    def parse_response(self, body: Dict[str, Any]) -> ProviderResponse:
        ...

    async def _post(self, call: Dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(**call)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.post(**call)

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        if not self.is_configured():
            raise ProviderError(self.kind.value, "provider is not configured")

        call = self.build_call(request)
        try:
            response = await self._post(call)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.kind.value, f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.kind.value, f"request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.kind.value, "response body is not valid JSON") from e

        if not isinstance(body, dict):
            raise ProviderError(self.kind.value, f"unexpected response body: {type(body).__name__}")

        try:
            result = self.parse_response(body)
        except (KeyError, IndexError, TypeError, AttributeError, ValueError) as e:
            raise ProviderError(self.kind.value, f"unexpected response shape: {e}") from e

        logger.info(
            f"{self.kind.value} response: model={result.model}, "
            f"input={result.usage.input_tokens}, output={result.usage.output_tokens}, "
            f"stop={result.stop_reason}"
        )
        return result
