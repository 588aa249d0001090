"""Provider envelopes and the daily usage record."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from study_assistant.schemas.documents import utc_now


class ProviderKind(str, Enum):
    ANTHROPIC = "anthropic"
    GEMINI = "gemini"


class ProviderRequest(BaseModel):
    system_prompt: str
    user_prompt: str
    temperature: float = Field(0.7, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, ge=1, description="None uses the provider default")
    enable_caching: bool = True


class TokenUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class ProviderResponse(BaseModel):
    id: str = ""
    text: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = ""
    provider: ProviderKind
    stop_reason: Optional[str] = None


class UsageRecord(BaseModel):
    """Token spend for one UTC calendar day."""
    day: date
    input_tokens: int = 0
    output_tokens: int = 0
    call_count: int = 0
    last_updated: datetime = Field(default_factory=utc_now)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class UsageResponse(BaseModel):
    day: date
    input_tokens: int
    output_tokens: int
    total_tokens: int
    call_count: int
    daily_limit: int
    rate_limiting_enabled: bool
