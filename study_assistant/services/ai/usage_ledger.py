"""
Daily token budget.

Admission is a soft gate checked before a call; usage is recorded only after a
successful call, so concurrent requests may briefly overshoot the limit.
"""

import logging
from datetime import date, datetime, timezone
from typing import Callable, Optional

from study_assistant.core.config import settings
from study_assistant.core.exceptions import RateLimitExceededError
from study_assistant.schemas.providers import UsageRecord
from study_assistant.services.storage.base import UsageStore

logger = logging.getLogger(__name__)


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


class UsageLedger:
    def __init__(
        self,
        store: UsageStore,
        daily_limit: Optional[int] = None,
        enabled: Optional[bool] = None,
        clock: Callable[[], datetime] = utc_clock,
    ):
        self.store = store
        self.daily_limit = daily_limit if daily_limit is not None else settings.DAILY_TOKEN_LIMIT
        self.enabled = enabled if enabled is not None else settings.RATE_LIMITING_ENABLED
        self._clock = clock

    def today(self) -> date:
        """Current UTC calendar day."""
        return self._clock().astimezone(timezone.utc).date()

    async def today_usage(self) -> UsageRecord:
        return await self.store.get_or_create(self.today())

    async def admit(self) -> bool:
        if not self.enabled:
            return True
        usage = await self.today_usage()
        allowed = usage.total_tokens < self.daily_limit
        if not allowed:
            logger.warning(
                f"Daily token limit reached: {usage.total_tokens}/{self.daily_limit} on {usage.day.isoformat()}"
            )
        return allowed

    async def ensure_admitted(self) -> None:
        """Raise RateLimitExceededError when today's budget is spent."""
        if not self.enabled:
            return
        usage = await self.today_usage()
        if usage.total_tokens >= self.daily_limit:
            raise RateLimitExceededError(usage.total_tokens, self.daily_limit)

    async def record(self, input_tokens: int, output_tokens: int) -> UsageRecord:
        record = await self.store.increment(self.today(), input_tokens, output_tokens)
        logger.info(
            f"Recorded token usage: +{input_tokens} input, +{output_tokens} output "
            f"(today: {record.total_tokens}/{self.daily_limit}, calls: {record.call_count})"
        )
        return record
