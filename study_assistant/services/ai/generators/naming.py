"""
Study set name suggestions.

Unlike the content generators this never fails: when the budget is spent,
no text is available or the provider call goes wrong, it returns a
date-stamped default name.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from study_assistant.schemas.providers import ProviderRequest
from study_assistant.services.storage.base import DocumentRepository
from ..gateway import AiGateway
from ..usage_ledger import UsageLedger, utc_clock

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 50
EXCERPT_LENGTH = 1000

SYSTEM_PROMPT = (
    "You are an educational assistant that creates concise, descriptive test names.\n"
    "Based on the content provided, suggest a short, clear test name in Swedish (max 50 characters).\n"
    "The name should indicate the subject or topic being covered.\n"
    "Respond with ONLY the test name, nothing else.\n"
    "Examples: 'Fotosyntesen och Cellbiologi', 'Svenska Grammatik - Verb', 'Andra Världskriget 1939-1945'"
)


def clean_name(raw: str) -> str:
    name = raw.strip().strip("\"'").strip()
    if len(name) > MAX_NAME_LENGTH:
        name = name[:MAX_NAME_LENGTH - 3] + "..."
    return name


class StudySetNamer:
    def __init__(
        self,
        gateway: AiGateway,
        ledger: UsageLedger,
        documents: DocumentRepository,
        clock: Callable[[], datetime] = utc_clock,
    ):
        self.gateway = gateway
        self.ledger = ledger
        self.documents = documents
        self._clock = clock

    def default_name(self) -> str:
        return f"Test - {self._clock().astimezone(timezone.utc):%Y-%m-%d}"

    async def suggest_name(self, test_id: str, document_ids: Optional[List[str]] = None) -> str:
        try:
            if not await self.ledger.admit():
                logger.warning("Daily token limit exceeded, returning default test name")
                return self.default_name()

            documents = await self.documents.list_for_set(test_id)
            if document_ids is not None:
                wanted = set(document_ids)
                documents = [doc for doc in documents if doc.id in wanted]
            excerpts = [
                doc.extracted_text[:EXCERPT_LENGTH]
                for doc in documents
                if doc.has_usable_text
            ]
            if not excerpts:
                logger.warning(f"No documents with extracted text found for study set {test_id}")
                return self.default_name()

            user_prompt = (
                "Based on this study material, suggest a concise test name (max 50 characters):\n\n"
                + "\n\n".join(excerpts)
            )
            response = await self.gateway.send(
                ProviderRequest(
                    system_prompt=SYSTEM_PROMPT,
                    user_prompt=user_prompt,
                    max_tokens=100,
                    enable_caching=False,
                )
            )
            await self.ledger.record(response.usage.input_tokens, response.usage.output_tokens)
        except Exception as e:
            logger.error(f"Error suggesting test name for study set {test_id}: {e}")
            return self.default_name()

        name = clean_name(response.text)
        if not name:
            return self.default_name()
        logger.info(f"Suggested test name for study set {test_id}: {name}")
        return name
