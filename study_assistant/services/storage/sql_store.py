"""
SQLAlchemy Core repositories.

Blocking database work runs in the default executor so callers stay on the
event loop. Usage increments are issued as a single UPDATE with column
arithmetic so concurrent calls never lose an update.
"""

import asyncio
import logging
from datetime import date
from functools import partial
from typing import List

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    delete,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from study_assistant.core.exceptions import NotFoundError
from study_assistant.schemas.documents import DocumentStatus, SourceDocument, StudySet, utc_now
from study_assistant.schemas.generation import ContentKind, FlashcardItem, GeneratedContent
from study_assistant.schemas.providers import UsageRecord
from .base import ContentRepository, DocumentRepository, StudySetRepository, UsageStore

logger = logging.getLogger(__name__)

metadata = MetaData()

study_sets = Table(
    "study_sets",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("owner_id", String(64)),
)

documents = Table(
    "documents",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("test_id", String(64), ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("file_name", String(255), nullable=False),
    Column("file_path", String(1024), nullable=False),
    Column("content_type", String(128), nullable=False),
    Column("status", String(32), nullable=False),
    Column("extracted_text", Text),
    Column("uploaded_at", DateTime(timezone=True), nullable=False),
)

generated_contents = Table(
    "generated_contents",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("test_id", String(64), ForeignKey("study_sets.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("kind", String(32), nullable=False),
    Column("title", String(300), nullable=False),
    Column("raw_text", Text, nullable=False),
    Column("generated_at", DateTime(timezone=True), nullable=False),
)

flashcards = Table(
    "flashcards",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("content_id", String(64), ForeignKey("generated_contents.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("question", Text, nullable=False),
    Column("answer", Text, nullable=False),
    Column("order_index", Integer, nullable=False),
)

usage_records = Table(
    "usage_records",
    metadata,
    Column("day", Date, primary_key=True),
    Column("input_tokens", Integer, nullable=False, default=0),
    Column("output_tokens", Integer, nullable=False, default=0),
    Column("call_count", Integer, nullable=False, default=0),
    Column("last_updated", DateTime(timezone=True), nullable=False),
)


def create_tables(engine: Engine) -> None:
    metadata.create_all(engine)


class _SqlRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    async def _run(self, fn, *args):
        return await asyncio.get_event_loop().run_in_executor(None, partial(fn, *args))


class SqlStudySetRepository(_SqlRepository, StudySetRepository):

    def _load(self, test_id: str) -> StudySet:
        with self.engine.connect() as conn:
            row = conn.execute(select(study_sets).where(study_sets.c.id == test_id)).mappings().first()
        if row is None:
            raise NotFoundError("StudySet", test_id)
        return StudySet(**row)

    def _save(self, study_set: StudySet) -> None:
        values = study_set.model_dump()
        with self.engine.begin() as conn:
            result = conn.execute(
                update(study_sets).where(study_sets.c.id == study_set.id).values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(study_sets).values(**values))

    async def load(self, test_id: str) -> StudySet:
        return await self._run(self._load, test_id)

    async def save(self, study_set: StudySet) -> None:
        await self._run(self._save, study_set)


class SqlDocumentRepository(_SqlRepository, DocumentRepository):

    @staticmethod
    def _to_model(row) -> SourceDocument:
        data = dict(row)
        data["status"] = DocumentStatus(data["status"])
        return SourceDocument(**data)

    def _load(self, document_id: str) -> SourceDocument:
        with self.engine.connect() as conn:
            row = conn.execute(select(documents).where(documents.c.id == document_id)).mappings().first()
        if row is None:
            raise NotFoundError("Document", document_id)
        return self._to_model(row)

    def _save(self, document: SourceDocument) -> None:
        values = document.model_dump()
        values["status"] = document.status.value
        with self.engine.begin() as conn:
            result = conn.execute(
                update(documents).where(documents.c.id == document.id).values(**values)
            )
            if result.rowcount == 0:
                conn.execute(insert(documents).values(**values))

    def _list_for_set(self, test_id: str) -> List[SourceDocument]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                select(documents)
                .where(documents.c.test_id == test_id)
                .order_by(documents.c.uploaded_at, documents.c.id)
            ).mappings().all()
        return [self._to_model(row) for row in rows]

    def _delete(self, document_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(documents).where(documents.c.id == document_id))

    async def load(self, document_id: str) -> SourceDocument:
        return await self._run(self._load, document_id)

    async def save(self, document: SourceDocument) -> None:
        await self._run(self._save, document)

    async def list_for_set(self, test_id: str) -> List[SourceDocument]:
        return await self._run(self._list_for_set, test_id)

    async def delete(self, document_id: str) -> None:
        await self._run(self._delete, document_id)


class SqlContentRepository(_SqlRepository, ContentRepository):

    def _load(self, content_id: str) -> GeneratedContent:
        with self.engine.connect() as conn:
            row = conn.execute(
                select(generated_contents).where(generated_contents.c.id == content_id)
            ).mappings().first()
            if row is None:
                raise NotFoundError("GeneratedContent", content_id)
            cards = conn.execute(
                select(flashcards)
                .where(flashcards.c.content_id == content_id)
                .order_by(flashcards.c.order_index)
            ).mappings().all()
        data = dict(row)
        data["kind"] = ContentKind(data["kind"])
        data["flashcards"] = [
            FlashcardItem(question=c["question"], answer=c["answer"], order=c["order_index"])
            for c in cards
        ]
        return GeneratedContent(**data)

    def _save(self, content: GeneratedContent) -> None:
        # Content is immutable after creation, so save is insert-only.
        with self.engine.begin() as conn:
            conn.execute(
                insert(generated_contents).values(
                    id=content.id,
                    test_id=content.test_id,
                    kind=content.kind.value,
                    title=content.title,
                    raw_text=content.raw_text,
                    generated_at=content.generated_at,
                )
            )
            if content.flashcards:
                conn.execute(
                    insert(flashcards),
                    [
                        {
                            "content_id": content.id,
                            "question": card.question,
                            "answer": card.answer,
                            "order_index": card.order,
                        }
                        for card in content.flashcards
                    ],
                )

    def _delete(self, content_id: str) -> None:
        with self.engine.begin() as conn:
            conn.execute(delete(flashcards).where(flashcards.c.content_id == content_id))
            conn.execute(delete(generated_contents).where(generated_contents.c.id == content_id))

    async def load(self, content_id: str) -> GeneratedContent:
        return await self._run(self._load, content_id)

    async def save(self, content: GeneratedContent) -> None:
        await self._run(self._save, content)

    async def delete(self, content_id: str) -> None:
        await self._run(self._delete, content_id)


class SqlUsageStore(_SqlRepository, UsageStore):

    @staticmethod
    def _to_model(row) -> UsageRecord:
        return UsageRecord(**dict(row))

    def _select(self, conn, day: date):
        return conn.execute(select(usage_records).where(usage_records.c.day == day)).mappings().first()

    def _get_or_create(self, day: date) -> UsageRecord:
        with self.engine.connect() as conn:
            row = self._select(conn, day)
        if row is not None:
            return self._to_model(row)
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    insert(usage_records).values(
                        day=day, input_tokens=0, output_tokens=0, call_count=0, last_updated=utc_now()
                    )
                )
            logger.info(f"Created usage record for {day.isoformat()}")
        except IntegrityError:
            # Another request created the row first.
            pass
        with self.engine.connect() as conn:
            return self._to_model(self._select(conn, day))

    def _increment(self, day: date, input_tokens: int, output_tokens: int) -> UsageRecord:
        self._get_or_create(day)
        with self.engine.begin() as conn:
            conn.execute(
                update(usage_records)
                .where(usage_records.c.day == day)
                .values(
                    input_tokens=usage_records.c.input_tokens + input_tokens,
                    output_tokens=usage_records.c.output_tokens + output_tokens,
                    call_count=usage_records.c.call_count + 1,
                    last_updated=utc_now(),
                )
            )
            row = self._select(conn, day)
        return self._to_model(row)

    async def get_or_create(self, day: date) -> UsageRecord:
        return await self._run(self._get_or_create, day)

    async def increment(self, day: date, input_tokens: int, output_tokens: int) -> UsageRecord:
        return await self._run(self._increment, day, input_tokens, output_tokens)
