"""In-memory doubles for storage, OCR and providers."""
import asyncio
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Dict, List, Optional, Sequence, Set, Union

from PIL import Image

from study_assistant.core.exceptions import NotFoundError
from study_assistant.schemas.documents import DocumentStatus, SourceDocument, StudySet
from study_assistant.schemas.generation import GeneratedContent
from study_assistant.schemas.providers import (
    ProviderKind,
    ProviderRequest,
    ProviderResponse,
    TokenUsage,
    UsageRecord,
)
from study_assistant.services.ai.providers.base import AiProvider
from study_assistant.services.processor.text_recognizer import RecognitionBackend
from study_assistant.services.storage.base import (
    ContentRepository,
    DocumentRepository,
    FileStorage,
    StudySetRepository,
    UsageStore,
)


class InMemoryFileStorage(FileStorage):
    def __init__(self, files: Optional[Dict[str, bytes]] = None):
        self.files = dict(files or {})
        self.reads: List[str] = []

    async def exists(self, path: str) -> bool:
        return path in self.files

    async def read(self, path: str) -> bytes:
        self.reads.append(path)
        if path not in self.files:
            raise NotFoundError("File", path)
        return self.files[path]


class InMemoryDocumentRepository(DocumentRepository):
    def __init__(self):
        self.items: Dict[str, SourceDocument] = {}
        self.saved_statuses: List[DocumentStatus] = []

    async def load(self, document_id: str) -> SourceDocument:
        if document_id not in self.items:
            raise NotFoundError("Document", document_id)
        return self.items[document_id].model_copy()

    async def save(self, document: SourceDocument) -> None:
        self.saved_statuses.append(document.status)
        self.items[document.id] = document.model_copy()

    async def list_for_set(self, test_id: str) -> List[SourceDocument]:
        return [d.model_copy() for d in self.items.values() if d.test_id == test_id]

    async def delete(self, document_id: str) -> None:
        self.items.pop(document_id, None)


class InMemoryStudySetRepository(StudySetRepository):
    def __init__(self):
        self.items: Dict[str, StudySet] = {}

    async def load(self, test_id: str) -> StudySet:
        if test_id not in self.items:
            raise NotFoundError("StudySet", test_id)
        return self.items[test_id]

    async def save(self, study_set: StudySet) -> None:
        self.items[study_set.id] = study_set


class InMemoryContentRepository(ContentRepository):
    def __init__(self):
        self.items: Dict[str, GeneratedContent] = {}

    async def load(self, content_id: str) -> GeneratedContent:
        if content_id not in self.items:
            raise NotFoundError("GeneratedContent", content_id)
        return self.items[content_id]

    async def save(self, content: GeneratedContent) -> None:
        self.items[content.id] = content

    async def delete(self, content_id: str) -> None:
        self.items.pop(content_id, None)


class InMemoryUsageStore(UsageStore):
    def __init__(self):
        self.records: Dict[date, UsageRecord] = {}

    async def get_or_create(self, day: date) -> UsageRecord:
        if day not in self.records:
            self.records[day] = UsageRecord(day=day)
        return self.records[day].model_copy()

    async def increment(self, day: date, input_tokens: int, output_tokens: int) -> UsageRecord:
        await self.get_or_create(day)
        record = self.records[day]
        record.input_tokens += input_tokens
        record.output_tokens += output_tokens
        record.call_count += 1
        return record.model_copy()


@dataclass
class RecognitionState:
    """Scripted OCR replies, consumed in order; the last reply repeats."""
    replies: List[Union[str, Exception]] = field(default_factory=lambda: [""])
    installed: Optional[Set[str]] = None
    calls: List[str] = field(default_factory=list)
    image_sizes: List[tuple] = field(default_factory=list)


class FakeRecognitionBackend(RecognitionBackend):
    def __init__(self, state: Optional[RecognitionState] = None):
        self.state = state or RecognitionState()

    async def recognize(self, image_bytes: bytes, language: str) -> str:
        self.state.calls.append(language)
        with Image.open(BytesIO(image_bytes)) as image:
            self.state.image_sizes.append(image.size)
        replies = self.state.replies
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def languages(self) -> Optional[Set[str]]:
        return self.state.installed


class FakeProvider(AiProvider):
    """Provider returning scripted replies; exceptions in the script are raised."""

    def __init__(
        self,
        kind: ProviderKind,
        replies: Sequence[Union[str, Exception]] = ("ok",),
        api_key: str = "test-key",
        delay: float = 0.0,
        usage: Optional[TokenUsage] = None,
    ):
        super().__init__(api_key=api_key, model=f"{kind.value}-test", max_tokens=1000, base_url="http://fake")
        self.kind = kind
        self.replies = list(replies)
        self.delay = delay
        self.usage = usage or TokenUsage(input_tokens=10, output_tokens=5)
        self.requests: List[ProviderRequest] = []

    def build_call(self, request: ProviderRequest):
        return {}

    def parse_response(self, body):
        raise NotImplementedError

    async def send(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return ProviderResponse(text=reply, usage=self.usage, model=self.model, provider=self.kind)


def completed_document(doc_id: str, test_id: str, text: str, file_name: str = "notes.txt") -> SourceDocument:
    return SourceDocument(
        id=doc_id,
        test_id=test_id,
        file_name=file_name,
        file_path=f"uploads/{doc_id}/{file_name}",
        status=DocumentStatus.OCR_COMPLETED,
        extracted_text=text,
    )


def build_text_pdf(text: str) -> bytes:
    """Single-page PDF with one line of Helvetica text."""
    stream = f"BT /F1 24 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"
    xref_offset = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (len(objects) + 1, xref_offset)
    return bytes(out)


def build_scanned_pdf(pages: int) -> bytes:
    """Image-only PDF with the given number of blank pages."""
    images = [Image.new("RGB", (300, 400), "white") for _ in range(pages)]
    buffer = BytesIO()
    images[0].save(buffer, format="PDF", save_all=True, append_images=images[1:])
    return buffer.getvalue()


def build_png(size=(120, 60), color="white") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()
