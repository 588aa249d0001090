"""
Extraction pipeline.
Turns a stored document into plain text: verbatim text files, digital PDF
text with an OCR fallback for scanned PDFs, and OCR for raster images.
"""

import asyncio
import gc
import logging
from pathlib import Path
from typing import Optional

import psutil

from study_assistant.core.config import settings
from study_assistant.core.exceptions import NotFoundError
from study_assistant.schemas.documents import DocumentStatus, ExtractionResult, SourceDocument
from study_assistant.services.storage.base import DocumentRepository, FileStorage
from .image_preprocessor import ImagePreprocessor
from .pdf_reader import PdfReader
from .text_recognizer import TextRecognizer

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt"}
PDF_EXTENSIONS = {".pdf"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".tif"}

MEMORY_GC_THRESHOLD_MB = 2000


def page_marker(page_number: int) -> str:
    return f"--- Page {page_number} ---"


class ExtractionPipeline:
    """Extracts and persists document text; failures surface only as OcrFailed"""

    def __init__(
        self,
        documents: DocumentRepository,
        files: FileStorage,
        recognizer: Optional[TextRecognizer] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
        raster_max_dimension: Optional[int] = None,
    ):
        self.documents = documents
        self.files = files
        self.recognizer = recognizer or TextRecognizer()
        self.preprocessor = preprocessor or ImagePreprocessor()
        self.raster_max_dimension = raster_max_dimension or settings.PDF_RASTER_MAX_DIMENSION

    def _check_memory_usage(self) -> None:
        """Log resident memory and force a collection when it runs high."""
        memory_mb = psutil.Process().memory_info().rss / 1024 / 1024
        logger.debug(f"Current memory usage: {memory_mb:.1f}MB")
        if memory_mb > MEMORY_GC_THRESHOLD_MB:
            logger.warning(f"High memory usage detected: {memory_mb:.1f}MB, forcing garbage collection")
            gc.collect()

    async def process_document(self, document_id: str) -> Optional[ExtractionResult]:
        """Run extraction for a stored document and persist text and status.

        Returns None when the document does not exist.
        """
        try:
            document = await self.documents.load(document_id)
        except NotFoundError:
            logger.error(f"Document {document_id} not found")
            return None

        logger.info(f"Processing document {document_id}: {document.file_name}")

        document.status = DocumentStatus.OCR_IN_PROGRESS
        await self.documents.save(document)

        result = await self.extract(document)

        document.status = result.status
        document.extracted_text = result.text if result.status == DocumentStatus.OCR_COMPLETED else None
        await self.documents.save(document)

        logger.info(
            f"Processed document {document_id}: {len(result.text)} characters, "
            f"method={result.method}, status={result.status.value}"
        )
        return result

    async def extract(self, document: SourceDocument) -> ExtractionResult:
        """Extract text from a document's file without touching persistence."""
        extension = Path(document.file_name).suffix.lower() or Path(document.file_path).suffix.lower()

        if extension not in TEXT_EXTENSIONS | PDF_EXTENSIONS | IMAGE_EXTENSIONS:
            logger.warning(f"Unsupported file type for document {document.id}: {extension or '(none)'}")
            return ExtractionResult(status=DocumentStatus.OCR_FAILED)

        try:
            if not await self.files.exists(document.file_path):
                logger.error(f"File not found for document {document.id}: {document.file_path}")
                return ExtractionResult(status=DocumentStatus.OCR_FAILED)

            data = await self.files.read(document.file_path)

            if extension in TEXT_EXTENSIONS:
                text, method, pages = data.decode("utf-8-sig", errors="replace"), "text", 1
            elif extension in PDF_EXTENSIONS:
                text, method, pages = await self._extract_pdf(data)
            else:
                text, method, pages = await self._extract_image(data), "image_ocr", 1
        except Exception as e:
            logger.error(f"Error processing document {document.id}: {e}", exc_info=True)
            return ExtractionResult(status=DocumentStatus.OCR_FAILED)

        status = DocumentStatus.OCR_COMPLETED if text.strip() else DocumentStatus.OCR_FAILED
        return ExtractionResult(text=text, status=status, method=method, pages=pages)

    async def _extract_image(self, data: bytes) -> str:
        loop = asyncio.get_event_loop()
        image = await loop.run_in_executor(None, self.preprocessor.preprocess_bytes, data)
        try:
            return await self.recognizer.recognize(image)
        finally:
            image.close()

    async def _extract_pdf(self, data: bytes) -> tuple[str, str, int]:
        loop = asyncio.get_event_loop()
        reader = await loop.run_in_executor(None, PdfReader, data)
        try:
            page_count = len(reader)
            text = await loop.run_in_executor(None, reader.text)
            if text:
                return text, "pdf_text", page_count

            logger.info("PDF has no text layer. Rasterizing pages for OCR...")
            return await self._extract_scanned_pdf(reader), "pdf_ocr", page_count
        finally:
            reader.close()

    async def _extract_scanned_pdf(self, reader: PdfReader) -> str:
        loop = asyncio.get_event_loop()
        page_count = len(reader)
        parts = []

        for page_num in range(page_count):
            logger.info(f"OCR page {page_num + 1} of {page_count}")
            bitmap = await loop.run_in_executor(
                None, reader.render_page, page_num, self.raster_max_dimension
            )
            try:
                prepared = await loop.run_in_executor(None, self.preprocessor.preprocess, bitmap)
            finally:
                bitmap.close()
            try:
                page_text = await self.recognizer.recognize(prepared)
            finally:
                prepared.close()

            if page_text.strip():
                parts.append(f"{page_marker(page_num + 1)}\n{page_text}\n")

            self._check_memory_usage()

        return "\n".join(parts).strip()


_pipeline: Optional[ExtractionPipeline] = None


def get_extraction_pipeline() -> ExtractionPipeline:
    """Get or create the global extraction pipeline."""
    global _pipeline
    if _pipeline is None:
        from study_assistant.services.storage import get_file_storage
        from study_assistant.services.storage.sql_store import SqlDocumentRepository
        from study_assistant.core.database import get_engine

        _pipeline = ExtractionPipeline(
            documents=SqlDocumentRepository(get_engine()),
            files=get_file_storage(),
        )
    return _pipeline
