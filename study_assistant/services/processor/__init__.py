"""
Document text extraction.

Architecture:
- pipeline.py: ExtractionPipeline, picks a strategy per file kind and persists status
- pdf_reader.py: digital PDF text and page rasterization (pypdfium2)
- image_preprocessor.py: grayscale, contrast and size clamp before OCR (Pillow)
- text_recognizer.py: pluggable OCR backend, Tesseract by default

Usage:
    from study_assistant.services.processor import get_extraction_pipeline

    pipeline = get_extraction_pipeline()
    result = await pipeline.process_document(document_id)
"""

from .image_preprocessor import ImagePreprocessor
from .pdf_reader import PdfReader
from .pipeline import ExtractionPipeline, get_extraction_pipeline, page_marker
from .text_recognizer import RecognitionBackend, TesseractBackend, TextRecognizer

__all__ = [
    "ExtractionPipeline",
    "get_extraction_pipeline",
    "page_marker",
    "ImagePreprocessor",
    "PdfReader",
    "RecognitionBackend",
    "TesseractBackend",
    "TextRecognizer",
]
