"""chatrelay ingest pipeline — extractors, embedding requestor, upload processing."""

from chatrelay.ingest.base import BaseExtractor, ExtractedContent
from chatrelay.ingest.dispatch import detect_category, extract
from chatrelay.ingest.embedding import EmbeddingRequestor
from chatrelay.ingest.image import ImageExtractor
from chatrelay.ingest.json_extractor import JsonExtractor
from chatrelay.ingest.pdf import PdfExtractor
from chatrelay.ingest.plaintext import PlainTextExtractor
from chatrelay.ingest.upload import UploadResult, process_upload

__all__ = [
    "BaseExtractor",
    "EmbeddingRequestor",
    "ExtractedContent",
    "ImageExtractor",
    "JsonExtractor",
    "PdfExtractor",
    "PlainTextExtractor",
    "UploadResult",
    "detect_category",
    "extract",
    "process_upload",
]
