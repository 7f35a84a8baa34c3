"""Extractor dispatch by file name and declared MIME type.

Precedence (first match wins):
  .pdf                         → PdfExtractor        (document)
  image/*                      → ImageExtractor      (image)
  .txt / .md / text/plain      → PlainTextExtractor  (text)
  .json                        → JsonExtractor       (structured)
  anything else                → ExtractionError(unsupported-type)
"""

from __future__ import annotations

from chatrelay.errors import ExtractionError
from chatrelay.ingest.base import (
    DOCUMENT,
    IMAGE,
    STRUCTURED,
    TEXT,
    UNKNOWN,
    BaseExtractor,
    ExtractedContent,
)
from chatrelay.ingest.image import ImageExtractor
from chatrelay.ingest.json_extractor import JsonExtractor
from chatrelay.ingest.pdf import PdfExtractor
from chatrelay.ingest.plaintext import PlainTextExtractor

_PDF_EXTS = (".pdf",)
_TEXT_EXTS = (".txt", ".md")
_JSON_EXTS = (".json",)

_EXTRACTORS: dict[str, type[BaseExtractor]] = {
    DOCUMENT: PdfExtractor,
    IMAGE: ImageExtractor,
    TEXT: PlainTextExtractor,
    STRUCTURED: JsonExtractor,
}


def detect_category(file_name: str, mime_type: str = "") -> str:
    """Infer the content category from *file_name* and *mime_type*."""
    name = file_name.lower()
    mime = (mime_type or "").lower()
    if name.endswith(_PDF_EXTS):
        return DOCUMENT
    if mime.startswith("image/"):
        return IMAGE
    if name.endswith(_TEXT_EXTS) or mime == "text/plain":
        return TEXT
    if name.endswith(_JSON_EXTS):
        return STRUCTURED
    return UNKNOWN


def extract(data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
    """Route *data* to the matching extractor and return its result.

    Raises:
        ExtractionError: ``unsupported-type`` when no extractor matches, or the
            extractor's own reason when the content is malformed.
    """
    category = detect_category(file_name, mime_type)
    extractor_cls = _EXTRACTORS.get(category)
    if extractor_cls is None:
        raise ExtractionError(
            "unsupported-type",
            f"Unsupported file type: {mime_type or 'unknown'}. "
            "Supported types: PDF, images, text files, JSON.",
            mime_type=mime_type,
        )
    return extractor_cls().extract(data, file_name, mime_type)
