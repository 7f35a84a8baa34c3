"""PDF extractor — page-based text extraction via pypdf."""

from __future__ import annotations

from io import BytesIO

import pypdf

from chatrelay.errors import ExtractionError
from chatrelay.ingest.base import DOCUMENT, BaseExtractor, ExtractedContent


class PdfExtractor(BaseExtractor):
    """Extract the text of a PDF document.

    Page text is stripped and joined with blank lines; pages that yield no
    text (scanned images, etc.) are skipped. Any pypdf failure while reading
    is reported as ``invalid-pdf``.
    """

    category = DOCUMENT

    def extract(self, data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
        try:
            text = self._extract_text(data)
        except Exception as exc:
            raise ExtractionError(
                "invalid-pdf",
                "Failed to parse PDF. Ensure the file is a valid PDF.",
            ) from exc
        return ExtractedContent(text=text, category=self.category)

    @staticmethod
    def _extract_text(data: bytes) -> str:
        reader = pypdf.PdfReader(BytesIO(data))
        parts: list[str] = []
        for page in reader.pages:
            page_text = page.extract_text() or ""
            stripped = page_text.strip()
            if stripped:
                parts.append(stripped)
        return "\n\n".join(parts)
