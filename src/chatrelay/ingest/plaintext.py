"""Plain text extractor — strict UTF-8 decode."""

from __future__ import annotations

from chatrelay.errors import ExtractionError
from chatrelay.ingest.base import TEXT, BaseExtractor, ExtractedContent


class PlainTextExtractor(BaseExtractor):
    """Decode ``.txt`` / ``.md`` / ``text/plain`` uploads as UTF-8."""

    category = TEXT

    def extract(self, data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ExtractionError(
                "invalid-encoding",
                "Failed to read text file. Ensure the file is valid UTF-8 text.",
            ) from exc
        return ExtractedContent(text=text.strip(), category=self.category)
