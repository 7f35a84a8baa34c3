"""JSON extractor — parse and re-serialise with stable formatting."""

from __future__ import annotations

import json

from chatrelay.errors import ExtractionError
from chatrelay.ingest.base import STRUCTURED, BaseExtractor, ExtractedContent


class JsonExtractor(BaseExtractor):
    """Normalise a JSON upload to 2-space indented text.

    Key order is kept as written; non-ASCII characters are emitted verbatim.
    Re-parsing the extracted text yields a value equal to the original.
    """

    category = STRUCTURED

    def extract(self, data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
        try:
            parsed = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ExtractionError(
                "invalid-json",
                "Failed to parse JSON file. Ensure the file contains valid JSON.",
            ) from exc
        text = json.dumps(parsed, indent=2, ensure_ascii=False)
        return ExtractedContent(text=text, category=self.category)
