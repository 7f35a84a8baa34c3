"""Image extractor — no text extraction, placeholder label + data URL."""

from __future__ import annotations

import base64

from chatrelay.ingest.base import IMAGE, BaseExtractor, ExtractedContent


class ImageExtractor(BaseExtractor):
    """Label an image upload and encode it for vision models."""

    category = IMAGE

    def extract(self, data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
        encoded = base64.b64encode(data).decode("ascii")
        return ExtractedContent(
            text=f"[Image: {file_name}]",
            category=self.category,
            base64_data=f"data:{mime_type};base64,{encoded}",
        )
