"""Upload pipeline — extraction followed by an optional embedding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from chatrelay.ingest.dispatch import extract
from chatrelay.ingest.embedding import EmbeddingRequestor
from chatrelay.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class UploadResult:
    text: str
    embedding: list[float] | None
    file_category: str
    file_name: str
    file_type: str
    file_size: int
    base64_data: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire shape returned by the upload endpoint."""
        payload: dict[str, Any] = {
            "text": self.text,
            "embedding": self.embedding,
            "fileCategory": self.file_category,
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": self.file_size,
        }
        if self.base64_data:
            payload["base64Data"] = self.base64_data
        return payload


def process_upload(
    data: bytes,
    file_name: str,
    mime_type: str,
    requestor: EmbeddingRequestor,
) -> UploadResult:
    """Extract *data* and attach an embedding when one can be computed.

    Raises:
        chatrelay.errors.ExtractionError: If the content cannot be extracted.
            Embedding failures never raise.
    """
    logger.info("Upload received: %s (%d bytes, %s)", file_name, len(data), mime_type or "?")
    content = extract(data, file_name, mime_type)
    embedding = requestor.request(content.text, content.category)
    logger.info(
        "Upload processed: %s → %s, %d chars, embedding=%s",
        file_name,
        content.category,
        len(content.text),
        "yes" if embedding is not None else "no",
    )
    return UploadResult(
        text=content.text,
        embedding=embedding,
        file_category=content.category,
        file_name=file_name,
        file_type=mime_type,
        file_size=len(data),
        base64_data=content.base64_data,
    )
