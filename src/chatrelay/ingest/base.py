"""Base extractor interface for uploaded content."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

# Category tags attached to every extraction result.
DOCUMENT = "document"
IMAGE = "image"
TEXT = "text"
STRUCTURED = "structured"
UNKNOWN = "unknown"

CATEGORIES = frozenset([DOCUMENT, IMAGE, TEXT, STRUCTURED, UNKNOWN])


@dataclass
class ExtractedContent:
    """Plain text pulled out of an upload, plus its category tag.

    ``base64_data`` is only set for images (a ``data:`` URL usable by vision
    models); text-bearing categories leave it ``None``.
    """

    text: str
    category: str
    base64_data: str | None = None


class BaseExtractor(ABC):
    """Abstract base for all extractors.

    Extractors are stateless: ``extract()`` has no side effects and never
    truncates its output.
    """

    category: str = UNKNOWN

    @abstractmethod
    def extract(self, data: bytes, file_name: str, mime_type: str = "") -> ExtractedContent:
        """Convert the raw *data* of *file_name* into an ExtractedContent.

        Raises:
            chatrelay.errors.ExtractionError: If *data* cannot be read as this type.
        """
