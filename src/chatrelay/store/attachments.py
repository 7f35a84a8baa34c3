"""Attachment tray — uploads waiting to be folded into the next message.

Each attachment moves ``pending → ready`` or ``pending → error`` on its own;
``process_uploads()`` extracts several files concurrently and one failure
never holds up or fails the others.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from chatrelay.errors import ChatRelayError
from chatrelay.ingest.base import ExtractedContent
from chatrelay.ingest.dispatch import extract
from chatrelay.logging_config import get_logger
from chatrelay.store.models import ERROR, PENDING, READY, UploadedAttachment, new_id

logger = get_logger(__name__)

Extractor = Callable[[bytes, str, str], ExtractedContent]


@dataclass
class PendingUpload:
    name: str
    data: bytes
    mime_type: str = ""


class AttachmentTray:
    """Transient, ordered attachments for the message being composed."""

    def __init__(self) -> None:
        self._items: dict[str, UploadedAttachment] = {}
        self._lock = threading.Lock()

    def add_pending(self, name: str, mime_type: str = "", size: int = 0) -> UploadedAttachment:
        attachment = UploadedAttachment(id=new_id(), name=name, mime_type=mime_type, size=size)
        with self._lock:
            self._items[attachment.id] = attachment
        return attachment

    def mark_ready(self, attachment_id: str, content: ExtractedContent) -> None:
        with self._lock:
            attachment = self._items.get(attachment_id)
            if attachment is None:
                return  # removed while processing
            attachment.status = READY
            attachment.text = content.text
            attachment.category = content.category
            attachment.base64_data = content.base64_data

    def mark_error(self, attachment_id: str, message: str) -> None:
        with self._lock:
            attachment = self._items.get(attachment_id)
            if attachment is None:
                return
            attachment.status = ERROR
            attachment.error = message

    def remove(self, attachment_id: str) -> UploadedAttachment:
        """Raises KeyError for an unknown id."""
        with self._lock:
            return self._items.pop(attachment_id)

    def get(self, attachment_id: str) -> UploadedAttachment | None:
        return self._items.get(attachment_id)

    def list(self) -> list[UploadedAttachment]:
        """Attachments in upload order."""
        with self._lock:
            return list(self._items.values())

    def discard(self, attachment_ids: Iterable[str]) -> None:
        """Drop the given attachments. Ids no longer in the tray are ignored."""
        with self._lock:
            for attachment_id in attachment_ids:
                self._items.pop(attachment_id, None)

    def __len__(self) -> int:
        return len(self._items)


def process_uploads(
    tray: AttachmentTray,
    uploads: list[PendingUpload],
    extractor: Extractor = extract,
    max_workers: int = 4,
) -> list[UploadedAttachment]:
    """Register *uploads* as pending and extract them concurrently.

    Returns the attachments in upload order once every extraction finished.
    """
    attachments = [tray.add_pending(u.name, u.mime_type, len(u.data)) for u in uploads]

    def _run(attachment: UploadedAttachment, upload: PendingUpload) -> None:
        try:
            content = extractor(upload.data, upload.name, upload.mime_type)
        except ChatRelayError as exc:
            logger.warning("Attachment %s failed: %s", upload.name, exc.message)
            tray.mark_error(attachment.id, exc.message)
        else:
            tray.mark_ready(attachment.id, content)

    if attachments:
        with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(attachments)))) as pool:
            futures = [pool.submit(_run, a, u) for a, u in zip(attachments, uploads)]
            for future in futures:
                future.result()

    return attachments
