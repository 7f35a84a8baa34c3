"""File upload and attachment tray routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from chatrelay.api.deps import get_config, get_session
from chatrelay.config import RelayConfig
from chatrelay.errors import NotFoundError, ValidationError
from chatrelay.ingest.embedding import EmbeddingRequestor
from chatrelay.ingest.upload import process_upload
from chatrelay.session import ChatSession
from chatrelay.store.attachments import PendingUpload, process_uploads

router = APIRouter()


@router.post("/upload")
def upload(
    file: Optional[UploadFile] = File(None),
    config: RelayConfig = Depends(get_config),
):
    """Extract an uploaded file and embed its text when a key is configured."""
    if file is None:
        raise ValidationError("No file uploaded")
    requestor = EmbeddingRequestor(config.embedding, api_key_env=config.vendor.api_key_env)
    result = process_upload(
        file.file.read(), file.filename or "", file.content_type or "", requestor
    )
    return result.to_dict()


@router.get("/attachments")
def list_attachments(session: ChatSession = Depends(get_session)):
    return {"attachments": [a.to_dict() for a in session.attachments.list()]}


@router.post("/attachments")
def add_attachments(
    files: Optional[list[UploadFile]] = File(None),
    session: ChatSession = Depends(get_session),
):
    """Queue files for the next session message; each one is extracted independently."""
    if not files:
        raise ValidationError("No file uploaded")
    uploads = [
        PendingUpload(name=f.filename or "", data=f.file.read(), mime_type=f.content_type or "")
        for f in files
    ]
    attachments = process_uploads(session.attachments, uploads)
    return {"attachments": [a.to_dict() for a in attachments]}


@router.delete("/attachments/{attachment_id}")
def remove_attachment(attachment_id: str, session: ChatSession = Depends(get_session)):
    try:
        attachment = session.attachments.remove(attachment_id)
    except KeyError:
        raise NotFoundError(f"Unknown attachment: {attachment_id}") from None
    return attachment.to_dict()
