"""Image and voice proxy routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel

from chatrelay.api.deps import get_config
from chatrelay.config import RelayConfig
from chatrelay.proxies.base import FilePart
from chatrelay.proxies.images import ImageProxy
from chatrelay.proxies.voice import SPEAK_OPERATION, VoiceProxy
from chatrelay.rag.llm_client import validate_api_key

router = APIRouter()


class ImageRequest(BaseModel):
    prompt: Optional[str] = None
    model: Optional[str] = None
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None


def _file_part(upload: Optional[UploadFile]) -> Optional[FilePart]:
    if upload is None:
        return None
    return (upload.filename or "upload", upload.file.read(), upload.content_type or "")


@router.post("/image")
def generate_image(request: ImageRequest, config: RelayConfig = Depends(get_config)):
    """Generate one image; ``model`` is accepted but the configured model is used."""
    proxy = ImageProxy(config.image, api_key_env=config.vendor.api_key_env)
    return proxy.generate(request.prompt, request.size, request.quality, request.style)


@router.post("/image/edit")
def edit_image(
    image: Optional[UploadFile] = File(None),
    prompt: Optional[str] = Form(None),
    operation: Optional[str] = Form(None),
    mask: Optional[UploadFile] = File(None),
    config: RelayConfig = Depends(get_config),
):
    proxy = ImageProxy(config.image, api_key_env=config.vendor.api_key_env)
    return proxy.edit(_file_part(image), operation, prompt=prompt, mask=_file_part(mask))


@router.post("/voice")
def voice(
    operation: Optional[str] = Form(None),
    audio: Optional[UploadFile] = File(None),
    text: Optional[str] = Form(None),
    voice: Optional[str] = Form(None),
    model: Optional[str] = Form(None),
    config: RelayConfig = Depends(get_config),
):
    """Transcribe ``audio`` to JSON or synthesise ``text`` to an MP3 download."""
    validate_api_key(config.vendor.api_key_env)
    proxy = VoiceProxy(config.speech, api_key_env=config.vendor.api_key_env)
    proxy.check_operation(operation)

    if operation == SPEAK_OPERATION:
        audio_bytes = proxy.speak(text, voice=voice, model=model)
        return Response(
            content=audio_bytes,
            media_type="audio/mpeg",
            headers={"Content-Disposition": 'attachment; filename="speech.mp3"'},
        )
    return proxy.transcribe(_file_part(audio))
