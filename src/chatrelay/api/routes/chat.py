"""Streaming chat completion routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from chatrelay.api.deps import get_config, get_session
from chatrelay.config import RelayConfig
from chatrelay.errors import NotFoundError, ValidationError
from chatrelay.rag.llm_client import (
    build_messages,
    open_stream,
    relay,
    resolve_model,
    validate_api_key,
)
from chatrelay.session import ChatSession

router = APIRouter()

STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"


class ChatRequest(BaseModel):
    messages: Optional[list[dict]] = None
    model: Optional[str] = None
    context: Optional[str] = None


class SessionChatRequest(BaseModel):
    messages: Optional[list[dict]] = None
    model: Optional[str] = None
    conversation_id: Optional[str] = None


@router.post("/chat")
async def chat(request: ChatRequest, config: RelayConfig = Depends(get_config)):
    """Relay a completion for caller-supplied history and context."""
    if request.messages is None:
        raise ValidationError("Missing messages")
    api_key = validate_api_key(config.vendor.api_key_env)
    model = resolve_model(request.model, config.completion.default_model)

    stream = await open_stream(
        model,
        build_messages(request.messages, request.context),
        api_key=api_key,
        temperature=config.completion.temperature,
        max_tokens=config.completion.max_tokens,
    )
    return StreamingResponse(relay(stream), media_type=STREAM_MEDIA_TYPE)


@router.post("/session/chat")
async def session_chat(
    request: SessionChatRequest,
    config: RelayConfig = Depends(get_config),
    session: ChatSession = Depends(get_session),
):
    """Relay a completion whose context comes from the session's selection and tray.

    Attachments are consumed only when the vendor accepts the request. The
    conversation log is recorded once the reply has been fully streamed.
    """
    if request.messages is None:
        raise ValidationError("Missing messages")
    api_key = validate_api_key(config.vendor.api_key_env)

    conversation_id = request.conversation_id or session.conversations.active_id
    conversation = session.conversations.get(conversation_id) if conversation_id else None
    if request.conversation_id and conversation is None:
        raise NotFoundError(f"Unknown conversation: {request.conversation_id}")
    model = resolve_model(
        request.model or (conversation.model if conversation else None),
        config.completion.default_model,
    )

    stream = await session.open_turn(request.messages, model, api_key=api_key)
    return StreamingResponse(
        session.stream_turn(stream, conversation_id, request.messages, model),
        media_type=STREAM_MEDIA_TYPE,
    )
