"""Session state routes: sources and selection, context preview, conversations, memory."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chatrelay.api.deps import get_session
from chatrelay.errors import NotFoundError, ValidationError
from chatrelay.session import ChatSession
from chatrelay.store.models import Source

router = APIRouter()


class SourceRequest(BaseModel):
    name: Optional[str] = None
    text: Optional[str] = None
    embedding: Optional[list[float]] = None


class SearchResultRequest(BaseModel):
    title: Optional[str] = None
    url: Optional[str] = None


class ConversationCreateRequest(BaseModel):
    model: Optional[str] = None


class ConversationUpdateRequest(BaseModel):
    name: Optional[str] = None
    model: Optional[str] = None
    summary: Optional[str] = None


class MemoryUpdateRequest(BaseModel):
    facts: Optional[list[str]] = None
    topics: Optional[list[str]] = None
    preferences: Optional[dict[str, Any]] = None


def _source_dict(session: ChatSession, source: Source) -> dict:
    return {**source.to_dict(), "selected": session.sources.is_selected(source.id)}


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


@router.get("/sources")
def list_sources(session: ChatSession = Depends(get_session)):
    return {
        "sources": [_source_dict(session, s) for s in session.sources.list()],
        "selected": session.sources.selected_ids(),
    }


@router.post("/sources")
def add_source(request: SourceRequest, session: ChatSession = Depends(get_session)):
    if not request.name or request.text is None:
        raise ValidationError("Missing name or text")
    source = session.sources.add(
        Source(name=request.name, text=request.text, embedding=request.embedding)
    )
    return _source_dict(session, source)


@router.post("/sources/search-result")
def add_search_result(request: SearchResultRequest, session: ChatSession = Depends(get_session)):
    """Keep a search hit as a selected source."""
    if not request.title or not request.url:
        raise ValidationError("Missing title or url")
    source = session.sources.add_search_result(request.title, request.url)
    return _source_dict(session, source)


@router.delete("/sources/{source_id}")
def remove_source(source_id: str, session: ChatSession = Depends(get_session)):
    try:
        session.sources.remove(source_id)
    except KeyError:
        raise NotFoundError(f"Unknown source: {source_id}") from None
    return {"removed": source_id, "selected": session.sources.selected_ids()}


@router.post("/sources/{source_id}/select")
def select_source(source_id: str, session: ChatSession = Depends(get_session)):
    try:
        session.sources.select(source_id)
    except KeyError:
        raise NotFoundError(f"Unknown source: {source_id}") from None
    return {"selected": session.sources.selected_ids()}


@router.delete("/sources/{source_id}/select")
def deselect_source(source_id: str, session: ChatSession = Depends(get_session)):
    session.sources.deselect(source_id)
    return {"selected": session.sources.selected_ids()}


@router.get("/context")
def context_preview(session: ChatSession = Depends(get_session)):
    """The context the next session message would carry."""
    context = session.assemble_context()
    return {
        "context": context.text,
        "blocks": [{"label": b.label, "text": b.text} for b in context.blocks],
    }


# ---------------------------------------------------------------------------
# Conversations
# ---------------------------------------------------------------------------


@router.get("/conversations")
def list_conversations(session: ChatSession = Depends(get_session)):
    return {
        "conversations": [c.to_dict() for c in session.conversations.list()],
        "activeId": session.conversations.active_id,
    }


@router.post("/conversations")
def create_conversation(
    request: ConversationCreateRequest, session: ChatSession = Depends(get_session)
):
    return session.conversations.create(request.model).to_dict()


@router.patch("/conversations/{conversation_id}")
def update_conversation(
    conversation_id: str,
    request: ConversationUpdateRequest,
    session: ChatSession = Depends(get_session),
):
    fields = request.model_dump(exclude_none=True)
    try:
        return session.conversations.update(conversation_id, **fields).to_dict()
    except KeyError:
        raise NotFoundError(f"Unknown conversation: {conversation_id}") from None


@router.delete("/conversations/{conversation_id}")
def delete_conversation(conversation_id: str, session: ChatSession = Depends(get_session)):
    try:
        session.conversations.delete(conversation_id)
    except KeyError:
        raise NotFoundError(f"Unknown conversation: {conversation_id}") from None
    return {"removed": conversation_id, "activeId": session.conversations.active_id}


@router.post("/conversations/{conversation_id}/activate")
def activate_conversation(conversation_id: str, session: ChatSession = Depends(get_session)):
    try:
        return session.conversations.activate(conversation_id).to_dict()
    except KeyError:
        raise NotFoundError(f"Unknown conversation: {conversation_id}") from None


@router.get("/conversations/{conversation_id}/messages")
def conversation_messages(conversation_id: str, session: ChatSession = Depends(get_session)):
    if session.conversations.get(conversation_id) is None:
        raise NotFoundError(f"Unknown conversation: {conversation_id}")
    return {"messages": session.conversations.messages(conversation_id)}


# ---------------------------------------------------------------------------
# User memory
# ---------------------------------------------------------------------------


@router.get("/memory")
def get_memory(session: ChatSession = Depends(get_session)):
    return session.memory.memory.to_dict()


@router.post("/memory")
def update_memory(request: MemoryUpdateRequest, session: ChatSession = Depends(get_session)):
    return session.memory.update(
        facts=request.facts, topics=request.topics, preferences=request.preferences
    ).to_dict()
