"""Request-scoped dependencies: the loaded config, the chat session and the
search-intent classifier."""

from __future__ import annotations

from fastapi import Request

from chatrelay.config import RelayConfig
from chatrelay.rag.intent import IntentClassifier
from chatrelay.session import ChatSession


def get_config(request: Request) -> RelayConfig:
    return request.app.state.config


def get_session(request: Request) -> ChatSession:
    return request.app.state.session


def get_intent_classifier(request: Request) -> IntentClassifier:
    return request.app.state.intent_classifier
