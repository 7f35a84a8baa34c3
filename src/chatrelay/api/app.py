"""FastAPI application factory.

Every route lives under ``/api``. Errors from the chatrelay taxonomy are
rendered as ``{"error": message}`` with the error's status code. A body
that does not match a route's request model is a 400 in the same shape;
anything else escaping a route becomes a 500 with the exception text.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatrelay import __version__
from chatrelay.api.routes import browse, chat, media, state, upload
from chatrelay.config import RelayConfig, load_config
from chatrelay.errors import ChatRelayError, ValidationError
from chatrelay.logging_config import get_logger
from chatrelay.rag.intent import IntentClassifier, classify_search_intent
from chatrelay.session import ChatSession

logger = get_logger(__name__)

API_PREFIX = "/api"


def create_app(
    config: RelayConfig | None = None,
    session: ChatSession | None = None,
    intent_classifier: IntentClassifier | None = None,
) -> FastAPI:
    """Build the app around *config* and *session*.

    Args:
        config:  Loaded configuration; ``load_config()`` when omitted.
        session: Session state; opened from ``config.storage`` when omitted.
        intent_classifier: Decides whether a message asks for a web search;
            the keyword/URL heuristic when omitted.
    """
    config = config or load_config()
    session = session or ChatSession.from_config(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting chatrelay API %s", __version__)
        yield
        logger.info("Shutting down chatrelay API")
        session.close()

    app = FastAPI(title="chatrelay API", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.session = session
    app.state.intent_classifier = intent_classifier or classify_search_intent

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatRelayError)
    async def chatrelay_error_handler(request: Request, exc: ChatRelayError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = ValidationError(describe_validation_error(exc))
        return JSONResponse(error.to_payload(), status_code=error.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": str(exc) or "Internal Server Error"}, status_code=500)

    @app.get(f"{API_PREFIX}/health")
    async def health_check() -> dict:
        return {"status": "ok"}

    for module in (chat, upload, media, browse, state):
        app.include_router(module.router, prefix=API_PREFIX)

    return app


def describe_validation_error(exc: RequestValidationError) -> str:
    """One-line message for the first problem in a malformed request."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"Invalid request: {location}: {message}" if location else f"Invalid request: {message}"
