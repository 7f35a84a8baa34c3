"""Web browsing and raw search routes."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from chatrelay.api.deps import get_config, get_intent_classifier
from chatrelay.config import RelayConfig
from chatrelay.errors import ValidationError
from chatrelay.rag.intent import IntentClassifier, find_urls
from chatrelay.rag.llm_client import validate_api_key
from chatrelay.search.browse import browse as browse_web
from chatrelay.search.duckduckgo import raw_search, search_candidates

router = APIRouter()


class BrowseRequest(BaseModel):
    query: Optional[str] = None
    urls: Optional[list[str]] = None


class IntentRequest(BaseModel):
    text: Optional[str] = None


@router.post("/browse")
def browse(request: BrowseRequest, config: RelayConfig = Depends(get_config)):
    if not request.query and not request.urls:
        raise ValidationError("Missing query or URLs")
    api_key = validate_api_key(config.vendor.api_key_env)
    result = browse_web(request.query, request.urls, config=config.browse, api_key=api_key)
    return result.to_dict()


@router.get("/search")
def search(q: Optional[str] = None, config: RelayConfig = Depends(get_config)):
    """Proxy the search engine's JSON for *q* unchanged."""
    if not q:
        raise ValidationError("Missing q parameter")
    return raw_search(q, timeout=config.browse.timeout)


@router.get("/search/candidates")
def search_source_candidates(q: Optional[str] = None, config: RelayConfig = Depends(get_config)):
    """Search hits for *q* as ``{title, url}`` pairs the source manager can keep."""
    if not q:
        raise ValidationError("Missing q parameter")
    data = raw_search(q, timeout=config.browse.timeout)
    return {"candidates": [{"title": t, "url": u} for t, u in search_candidates(data)]}


@router.post("/intent")
def search_intent(
    request: IntentRequest,
    classify: IntentClassifier = Depends(get_intent_classifier),
):
    """Whether a chat message should trigger a web search, and which URLs it names."""
    if request.text is None:
        raise ValidationError("Missing text")
    intent = classify(request.text)
    return {
        "triggerSearch": intent.trigger_search,
        "rationale": intent.rationale,
        "urls": find_urls(request.text),
    }
