"""DuckDuckGo instant-answer client."""

from __future__ import annotations

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

from chatrelay.errors import NetworkError, VendorError
from chatrelay.search.models import SearchResult

_API_URL = "https://api.duckduckgo.com/"
_USER_AGENT = "Mozilla/5.0 (compatible; chatrelay/0.1)"
_MAX_RELATED = 3


def raw_search(query: str, timeout: int = 10, plain: bool = False) -> dict[str, Any]:
    """Return the instant-answer JSON for *query*.

    Args:
        plain: Ask for HTML-free text and skip disambiguation pages.

    Raises:
        VendorError: Non-success HTTP status.
        NetworkError: Transport failure or undecodable body.
    """
    params = {"q": query, "format": "json"}
    if plain:
        params.update({"no_html": "1", "skip_disambig": "1"})
    url = f"{_API_URL}?{urllib.parse.urlencode(params)}"
    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            body = response.read()
    except urllib.error.HTTPError as exc:
        raise VendorError(exc.code, f"Search request failed with status {exc.code}") from exc
    except (urllib.error.URLError, TimeoutError) as exc:
        raise NetworkError(f"Search request failed: {exc}") from exc
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise NetworkError(f"Search returned an unreadable response: {exc}") from exc


def instant_answer(query: str, timeout: int = 10) -> list[SearchResult]:
    """Abstract plus up to three related topics for *query*."""
    return parse_instant_answer(raw_search(query, timeout=timeout, plain=True))


def parse_instant_answer(data: dict[str, Any]) -> list[SearchResult]:
    results: list[SearchResult] = []
    if data.get("Abstract"):
        results.append(
            SearchResult(
                title=data.get("Heading") or "Search Result",
                url=data.get("AbstractURL") or "",
                content=data["Abstract"],
                source=data.get("AbstractSource") or "DuckDuckGo",
            )
        )
    for topic in (data.get("RelatedTopics") or [])[:_MAX_RELATED]:
        if isinstance(topic, dict) and topic.get("Text") and topic.get("FirstURL"):
            results.append(
                SearchResult(
                    title=topic["Text"][:100],
                    url=topic["FirstURL"],
                    content=topic["Text"],
                    source="DuckDuckGo",
                )
            )
    return results


def search_candidates(data: dict[str, Any]) -> list[tuple[str, str]]:
    """Flatten ``RelatedTopics`` (including nested groups) and ``Results`` into
    ``(title, url)`` pairs that can be added as sources.

    Entries that are not objects or lack ``Text``/``FirstURL`` are skipped.
    """
    candidates: list[tuple[str, str]] = []
    if not isinstance(data, dict):
        return candidates
    for item in _objects(data.get("RelatedTopics")):
        if item.get("Text") and item.get("FirstURL"):
            candidates.append((str(item["Text"]), str(item["FirstURL"])))
        else:
            for sub in _objects(item.get("Topics")):
                if sub.get("Text") and sub.get("FirstURL"):
                    candidates.append((str(sub["Text"]), str(sub["FirstURL"])))
    for item in _objects(data.get("Results")):
        if item.get("Text") and item.get("FirstURL"):
            candidates.append((str(item["Text"]), str(item["FirstURL"])))
    return candidates


def _objects(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]
