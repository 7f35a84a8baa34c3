"""Tests for the browse and raw search routes."""

from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from chatrelay.api.app import create_app
from chatrelay.rag.intent import SearchIntent
from chatrelay.search.models import SearchResult


def test_browse_missing_input(client: TestClient, api_key) -> None:
    response = client.post("/api/browse", json={"urls": []})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing query or URLs"}


def test_browse_missing_key(client: TestClient) -> None:
    response = client.post("/api/browse", json={"query": "python"})
    assert response.status_code == 500
    assert response.json() == {"error": "OPENAI_API_KEY not set"}


def test_browse_query_summarised(client: TestClient, api_key) -> None:
    hits = [SearchResult(title="Python", url="https://python.org", content="A language")]
    with patch("chatrelay.search.browse.instant_answer", return_value=hits), patch(
        "chatrelay.search.browse.complete", return_value="Python is a language [1]."
    ) as mock_complete:
        response = client.post("/api/browse", json={"query": "python"})

    body = response.json()
    assert response.status_code == 200
    assert body["summary"] == "Python is a language [1]."
    assert body["query"] == "python"
    assert [s["url"] for s in body["sources"]] == ["https://python.org"]
    assert mock_complete.call_args.kwargs["api_key"] == "sk-test-key"


def test_browse_no_results_uses_fallback(client: TestClient, api_key) -> None:
    with patch("chatrelay.search.browse.instant_answer", return_value=[]):
        response = client.post("/api/browse", json={"query": "zzqx"})

    body = response.json()
    assert body["sources"] == []
    assert body["summary"].startswith("I couldn't find recent information about \"zzqx\"")


def test_search_missing_q(client: TestClient) -> None:
    response = client.get("/api/search")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing q parameter"}


def test_search_passes_engine_json_through(client: TestClient) -> None:
    engine = {"Abstract": "", "RelatedTopics": [{"Text": "x", "FirstURL": "https://x"}]}
    with patch("chatrelay.api.routes.browse.raw_search", return_value=engine) as mock_search:
        response = client.get("/api/search", params={"q": "x"})

    assert response.json() == engine
    mock_search.assert_called_once_with("x", timeout=10)


# ---------------------------------------------------------------------------
# POST /api/intent
# ---------------------------------------------------------------------------


def test_intent_missing_text(client: TestClient) -> None:
    response = client.post("/api/intent", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing text"}


def test_intent_keyword(client: TestClient) -> None:
    body = client.post("/api/intent", json={"text": "Search for the latest news on Mars"}).json()
    assert body["triggerSearch"] is True
    assert body["urls"] == []


def test_intent_url(client: TestClient) -> None:
    body = client.post("/api/intent", json={"text": "Summarise https://example.com/a please"}).json()
    assert body == {
        "triggerSearch": True,
        "rationale": "contains a URL",
        "urls": ["https://example.com/a"],
    }


def test_intent_plain_message(client: TestClient) -> None:
    body = client.post("/api/intent", json={"text": "Tell me a joke"}).json()
    assert body["triggerSearch"] is False


def test_intent_uses_injected_classifier(config, session) -> None:
    seen: list[str] = []

    def always_search(text: str) -> SearchIntent:
        seen.append(text)
        return SearchIntent(True, "custom classifier")

    with TestClient(create_app(config, session, intent_classifier=always_search)) as c:
        body = c.post("/api/intent", json={"text": "Tell me a joke"}).json()

    assert body == {"triggerSearch": True, "rationale": "custom classifier", "urls": []}
    assert seen == ["Tell me a joke"]


def test_search_candidates_route(client: TestClient) -> None:
    engine = {
        "RelatedTopics": [
            {"Text": "PyPI", "FirstURL": "https://ddg.example/pypi"},
            {"Name": "Group", "Topics": [{"Text": "CPython", "FirstURL": "https://ddg.example/cp"}]},
        ],
        "Results": [{"Text": "Official site", "FirstURL": "https://python.org"}],
    }
    with patch("chatrelay.api.routes.browse.raw_search", return_value=engine):
        response = client.get("/api/search/candidates", params={"q": "python"})

    assert response.json() == {
        "candidates": [
            {"title": "PyPI", "url": "https://ddg.example/pypi"},
            {"title": "CPython", "url": "https://ddg.example/cp"},
            {"title": "Official site", "url": "https://python.org"},
        ]
    }


def test_search_candidates_missing_q(client: TestClient) -> None:
    response = client.get("/api/search/candidates")
    assert response.status_code == 400
    assert response.json() == {"error": "Missing q parameter"}
