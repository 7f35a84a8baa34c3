"""Tests for web-search intent detection."""

from __future__ import annotations

import pytest

from chatrelay.rag.intent import SearchIntent, classify_search_intent, find_urls


@pytest.mark.parametrize(
    "text",
    [
        "Search for flights to Lisbon",
        "can you BROWSE the docs",
        "find information about the James Webb telescope",
        "latest news on the election",
        "what is the current price of copper",
        "any recent papers on RAG?",
    ],
)
def test_keywords_trigger_search(text):
    intent = classify_search_intent(text)
    assert isinstance(intent, SearchIntent)
    assert intent.trigger_search
    assert "keyword" in intent.rationale


def test_url_triggers_search():
    intent = classify_search_intent("summarise https://example.com/post please")
    assert intent.trigger_search
    assert intent.rationale == "contains a URL"


def test_plain_question_does_not_trigger():
    assert not classify_search_intent("write a haiku about tea").trigger_search


def test_find_urls():
    assert find_urls("see http://a.com and https://b.org/x?y=1 now") == [
        "http://a.com",
        "https://b.org/x?y=1",
    ]
