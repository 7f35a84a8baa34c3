"""Web-search intent detection.

A classifier is any callable ``(text) -> SearchIntent``; the default is a
keyword / URL heuristic and can be swapped without touching the callers.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

BROWSING_KEYWORDS: tuple[str, ...] = (
    "search for",
    "browse",
    "find information about",
    "latest news",
    "current",
    "recent",
)

_URL_RE = re.compile(r"https?://[^\s]+")


@dataclass(frozen=True)
class SearchIntent:
    trigger_search: bool
    rationale: str


IntentClassifier = Callable[[str], SearchIntent]


def find_urls(text: str) -> list[str]:
    return _URL_RE.findall(text)


def classify_search_intent(text: str) -> SearchIntent:
    """Decide whether *text* asks for a web search."""
    lowered = text.lower()
    for keyword in BROWSING_KEYWORDS:
        if keyword in lowered:
            return SearchIntent(True, f"contains browsing keyword '{keyword}'")
    if _URL_RE.search(text):
        return SearchIntent(True, "contains a URL")
    return SearchIntent(False, "no browsing keyword or URL")
