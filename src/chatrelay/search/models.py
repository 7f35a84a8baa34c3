"""Result types for web search and browsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class SearchResult:
    title: str
    url: str
    content: str
    source: str = "Web"
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "url": self.url,
            "content": self.content,
            "source": self.source,
            "timestamp": self.timestamp,
        }


@dataclass
class BrowseResult:
    summary: str
    sources: list[SearchResult]
    query: str | None
    timestamp: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "sources": [s.to_dict() for s in self.sources],
            "query": self.query,
            "timestamp": self.timestamp,
        }
