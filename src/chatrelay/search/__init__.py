"""chatrelay web search — page fetching, instant answers, browse summaries."""

from chatrelay.search.browse import browse, fallback_summary
from chatrelay.search.duckduckgo import instant_answer, raw_search, search_candidates
from chatrelay.search.models import BrowseResult, SearchResult
from chatrelay.search.web import PageFetchError, SsrfError, fetch_page

__all__ = [
    "BrowseResult",
    "SearchResult",
    "PageFetchError",
    "SsrfError",
    "browse",
    "fallback_summary",
    "fetch_page",
    "instant_answer",
    "raw_search",
    "search_candidates",
]
