"""Browse — fetch pages or search, then summarise the hits with citations.

Per-URL fetch failures are logged and skipped. When the summariser fails
(or nothing was found) a deterministic fallback summary is returned instead,
so a browse request never fails once it has something to look up.
"""

from __future__ import annotations

from chatrelay.config import BrowseCfg
from chatrelay.errors import ChatRelayError, ValidationError
from chatrelay.logging_config import get_logger
from chatrelay.rag.llm_client import complete
from chatrelay.search.duckduckgo import instant_answer
from chatrelay.search.models import BrowseResult, SearchResult
from chatrelay.search.web import PageFetchError, fetch_page

logger = get_logger(__name__)

SUMMARY_SYSTEM_PROMPT = (
    "You are a helpful assistant that summarizes web search results. "
    "Always include proper citations and be factual."
)
_SUMMARY_TEMPERATURE = 0.3
_SUMMARY_MAX_TOKENS = 1500
_FALLBACK_SNIPPET_CHARS = 200


def fetch_urls(urls: list[str], config: BrowseCfg) -> list[SearchResult]:
    """Fetch at most ``config.max_urls`` of *urls*, skipping failures."""
    results: list[SearchResult] = []
    for url in urls[: config.max_urls]:
        try:
            results.append(fetch_page(url, timeout=config.timeout, content_chars=config.content_chars))
        except PageFetchError as exc:
            logger.warning("Skipping %s: %s", url, exc)
    return results


def build_summary_prompt(query: str | None, results: list[SearchResult]) -> str:
    listing = "\n\n".join(
        f"[{i}] {r.title}\nURL: {r.url}\nContent: {r.content}"
        for i, r in enumerate(results, start=1)
    )
    subject = f'the query "{query}"' if query else "the requested pages"
    return (
        f"Summarize the following search results for {subject}.\n"
        "Cite sources inline using their number in square brackets, e.g. [1], "
        "and finish with a numbered list of the sources you used.\n\n"
        f"{listing}"
    )


def fallback_summary(query: str | None, results: list[SearchResult]) -> str:
    """Summary used when nothing was found or the summariser is unavailable."""
    if not results:
        return (
            f'I couldn\'t find recent information about "{query or ""}". '
            "This might be due to search limitations or the query being too specific."
        )
    snippets = " ".join(r.content[:_FALLBACK_SNIPPET_CHARS] for r in results)
    return f'I found {len(results)} relevant result(s) for "{query or ""}". {snippets}'


def summarize(
    query: str | None,
    results: list[SearchResult],
    config: BrowseCfg,
    api_key: str | None,
) -> str:
    if not results:
        return fallback_summary(query, results)
    messages = [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": build_summary_prompt(query, results)},
    ]
    try:
        return complete(
            config.summary_model,
            messages,
            max_tokens=_SUMMARY_MAX_TOKENS,
            temperature=_SUMMARY_TEMPERATURE,
            api_key=api_key,
        )
    except ChatRelayError as exc:
        logger.warning("Summarisation failed, using fallback summary: %s", exc.message)
        return fallback_summary(query, results)


def browse(
    query: str | None = None,
    urls: list[str] | None = None,
    config: BrowseCfg | None = None,
    api_key: str | None = None,
) -> BrowseResult:
    """Fetch *urls* when given, otherwise search for *query*, and summarise.

    Raises:
        ValidationError: If neither a query nor URLs were supplied.
    """
    config = config or BrowseCfg()
    if not query and not urls:
        raise ValidationError("Missing query or URLs")

    if urls:
        logger.info("Browsing %d URL(s)", min(len(urls), config.max_urls))
        results = fetch_urls(urls, config)
    else:
        logger.info("Searching the web for %r", query)
        try:
            results = instant_answer(query, timeout=config.timeout)
        except ChatRelayError as exc:
            logger.warning("Search failed: %s", exc.message)
            results = []

    return BrowseResult(
        summary=summarize(query, results, config, api_key),
        sources=results,
        query=query,
    )
