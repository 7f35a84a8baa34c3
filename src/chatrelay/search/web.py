"""Page fetcher for browse requests.

A browse request names URLs chosen by the chat user, so every fetch is
treated as untrusted input:

- only http:// and https:// URLs are followed;
- the host (and the host of every redirect hop) must resolve to public
  addresses only;
- at most 3 redirects, 5 MB of body and HTML or plain-text responses.

The page is reduced to a title and readable text for the summariser.
"""

from __future__ import annotations

import ipaddress
import socket
import urllib.error
import urllib.parse
import urllib.request

import html2text
from bs4 import BeautifulSoup

from chatrelay.search.models import SearchResult

_USER_AGENT = "Mozilla/5.0 (compatible; chatrelay/0.1)"
_MAX_BODY_BYTES = 5 * 1024 * 1024
_MAX_REDIRECTS = 3
_SCHEMES = frozenset({"http", "https"})
_READABLE_TYPES = frozenset({"text/html", "text/plain"})
_BOILERPLATE_TAGS = ["script", "style", "nav", "footer", "head"]

_markdown = html2text.HTML2Text()
_markdown.ignore_links = True
_markdown.ignore_images = True
_markdown.body_width = 0


class PageFetchError(ValueError):
    """A page could not be fetched or is not readable text."""


class SsrfError(PageFetchError):
    """The URL points at a private, loopback or otherwise internal address."""


def fetch_page(url: str, timeout: int = 10, content_chars: int = 2_000) -> SearchResult:
    """Fetch *url* and return its title and leading readable text.

    Whitespace is collapsed and the text is cut to *content_chars*. Pages
    without a title are titled by their URL.

    Raises:
        PageFetchError: Disallowed URL, unreachable host or unreadable body
            (``SsrfError`` for internal addresses).
    """
    validate_scheme(url)
    check_ssrf(url)
    text, content_type = _fetch(url, timeout)
    title, body = to_plain_text(text, content_type)
    content = " ".join(body.split())[:content_chars]
    return SearchResult(title=title or url, url=url, content=content)


def validate_scheme(url: str) -> None:
    scheme = urllib.parse.urlparse(url).scheme
    if scheme not in _SCHEMES:
        raise PageFetchError(
            f"Unsupported URL scheme '{scheme}'. Only https:// and http:// are allowed."
        )


def check_ssrf(url: str) -> None:
    """Resolve the URL's host and reject it unless every address is public."""
    host = urllib.parse.urlparse(url).hostname
    if not host:
        raise PageFetchError(f"URL has no hostname: {url}")

    try:
        resolved = {info[4][0] for info in socket.getaddrinfo(host, None)}
    except socket.gaierror as exc:
        raise PageFetchError(f"DNS resolution failed for '{host}': {exc}") from exc

    for address in sorted(resolved):
        ip = _parse_ip(address)
        if ip is not None and _is_internal(ip):
            raise SsrfError(
                f"URL resolves to private address ({ip}). "
                "Browsing internal network addresses is not allowed."
            )


def _parse_ip(address: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return None
    mapped = getattr(ip, "ipv4_mapped", None)
    return mapped or ip


def _is_internal(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    return not ip.is_global or ip.is_multicast


class _GuardedRedirects(urllib.request.HTTPRedirectHandler):
    """Caps redirects and re-checks the target of each hop."""

    max_redirections = _MAX_REDIRECTS

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        validate_scheme(newurl)
        check_ssrf(newurl)
        return super().redirect_request(req, fp, code, msg, headers, newurl)


def _fetch(url: str, timeout: int) -> tuple[str, str]:
    """Return the decoded body of *url* and its content type."""
    opener = urllib.request.build_opener(_GuardedRedirects())
    request = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    try:
        response = opener.open(request, timeout=timeout)
    except urllib.error.URLError as exc:
        raise PageFetchError(f"Failed to fetch URL '{url}': {exc}") from exc

    with response:
        content_type = response.headers.get_content_type()
        if content_type not in _READABLE_TYPES:
            raise PageFetchError(f"Cannot read '{url}': content type {content_type} is not text")
        charset = response.headers.get_content_charset() or "utf-8"
        body = response.read(_MAX_BODY_BYTES + 1)

    if len(body) > _MAX_BODY_BYTES:
        raise PageFetchError(f"Cannot read '{url}': page is larger than 5 MB")
    try:
        return body.decode(charset, errors="replace"), content_type
    except LookupError:
        return body.decode("utf-8", errors="replace"), content_type


def to_plain_text(text: str, content_type: str) -> tuple[str, str]:
    """Return ``(title, readable text)``; plain-text pages have no title."""
    if content_type == "text/plain":
        return "", text

    soup = BeautifulSoup(text, "html.parser")
    title = soup.title.get_text(strip=True) if soup.title else ""
    for tag in soup.find_all(_BOILERPLATE_TAGS):
        tag.decompose()
    return title, _markdown.handle(str(soup)).strip()
