"""Shared helpers for the single-shot vendor proxies."""

from __future__ import annotations

from typing import Any

# (file name, raw bytes, MIME type): the multipart file shape the vendor SDK accepts.
FilePart = tuple[str, bytes, str]


def response_json(response: Any) -> dict[str, Any]:
    """Narrow a litellm response object to a plain JSON-able dict."""
    if isinstance(response, dict):
        return response
    dump = getattr(response, "model_dump", None)
    if dump is not None:
        return dump(exclude_none=True)
    return dict(response)
