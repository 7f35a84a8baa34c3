"""Embedding requestor — optional vendor embedding for extracted text.

The embedding is an enhancement, never a requirement: a missing credential,
an image upload or empty text skip the call, and vendor or network failures
are logged and reported as "no embedding" instead of failing the upload.

Text is hard-cut to ``EmbeddingCfg.max_chars`` characters before it is sent.
The cut is not word-aware and may split a word (or a grapheme cluster) in
two; this is known and accepted.
"""

from __future__ import annotations

import os

from chatrelay.config import EmbeddingCfg
from chatrelay.errors import ChatRelayError
from chatrelay.ingest.base import IMAGE
from chatrelay.logging_config import get_logger
from chatrelay.rag.llm_client import embed

logger = get_logger(__name__)


def truncate_for_embedding(text: str, max_chars: int) -> str:
    """Return the first *max_chars* characters of *text*."""
    return text[:max_chars]


class EmbeddingRequestor:
    """Compute at most one embedding vector per piece of extracted text.

    Args:
        config:      Embedding configuration (model, max_chars).
        api_key_env: Environment variable holding the vendor key.
    """

    def __init__(self, config: EmbeddingCfg | None = None, api_key_env: str = "OPENAI_API_KEY") -> None:
        self._config = config or EmbeddingCfg()
        self._api_key_env = api_key_env

    @property
    def config(self) -> EmbeddingCfg:
        return self._config

    def request(self, text: str, category: str) -> list[float] | None:
        """Return an embedding for *text*, or None when skipped or failed."""
        api_key = os.environ.get(self._api_key_env)
        if not api_key or category == IMAGE or not text:
            return None

        payload = truncate_for_embedding(text, self._config.max_chars)
        try:
            return embed(self._config.model, payload, api_key=api_key)
        except ChatRelayError as exc:
            logger.warning("Embedding computation failed: %s", exc.message)
            return None
