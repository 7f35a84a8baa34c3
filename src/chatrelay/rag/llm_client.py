"""LiteLLM client wrapper — credential lookup, model mapping, streaming relay.

All completion and embedding calls route through this module. Vendor calls
are never retried (``num_retries=0``); the user re-triggers the action.
Exceptions raised by litellm are translated into the chatrelay error taxonomy
by ``translate_error()`` before they leave this module.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from typing import Any

import litellm

from chatrelay.errors import ChatRelayError, CredentialError, NetworkError, VendorError
from chatrelay.logging_config import get_logger

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True
litellm.set_verbose = False  # type: ignore[assignment]

logger = get_logger(__name__)

DEFAULT_MODEL = "gpt-4o"
CONTEXT_PREAMBLE = "The following context may be useful:\n"

# Names the vendor accepts as-is.
KNOWN_MODELS: frozenset[str] = frozenset(
    [
        "gpt-4o",
        "gpt-4o-mini",
        "gpt-4-turbo",
        "gpt-4",
        "gpt-3.5-turbo",
    ]
)

# Forward-looking or aliased names → closest available model, first match wins.
_PREFIX_RULES: tuple[tuple[str, str], ...] = (
    ("gpt-5", "gpt-4o"),
    ("o3", "gpt-4o"),
    ("o4", "gpt-4o"),
)
_CONTAINS_RULES: tuple[tuple[str, str], ...] = (("4.1", "gpt-4o"),)


# ------------------------------------------------------------------
# Credentials
# ------------------------------------------------------------------


def validate_api_key(env_var: str = "OPENAI_API_KEY") -> str:
    """Return the vendor key stored in *env_var*.

    Raises:
        CredentialError: If the variable is unset or empty.
    """
    key = os.getenv(env_var)
    if not key:
        raise CredentialError(env_var)
    return key


# ------------------------------------------------------------------
# Error translation
# ------------------------------------------------------------------


def translate_error(exc: BaseException, action: str = "Request") -> ChatRelayError:
    """Map a litellm / transport exception onto the chatrelay taxonomy."""
    if isinstance(exc, ChatRelayError):
        return exc
    if isinstance(exc, (litellm.Timeout, litellm.APIConnectionError, ConnectionError, TimeoutError)):
        return NetworkError(f"{action} failed: could not reach vendor ({exc})")
    status = getattr(exc, "status_code", None)
    if status is not None:
        return VendorError(status, f"{action} failed: {status} {exc}")
    return VendorError(None, f"{action} failed: {exc}")


# ------------------------------------------------------------------
# Model mapping
# ------------------------------------------------------------------


def resolve_model(requested: str | None, default: str = DEFAULT_MODEL) -> str:
    """Map any requested model name onto a vendor-accepted one.

    Total and deterministic: known names pass through unchanged, patterned
    aliases (``gpt-5*``, ``o3*``, ``o4*``, ``*4.1*``) map to their fallback,
    and everything else (including empty input) resolves to *default*.
    """
    name = (requested or "").strip()
    if not name:
        return default
    if name in KNOWN_MODELS:
        return name
    for prefix, target in _PREFIX_RULES:
        if name.startswith(prefix):
            return target
    for fragment, target in _CONTAINS_RULES:
        if fragment in name:
            return target
    return default


# ------------------------------------------------------------------
# Message assembly
# ------------------------------------------------------------------


def build_messages(history: list[dict], context: str | None = None) -> list[dict]:
    """Return *history* with one synthetic system message prepended for *context*.

    Existing messages are copied, never modified. Blank context adds nothing.
    """
    messages = [dict(m) for m in history]
    if context and context.strip():
        messages.insert(0, {"role": "system", "content": f"{CONTEXT_PREAMBLE}{context.strip()}"})
    return messages


# ------------------------------------------------------------------
# Blocking calls
# ------------------------------------------------------------------


def complete(
    model: str,
    messages: list[dict],
    max_tokens: int = 2048,
    temperature: float = 0.0,
    api_key: str | None = None,
) -> str:
    """Call litellm.completion() once. Returns the content of the first choice.

    Raises:
        VendorError / NetworkError: On any vendor or transport failure.
    """
    try:
        response = litellm.completion(
            model=model,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
            api_key=api_key,
            num_retries=0,
        )
    except Exception as exc:
        raise translate_error(exc, "Completion") from exc
    return response.choices[0].message.content or ""


def embed(model: str, text: str, api_key: str | None = None) -> list[float]:
    """Call litellm.embedding() once. Returns the embedding vector.

    Raises:
        VendorError / NetworkError: On any vendor or transport failure,
            including a response without a vector.
    """
    try:
        response = litellm.embedding(
            model=model,
            input=[text],
            api_key=api_key,
            num_retries=0,
        )
    except Exception as exc:
        raise translate_error(exc, "Embedding") from exc
    try:
        vector = response.data[0]["embedding"]
    except (AttributeError, IndexError, KeyError, TypeError) as exc:
        raise VendorError(None, "Embedding failed: malformed response") from exc
    if not isinstance(vector, (list, tuple)) or not vector:
        raise VendorError(None, "Embedding failed: malformed response")
    return list(vector)


# ------------------------------------------------------------------
# Streaming
# ------------------------------------------------------------------


async def open_stream(
    model: str,
    messages: list[dict],
    *,
    api_key: str,
    temperature: float = 0.7,
    max_tokens: int = 2048,
) -> Any:
    """Start a streamed completion and return the vendor stream.

    Failures before the first chunk surface here as a single taxonomy error.
    """
    logger.info("Opening completion stream: model=%s, %d messages", model, len(messages))
    try:
        return await litellm.acompletion(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=api_key,
            stream=True,
            num_retries=0,
        )
    except Exception as exc:
        raise translate_error(exc, "Completion") from exc


async def relay(stream: Any) -> AsyncIterator[str]:
    """Yield text deltas from *stream* in arrival order.

    A failure after streaming began ends the relay; text already yielded
    stands. Closing the generator early (client disconnect, cancellation)
    closes the vendor stream so its connection is released.
    """
    try:
        async for chunk in stream:
            delta = _delta_text(chunk)
            if delta:
                yield delta
    except Exception as exc:
        logger.error("Completion stream interrupted: %s", exc)
    finally:
        await _close_stream(stream)


def _delta_text(chunk: Any) -> str:
    choices = getattr(chunk, "choices", None)
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    return (getattr(delta, "content", None) or "") if delta is not None else ""


async def _close_stream(stream: Any) -> None:
    close = getattr(stream, "aclose", None)
    if close is None:
        return
    try:
        await close()
    except Exception as exc:
        logger.debug("Ignoring error while closing completion stream: %s", exc)
