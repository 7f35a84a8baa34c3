"""Tests for the LiteLLM client wrapper."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import litellm
import pytest

from chatrelay.errors import CredentialError, NetworkError, ValidationError, VendorError
from chatrelay.rag.llm_client import (
    CONTEXT_PREAMBLE,
    build_messages,
    complete,
    embed,
    resolve_model,
    translate_error,
    validate_api_key,
)


class _VendorHTTPError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


# ------------------------------------------------------------------
# validate_api_key
# ------------------------------------------------------------------


def test_validate_api_key_raises_if_missing():
    with pytest.raises(CredentialError, match="OPENAI_API_KEY not set") as exc_info:
        validate_api_key()
    assert exc_info.value.status_code == 500
    assert exc_info.value.to_payload() == {"error": "OPENAI_API_KEY not set"}


def test_validate_api_key_returns_value(api_key):
    assert validate_api_key() == api_key


def test_validate_api_key_empty_counts_as_missing(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    with pytest.raises(CredentialError):
        validate_api_key()


# ------------------------------------------------------------------
# resolve_model
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    ("requested", "expected"),
    [
        ("gpt-4o", "gpt-4o"),
        ("gpt-4o-mini", "gpt-4o-mini"),
        ("gpt-3.5-turbo", "gpt-3.5-turbo"),
        ("gpt-5", "gpt-4o"),
        ("gpt-5-turbo-preview", "gpt-4o"),
        ("o3-mini", "gpt-4o"),
        ("o4", "gpt-4o"),
        ("gpt-4.1-nano", "gpt-4o"),
        ("", "gpt-4o"),
        (None, "gpt-4o"),
        ("   ", "gpt-4o"),
        ("totally-made-up", "gpt-4o"),
    ],
)
def test_resolve_model(requested, expected):
    assert resolve_model(requested) == expected


def test_resolve_model_custom_default():
    assert resolve_model(None, default="gpt-4o-mini") == "gpt-4o-mini"


# ------------------------------------------------------------------
# build_messages
# ------------------------------------------------------------------


def test_build_messages_prepends_context():
    history = [{"role": "user", "content": "hi"}]
    messages = build_messages(history, "  some context \n")

    assert messages[0] == {"role": "system", "content": f"{CONTEXT_PREAMBLE}some context"}
    assert messages[1:] == history


def test_build_messages_blank_context_adds_nothing():
    history = [{"role": "user", "content": "hi"}]
    assert build_messages(history, "   ") == history
    assert build_messages(history, None) == history


def test_build_messages_does_not_mutate_history():
    history = [{"role": "user", "content": "hi"}]
    messages = build_messages(history, "ctx")
    messages[1]["content"] = "changed"
    assert history == [{"role": "user", "content": "hi"}]


# ------------------------------------------------------------------
# translate_error
# ------------------------------------------------------------------


def test_translate_status_error_to_vendor_error():
    err = translate_error(_VendorHTTPError(429, "rate limited"), "Completion")
    assert isinstance(err, VendorError)
    assert err.status == 429
    assert err.message.startswith("Completion failed: 429")
    assert err.to_payload()["status"] == 429


def test_translate_connection_error_to_network_error():
    assert isinstance(translate_error(ConnectionError("refused")), NetworkError)
    assert isinstance(translate_error(TimeoutError("slow")), NetworkError)


def test_translate_passes_chatrelay_errors_through():
    original = ValidationError("Missing messages")
    assert translate_error(original) is original


def test_translate_unknown_error_has_no_status():
    err = translate_error(RuntimeError("boom"))
    assert isinstance(err, VendorError)
    assert err.status is None


# ------------------------------------------------------------------
# complete() / embed()
# ------------------------------------------------------------------


def test_complete_returns_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = "Hello, world!"

    with patch("chatrelay.rag.llm_client.litellm.completion", return_value=mock_response) as mock_c:
        result = complete(
            "gpt-4-turbo",
            [{"role": "user", "content": "Hi"}],
            max_tokens=1500,
            temperature=0.3,
        )

    assert result == "Hello, world!"
    kwargs = mock_c.call_args.kwargs
    assert kwargs["model"] == "gpt-4-turbo"
    assert kwargs["max_tokens"] == 1500
    assert kwargs["temperature"] == pytest.approx(0.3)
    assert kwargs["num_retries"] == 0


def test_complete_returns_empty_string_on_none_content():
    mock_response = MagicMock()
    mock_response.choices[0].message.content = None

    with patch("chatrelay.rag.llm_client.litellm.completion", return_value=mock_response):
        assert complete("gpt-4o", [{"role": "user", "content": "Hi"}]) == ""


def test_complete_vendor_failure_translated():
    with patch(
        "chatrelay.rag.llm_client.litellm.completion",
        side_effect=_VendorHTTPError(500, "server error"),
    ):
        with pytest.raises(VendorError) as exc_info:
            complete("gpt-4o", [{"role": "user", "content": "Hi"}])
    assert exc_info.value.status == 500


def test_complete_litellm_connection_error_is_network_error():
    error = litellm.APIConnectionError(message="no route", llm_provider="openai", model="gpt-4o")
    with patch("chatrelay.rag.llm_client.litellm.completion", side_effect=error):
        with pytest.raises(NetworkError):
            complete("gpt-4o", [{"role": "user", "content": "Hi"}])


def test_embed_returns_vector():
    response = MagicMock()
    response.data = [{"embedding": [0.1, 0.2]}]
    with patch("chatrelay.rag.llm_client.litellm.embedding", return_value=response):
        assert embed("text-embedding-3-small", "hello") == [0.1, 0.2]


@pytest.mark.parametrize(
    "data",
    [[], [{}], [{"embedding": None}], [{"embedding": []}]],
)
def test_embed_malformed_response_is_vendor_error(data):
    response = MagicMock()
    response.data = data
    with patch("chatrelay.rag.llm_client.litellm.embedding", return_value=response):
        with pytest.raises(VendorError, match="malformed response"):
            embed("text-embedding-3-small", "hello")
