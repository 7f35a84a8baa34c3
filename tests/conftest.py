"""Shared pytest fixtures."""

from __future__ import annotations

import os

# Use litellm's bundled model cost map; the remote fetch at import time
# fails (and can deadlock) when the test environment has no network.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from chatrelay.api.app import create_app
from chatrelay.config import RelayConfig, StorageCfg
from chatrelay.session import ChatSession
from chatrelay.store.backends import MemoryBackend

_ENV_VARS = (
    "OPENAI_API_KEY",
    "CHATRELAY_COMPLETION_MODEL",
    "CHATRELAY_EMBEDDING_MODEL",
    "CHATRELAY_STORAGE_PATH",
    "CHATRELAY_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Every test starts without a vendor key or CHATRELAY_* overrides."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test-key")
    return "sk-test-key"


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def config():
    return RelayConfig(storage=StorageCfg(path=None))


@pytest.fixture
def session(backend, config):
    """Loaded in-memory session (one default conversation, no sources)."""
    s = ChatSession(backend, config)
    s.load()
    return s


@pytest.fixture
def client(config, session):
    with TestClient(create_app(config, session)) as c:
        yield c


class FakeStream:
    """Async iterator standing in for a litellm streaming response."""

    def __init__(self, deltas: list[str | None], fail_after: int | None = None) -> None:
        self._deltas = deltas
        self._fail_after = fail_after
        self.closed = False
        self.consumed = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for i, delta in enumerate(self._deltas):
            if self._fail_after is not None and i >= self._fail_after:
                raise ConnectionError("stream reset by peer")
            self.consumed += 1
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=delta))])

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def fake_stream():
    """Factory for FakeStream objects: ``fake_stream(["Hel", "lo"])``."""
    return FakeStream
