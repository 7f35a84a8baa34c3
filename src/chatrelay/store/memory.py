"""User memory — append-only preferences, facts and topics."""

from __future__ import annotations

from typing import Any

from chatrelay.logging_config import get_logger
from chatrelay.store.backends import StateBackend
from chatrelay.store.models import UserMemory, now_ms

logger = get_logger(__name__)

MEMORY_KEY = "userMemory"


def _union(existing: list[str], new: list[str]) -> list[str]:
    """Order-preserving union: existing items first, then unseen new ones."""
    seen = set(existing)
    merged = list(existing)
    for item in new:
        if item not in seen:
            seen.add(item)
            merged.append(item)
    return merged


class MemoryStore:
    """Holds the single UserMemory record for the session."""

    def __init__(self, backend: StateBackend) -> None:
        self._backend = backend
        self._memory = UserMemory()

    @property
    def memory(self) -> UserMemory:
        return self._memory

    def load(self) -> None:
        try:
            raw = self._backend.read_json(MEMORY_KEY)
            self._memory = UserMemory.from_dict(raw) if raw else UserMemory()
        except (ValueError, TypeError, AttributeError) as exc:
            logger.warning("Discarding unreadable user memory: %s", exc)
            self._backend.delete(MEMORY_KEY)
            self._memory = UserMemory()

    def save(self) -> None:
        self._backend.write_json(MEMORY_KEY, self._memory.to_dict())

    def update(
        self,
        facts: list[str] | None = None,
        topics: list[str] | None = None,
        preferences: dict[str, Any] | None = None,
    ) -> UserMemory:
        """Union new facts and topics, merge preferences, refresh the timestamp.

        Nothing already remembered is ever dropped.
        """
        current = self._memory
        self._memory = UserMemory(
            preferences={**current.preferences, **(preferences or {})},
            facts=_union(current.facts, facts or []),
            topics=_union(current.topics, topics or []),
            last_updated=now_ms(),
        )
        self.save()
        return self._memory
