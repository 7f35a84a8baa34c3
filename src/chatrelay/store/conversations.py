"""Conversation store — metadata list, active conversation, per-id message logs.

Invariant: whenever at least one conversation exists, exactly one is active.
Deleting the active conversation promotes the first remaining one.
"""

from __future__ import annotations

from typing import Any

from chatrelay.logging_config import get_logger
from chatrelay.store.backends import StateBackend
from chatrelay.store.models import Conversation, new_id, now_ms

logger = get_logger(__name__)

CONVERSATIONS_KEY = "conversations"
DEFAULT_NAME = "New Chat"

_UPDATABLE_FIELDS = frozenset(["name", "model", "message_count", "summary"])


def messages_key(conversation_id: str) -> str:
    return f"chat_{conversation_id}"


class ConversationStore:
    def __init__(self, backend: StateBackend, default_model: str = "gpt-4o") -> None:
        self._backend = backend
        self._default_model = default_model
        self._conversations: list[Conversation] = []
        self._active_id: str | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Load persisted conversations; start a default one if there are none."""
        try:
            raw = self._backend.read_json(CONVERSATIONS_KEY)
            loaded = [Conversation.from_dict(item) for item in raw or []]
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable conversations: %s", exc)
            loaded = []

        if not loaded:
            self._conversations = []
            self._start_default()
            return

        self._conversations = loaded
        self._active_id = loaded[0].id

    def save(self) -> None:
        self._backend.write_json(
            CONVERSATIONS_KEY, [c.to_dict() for c in self._conversations]
        )

    def _start_default(self) -> Conversation:
        conversation = Conversation(id=new_id(), name=DEFAULT_NAME, model=self._default_model)
        self._conversations = [conversation]
        self._active_id = conversation.id
        self.save()
        return conversation

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def active_id(self) -> str | None:
        return self._active_id

    @property
    def active(self) -> Conversation | None:
        return self.get(self._active_id) if self._active_id else None

    def get(self, conversation_id: str) -> Conversation | None:
        return next((c for c in self._conversations if c.id == conversation_id), None)

    def list(self) -> list[Conversation]:
        """Conversations, newest first."""
        return list(self._conversations)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, model: str | None = None) -> Conversation:
        """Start a new conversation at the top of the list and make it active."""
        conversation = Conversation(
            id=new_id(),
            name=f"Chat {len(self._conversations) + 1}",
            model=model or self._default_model,
        )
        self._conversations.insert(0, conversation)
        self._active_id = conversation.id
        self.save()
        logger.info("Conversation created: %s", conversation.id)
        return conversation

    def activate(self, conversation_id: str) -> Conversation:
        """Raises KeyError for an unknown id."""
        conversation = self.get(conversation_id)
        if conversation is None:
            raise KeyError(conversation_id)
        self._active_id = conversation_id
        return conversation

    def update(self, conversation_id: str, **fields: Any) -> Conversation:
        """Apply *fields* and touch ``last_modified``.

        Raises:
            KeyError: For an unknown id.
            ValueError: For a field that cannot be updated.
        """
        conversation = self.get(conversation_id)
        if conversation is None:
            raise KeyError(conversation_id)
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update conversation field(s): {', '.join(sorted(unknown))}")
        for name, value in fields.items():
            setattr(conversation, name, value)
        conversation.last_modified = now_ms()
        self.save()
        return conversation

    def delete(self, conversation_id: str) -> None:
        """Remove a conversation and its message log.

        Raises:
            KeyError: For an unknown id.
        """
        conversation = self.get(conversation_id)
        if conversation is None:
            raise KeyError(conversation_id)
        self._conversations = [c for c in self._conversations if c.id != conversation_id]
        if self._active_id == conversation_id:
            self._active_id = self._conversations[0].id if self._conversations else None
        self._backend.delete(messages_key(conversation_id))
        self.save()
        logger.info("Conversation deleted: %s", conversation_id)

    # ------------------------------------------------------------------
    # Message logs
    # ------------------------------------------------------------------

    def messages(self, conversation_id: str) -> list[dict]:
        try:
            return list(self._backend.read_json(messages_key(conversation_id)) or [])
        except ValueError as exc:
            logger.warning("Discarding unreadable message log %s: %s", conversation_id, exc)
            self._backend.delete(messages_key(conversation_id))
            return []

    def record_messages(self, conversation_id: str, messages: list[dict]) -> Conversation:
        """Persist the full message log and refresh the conversation's count."""
        if self.get(conversation_id) is None:
            raise KeyError(conversation_id)
        self._backend.write_json(messages_key(conversation_id), messages)
        return self.update(conversation_id, message_count=len(messages))
