"""Chat session — wires the stores, the context assembler and the completion relay.

One ``ChatSession`` stands for one browser's worth of client state: sources
and their selection, conversations, user memory and the attachment tray.
The stores share a single injected backend and are loaded explicitly.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

from chatrelay.config import RelayConfig
from chatrelay.logging_config import get_logger
from chatrelay.rag.assembler import AssembledContext, assemble
from chatrelay.rag.llm_client import build_messages, open_stream, relay
from chatrelay.store.attachments import AttachmentTray
from chatrelay.store.backends import StateBackend, open_backend
from chatrelay.store.conversations import ConversationStore
from chatrelay.store.memory import MemoryStore
from chatrelay.store.models import UploadedAttachment
from chatrelay.store.sources import SourceStore

logger = get_logger(__name__)


class ChatSession:
    """Client-side state for the chat front end.

    Args:
        backend: Persistence for sources, conversations and memory.
        config:  Loaded configuration; defaults are used when omitted.
    """

    def __init__(self, backend: StateBackend, config: RelayConfig | None = None) -> None:
        self.config = config or RelayConfig()
        self.backend = backend
        self.sources = SourceStore(backend)
        self.conversations = ConversationStore(
            backend, default_model=self.config.completion.default_model
        )
        self.memory = MemoryStore(backend)
        self.attachments = AttachmentTray()

    @classmethod
    def from_config(cls, config: RelayConfig) -> ChatSession:
        """Open the configured backend and load every store."""
        session = cls(open_backend(config.storage.path), config)
        session.load()
        return session

    def load(self) -> None:
        self.sources.load()
        self.conversations.load()
        self.memory.load()
        logger.info(
            "Session loaded: %d source(s), %d conversation(s)",
            len(self.sources),
            len(self.conversations.list()),
        )

    def close(self) -> None:
        self.backend.close()

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    def assemble_context(self) -> AssembledContext:
        """Preview the context the next message would carry. Leaves the tray intact."""
        return assemble(
            self.sources.list(), self.sources.selected_ids(), self.attachments.list()
        )

    def prepare_messages(
        self,
        history: list[dict],
        attachments: list[UploadedAttachment] | None = None,
    ) -> list[dict]:
        """Return *history* with the session context prepended.

        Uses the tray's current attachments unless *attachments* is given.
        The tray itself is left intact.
        """
        if attachments is None:
            attachments = self.attachments.list()
        context = assemble(self.sources.list(), self.sources.selected_ids(), attachments)
        return build_messages(history, None if context.is_empty else context.text)

    async def open_turn(self, history: list[dict], model: str, *, api_key: str) -> Any:
        """Open a completion stream for *history* carrying the session context.

        The attachments folded into the request leave the tray once the
        vendor has accepted it. A rejected request keeps them for a retry.
        """
        attachments = self.attachments.list()
        stream = await open_stream(
            model,
            self.prepare_messages(history, attachments),
            api_key=api_key,
            temperature=self.config.completion.temperature,
            max_tokens=self.config.completion.max_tokens,
        )
        self.attachments.discard(a.id for a in attachments)
        return stream

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def finish_turn(
        self,
        conversation_id: str | None,
        messages: list[dict],
        reply: str,
        model: str,
    ) -> None:
        """Persist a completed exchange and refresh the conversation metadata.

        Unknown conversation ids are logged and ignored.
        """
        target = conversation_id or self.conversations.active_id
        if target is None or self.conversations.get(target) is None:
            logger.warning("Turn finished for unknown conversation %s; not recorded", target)
            return
        log: list[dict[str, Any]] = [dict(m) for m in messages]
        log.append({"role": "assistant", "content": reply})
        self.conversations.record_messages(target, log)
        self.conversations.update(target, model=model)

    async def stream_turn(
        self,
        stream: Any,
        conversation_id: str | None,
        history: list[dict],
        model: str,
    ) -> AsyncIterator[str]:
        """Relay *stream* and record the turn once it has been fully delivered.

        A relay closed early (client gone, request cancelled) records nothing.
        """
        deltas = relay(stream)
        parts: list[str] = []
        try:
            async for delta in deltas:
                parts.append(delta)
                yield delta
        finally:
            await deltas.aclose()
        self.finish_turn(conversation_id, history, "".join(parts), model)
