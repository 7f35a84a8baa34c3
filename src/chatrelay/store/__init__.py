"""chatrelay session state — sources, conversations, memory, attachments."""

from chatrelay.store.attachments import AttachmentTray, PendingUpload, process_uploads
from chatrelay.store.backends import MemoryBackend, SqliteBackend, StateBackend, open_backend
from chatrelay.store.conversations import ConversationStore
from chatrelay.store.memory import MemoryStore
from chatrelay.store.models import Conversation, Source, UploadedAttachment, UserMemory
from chatrelay.store.sources import SourceStore

__all__ = [
    "AttachmentTray",
    "Conversation",
    "ConversationStore",
    "MemoryBackend",
    "MemoryStore",
    "PendingUpload",
    "Source",
    "SourceStore",
    "SqliteBackend",
    "StateBackend",
    "UploadedAttachment",
    "UserMemory",
    "open_backend",
    "process_uploads",
]
