"""Domain models for the chatrelay session state."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

PENDING = "pending"
READY = "ready"
ERROR = "error"


def new_id() -> str:
    return str(uuid.uuid4())


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Source:
    """A named text fragment that can be selected as prompt context.

    Sources are immutable once created; ``id`` is assigned by the store when
    left empty.
    """

    name: str
    text: str
    embedding: list[float] | None = None
    id: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "name": self.name, "text": self.text}
        if self.embedding is not None:
            data["embedding"] = list(self.embedding)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Source:
        embedding = data.get("embedding")
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            text=str(data.get("text", "")),
            embedding=[float(v) for v in embedding] if embedding else None,
        )


@dataclass
class Conversation:
    """Conversation metadata; message bodies are stored separately per id."""

    id: str
    name: str
    model: str
    last_modified: int = field(default_factory=now_ms)
    message_count: int = 0
    summary: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "model": self.model,
            "lastModified": self.last_modified,
            "messageCount": self.message_count,
        }
        if self.summary is not None:
            data["summary"] = self.summary
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Conversation:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            model=str(data["model"]),
            last_modified=int(data.get("lastModified", now_ms())),
            message_count=int(data.get("messageCount", 0)),
            summary=data.get("summary"),
        )


@dataclass
class UserMemory:
    """Accumulated preferences, facts and topics about the user."""

    preferences: dict[str, Any] = field(default_factory=dict)
    facts: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    last_updated: int = field(default_factory=now_ms)

    def to_dict(self) -> dict[str, Any]:
        return {
            "preferences": dict(self.preferences),
            "facts": list(self.facts),
            "topics": list(self.topics),
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> UserMemory:
        return cls(
            preferences=dict(data.get("preferences") or {}),
            facts=[str(f) for f in data.get("facts") or []],
            topics=[str(t) for t in data.get("topics") or []],
            last_updated=int(data.get("lastUpdated", now_ms())),
        )


@dataclass
class UploadedAttachment:
    """A file being prepared for the next message; never persisted."""

    id: str
    name: str
    mime_type: str = ""
    size: int = 0
    status: str = PENDING
    text: str = ""
    category: str = "unknown"
    error: str | None = None
    base64_data: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "mimeType": self.mime_type,
            "size": self.size,
            "status": self.status,
            "text": self.text,
            "category": self.category,
            "error": self.error,
        }
