"""Context assembler: attachments + selected sources → one labeled context block.

Layout of the assembled text, blocks separated by a blank line:

  [File: notes.txt]            one block per attachment, upload order
  <extracted text>

  [Selected Sources]           present only when a selected source exists
  [Source: A]                  one block per selected source, store order
  <text of A>

Labels are stable and distinct per origin so the provenance of every line
in the final prompt can be traced. No attachments and no selection → empty
context, and the caller sends no context message at all.

The assembled text goes to the completion request only; it is never sent to
the embedding endpoint.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from chatrelay.ingest.base import IMAGE
from chatrelay.store.models import READY, Source, UploadedAttachment

SELECTED_SOURCES_LABEL = "[Selected Sources]"


@dataclass
class ContextBlock:
    label: str
    text: str = ""

    def render(self) -> str:
        return f"{self.label}\n{self.text}" if self.text else self.label


@dataclass
class AssembledContext:
    attachment_blocks: list[ContextBlock] = field(default_factory=list)
    source_blocks: list[ContextBlock] = field(default_factory=list)

    @property
    def blocks(self) -> list[ContextBlock]:
        """One block per attachment, then one per selected source."""
        return self.attachment_blocks + self.source_blocks

    @property
    def is_empty(self) -> bool:
        return not self.attachment_blocks and not self.source_blocks

    @property
    def text(self) -> str:
        parts = [b.render() for b in self.attachment_blocks]
        if self.source_blocks:
            grouped = "\n\n".join(b.render() for b in self.source_blocks)
            parts.append(f"{SELECTED_SOURCES_LABEL}\n{grouped}")
        return "\n\n".join(parts)


def attachment_block(attachment: UploadedAttachment) -> ContextBlock:
    """Label an attachment by origin and readiness."""
    if attachment.status == READY and attachment.category == IMAGE:
        return ContextBlock(label=f"[Image: {attachment.name}]")
    if attachment.status == READY and attachment.text:
        return ContextBlock(label=f"[File: {attachment.name}]", text=attachment.text)
    return ContextBlock(label=f"[File: {attachment.name}] (content not extracted)")


def source_block(source: Source) -> ContextBlock:
    return ContextBlock(label=f"[Source: {source.name}]", text=source.text)


def assemble(
    sources: Iterable[Source],
    selected_ids: Iterable[str],
    attachments: Iterable[UploadedAttachment] = (),
) -> AssembledContext:
    """Build the context for the next completion request.

    Args:
        sources: Every source, in store order.
        selected_ids: Ids currently marked for inclusion; ids that match no
            source are ignored and their order is irrelevant.
        attachments: Uploads for the message being sent, in upload order.
    """
    wanted = set(selected_ids)
    return AssembledContext(
        attachment_blocks=[attachment_block(a) for a in attachments],
        source_blocks=[source_block(s) for s in sources if s.id in wanted],
    )
