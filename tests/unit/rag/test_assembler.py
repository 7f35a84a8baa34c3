"""Tests for the context assembler."""

from __future__ import annotations

from chatrelay.ingest.base import IMAGE, TEXT
from chatrelay.rag.assembler import (
    SELECTED_SOURCES_LABEL,
    AssembledContext,
    assemble,
    attachment_block,
)
from chatrelay.store.models import ERROR, PENDING, READY, Source, UploadedAttachment


def _source(name: str, text: str) -> Source:
    return Source(name=name, text=text, id=f"id-{name}")


def _attachment(name: str, status: str = READY, text: str = "", category: str = TEXT):
    return UploadedAttachment(id=f"att-{name}", name=name, status=status, text=text, category=category)


# ------------------------------------------------------------------
# Emptiness
# ------------------------------------------------------------------


def test_nothing_selected_is_empty():
    context = assemble([_source("A", "foo")], [])
    assert isinstance(context, AssembledContext)
    assert context.is_empty
    assert context.text == ""


def test_unknown_selected_ids_ignored():
    context = assemble([_source("A", "foo")], ["id-ghost"])
    assert context.is_empty


# ------------------------------------------------------------------
# Ordering
# ------------------------------------------------------------------


def test_selected_sources_in_store_order():
    a, b = _source("A", "foo"), _source("B", "bar")
    text = assemble([a, b], [b.id, a.id]).text

    assert text.index("foo") < text.index("bar")


def test_selection_order_does_not_matter():
    sources = [_source("A", "foo"), _source("B", "bar"), _source("C", "baz")]
    first = assemble(sources, ["id-A", "id-C"]).text
    second = assemble(sources, ["id-C", "id-A"]).text
    assert first == second


def test_unselected_source_excluded():
    text = assemble([_source("A", "foo"), _source("B", "bar")], ["id-A"]).text
    assert "foo" in text
    assert "bar" not in text


# ------------------------------------------------------------------
# Labels and layout
# ------------------------------------------------------------------


def test_source_group_layout():
    text = assemble([_source("A", "foo"), _source("B", "bar")], ["id-A", "id-B"]).text
    assert text == f"{SELECTED_SOURCES_LABEL}\n[Source: A]\nfoo\n\n[Source: B]\nbar"


def test_attachments_precede_sources():
    context = assemble(
        [_source("A", "foo")],
        ["id-A"],
        [_attachment("notes.txt", text="hello")],
    )
    assert context.text == (
        f"[File: notes.txt]\nhello\n\n{SELECTED_SOURCES_LABEL}\n[Source: A]\nfoo"
    )
    assert [b.label for b in context.blocks] == ["[File: notes.txt]", "[Source: A]"]


def test_attachments_only_has_no_sources_header():
    text = assemble([], [], [_attachment("notes.txt", text="hello")]).text
    assert SELECTED_SOURCES_LABEL not in text


def test_image_attachment_label():
    block = attachment_block(_attachment("cat.png", text="[Image: cat.png]", category=IMAGE))
    assert block.render() == "[Image: cat.png]"


def test_pending_and_failed_attachments_flagged():
    assert attachment_block(_attachment("a.pdf", status=PENDING)).render() == (
        "[File: a.pdf] (content not extracted)"
    )
    assert attachment_block(_attachment("b.pdf", status=ERROR)).render() == (
        "[File: b.pdf] (content not extracted)"
    )
