"""Source store and selection.

Invariant: every selected id refers to a source in the store. ``remove()``
drops the source and its selection entry in the same call, and
``selected_ids()`` always walks the store in insertion order, so the
assembled context depends only on *which* sources are selected, never on the
order they were clicked.

Sources are persisted under the ``sources`` key. Selection is session state
and is not persisted.
"""

from __future__ import annotations

import dataclasses

from chatrelay.logging_config import get_logger
from chatrelay.store.backends import StateBackend
from chatrelay.store.models import Source, new_id

logger = get_logger(__name__)

SOURCES_KEY = "sources"


class SourceStore:
    """Ordered, non-deduplicating collection of sources plus a selection set."""

    def __init__(self, backend: StateBackend) -> None:
        self._backend = backend
        self._sources: dict[str, Source] = {}
        self._selected: set[str] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Replace in-memory state with the persisted sources.

        Corrupt persisted data is discarded and the store starts empty.
        """
        self._sources = {}
        self._selected = set()
        try:
            raw = self._backend.read_json(SOURCES_KEY) or []
            for item in raw:
                source = Source.from_dict(item)
                self._sources[source.id] = source
        except (ValueError, KeyError, TypeError) as exc:
            logger.warning("Discarding unreadable persisted sources: %s", exc)
            self._sources = {}
            self._backend.delete(SOURCES_KEY)

    def save(self) -> None:
        self._backend.write_json(SOURCES_KEY, [s.to_dict() for s in self._sources.values()])

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def add(self, source: Source) -> Source:
        """Append *source*, assigning a fresh id when it has none.

        Same-name or same-text sources are kept side by side. Returns the
        stored source (with its id).
        """
        if not source.id or source.id in self._sources:
            source = dataclasses.replace(source, id=new_id())
        self._sources[source.id] = source
        self.save()
        logger.info("Source added: %s (%s)", source.name, source.id)
        return source

    def remove(self, source_id: str) -> Source:
        """Delete a source and drop it from the selection.

        Raises:
            KeyError: If no source has *source_id*.
        """
        source = self._sources.pop(source_id)
        self._selected.discard(source_id)
        self.save()
        logger.info("Source removed: %s (%s)", source.name, source_id)
        return source

    def get(self, source_id: str) -> Source | None:
        return self._sources.get(source_id)

    def list(self) -> list[Source]:
        """All sources in insertion order."""
        return list(self._sources.values())

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    def add_search_result(self, title: str, url: str) -> Source:
        """Persist a web search hit as a source and select it."""
        source = self.add(Source(name=title, text=f"{title}\n{url}"))
        self.select(source.id)
        return source

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, source_id: str) -> None:
        """Mark a source as included in the next prompt.

        Raises:
            KeyError: If no source has *source_id*.
        """
        if source_id not in self._sources:
            raise KeyError(source_id)
        self._selected.add(source_id)

    def deselect(self, source_id: str) -> None:
        """Unmark a source. Unknown or unselected ids are ignored."""
        self._selected.discard(source_id)

    def toggle(self, source_id: str) -> bool:
        """Flip the selection state of a source. Returns the new state."""
        if source_id in self._selected:
            self.deselect(source_id)
            return False
        self.select(source_id)
        return True

    def is_selected(self, source_id: str) -> bool:
        return source_id in self._selected

    def clear_selection(self) -> None:
        self._selected.clear()

    def selected_ids(self) -> list[str]:
        """Selected ids in store insertion order."""
        return [sid for sid in self._sources if sid in self._selected]

    def selected_sources(self) -> list[Source]:
        return [s for sid, s in self._sources.items() if sid in self._selected]
