"""
In-memory dictionary store.

Each source keeps its entries in load (sequence) order plus two indexes:
an exact index over terms and readings, and a sorted key list used for
prefix scans. Sources never change once built; the store itself only ever
grows by appending imported sources.
"""

import logging
import threading
from bisect import bisect_left
from typing import Iterable

from services.entry import DictionaryEntry
from services.sources import SourceId


logger = logging.getLogger(__name__)


class DictionaryLoadError(RuntimeError):
    """A dictionary file is missing or cannot be read.

    Raised while building or importing sources, never by a query.
    """


class DictionarySource:
    """All entries of one dictionary, indexed for term, prefix and meaning queries."""

    def __init__(
        self,
        source_id: SourceId,
        entries: Iterable[DictionaryEntry],
        title: str | None = None,
        revision: str | None = None,
    ) -> None:
        self.source_id = source_id
        self.title = title or source_id.name
        self.revision = revision
        self._entries: tuple[DictionaryEntry, ...] = tuple(entries)

        self._index: dict[str, list[int]] = {}
        for i, entry in enumerate(self._entries):
            self._index.setdefault(entry.term, []).append(i)
            if entry.reading and entry.reading != entry.term:
                self._index.setdefault(entry.reading, []).append(i)

        self._keys = sorted(self._index)
        self._meaning_text = tuple("\n".join(e.meanings).lower() for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"DictionarySource({self.source_id.name!r}, {len(self)} entries)"

    @property
    def entries(self) -> tuple[DictionaryEntry, ...]:
        return self._entries

    def exact_lookup(self, term: str) -> list[DictionaryEntry]:
        """Entries whose term or reading equals ``term``, in sequence order."""
        return [self._entries[i] for i in self._index.get(term, ())]

    def prefix_lookup(self, prefix: str, limit: int) -> list[DictionaryEntry]:
        """Entries whose term or reading starts with ``prefix``, in sequence order."""
        if not prefix or limit <= 0:
            return []

        hits: set[int] = set()
        pos = bisect_left(self._keys, prefix)
        while pos < len(self._keys) and self._keys[pos].startswith(prefix):
            hits.update(self._index[self._keys[pos]])
            pos += 1

        return [self._entries[i] for i in sorted(hits)[:limit]]

    def meaning_search(self, text: str, limit: int) -> list[DictionaryEntry]:
        """Entries with a meaning containing ``text`` (case-insensitive)."""
        needle = text.strip().lower()
        if not needle or limit <= 0:
            return []

        results: list[DictionaryEntry] = []
        for entry, haystack in zip(self._entries, self._meaning_text):
            if needle in haystack:
                results.append(entry)
                if len(results) >= limit:
                    break
        return results


class DictionaryStore:
    """
    Built-in and imported dictionary sources.

    Readers take a snapshot tuple of the source list; :meth:`add_imported`
    replaces the imported tuple under a lock, so a query that already holds
    a snapshot keeps seeing the same set of sources.
    """

    def __init__(
        self,
        built_in: Iterable[DictionarySource] = (),
        imported: Iterable[DictionarySource] = (),
    ) -> None:
        self._built_in = tuple(built_in)
        self._imported = tuple(imported)
        self._write_lock = threading.Lock()

        for source in self._built_in:
            if not source.source_id.is_built_in:
                raise ValueError(f"{source.source_id.name} is not a built-in source")
        for source in self._imported:
            if not source.source_id.is_imported:
                raise ValueError(f"{source.source_id.name} is not an imported source")

    def builtin_sources(self) -> tuple[DictionarySource, ...]:
        return self._built_in

    def imported_sources(self) -> tuple[DictionarySource, ...]:
        return self._imported

    def all_sources(self) -> tuple[DictionarySource, ...]:
        return self._built_in + self._imported

    def get(self, source_id: SourceId) -> DictionarySource | None:
        for source in self.all_sources():
            if source.source_id == source_id:
                return source
        return None

    def add_imported(self, source: DictionarySource) -> None:
        """Append an imported source. Existing sources are never touched."""
        if not source.source_id.is_imported:
            raise ValueError(f"{source.source_id.name} is not an imported source")

        with self._write_lock:
            if any(s.source_id == source.source_id for s in self._imported):
                raise ValueError(f"Source {source.source_id.name} is already imported")
            self._imported = self._imported + (source,)

        logger.info(f"Imported dictionary {source.title!r} as {source.source_id.name} ({len(source)} entries)")
