"""
Lookup orchestration.

Runs store queries (and the deinflector, for tapped words) against the
right set of sources and enforces result caps. Every operation reads one
snapshot of the source list, so a concurrent import is either fully
visible to a call or not at all.
"""

import logging

from services.config import LookupConfig
from services.deinflect import Deinflection, Deinflector
from services.english import query_lemmas
from services.entry import DictionaryEntry
from services.store import DictionarySource, DictionaryStore


logger = logging.getLogger(__name__)


# Frequency-list tags from JMdict priority fields (news1, ichi2, spec1, gai1)
PRIORITY_LIST_PREFIXES = ("news", "ichi", "spec", "gai")

# Archaic, obsolete and rare-form markers
ARCHAIC_TAGS = frozenset({"arch", "obs", "R", "⛬", "⚠️"})


def priority_rank(entry: DictionaryEntry) -> int:
    """Lower is better: ⭐ (-10), P (-5), a frequency-list tag (-2), none (0)."""
    tags = entry.term_tags | entry.meaning_tags
    if "⭐" in tags:
        return -10
    if "P" in tags:
        return -5
    if any(tag.startswith(PRIORITY_LIST_PREFIXES) for tag in tags):
        return -2
    return 0


def is_archaic(entry: DictionaryEntry) -> bool:
    return not ARCHAIC_TAGS.isdisjoint(entry.term_tags | entry.meaning_tags)


def sort_by_popularity(entries: list[DictionaryEntry]) -> list[DictionaryEntry]:
    """
    Rank entries for display; stable on full ties.

    Keys in order: popularity (higher first, compared to three decimals),
    priority tags, archaic entries last, shorter terms first.
    """
    return sorted(
        entries,
        key=lambda e: (-round(e.popularity, 3), priority_rank(e), is_archaic(e), len(e.term)),
    )


def _mark_transformed(entry: DictionaryEntry, candidate: Deinflection) -> DictionaryEntry:
    return entry.evolve(
        rules=candidate.reasons,
        transformed=True,
        transformation_notes=candidate.notes,
    )


def _prefix_across(sources: tuple[DictionarySource, ...], prefix: str, limit: int) -> list[DictionaryEntry]:
    results: list[DictionaryEntry] = []
    for source in sources:
        remaining = limit - len(results)
        if remaining <= 0:
            break
        results.extend(source.prefix_lookup(prefix, remaining))
    return results


class LookupOrchestrator:
    """The five lookup operations over a :class:`DictionaryStore`."""

    def __init__(
        self,
        store: DictionaryStore,
        deinflector: Deinflector,
        config: LookupConfig | None = None,
    ) -> None:
        self.store = store
        self.deinflector = deinflector
        self.config = config or LookupConfig()

    def _builtin(self) -> tuple[DictionarySource, ...]:
        return tuple(s for s in self.store.builtin_sources() if self.config.is_enabled(s.source_id))

    def lookup(self, word: str) -> list[DictionaryEntry]:
        """Exact term/reading match across built-in sources, no deinflection."""
        results = [entry for source in self._builtin() for entry in source.exact_lookup(word)]
        return sort_by_popularity(results)

    def lookup_with_deinflection(self, word: str) -> list[DictionaryEntry]:
        """
        Look up every deinflection candidate of ``word``, shallowest first.

        Each candidate's matches are sorted by popularity as a block; blocks
        keep candidate order. Expansion stops at the first depth boundary
        once the result cap is reached, so every candidate of a given depth
        is tried before any deeper one. An entry already reached through an
        earlier candidate is not repeated.
        """
        cap = self.config.deinflection_result_cap
        sources = self._builtin()
        candidates = self.deinflector.deinflect(word)

        results: list[DictionaryEntry] = []
        seen: set[tuple[str, str]] = set()
        depth = 0
        tried = 0

        for candidate in candidates:
            if candidate.depth != depth:
                if len(results) >= cap:
                    break
                depth = candidate.depth

            tried += 1
            block: list[DictionaryEntry] = []
            for source in sources:
                for entry in source.exact_lookup(candidate.term):
                    key = (entry.source.name, entry.id)
                    if key in seen:
                        continue
                    seen.add(key)
                    block.append(entry if candidate.is_identity else _mark_transformed(entry, candidate))
            results.extend(sort_by_popularity(block))

        logger.debug(
            f"Deinflected lookup {word!r}: {len(candidates)} candidates, "
            f"{tried} tried, {len(results)} entries"
        )
        return results[:cap]

    def search_by_prefix(self, prefix: str, limit: int) -> list[DictionaryEntry]:
        """Prefix match over built-in sources, at most ``limit`` entries."""
        return _prefix_across(self._builtin(), prefix, limit)

    def search_imported_dictionaries_by_prefix(self, prefix: str, limit: int) -> list[DictionaryEntry]:
        """Prefix match over imported sources only, at most ``limit`` entries."""
        return _prefix_across(self.store.imported_sources(), prefix, limit)

    def search_by_meaning(self, text: str, limit: int) -> list[DictionaryEntry]:
        """
        English gloss search over built-in sources.

        Falls back to the query's lemmas ("running" -> "run") when the
        query itself matches nothing.
        """
        sources = self._builtin()
        results = self._meaning_across(sources, text, limit)
        if results:
            return results

        for lemma in query_lemmas(text):
            results = self._meaning_across(sources, lemma, limit)
            if results:
                logger.debug(f"Meaning search {text!r} matched via lemma {lemma!r}")
                return results
        return []

    @staticmethod
    def _meaning_across(sources: tuple[DictionarySource, ...], text: str, limit: int) -> list[DictionaryEntry]:
        results: list[DictionaryEntry] = []
        for source in sources:
            remaining = limit - len(results)
            if remaining <= 0:
                break
            results.extend(source.meaning_search(text, remaining))
        return results
