"""
Result merging and annotation.

Raw lookup results contain one entry per (source, headword). Before they
reach a caller, entries sharing a (term, reading) pair are folded into one,
then pitch accents and frequency ranks are joined on.
"""

import logging
from typing import Iterable

from services.entry import DictionaryEntry, PitchAccent
from services.frequency import FrequencyIndex, FrequencyRecord
from services.pitch import PitchAccentIndex
from services.sources import COMBINED


logger = logging.getLogger(__name__)

MERGED_ID_PREFIX = "merged_"


def merge_group(group: list[DictionaryEntry]) -> DictionaryEntry:
    """
    Fold entries with the same (term, reading) into one.

    The first entry is the representative: its term, reading, tags, score,
    rules, transformation fields and popularity carry over unchanged.
    Meanings are concatenated in group order and never deduplicated.
    """
    if len(group) == 1:
        return group[0]

    first = group[0]
    sources = {entry.source for entry in group}
    meanings = tuple(m for entry in group for m in entry.meanings)
    meaning_tags = frozenset().union(*(entry.meaning_tags for entry in group))

    return first.evolve(
        id=f"{MERGED_ID_PREFIX}{first.group_key}",
        meanings=meanings,
        meaning_tags=meaning_tags,
        source=COMBINED if len(sources) >= 2 else first.source,
    )


def merge_entries(entries: Iterable[DictionaryEntry]) -> list[DictionaryEntry]:
    """Group by (term, reading); output follows first-seen order of each key."""
    groups: dict[tuple[str, str], list[DictionaryEntry]] = {}
    for entry in entries:
        groups.setdefault((entry.term, entry.reading), []).append(entry)
    return [merge_group(group) for group in groups.values()]


class ResultMerger:
    """
    Merges raw results and joins pitch accent and frequency data onto them.

    Both indexes live in one tuple that :meth:`extend` replaces whole, so
    a :meth:`process` call annotates every entry from the same pair.
    """

    def __init__(
        self,
        pitch_index: PitchAccentIndex | None = None,
        frequency_index: FrequencyIndex | None = None,
        frequency_enabled: bool = True,
    ) -> None:
        self._indexes = (pitch_index or PitchAccentIndex(), frequency_index or FrequencyIndex())
        self.frequency_enabled = frequency_enabled

    @property
    def pitch_index(self) -> PitchAccentIndex:
        return self._indexes[0]

    @property
    def frequency_index(self) -> FrequencyIndex:
        return self._indexes[1]

    def extend(
        self,
        pitch_accents: Iterable[PitchAccent] = (),
        frequencies: Iterable[FrequencyRecord] = (),
    ) -> None:
        """Swap in indexes extended with imported data. Writers must be serialised."""
        pitch_index, frequency_index = self._indexes
        pitch_accents = list(pitch_accents)
        frequencies = list(frequencies)
        if pitch_accents:
            pitch_index = pitch_index.extended(pitch_accents)
        if frequencies:
            frequency_index = frequency_index.extended(frequencies)
        self._indexes = (pitch_index, frequency_index)

    def merge(self, entries: Iterable[DictionaryEntry]) -> list[DictionaryEntry]:
        return merge_entries(entries)

    def annotate(
        self,
        entry: DictionaryEntry,
        indexes: tuple[PitchAccentIndex, FrequencyIndex] | None = None,
    ) -> DictionaryEntry:
        pitch_index, frequency_index = indexes or self._indexes
        pitch = pitch_index.lookup(entry.term, entry.reading)
        rank = None
        if self.frequency_enabled:
            rank = frequency_index.rank_label(entry.term, entry.reading)

        if pitch is None and rank is None:
            return entry
        return entry.evolve(pitch_accents=pitch, frequency_rank=rank)

    def process(self, entries: Iterable[DictionaryEntry]) -> list[DictionaryEntry]:
        """Merge, then annotate every resulting entry against one index snapshot."""
        indexes = self._indexes
        entries = list(entries)
        merged = self.merge(entries)
        logger.debug(f"Merged {len(entries)} entries into {len(merged)} groups")
        return [self.annotate(entry, indexes) for entry in merged]
