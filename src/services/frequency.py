"""
Frequency rank lookups.

Ranks come from a plain TSV (``term<TAB>reading<TAB>rank`` or
``term<TAB>rank``) or from the ``freq`` rows of an imported Yomitan
dictionary. A missing rank is never an error; the entry simply has no
frequency label.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Self


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FrequencyRecord:
    term: str
    reading: str | None
    rank: int


def decode_frequency_value(data) -> tuple[str | None, int | None]:
    """
    Decode a Yomitan frequency payload into ``(reading, rank)``.

    Accepted shapes::

        1234
        "1234"
        {"value": 1234, "displayValue": "1234"}
        {"reading": "たべる", "frequency": <any of the above>}
    """
    match data:
        case bool():
            return None, None
        case int():
            return None, data
        case float() | str():
            try:
                return None, int(float(data))
            except (ValueError, OverflowError):
                return None, None
        case {"reading": str() as reading, "frequency": inner}:
            _, rank = decode_frequency_value(inner)
            return reading, rank
        case {"value": value}:
            return decode_frequency_value(value)
        case _:
            return None, None


class FrequencyIndex:
    """Read-only (term, reading) -> rank map. The first rank seen for a key wins."""

    def __init__(self, records: Iterable[FrequencyRecord] = ()) -> None:
        self._ranks: dict[tuple[str, str | None], int] = {}
        for record in records:
            self._ranks.setdefault((record.term, record.reading or None), record.rank)

    def __len__(self) -> int:
        return len(self._ranks)

    @classmethod
    def from_tsv(cls, path: Path | str) -> Self:
        records: list[FrequencyRecord] = []
        skipped = 0
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.rstrip("\n")
                if not line or line.startswith("#"):
                    continue
                parts = line.split("\t")
                try:
                    if len(parts) >= 3:
                        records.append(FrequencyRecord(parts[0], parts[1] or None, int(parts[2])))
                    elif len(parts) == 2:
                        records.append(FrequencyRecord(parts[0], None, int(parts[1])))
                    else:
                        skipped += 1
                except ValueError:
                    skipped += 1

        if skipped:
            logger.debug(f"Skipped {skipped} malformed frequency rows in {path}")
        return cls(records)

    def extended(self, records: Iterable[FrequencyRecord]) -> Self:
        """New index with ``records`` added after the existing ones."""
        merged = type(self)()
        merged._ranks = dict(self._ranks)
        for record in records:
            merged._ranks.setdefault((record.term, record.reading or None), record.rank)
        return merged

    def rank(self, term: str, reading: str | None = None) -> int | None:
        if reading:
            rank = self._ranks.get((term, reading))
            if rank is not None:
                return rank
        return self._ranks.get((term, None))

    def rank_label(self, term: str, reading: str | None = None) -> str | None:
        """Formatted rank (``"#1234"``), or None when the term is unranked."""
        rank = self.rank(term, reading)
        return f"#{rank}" if rank is not None else None


def load_frequency_index(path: Path | None) -> FrequencyIndex:
    """Load the frequency TSV; a missing file yields an empty index."""
    if path is None:
        return FrequencyIndex()
    if not path.exists():
        logger.warning(f"Frequency data not found at {path}, frequency ranks disabled")
        return FrequencyIndex()

    index = FrequencyIndex.from_tsv(path)
    logger.info(f"Loaded {len(index)} frequency ranks from {path}")
    return index
