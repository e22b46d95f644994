"""
Pitch accent index.

Built from the kanjium ``accents.txt`` table (``term<TAB>reading<TAB>0,2``)
and from the ``pitch`` rows of imported Yomitan dictionaries. Matching is
exact on (term, reading); several patterns for one pair are all kept, in
file order.
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Self

from services.entry import PitchAccent, PitchAccentData


logger = logging.getLogger(__name__)

_POSITION_RE = re.compile(r"\d+")


def parse_positions(field: str) -> list[int]:
    """Downstep positions from a kanjium accent field: ``"0,2"``, ``"(名)1,(副)0"``."""
    positions: list[int] = []
    for part in field.split(","):
        match = _POSITION_RE.search(part)
        if match:
            positions.append(int(match.group()))
    return positions


class PitchAccentIndex:
    """Read-only (term, reading) -> accents map."""

    def __init__(self, accents: Iterable[PitchAccent] = ()) -> None:
        self._accents: dict[tuple[str, str], list[PitchAccent]] = {}
        self._add(accents)

    def _add(self, accents: Iterable[PitchAccent]) -> None:
        for accent in accents:
            key = (accent.term, accent.reading)
            bucket = self._accents.setdefault(key, [])
            if accent not in bucket:
                bucket.append(accent)

    def __len__(self) -> int:
        return len(self._accents)

    @classmethod
    def from_tsv(cls, path: Path | str) -> Self:
        accents: list[PitchAccent] = []
        skipped = 0
        with open(path, encoding="utf-8") as f:
            for line in f:
                parts = line.rstrip("\n").split("\t")
                if len(parts) < 3 or not parts[0]:
                    skipped += 1
                    continue
                term, reading, field = parts[0], parts[1] or parts[0], parts[2]
                positions = parse_positions(field)
                if not positions:
                    skipped += 1
                    continue
                accents.extend(PitchAccent(term, reading, p) for p in positions)

        if skipped:
            logger.debug(f"Skipped {skipped} malformed pitch accent rows in {path}")
        return cls(accents)

    def extended(self, accents: Iterable[PitchAccent]) -> Self:
        """New index with ``accents`` appended after the existing patterns."""
        merged = type(self)()
        merged._accents = {key: list(bucket) for key, bucket in self._accents.items()}
        merged._add(accents)
        return merged

    def lookup(self, term: str, reading: str) -> PitchAccentData | None:
        """
        All patterns for exactly (term, reading).

        An empty reading means the term is its own reading. Returns None
        when the pair is not indexed.
        """
        accents = self._accents.get((term, reading or term))
        if not accents:
            return None
        return PitchAccentData(tuple(accents))


def load_pitch_accents(path: Path | None) -> PitchAccentIndex:
    """Load ``accents.txt``; a missing file yields an empty index."""
    if path is None:
        return PitchAccentIndex()
    if not path.exists():
        logger.warning(f"Pitch accent data not found at {path}, pitch accents disabled")
        return PitchAccentIndex()

    index = PitchAccentIndex.from_tsv(path)
    logger.info(f"Loaded pitch accents for {len(index)} term/reading pairs from {path}")
    return index
