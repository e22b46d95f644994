"""Value types returned by the lookup engine."""

from dataclasses import dataclass, field, replace
from typing import Self

from services.sources import SourceId


@dataclass(frozen=True, slots=True)
class PitchAccent:
    """One pitch-accent pattern for a (term, reading) pair.

    ``pitch_accent`` is the downstep position: 0 is heiban (flat),
    1 is atamadaka (head-high), 2 and above are nakadaka/odaka depending
    on the mora count of the reading.
    """

    term: str
    reading: str
    pitch_accent: int

    @property
    def accent_type_english(self) -> str:
        match self.pitch_accent:
            case 0:
                return "Flat (Heiban)"
            case 1:
                return "Head-high (Atamadaka)"
            case _:
                return "Middle-high (Nakadaka)"


@dataclass(frozen=True, slots=True)
class PitchAccentData:
    """All pitch-accent patterns found for one lookup, in index order."""

    accents: tuple[PitchAccent, ...] = ()

    @property
    def primary(self) -> PitchAccent | None:
        return self.accents[0] if self.accents else None

    @property
    def all_patterns(self) -> list[int]:
        return [a.pitch_accent for a in self.accents]


@dataclass(frozen=True, slots=True)
class DictionaryEntry:
    """A single headword record from one source (or merged from several).

    Entries are immutable values built fresh for every query. The merger
    and annotators derive new entries with :meth:`evolve` instead of
    mutating them.
    """

    id: str
    term: str
    reading: str
    meanings: tuple[str, ...]
    source: SourceId
    meaning_tags: frozenset[str] = field(default_factory=frozenset)
    term_tags: frozenset[str] = field(default_factory=frozenset)
    score: float = 0.0
    rules: tuple[str, ...] = ()
    transformed: bool = False
    transformation_notes: str | None = None
    popularity: float = 0.0
    pitch_accents: PitchAccentData | None = None
    frequency_rank: str | None = None

    @property
    def group_key(self) -> str:
        """Key used to merge entries across sources."""
        return f"{self.term}-{self.reading}"

    def evolve(self, **changes) -> Self:
        return replace(self, **changes)
