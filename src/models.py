"""Pydantic models for Shiori lookup API requests and responses."""

from typing import Self

from pydantic import BaseModel, Field

from services.deinflect import Deinflection
from services.entry import DictionaryEntry, PitchAccent
from services.store import DictionarySource


# ============================================================================
# Request Models
# ============================================================================


class LookupRequest(BaseModel):
    """Request body for a tapped-word lookup."""
    word: str = Field(..., min_length=1, max_length=100, description="Isolated Japanese word, possibly inflected")
    deinflect: bool = Field(True, description="Resolve inflected forms (食べられなかった -> 食べる)")


class SearchRequest(BaseModel):
    """Request body for search-box queries."""
    query: str = Field(..., min_length=1, max_length=200, description="Japanese word or English phrase")


class PrefixSearchRequest(BaseModel):
    """Request body for prefix search."""
    prefix: str = Field(..., min_length=1, max_length=100, description="Start of a term or reading")
    limit: int = Field(50, ge=1, le=500, description="Maximum entries per source group")
    include_imported: bool = Field(False, description="Also search imported dictionaries")


class MeaningSearchRequest(BaseModel):
    """Request body for English meaning search."""
    text: str = Field(..., min_length=1, max_length=200, description="English text to find in glosses")
    limit: int = Field(100, ge=1, le=500, description="Maximum entries")


class DeinflectRequest(BaseModel):
    """Request body for raw deinflection."""
    word: str = Field(..., min_length=1, max_length=100, description="Conjugated word")


class ImportRequest(BaseModel):
    """Request body for importing a Yomitan dictionary from a server-side path."""
    path: str = Field(..., min_length=1, description="Path to a Yomitan .zip archive")


# ============================================================================
# Response Components
# ============================================================================


class PitchAccentModel(BaseModel):
    """One pitch accent pattern."""
    term: str
    reading: str
    pitch_accent: int = Field(..., description="Downstep position (0 = heiban)")
    accent_type: str = Field(..., description="English name of the pattern")

    @classmethod
    def from_accent(cls, accent: PitchAccent) -> Self:
        return cls(
            term=accent.term,
            reading=accent.reading,
            pitch_accent=accent.pitch_accent,
            accent_type=accent.accent_type_english,
        )


class DictionaryEntryModel(BaseModel):
    """Single dictionary entry."""
    id: str = Field(..., description="Source-local id, or merged_<term>-<reading>")
    term: str
    reading: str
    meanings: list[str] = Field(default_factory=list, description="Glosses in source order")
    meaning_tags: list[str] = Field(default_factory=list)
    term_tags: list[str] = Field(default_factory=list)
    score: float = 0.0
    rules: list[str] = Field(default_factory=list, description="Deinflection reasons, innermost first")
    transformed: bool = Field(False, description="Reached through deinflection")
    transformation_notes: str | None = None
    popularity: float = 0.0
    source: str = Field(..., description="Source id, or 'combined'")
    pitch_accents: list[PitchAccentModel] | None = None
    frequency_rank: str | None = Field(None, description="Formatted rank like '#1234'")

    @classmethod
    def from_entry(cls, entry: DictionaryEntry) -> Self:
        return cls(
            id=entry.id,
            term=entry.term,
            reading=entry.reading,
            meanings=list(entry.meanings),
            meaning_tags=sorted(entry.meaning_tags),
            term_tags=sorted(entry.term_tags),
            score=entry.score,
            rules=list(entry.rules),
            transformed=entry.transformed,
            transformation_notes=entry.transformation_notes,
            popularity=entry.popularity,
            source=str(entry.source),
            pitch_accents=(
                [PitchAccentModel.from_accent(a) for a in entry.pitch_accents.accents]
                if entry.pitch_accents is not None else None
            ),
            frequency_rank=entry.frequency_rank,
        )


class DeinflectionModel(BaseModel):
    """One deinflection candidate."""
    term: str
    reasons: list[str] = Field(default_factory=list)
    score: float
    notes: str | None = None

    @classmethod
    def from_deinflection(cls, candidate: Deinflection) -> Self:
        return cls(
            term=candidate.term,
            reasons=list(candidate.reasons),
            score=candidate.score,
            notes=candidate.notes,
        )


class SourceModel(BaseModel):
    """A loaded dictionary source."""
    id: str
    kind: str = Field(..., description="built_in or imported")
    title: str
    revision: str | None = None
    entries: int

    @classmethod
    def from_source(cls, source: DictionarySource) -> Self:
        return cls(
            id=source.source_id.name,
            kind=str(source.source_id.kind),
            title=source.title,
            revision=source.revision,
            entries=len(source),
        )


# ============================================================================
# Response Models
# ============================================================================


class EntriesResponse(BaseModel):
    """Response for lookup and search endpoints."""
    query: str
    entries: list[DictionaryEntryModel]
    count: int = Field(..., description="Number of entries")

    @classmethod
    def build(cls, query: str, entries: list[DictionaryEntry]) -> Self:
        return cls(
            query=query,
            entries=[DictionaryEntryModel.from_entry(e) for e in entries],
            count=len(entries),
        )


class DeinflectResponse(BaseModel):
    """Response for /deinflect."""
    word: str
    candidates: list[DeinflectionModel]
    count: int


class SourcesResponse(BaseModel):
    """Response for /sources."""
    sources: list[SourceModel]


class ImportResponse(BaseModel):
    """Response for /dictionaries/import."""
    source: SourceModel
    frequencies: int = Field(..., description="Frequency rows imported")
    pitch_accents: int = Field(..., description="Pitch accent patterns imported")
    skipped_rows: int = Field(..., description="Malformed rows skipped")
