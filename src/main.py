"""Shiori lookup FastAPI application - Japanese dictionary lookup API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from models import (
    LookupRequest,
    SearchRequest,
    PrefixSearchRequest,
    MeaningSearchRequest,
    DeinflectRequest,
    ImportRequest,
    EntriesResponse,
    DeinflectResponse,
    DeinflectionModel,
    SourcesResponse,
    SourceModel,
    ImportResponse,
)
from services.engine import DictionaryEngine, build_engine
from services.store import DictionaryLoadError


logger = logging.getLogger(__name__)

VERSION = "0.1.0"


# ============================================================================
# Application Factory
# ============================================================================


def create_app(engine: DictionaryEngine | None = None) -> FastAPI:
    """
    Build the API around ``engine``.

    Without an engine, one is built from the environment on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load dictionaries once on startup."""
        if engine is None:
            app.state.engine = build_engine()
        else:
            app.state.engine = engine
        yield

    app = FastAPI(
        title="Shiori Lookup API",
        description="""Japanese dictionary lookup for readers and learners.

## Features
- **Deinflection**: Resolve forms like 食べられなかった to 食べる
- **Multi-source lookup**: JMdict plus imported Yomitan dictionaries
- **Merging**: Entries shared by several dictionaries are combined
- **Pitch accent & frequency**: Joined onto every entry

## Endpoints
- `/lookup` - Tapped word lookup (with deinflection)
- `/search` - Search box: Japanese or English
- `/search/prefix` - Prefix search
- `/search/meaning` - English gloss search
- `/deinflect` - Raw deinflection candidates
- `/sources` - Loaded dictionaries
- `/dictionaries/import` - Import a Yomitan dictionary
""",
        version=VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def get_engine(request: Request) -> DictionaryEngine:
        return request.app.state.engine

    # ========================================================================
    # Health Endpoints
    # ========================================================================

    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "shiori-lookup", "version": VERSION}

    @app.get("/health", tags=["Health"])
    async def health(request: Request) -> dict[str, str | int]:
        """Detailed health check."""
        engine = get_engine(request)
        return {
            "status": "healthy",
            "version": VERSION,
            "sources": len(engine.store.all_sources()),
        }

    # ========================================================================
    # Lookup Endpoints
    # ========================================================================

    @app.post("/lookup", response_model=EntriesResponse, tags=["Lookup"])
    def lookup_endpoint(request: Request, body: LookupRequest) -> EntriesResponse:
        """
        Look up an isolated word, as tapped in a book.

        Inflected forms are resolved to their dictionary form; entries
        reached that way carry the applied transformations.
        """
        engine = get_engine(request)
        try:
            if body.deinflect:
                entries = engine.lookup_word(body.word)
            else:
                entries = engine.merger.process(engine.orchestrator.lookup(body.word))
            return EntriesResponse.build(body.word, entries)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Lookup failed: {e!s}") from e

    @app.post("/search", response_model=EntriesResponse, tags=["Lookup"])
    def search_endpoint(request: Request, body: SearchRequest) -> EntriesResponse:
        """
        Search-box query.

        Japanese queries use deinflected lookup with a prefix-search
        fallback; anything else searches English meanings.
        """
        try:
            return EntriesResponse.build(body.query, get_engine(request).search(body.query))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Search failed: {e!s}") from e

    @app.post("/search/prefix", response_model=EntriesResponse, tags=["Lookup"])
    def prefix_search_endpoint(request: Request, body: PrefixSearchRequest) -> EntriesResponse:
        """Entries whose term or reading starts with the prefix."""
        engine = get_engine(request)
        try:
            entries = engine.orchestrator.search_by_prefix(body.prefix, body.limit)
            if body.include_imported:
                entries += engine.orchestrator.search_imported_dictionaries_by_prefix(body.prefix, body.limit)
            return EntriesResponse.build(body.prefix, engine.merger.process(entries))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Prefix search failed: {e!s}") from e

    @app.post("/search/meaning", response_model=EntriesResponse, tags=["Lookup"])
    def meaning_search_endpoint(request: Request, body: MeaningSearchRequest) -> EntriesResponse:
        """Entries with an English gloss containing the text (built-in dictionaries only)."""
        engine = get_engine(request)
        try:
            entries = engine.orchestrator.search_by_meaning(body.text, body.limit)
            return EntriesResponse.build(body.text, engine.merger.process(entries))
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Meaning search failed: {e!s}") from e

    @app.post("/deinflect", response_model=DeinflectResponse, tags=["Lookup"])
    def deinflect_endpoint(request: Request, body: DeinflectRequest) -> DeinflectResponse:
        """
        Candidate dictionary forms of a conjugated word.

        Candidates are not checked against any dictionary.
        """
        try:
            candidates = get_engine(request).deinflect(body.word)
            return DeinflectResponse(
                word=body.word,
                candidates=[DeinflectionModel.from_deinflection(c) for c in candidates],
                count=len(candidates),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Deinflection failed: {e!s}") from e

    # ========================================================================
    # Dictionary Endpoints
    # ========================================================================

    @app.get("/sources", response_model=SourcesResponse, tags=["Dictionaries"])
    def sources_endpoint(request: Request) -> SourcesResponse:
        """Loaded dictionaries: built-in in configured order, then imported."""
        sources = get_engine(request).sources()
        return SourcesResponse(sources=[SourceModel.from_source(s) for s in sources])

    @app.post("/dictionaries/import", response_model=ImportResponse, tags=["Dictionaries"])
    def import_endpoint(request: Request, body: ImportRequest) -> ImportResponse:
        """Import a Yomitan dictionary archive as a new searchable source."""
        try:
            dictionary = get_engine(request).import_dictionary(body.path)
        except (ValueError, DictionaryLoadError) as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Import failed: {e!s}") from e

        return ImportResponse(
            source=SourceModel.from_source(dictionary.source),
            frequencies=len(dictionary.frequencies),
            pitch_accents=len(dictionary.pitch_accents),
            skipped_rows=dictionary.skipped_rows,
        )

    return app


# ============================================================================
# CLI Entry Point
# ============================================================================


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(
        "main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
