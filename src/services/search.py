"""
Search coordinator for interactive (type-ahead) search.

Sits between a search box and the engine: waits for typing to settle,
runs the query off the event loop, and drops results that arrive after a
newer query was submitted. The engine call itself is never interrupted;
a stale result is simply discarded when it arrives.
"""

import asyncio
import logging

from services.config import LookupConfig
from services.engine import DictionaryEngine
from services.entry import DictionaryEntry


logger = logging.getLogger(__name__)


class SearchCoordinator:
    """Debounced search with generation-based cancellation and pagination state."""

    def __init__(self, engine: DictionaryEngine, config: LookupConfig | None = None) -> None:
        config = config or engine.config
        self.engine = engine
        self.debounce_seconds = config.debounce_seconds
        self.initial_results_limit = config.initial_results_limit

        self.query = ""
        self.results: list[DictionaryEntry] = []
        self.is_searching = False
        self.showing_all_results = False

        self._generation = 0
        self._last_query: str | None = None
        self._pending: asyncio.Task | None = None

    @property
    def generation(self) -> int:
        return self._generation

    async def submit(self, query: str) -> list[DictionaryEntry] | None:
        """
        Search for ``query`` after the debounce period.

        Returns the delivered results, or None when the query repeated the
        previous one or was superseded before its results arrived.
        """
        query = query.strip()
        if query == self._last_query:
            return None
        self._last_query = query
        self._generation += 1
        generation = self._generation
        self.query = query

        if not query:
            self.is_searching = False
            self._deliver([])
            return []

        try:
            await asyncio.sleep(self.debounce_seconds)
            if generation != self._generation:
                return None

            self.is_searching = True
            try:
                results = await asyncio.to_thread(self.engine.search, query)
            finally:
                if generation == self._generation:
                    self.is_searching = False
        except asyncio.CancelledError:
            # A cancelled query may be submitted again
            if generation == self._generation:
                self._last_query = None
            raise

        if generation != self._generation:
            logger.debug(f"Discarding stale results for {query!r} (generation {generation} < {self._generation})")
            return None

        self._deliver(results)
        return results

    def schedule(self, query: str) -> asyncio.Task:
        """
        Fire-and-forget :meth:`submit`; must be called from a running loop.

        A previously scheduled query that has not finished is cancelled.
        """
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = asyncio.create_task(self.submit(query))
        return self._pending

    async def wait(self) -> None:
        """Wait for the most recently scheduled query to settle."""
        if self._pending is not None:
            await self._pending

    def _deliver(self, results: list[DictionaryEntry]) -> None:
        self.results = results
        self.showing_all_results = False
        logger.debug(f"Delivered {len(results)} results for {self.query!r}")

    # Pagination

    @property
    def visible_results(self) -> list[DictionaryEntry]:
        if self.showing_all_results:
            return self.results
        return self.results[:self.initial_results_limit]

    @property
    def total_results_count(self) -> int:
        return len(self.results)

    @property
    def has_more_results(self) -> bool:
        return not self.showing_all_results and len(self.results) > self.initial_results_limit

    @property
    def remaining_results_count(self) -> int:
        if self.showing_all_results:
            return 0
        return max(0, len(self.results) - self.initial_results_limit)

    def show_all_results(self) -> None:
        self.showing_all_results = True

    def show_less_results(self) -> None:
        self.showing_all_results = False

    def clear(self) -> None:
        """Reset state; any in-flight query is discarded on arrival."""
        self._generation += 1
        self._last_query = None
        self.query = ""
        self.results = []
        self.is_searching = False
        self.showing_all_results = False
