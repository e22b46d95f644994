"""
Dictionary engine: the service value handed to callers.

Owns the store, deinflector, orchestrator and merger, applies the
query-shape dispatch policy, and accepts new imported dictionaries.
Built once at startup by :func:`build_engine`.
"""

import logging
import threading
from pathlib import Path

from services.config import LookupConfig
from services.deinflect import Deinflection, Deinflector
from services.entry import DictionaryEntry
from services.frequency import FrequencyIndex, load_frequency_index
from services.jmdict import load_jmdict
from services.kana import contains_japanese, normalize_query
from services.lookup import LookupOrchestrator
from services.merge import ResultMerger
from services.pitch import PitchAccentIndex, load_pitch_accents
from services.sources import SourceId
from services.store import DictionaryLoadError, DictionarySource, DictionaryStore
from services.yomitan import ImportedDictionary, load_yomitan_dictionary


logger = logging.getLogger(__name__)


class DictionaryEngine:
    """Entry point for word taps, search queries and dictionary imports."""

    def __init__(
        self,
        store: DictionaryStore,
        deinflector: Deinflector | None = None,
        config: LookupConfig | None = None,
        pitch_index: PitchAccentIndex | None = None,
        frequency_index: FrequencyIndex | None = None,
    ) -> None:
        self.config = config or LookupConfig()
        self.store = store
        self.deinflector = deinflector or Deinflector.from_json(max_depth=self.config.max_deinflection_depth)
        self.orchestrator = LookupOrchestrator(store, self.deinflector, self.config)
        self.merger = ResultMerger(pitch_index, frequency_index, self.config.frequency_data_enabled)
        self._import_lock = threading.Lock()

    def search(self, query: str) -> list[DictionaryEntry]:
        """
        Search-box query.

        Japanese text goes through deinflected lookup, falling back to
        built-in plus imported prefix search when that finds nothing.
        Anything else is an English meaning search. Results are merged
        and annotated.
        """
        query = normalize_query(query)
        if not query:
            return []

        if contains_japanese(query):
            results = self.orchestrator.lookup_with_deinflection(query)
            if not results:
                limit = self.config.prefix_limit
                results = (
                    self.orchestrator.search_by_prefix(query, limit)
                    + self.orchestrator.search_imported_dictionaries_by_prefix(query, limit)
                )
            results = results[:self.config.japanese_result_cap]
        else:
            results = self.orchestrator.search_by_meaning(query, self.config.meaning_limit)

        return self.merger.process(results)

    def lookup_word(self, word: str) -> list[DictionaryEntry]:
        """Tapped word: deinflected lookup only, merged and annotated."""
        word = normalize_query(word)
        if not word:
            return []
        return self.merger.process(self.orchestrator.lookup_with_deinflection(word))

    def deinflect(self, word: str) -> list[Deinflection]:
        return self.deinflector.deinflect(normalize_query(word))

    def sources(self) -> list[DictionarySource]:
        """Every source, built-in in configured order, then imported in import order."""
        ordered = self.config.order_sources(s.source_id for s in self.store.builtin_sources())
        built_in = [self.store.get(source_id) for source_id in ordered]
        return built_in + list(self.store.imported_sources())

    def add_dictionary(self, dictionary: ImportedDictionary) -> None:
        """Append an imported dictionary and its pitch/frequency data."""
        with self._import_lock:
            self.store.add_imported(dictionary.source)
            self.merger.extend(dictionary.pitch_accents, dictionary.frequencies)

    def import_dictionary(self, path: Path | str) -> ImportedDictionary:
        """Read a Yomitan zip and make it searchable as an imported source."""
        dictionary = load_yomitan_dictionary(path)
        self.add_dictionary(dictionary)
        return dictionary


def _load_built_in(name: str, path: Path) -> DictionarySource:
    if not path.exists():
        raise DictionaryLoadError(f"Dictionary {name!r} not found at {path}")
    source_id = SourceId.built_in(name)
    if path.suffix == ".zip":
        return load_yomitan_dictionary(path, source_id).source
    return load_jmdict(path, source_id)


def build_engine(config: LookupConfig | None = None) -> DictionaryEngine:
    """
    Load every configured data file and build the engine.

    A missing built-in dictionary is fatal. Missing pitch or frequency
    data only disables that annotation, and an unreadable archive in the
    imported directory is skipped.
    """
    config = config or LookupConfig.from_env()

    built_in = [_load_built_in(name, Path(path)) for name, path in config.dictionary_paths.items()]

    imported: list[ImportedDictionary] = []
    if config.imported_dir and config.imported_dir.is_dir():
        for archive in sorted(config.imported_dir.glob("*.zip")):
            try:
                imported.append(load_yomitan_dictionary(archive, SourceId.imported(archive.stem)))
            except DictionaryLoadError as e:
                logger.warning(f"Skipping imported dictionary {archive.name}: {e}")

    engine = DictionaryEngine(
        DictionaryStore(built_in),
        config=config,
        pitch_index=load_pitch_accents(config.pitch_accent_path),
        frequency_index=load_frequency_index(config.frequency_path),
    )
    for dictionary in imported:
        engine.add_dictionary(dictionary)

    logger.info(
        f"Dictionary engine ready: {len(built_in)} built-in, "
        f"{len(imported)} imported sources"
    )
    return engine
