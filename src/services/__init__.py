"""Shiori lookup services module."""

from .config import LookupConfig
from .deinflect import Deinflection, Deinflector, RuleType
from .engine import DictionaryEngine, build_engine
from .entry import DictionaryEntry, PitchAccent, PitchAccentData
from .lookup import LookupOrchestrator
from .merge import ResultMerger, merge_entries
from .search import SearchCoordinator
from .sources import COMBINED, SourceId, SourceKind
from .store import DictionaryLoadError, DictionarySource, DictionaryStore

__all__ = [
    # Configuration
    "LookupConfig",
    # Deinflection
    "Deinflection",
    "Deinflector",
    "RuleType",
    # Engine
    "DictionaryEngine",
    "build_engine",
    "LookupOrchestrator",
    "SearchCoordinator",
    # Entries
    "DictionaryEntry",
    "PitchAccent",
    "PitchAccentData",
    # Merging
    "ResultMerger",
    "merge_entries",
    # Sources
    "COMBINED",
    "SourceId",
    "SourceKind",
    "DictionaryLoadError",
    "DictionarySource",
    "DictionaryStore",
]
