"""
Read-only configuration consumed by the lookup engine.

Values come from the environment the same way the rest of the service is
configured; nothing here is written back.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Self

from services.sources import BUILT_IN_SOURCE_NAMES, SourceId


DATA_DIR = Path(__file__).parent.parent.parent / "data"

DEFAULT_DICTIONARY_PATHS = {"jmdict": DATA_DIR / "jmdict-eng.json.gz"}
DEFAULT_PITCH_ACCENT_PATH = DATA_DIR / "accents.txt"
DEFAULT_FREQUENCY_PATH = DATA_DIR / "bccwj.tsv"
DEFAULT_IMPORTED_DIR = DATA_DIR / "imported"


def _env_list(name: str, default: Iterable[str]) -> list[str]:
    raw = os.environ.get(name)
    if raw is None:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


def _env_paths(name: str, default: dict[str, Path]) -> dict[str, Path]:
    """Parse ``name=path,name=path`` into an ordered mapping."""
    raw = os.environ.get(name)
    if not raw:
        return dict(default)
    paths: dict[str, Path] = {}
    for part in raw.split(","):
        key, sep, value = part.partition("=")
        if not sep:
            raise ValueError(f"{name}: expected name=path, got {part!r}")
        paths[key.strip()] = Path(value.strip())
    return paths


@dataclass(frozen=True, slots=True)
class LookupConfig:
    """Every option the engine recognises."""

    enabled_sources: frozenset[str] = frozenset(BUILT_IN_SOURCE_NAMES)
    source_order: tuple[str, ...] = BUILT_IN_SOURCE_NAMES
    frequency_data_enabled: bool = True

    max_deinflection_depth: int = 8
    deinflection_result_cap: int = 100
    japanese_result_cap: int = 100
    prefix_limit: int = 50
    meaning_limit: int = 100

    # Search coordinator
    debounce_seconds: float = 0.3
    initial_results_limit: int = 30

    # Data files
    dictionary_paths: dict[str, Path] = field(default_factory=lambda: dict(DEFAULT_DICTIONARY_PATHS))
    pitch_accent_path: Path | None = DEFAULT_PITCH_ACCENT_PATH
    frequency_path: Path | None = DEFAULT_FREQUENCY_PATH
    imported_dir: Path | None = DEFAULT_IMPORTED_DIR

    @classmethod
    def from_env(cls) -> Self:
        """Build a config from ``SHIORI_*`` environment variables."""
        pitch = os.environ.get("SHIORI_PITCH_ACCENTS")
        freq = os.environ.get("SHIORI_FREQUENCY")
        imported = os.environ.get("SHIORI_IMPORTED_DIR")
        return cls(
            enabled_sources=frozenset(_env_list("SHIORI_ENABLED_SOURCES", BUILT_IN_SOURCE_NAMES)),
            source_order=tuple(_env_list("SHIORI_SOURCE_ORDER", BUILT_IN_SOURCE_NAMES)),
            frequency_data_enabled=_env_bool("SHIORI_FREQUENCY_ENABLED", True),
            max_deinflection_depth=_env_int("SHIORI_MAX_DEINFLECTION_DEPTH", 8),
            dictionary_paths=_env_paths("SHIORI_DICTIONARIES", DEFAULT_DICTIONARY_PATHS),
            pitch_accent_path=Path(pitch) if pitch else DEFAULT_PITCH_ACCENT_PATH,
            frequency_path=Path(freq) if freq else DEFAULT_FREQUENCY_PATH,
            imported_dir=Path(imported) if imported else DEFAULT_IMPORTED_DIR,
        )

    def is_enabled(self, source: SourceId) -> bool:
        """Built-in sources must be listed; imported ones are always on."""
        if source.is_imported:
            return True
        return source.name in self.enabled_sources

    def order_sources(self, sources: Iterable[SourceId]) -> list[SourceId]:
        """Sort sources for presentation: configured order first, then the rest."""
        rank = {name: i for i, name in enumerate(self.source_order)}
        return sorted(sources, key=lambda s: (rank.get(s.name, len(rank)), s.name))
