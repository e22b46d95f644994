"""Dictionary source identity.

Every entry carries the source it came from. Sources are a tagged variant
rather than bare strings so that merge and display code can't silently
mishandle an unknown name:

- built-in sources ship with the engine (``jmdict``, ``obunsha``)
- imported sources are user-added Yomitan dictionaries (``imported_<id>``)
- ``combined`` is synthetic, produced when the merger folds entries from
  two or more sources into one
"""

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import Self


BUILT_IN_SOURCE_NAMES = ("jmdict", "obunsha")
IMPORTED_PREFIX = "imported_"
COMBINED_NAME = "combined"


class SourceKind(StrEnum):
    """Kind of dictionary source."""

    BUILT_IN = auto()
    IMPORTED = auto()
    COMBINED = auto()


@dataclass(frozen=True, slots=True)
class SourceId:
    """Identifier of a dictionary source."""

    kind: SourceKind
    name: str

    @classmethod
    def built_in(cls, name: str) -> Self:
        return cls(SourceKind.BUILT_IN, name)

    @classmethod
    def imported(cls, name: str) -> Self:
        if not name.startswith(IMPORTED_PREFIX):
            name = IMPORTED_PREFIX + name
        return cls(SourceKind.IMPORTED, name)

    @classmethod
    def parse(cls, value: str) -> Self:
        """Map a raw source string onto the variant.

        Unknown names that don't carry the imported prefix are treated as
        built-in, so a newly bundled dictionary still routes through the
        built-in search paths.
        """
        if value == COMBINED_NAME:
            return COMBINED
        if value.startswith(IMPORTED_PREFIX):
            return cls(SourceKind.IMPORTED, value)
        return cls(SourceKind.BUILT_IN, value)

    @property
    def is_built_in(self) -> bool:
        return self.kind is SourceKind.BUILT_IN

    @property
    def is_imported(self) -> bool:
        return self.kind is SourceKind.IMPORTED

    @property
    def is_combined(self) -> bool:
        return self.kind is SourceKind.COMBINED

    def __str__(self) -> str:
        return self.name


COMBINED = SourceId(SourceKind.COMBINED, COMBINED_NAME)
JMDICT = SourceId.built_in("jmdict")
OBUNSHA = SourceId.built_in("obunsha")
