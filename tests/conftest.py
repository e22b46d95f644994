"""
Shared fixtures: a small fabricated dictionary store and an engine over it.
"""

import pytest

from services.config import LookupConfig
from services.deinflect import Deinflector
from services.engine import DictionaryEngine
from services.entry import DictionaryEntry, PitchAccent
from services.frequency import FrequencyIndex, FrequencyRecord
from services.pitch import PitchAccentIndex
from services.sources import JMDICT, OBUNSHA, SourceId
from services.store import DictionarySource, DictionaryStore


IMPORTED = SourceId.imported("test")


def make_entry(id, term, reading, meanings, source=JMDICT, popularity=0.0, **kwargs) -> DictionaryEntry:
    return DictionaryEntry(
        id=id,
        term=term,
        reading=reading,
        meanings=tuple(meanings),
        source=source,
        popularity=popularity,
        **kwargs,
    )


@pytest.fixture
def jmdict_source():
    return DictionarySource(JMDICT, [
        make_entry("1358280-0", "食べる", "たべる", ["to eat"], popularity=15.0,
                   meaning_tags=frozenset({"v1", "vt"})),
        make_entry("1358300-0", "食べ物", "たべもの", ["food"], popularity=10.0),
        make_entry("1596000-0", "走る", "はしる", ["to run"], popularity=15.0),
        make_entry("1406000-0", "高い", "たかい", ["high; tall", "expensive"], popularity=15.0),
        make_entry("1587040-0", "言う", "いう", ["to say"], popularity=15.0),
        make_entry("1468700-0", "鼠", "ねずみ", ["mouse; rat"]),
    ], title="JMdict")


@pytest.fixture
def obunsha_source():
    return DictionarySource(OBUNSHA, [
        make_entry("ob-1", "食べる", "たべる", ["たべる【食べる】 eat"], source=OBUNSHA),
        make_entry("ob-2", "走る", "はしる", ["run; dash"], source=OBUNSHA),
    ], title="旺文社")


@pytest.fixture
def imported_source():
    return DictionarySource(IMPORTED, [
        make_entry("imported_test-0", "食べ放題", "たべほうだい", ["all you can eat"], source=IMPORTED),
        make_entry("imported_test-1", "食べ歩き", "たべあるき", ["eating while walking"], source=IMPORTED),
    ], title="Test Dictionary")


@pytest.fixture
def store(jmdict_source, obunsha_source, imported_source):
    return DictionaryStore([jmdict_source, obunsha_source], [imported_source])


@pytest.fixture
def config():
    return LookupConfig(debounce_seconds=0.01, pitch_accent_path=None, frequency_path=None, imported_dir=None)


@pytest.fixture(scope="session")
def deinflector():
    return Deinflector.from_json()


@pytest.fixture
def pitch_index():
    return PitchAccentIndex([
        PitchAccent("食べる", "たべる", 2),
        PitchAccent("高い", "たかい", 2),
        PitchAccent("高い", "たかい", 0),
    ])


@pytest.fixture
def frequency_index():
    return FrequencyIndex([
        FrequencyRecord("食べる", "たべる", 500),
        FrequencyRecord("走る", None, 1200),
    ])


@pytest.fixture
def engine(store, deinflector, config, pitch_index, frequency_index):
    return DictionaryEngine(
        store,
        deinflector,
        config=config,
        pitch_index=pitch_index,
        frequency_index=frequency_index,
    )
