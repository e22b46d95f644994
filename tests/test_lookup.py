"""
Tests for the store, lookup orchestrator and engine dispatch.
"""

import pytest

from services.config import LookupConfig
from services.engine import DictionaryEngine
from services.kana import contains_japanese, normalize_query
from services.lookup import LookupOrchestrator
from services.sources import COMBINED, JMDICT, OBUNSHA, SourceId
from services.store import DictionarySource, DictionaryStore

from conftest import IMPORTED, make_entry


@pytest.fixture
def orchestrator(store, deinflector, config):
    return LookupOrchestrator(store, deinflector, config)


# =============================================================================
# Dictionary store
# =============================================================================


class TestStore:
    """Per-source indexes and copy-on-write imports."""

    def test_exact_lookup_matches_reading(self, jmdict_source):
        assert [e.term for e in jmdict_source.exact_lookup("たべる")] == ["食べる"]

    def test_prefix_lookup_sequence_order(self, jmdict_source):
        assert [e.term for e in jmdict_source.prefix_lookup("食べ", 10)] == ["食べる", "食べ物"]
        assert [e.term for e in jmdict_source.prefix_lookup("たべ", 10)] == ["食べる", "食べ物"]

    def test_prefix_lookup_limit(self, jmdict_source):
        assert len(jmdict_source.prefix_lookup("食べ", 1)) == 1
        assert jmdict_source.prefix_lookup("食べ", 0) == []

    def test_meaning_search_case_insensitive(self, jmdict_source):
        assert [e.term for e in jmdict_source.meaning_search("EXPENSIVE", 10)] == ["高い"]

    def test_empty_queries(self, jmdict_source):
        assert jmdict_source.exact_lookup("") == []
        assert jmdict_source.prefix_lookup("", 10) == []
        assert jmdict_source.meaning_search("  ", 10) == []

    def test_add_imported_keeps_snapshots(self, store):
        snapshot = store.imported_sources()
        extra = DictionarySource(SourceId.imported("extra"), [
            make_entry("x", "猫", "ねこ", ["cat"], source=SourceId.imported("extra")),
        ])
        store.add_imported(extra)
        assert len(snapshot) == 1
        assert len(store.imported_sources()) == 2
        assert store.get(SourceId.imported("extra")) is extra

    def test_add_imported_rejects_duplicates(self, store, imported_source):
        with pytest.raises(ValueError):
            store.add_imported(imported_source)

    def test_add_imported_rejects_built_in(self, store, jmdict_source):
        with pytest.raises(ValueError):
            store.add_imported(jmdict_source)


# =============================================================================
# Lookup orchestrator
# =============================================================================


class TestLookup:
    """Exact and deinflected lookup."""

    def test_lookup_not_transformed(self, orchestrator):
        results = orchestrator.lookup("食べる")
        assert [e.source for e in results] == [JMDICT, OBUNSHA]
        assert all(not e.transformed and e.rules == () for e in results)

    def test_lookup_ignores_imported(self, orchestrator):
        assert orchestrator.lookup("食べ放題") == []

    def test_deinflected_lookup(self, orchestrator):
        results = orchestrator.lookup_with_deinflection("食べられなかった")
        assert results
        assert {e.term for e in results} == {"食べる"}
        for entry in results:
            assert entry.transformed
            assert entry.rules
            assert entry.transformation_notes

    def test_deinflected_lookup_dictionary_form(self, orchestrator):
        results = orchestrator.lookup_with_deinflection("食べる")
        assert results[0].term == "食べる"
        assert not results[0].transformed

    def test_entries_not_repeated_across_candidates(self, orchestrator):
        results = orchestrator.lookup_with_deinflection("走った")
        keys = [(e.source.name, e.id) for e in results]
        assert len(keys) == len(set(keys))

    def test_deinflection_cap(self, store, deinflector):
        orchestrator = LookupOrchestrator(store, deinflector, LookupConfig(deinflection_result_cap=1))
        assert len(orchestrator.lookup_with_deinflection("食べる")) == 1

    def test_disabled_source_skipped(self, store, deinflector):
        config = LookupConfig(enabled_sources=frozenset({"jmdict"}))
        orchestrator = LookupOrchestrator(store, deinflector, config)
        assert [e.source for e in orchestrator.lookup("食べる")] == [JMDICT]

    def test_popularity_order(self, store, deinflector):
        source = DictionarySource(JMDICT, [
            make_entry("a", "かける", "かける", ["to bet"], popularity=0.0),
            make_entry("b", "掛ける", "かける", ["to hang"], popularity=15.0),
        ])
        orchestrator = LookupOrchestrator(DictionaryStore([source]), deinflector)
        assert [e.id for e in orchestrator.lookup("かける")] == ["b", "a"]

    def test_archaic_entries_sink_on_ties(self, deinflector):
        source = DictionarySource(JMDICT, [
            make_entry("a", "候", "そうろう", ["to be (archaic copula)"], popularity=5.0,
                       meaning_tags=frozenset({"arch"})),
            make_entry("b", "候", "こう", ["season; weather"], popularity=5.0),
        ])
        orchestrator = LookupOrchestrator(DictionaryStore([source]), deinflector)
        assert [e.id for e in orchestrator.lookup("候")] == ["b", "a"]

    def test_priority_tags_break_popularity_ties(self, deinflector):
        source = DictionarySource(JMDICT, [
            make_entry("none", "かみ", "かみ", ["hair"]),
            make_entry("news", "かみ", "かみ", ["paper"], term_tags=frozenset({"news1"})),
            make_entry("common", "かみ", "かみ", ["god"], term_tags=frozenset({"P"})),
            make_entry("star", "かみ", "かみ", ["upper part"], term_tags=frozenset({"⭐"})),
        ])
        orchestrator = LookupOrchestrator(DictionaryStore([source]), deinflector)
        assert [e.id for e in orchestrator.lookup("かみ")] == ["star", "common", "news", "none"]

    def test_popularity_outranks_tags(self, deinflector):
        source = DictionarySource(JMDICT, [
            make_entry("a", "かみ", "かみ", ["paper"], term_tags=frozenset({"⭐"})),
            make_entry("b", "かみ", "かみ", ["god"], popularity=1.0, meaning_tags=frozenset({"obs"})),
        ])
        orchestrator = LookupOrchestrator(DictionaryStore([source]), deinflector)
        assert [e.id for e in orchestrator.lookup("かみ")] == ["b", "a"]


class TestSearch:
    """Prefix and meaning search."""

    @pytest.mark.parametrize("limit", [1, 2, 3, 50])
    def test_prefix_limit(self, orchestrator, limit):
        assert len(orchestrator.search_by_prefix("食べ", limit)) <= limit
        assert len(orchestrator.search_imported_dictionaries_by_prefix("食べ", limit)) <= limit

    def test_prefix_built_in_only(self, orchestrator):
        results = orchestrator.search_by_prefix("食べ", 50)
        assert all(e.source.is_built_in for e in results)
        assert "食べ放題" not in {e.term for e in results}

    def test_prefix_imported_only(self, orchestrator):
        results = orchestrator.search_imported_dictionaries_by_prefix("たべ", 50)
        assert [e.term for e in results] == ["食べ放題", "食べ歩き"]
        assert all(e.source == IMPORTED for e in results)

    def test_meaning_search(self, orchestrator):
        results = orchestrator.search_by_meaning("run", 10)
        assert results
        for entry in results:
            assert entry.source.is_built_in
            assert any("run" in m.lower() for m in entry.meanings)

    def test_meaning_search_skips_imported(self, orchestrator):
        assert orchestrator.search_by_meaning("all you can eat", 10) == []

    def test_meaning_search_lemma_fallback(self, orchestrator):
        assert [e.term for e in orchestrator.search_by_meaning("mice", 10)] == ["鼠"]

    def test_meaning_search_limit(self, orchestrator):
        assert len(orchestrator.search_by_meaning("to", 2)) == 2


# =============================================================================
# Engine dispatch
# =============================================================================


class TestEngine:
    """Query-shape dispatch, merging and annotation."""

    def test_japanese_query_deinflected(self, engine):
        [entry] = engine.search("食べられなかった")
        assert entry.term == "食べる"
        assert entry.transformed
        assert entry.rules == ("potential or passive", "negative", "past")
        assert entry.source == COMBINED
        assert entry.meanings == ("to eat", "たべる【食べる】 eat")
        assert entry.pitch_accents.all_patterns == [2]
        assert entry.frequency_rank == "#500"

    def test_prefix_fallback_includes_imported(self, engine):
        results = engine.search("たべほ")
        assert [e.term for e in results] == ["食べ放題"]

    def test_english_query(self, engine):
        [entry] = engine.search("run")
        assert entry.term == "走る"
        assert entry.source == COMBINED
        assert entry.meanings == ("to run", "run; dash")

    def test_blank_query(self, engine):
        assert engine.search("   ") == []

    def test_no_match_is_empty(self, engine):
        assert engine.search("zzzz") == []
        assert engine.lookup_word("ぬぬぬ") == []

    def test_lookup_word(self, engine):
        [entry] = engine.lookup_word("走った")
        assert entry.term == "走る"
        assert entry.rules == ("past",)

    def test_no_pitch_data_is_none(self, engine):
        [entry] = engine.search("言う")
        assert entry.pitch_accents is None

    def test_sources_order(self, engine):
        assert [s.source_id.name for s in engine.sources()] == ["jmdict", "obunsha", "imported_test"]

    def test_japanese_results_capped(self, deinflector):
        imported = SourceId.imported("neko")
        store = DictionaryStore(
            [DictionarySource(JMDICT, [
                make_entry("1", "猫舌", "ねこじた", ["cat tongue"]),
                make_entry("2", "猫背", "ねこぜ", ["stoop"]),
            ])],
            [DictionarySource(imported, [
                make_entry("i-1", "猫まんま", "ねこまんま", ["rice with leftovers"], source=imported),
                make_entry("i-2", "猫柳", "ねこやなぎ", ["pussy willow"], source=imported),
            ])],
        )
        engine = DictionaryEngine(store, deinflector, config=LookupConfig(japanese_result_cap=3))
        results = engine.search("ねこ")
        assert [e.term for e in results] == ["猫舌", "猫背", "猫まんま"]
        assert [e.source for e in results] == [JMDICT, JMDICT, imported]


class TestKana:
    """Script detection and normalisation."""

    @pytest.mark.parametrize("text", ["食べる", "たべる", "タベル", "ｶﾞｯｺｳ", "run 走る"])
    def test_contains_japanese(self, text):
        assert contains_japanese(text)

    @pytest.mark.parametrize("text", ["run", "to eat", "123", ""])
    def test_not_japanese(self, text):
        assert not contains_japanese(text)

    def test_normalize_query(self):
        assert normalize_query("  ｶﾞｯｺｳ ") == "ガッコウ"
        assert normalize_query(" run ") == "run"
