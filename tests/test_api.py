"""
Tests for the HTTP surface (src/main.py).
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app


@pytest.fixture
def client(engine):
    with TestClient(create_app(engine)) as client:
        yield client


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["sources"] == 3


class TestLookupEndpoints:
    """Lookup, search and deinflection endpoints."""

    def test_lookup_deinflects(self, client):
        data = client.post("/lookup", json={"word": "食べられなかった"}).json()
        assert data["count"] == 1
        [entry] = data["entries"]
        assert entry["term"] == "食べる"
        assert entry["transformed"] is True
        assert entry["rules"] == ["potential or passive", "negative", "past"]
        assert entry["source"] == "combined"
        assert entry["frequency_rank"] == "#500"
        assert entry["pitch_accents"][0]["pitch_accent"] == 2

    def test_lookup_without_deinflection(self, client):
        data = client.post("/lookup", json={"word": "食べる", "deinflect": False}).json()
        [entry] = data["entries"]
        assert entry["transformed"] is False
        assert entry["id"] == "merged_食べる-たべる"
        assert entry["meanings"] == ["to eat", "たべる【食べる】 eat"]

    def test_lookup_validation(self, client):
        assert client.post("/lookup", json={"word": ""}).status_code == 422

    def test_search_english(self, client):
        data = client.post("/search", json={"query": "run"}).json()
        assert [e["term"] for e in data["entries"]] == ["走る"]

    def test_search_no_results(self, client):
        data = client.post("/search", json={"query": "qwerty"}).json()
        assert data == {"query": "qwerty", "entries": [], "count": 0}

    def test_prefix_search(self, client):
        data = client.post("/search/prefix", json={"prefix": "たべ", "limit": 10}).json()
        assert [e["term"] for e in data["entries"]] == ["食べる", "食べ物"]

    def test_prefix_search_with_imported(self, client):
        data = client.post("/search/prefix", json={"prefix": "たべ", "limit": 10, "include_imported": True}).json()
        assert [e["term"] for e in data["entries"]] == ["食べる", "食べ物", "食べ放題", "食べ歩き"]

    def test_meaning_search(self, client):
        data = client.post("/search/meaning", json={"text": "food", "limit": 5}).json()
        assert [e["term"] for e in data["entries"]] == ["食べ物"]

    def test_deinflect(self, client):
        data = client.post("/deinflect", json={"word": "走った"}).json()
        first = data["candidates"][0]
        assert first == {"term": "走った", "reasons": [], "score": 1.0, "notes": None}
        assert any(c["term"] == "走る" and c["reasons"] == ["past"] for c in data["candidates"])


class TestDictionaryEndpoints:
    """Source listing and imports."""

    def test_sources(self, client):
        sources = client.get("/sources").json()["sources"]
        assert [s["id"] for s in sources] == ["jmdict", "obunsha", "imported_test"]
        assert [s["kind"] for s in sources] == ["built_in", "built_in", "imported"]

    def test_import_missing_archive(self, client, tmp_path):
        response = client.post("/dictionaries/import", json={"path": str(tmp_path / "missing.zip")})
        assert response.status_code == 400
