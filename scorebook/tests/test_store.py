"""Tests for match persistence and the document codec."""

from __future__ import annotations

import json

import pytest

from scorebook.config import StorageConfig, StoreBackend
from scorebook.data.ball_event import ExtraType, WicketType
from scorebook.data.roster import TeamSlot
from scorebook.errors import InvalidJoinCode
from scorebook.state.match_state import MatchStateEngine, join_match
from scorebook.storage.codec import SCHEMA_VERSION, match_from_dict, match_to_dict
from scorebook.storage.store import InMemoryMatchStore, JsonFileMatchStore, build_store


def play_a_few_balls(engine: MatchStateEngine) -> None:
    engine.record_runs(4)
    engine.record_extra(ExtraType.WIDE, 1)
    engine.record_extra(ExtraType.LEG_BYE, 1)
    engine.record_wicket(WicketType.CAUGHT)
    engine.change_striker("t3")
    engine.record_runs(0)


class TestCodec:
    def test_round_trip_of_played_match(self, live_engine: MatchStateEngine):
        play_a_few_balls(live_engine)
        match = live_engine.state
        doc = json.loads(json.dumps(match_to_dict(match)))
        assert doc["schema_version"] == SCHEMA_VERSION
        assert match_from_dict(doc) == match

    def test_enums_written_as_values(self, live_engine: MatchStateEngine):
        play_a_few_balls(live_engine)
        doc = match_to_dict(live_engine.state)
        assert doc["status"] == "in_progress"
        first = doc["innings"]["first"]
        assert [b["extra_type"] for b in first["balls"]][:3] == ["none", "wide", "leg_bye"]
        assert first["batting"]["t2"]["wicket_type"] == "caught"

    def test_rejects_unknown_version(self, live_engine: MatchStateEngine):
        doc = match_to_dict(live_engine.state)
        doc["schema_version"] = SCHEMA_VERSION + 1
        with pytest.raises(ValueError):
            match_from_dict(doc)


class TestInMemoryStore:
    def test_documents_are_detached(self, live_engine: MatchStateEngine, store: InMemoryMatchStore):
        match = live_engine.record_runs(2)
        loaded = store.load(match.match_id)
        assert loaded == match
        assert loaded is not match
        assert len(store) == 1

    def test_missing(self, store: InMemoryMatchStore):
        assert store.load("nope") is None
        assert store.find_by_code("NOPE00") is None


class TestJsonFileStore:
    def test_save_load_and_find(self, tmp_path):
        store = JsonFileMatchStore(tmp_path / "matches")
        engine = MatchStateEngine(store)
        match = engine.create_match(5)

        path = store.data_dir / f"{match.match_id}.json"
        assert path.exists()
        assert store.load(match.match_id) == match
        assert store.find_by_code(match.code) == match
        assert not list(store.data_dir.glob("*.tmp"))

    def test_spectator_follows_scorer(self, tmp_path):
        store = JsonFileMatchStore(tmp_path)
        engine = MatchStateEngine(store)
        engine.create_match(2)
        view = join_match(JsonFileMatchStore(tmp_path), engine.state.code)

        engine.set_team_name(TeamSlot.TEAM1, "Harbour")
        assert view.state.teams[TeamSlot.TEAM1].name == "Team A"
        assert view.refresh().teams[TeamSlot.TEAM1].name == "Harbour"

    def test_skips_unreadable_file(self, tmp_path, caplog):
        store = JsonFileMatchStore(tmp_path)
        engine = MatchStateEngine(store)
        match = engine.create_match(10)
        (tmp_path / "000-broken.json").write_text("{ not json", encoding="utf-8")

        assert store.find_by_code(match.code) == match
        assert "Skipping unreadable match file" in caplog.text

    def test_skips_files_that_are_not_matches(self, tmp_path, caplog):
        (tmp_path / "notes.json").write_text("[1, 2]", encoding="utf-8")
        store = JsonFileMatchStore(tmp_path)
        engine = MatchStateEngine(store)
        match = engine.create_match(5)

        assert store.find_by_code(match.code) == match
        assert join_match(store, match.code).state == match
        assert "not a match document" in caplog.text

    def test_malformed_document_with_matching_code(self, tmp_path, caplog):
        doc = {"schema_version": SCHEMA_VERSION, "code": "QQQ111", "status": "setup"}
        (tmp_path / "half.json").write_text(json.dumps(doc), encoding="utf-8")
        store = JsonFileMatchStore(tmp_path)

        assert store.find_by_code("QQQ111") is None
        assert "Skipping malformed match file" in caplog.text
        with pytest.raises(InvalidJoinCode):
            join_match(store, "QQQ111")


class TestBuildStore:
    def test_memory_backend(self):
        assert isinstance(build_store(StorageConfig(backend=StoreBackend.MEMORY)), InMemoryMatchStore)

    def test_json_backend(self, tmp_path):
        store = build_store(StorageConfig(backend=StoreBackend.JSON, data_dir=tmp_path / "d"))
        assert isinstance(store, JsonFileMatchStore)
        assert store.data_dir.is_dir()
