"""Shared test fixtures for scorebook tests."""

from __future__ import annotations

import pytest

from scorebook.config import MatchDefaults
from scorebook.data.roster import TeamSlot
from scorebook.state.innings import InningsState
from scorebook.state.match_state import MatchStateEngine, TossDecision
from scorebook.storage.store import InMemoryMatchStore


@pytest.fixture
def lineup_innings() -> InningsState:
    """Empty innings with striker S, non-striker N and bowler B assigned."""
    return InningsState(striker="S", non_striker="N", bowler="B")


@pytest.fixture
def store() -> InMemoryMatchStore:
    return InMemoryMatchStore()


@pytest.fixture
def engine(store: InMemoryMatchStore) -> MatchStateEngine:
    """Engine with a fresh 20-over match, Thunder vs Strikers, 11 a side."""
    eng = MatchStateEngine(store, defaults=MatchDefaults())
    eng.create_match(20)
    eng.set_team_name(TeamSlot.TEAM1, "Thunder")
    eng.set_team_name(TeamSlot.TEAM2, "Strikers")
    for i in range(1, 12):
        eng.add_player(TeamSlot.TEAM1, f"Thunder {i}", player_id=f"t{i}")
        eng.add_player(TeamSlot.TEAM2, f"Strikers {i}", player_id=f"s{i}")
    return eng


@pytest.fixture
def live_engine(engine: MatchStateEngine) -> MatchStateEngine:
    """Thunder won the toss and bat; t1/t2 at the crease, s11 bowling."""
    engine.perform_toss(TeamSlot.TEAM1, TossDecision.BAT)
    engine.start_innings()
    engine.change_striker("t1")
    engine.change_non_striker("t2")
    engine.change_bowler("s11")
    return engine
