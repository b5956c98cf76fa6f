"""Tests for environment-driven configuration and the command-line demo."""

from __future__ import annotations

from pathlib import Path

import pytest

from scorebook.config import ScorebookConfig, StorageConfig, StoreBackend
from scorebook.orchestrator import format_scoreboard, run_demo
from scorebook.state.match_state import MatchStatus

ENV_VARS = (
    "SCOREBOOK_DEFAULT_OVERS",
    "SCOREBOOK_JOIN_CODE_LENGTH",
    "SCOREBOOK_STORE",
    "SCOREBOOK_DATA_DIR",
    "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


class TestFromEnv:
    def test_defaults(self, clean_env):
        config = ScorebookConfig.from_env()
        assert config.match.total_overs == 20
        assert config.match.join_code_length == 6
        assert config.storage.backend is StoreBackend.JSON
        assert config.storage.data_dir == Path("data/matches")
        assert config.log_level == "INFO"

    def test_overrides(self, clean_env):
        clean_env.setenv("SCOREBOOK_DEFAULT_OVERS", "50")
        clean_env.setenv("SCOREBOOK_JOIN_CODE_LENGTH", "8")
        clean_env.setenv("SCOREBOOK_STORE", "MEMORY")
        clean_env.setenv("SCOREBOOK_DATA_DIR", "/tmp/scores")
        clean_env.setenv("LOG_LEVEL", "DEBUG")

        config = ScorebookConfig.from_env()
        assert config.match.total_overs == 50
        assert config.match.join_code_length == 8
        assert config.storage.backend is StoreBackend.MEMORY
        assert config.storage.data_dir == Path("/tmp/scores")
        assert config.log_level == "DEBUG"

    def test_unknown_backend(self, clean_env):
        clean_env.setenv("SCOREBOOK_STORE", "postgres")
        with pytest.raises(ValueError):
            ScorebookConfig.from_env()


class TestScoreboard:
    def test_format(self, live_engine):
        live_engine.record_runs(4)
        text = format_scoreboard(live_engine.state)
        assert "Thunder: 4/0 (0.1 ov" in text
        assert "Thunder 1" in text
        assert "Strikers 11" in text
        assert "0.1-0-4-0" in text

    def test_target_line(self, live_engine):
        live_engine.record_runs(2)
        live_engine.end_innings()
        assert "Target 3, 3 needed" in format_scoreboard(live_engine.state)


class TestDemo:
    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_demo_runs_to_completion(self, seed, capsys):
        config = ScorebookConfig(storage=StorageConfig(backend=StoreBackend.MEMORY))
        match = run_demo(config, overs=3, seed=seed)
        assert match.status is MatchStatus.COMPLETED
        assert "Target" in capsys.readouterr().out
