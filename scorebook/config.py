"""
Configuration management for the scoring engine.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


class StoreBackend(Enum):
    MEMORY = "memory"
    JSON = "json"


# Laws-of-the-game constants the engine relies on
BALLS_PER_OVER = 6
MAX_WICKETS = 10
MAX_RUNS_OFF_BAT = 6
MAX_EXTRA_RUNS = 7  # e.g. a wide that runs away for four, plus the wide


@dataclass(frozen=True)
class MatchDefaults:
    """Defaults applied when a scorer creates a new match."""
    total_overs: int = 20
    join_code_length: int = 6
    team1_name: str = "Team A"
    team2_name: str = "Team B"


@dataclass(frozen=True)
class StorageConfig:
    """Where match documents are kept."""
    backend: StoreBackend = StoreBackend.JSON
    data_dir: Path = field(default_factory=lambda: Path("data/matches"))


@dataclass
class ScorebookConfig:
    """Top-level scorebook configuration."""
    match: MatchDefaults = field(default_factory=MatchDefaults)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ScorebookConfig":
        """Load configuration from environment variables."""
        return cls(
            match=MatchDefaults(
                total_overs=int(os.getenv("SCOREBOOK_DEFAULT_OVERS", "20")),
                join_code_length=int(os.getenv("SCOREBOOK_JOIN_CODE_LENGTH", "6")),
            ),
            storage=StorageConfig(
                backend=StoreBackend(os.getenv("SCOREBOOK_STORE", "json").lower()),
                data_dir=Path(os.getenv("SCOREBOOK_DATA_DIR", "data/matches")),
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
