"""
Match persistence interface.

The engine never reaches for global storage: the caller injects a
``MatchStore``. Both backends keep serialized documents, so the scorer and
any spectator never share live objects.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Optional

from scorebook.config import StorageConfig, StoreBackend
from scorebook.state.match_state import Match
from scorebook.storage.codec import match_from_dict, match_to_dict

logger = logging.getLogger(__name__)


class MatchStore(ABC):
    """Abstract base class for match document stores."""

    @abstractmethod
    def save(self, match: Match) -> None:
        """Write the full match document, replacing any previous version."""

    @abstractmethod
    def load(self, match_id: str) -> Optional[Match]:
        """Read a match by id."""

    @abstractmethod
    def find_by_code(self, code: str) -> Optional[Match]:
        """Read a match by its join code."""


class InMemoryMatchStore(MatchStore):
    """Process-local store, used by tests and the demo."""

    def __init__(self):
        self._documents: dict[str, dict[str, Any]] = {}

    def save(self, match: Match) -> None:
        # round-trip through JSON text so stored documents are detached copies
        self._documents[match.match_id] = json.loads(json.dumps(match_to_dict(match)))
        logger.debug("Saved match %s (%s)", match.match_id, match.status.value)

    def load(self, match_id: str) -> Optional[Match]:
        doc = self._documents.get(match_id)
        return match_from_dict(doc) if doc is not None else None

    def find_by_code(self, code: str) -> Optional[Match]:
        for doc in self._documents.values():
            if doc.get("code") == code:
                return match_from_dict(doc)
        return None

    def __len__(self) -> int:
        return len(self._documents)


class JsonFileMatchStore(MatchStore):
    """One ``<match_id>.json`` document per match under ``data_dir``."""

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _path(self, match_id: str) -> Path:
        return self._data_dir / f"{match_id}.json"

    def save(self, match: Match) -> None:
        path = self._path(match.match_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(match_to_dict(match), indent=2), encoding="utf-8")
        tmp.replace(path)
        logger.debug("Saved match %s to %s", match.match_id, path)

    def load(self, match_id: str) -> Optional[Match]:
        path = self._path(match_id)
        if not path.exists():
            return None
        return match_from_dict(json.loads(path.read_text(encoding="utf-8")))

    def find_by_code(self, code: str) -> Optional[Match]:
        for path in sorted(self._data_dir.glob("*.json")):
            try:
                doc = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Skipping unreadable match file %s: %s", path, e)
                continue
            if not isinstance(doc, dict):
                logger.warning("Skipping %s: not a match document", path)
                continue
            if doc.get("code") != code:
                continue
            try:
                return match_from_dict(doc)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed match file %s: %s", path, e)
        return None


def build_store(config: StorageConfig) -> MatchStore:
    if config.backend is StoreBackend.MEMORY:
        return InMemoryMatchStore()
    return JsonFileMatchStore(config.data_dir)
