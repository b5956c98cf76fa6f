"""
Match State Engine.

Holds the match-level record (teams, toss, status, both innings) and the
state container the scorer drives. Every operation builds a new immutable
``Match``, persists it through the injected store and only then makes it
the current state, so a failed call never leaves a half-applied change.

Status flow: setup -> toss -> in_progress -> innings_break -> in_progress
-> completed.
"""

from __future__ import annotations

import logging
import random
import string
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional, Union

from scorebook.config import BALLS_PER_OVER, MAX_WICKETS, MatchDefaults
from scorebook.data import roster
from scorebook.data.ball_event import ExtraType, WicketType
from scorebook.data.roster import Player, Team, TeamSlot
from scorebook.errors import (
    InningsComplete,
    InvalidJoinCode,
    InvalidOversCount,
    InvalidTransition,
    MatchCompleted,
    ScorebookError,
    UnknownPlayer,
)
from scorebook.state import processor, undo
from scorebook.state.innings import InningsState

if TYPE_CHECKING:
    from scorebook.storage.store import MatchStore

logger = logging.getLogger(__name__)


class MatchStatus(Enum):
    SETUP = "setup"
    TOSS = "toss"
    IN_PROGRESS = "in_progress"
    INNINGS_BREAK = "innings_break"
    COMPLETED = "completed"


class TossDecision(Enum):
    BAT = "bat"
    BOWL = "bowl"


class InningsNumber(Enum):
    FIRST = "first"
    SECOND = "second"


@dataclass(frozen=True)
class Toss:
    winner: TeamSlot
    decision: TossDecision


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Match:
    """Complete match record; the unit that is persisted and broadcast."""

    match_id: str
    code: str
    total_overs: int
    status: MatchStatus = MatchStatus.SETUP
    teams: dict[TeamSlot, Team] = field(default_factory=dict)
    toss: Optional[Toss] = None
    current_innings: InningsNumber = InningsNumber.FIRST
    batting_team: TeamSlot = TeamSlot.TEAM1
    innings: dict[InningsNumber, InningsState] = field(
        default_factory=lambda: {n: InningsState() for n in InningsNumber}
    )
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @property
    def current_innings_state(self) -> InningsState:
        return self.innings[self.current_innings]

    @property
    def bowling_team_slot(self) -> TeamSlot:
        return self.batting_team.other

    @property
    def batting_side(self) -> Team:
        return self.teams[self.batting_team]

    @property
    def bowling_side(self) -> Team:
        return self.teams[self.bowling_team_slot]

    @property
    def current_batsmen(self) -> tuple[Optional[Player], Optional[Player]]:
        """(striker, non-striker) players of the batting side."""
        inn = self.current_innings_state
        side = self.batting_side
        return side.get_player(inn.striker), side.get_player(inn.non_striker)

    @property
    def current_bowler(self) -> Optional[Player]:
        return self.bowling_side.get_player(self.current_innings_state.bowler)

    @property
    def target(self) -> Optional[int]:
        """Runs the side batting second needs to win."""
        if self.current_innings is not InningsNumber.SECOND:
            return None
        return self.innings[InningsNumber.FIRST].total_runs + 1

    @property
    def runs_needed(self) -> Optional[int]:
        if self.target is None:
            return None
        return max(0, self.target - self.current_innings_state.total_runs)

    @property
    def balls_remaining(self) -> int:
        """Legal deliveries left in the active innings."""
        bowled = self.current_innings_state.legal_balls
        return max(0, self.total_overs * BALLS_PER_OVER - bowled)

    @property
    def is_innings_complete(self) -> bool:
        """All out, overs used up, or the chase won; only end_innings remains."""
        inn = self.current_innings_state
        if inn.wickets >= MAX_WICKETS or self.balls_remaining == 0:
            return True
        return self.target is not None and inn.total_runs >= self.target

    @property
    def is_complete(self) -> bool:
        return self.status is MatchStatus.COMPLETED

    def get_player(self, slot: TeamSlot, player_id: str) -> Optional[Player]:
        return self.teams[slot].get_player(player_id)


def parse_total_overs(value: Union[int, str]) -> int:
    """Validate the overs-per-innings setting: a positive whole number,
    given as an int or a numeric string."""
    if isinstance(value, bool):
        raise InvalidOversCount(f"Invalid overs count: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise InvalidOversCount(f"Invalid overs count: {value!r}")
        value = int(text)
    if not isinstance(value, int) or value <= 0:
        raise InvalidOversCount(f"Overs must be a positive whole number, got {value!r}")
    return value


def generate_join_code(length: int = 6, rng: Optional[random.Random] = None) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join((rng or random).choices(alphabet, k=length))


def new_match(
    total_overs: Union[int, str],
    defaults: Optional[MatchDefaults] = None,
    code: Optional[str] = None,
) -> Match:
    """A fresh match in SETUP with two empty teams and two empty innings."""
    defaults = defaults or MatchDefaults()
    overs = parse_total_overs(total_overs)
    return Match(
        match_id=str(uuid.uuid4()),
        code=code or generate_join_code(defaults.join_code_length),
        total_overs=overs,
        teams={
            TeamSlot.TEAM1: Team(team_id=TeamSlot.TEAM1.value, name=defaults.team1_name),
            TeamSlot.TEAM2: Team(team_id=TeamSlot.TEAM2.value, name=defaults.team2_name),
        },
    )


class MatchStateEngine:
    """State container for the single authoritative scorer.

    The caller owns the engine and injects the store it persists to.
    Scoring operations act on the active innings and return the new
    ``Match``; errors are raised before the state changes.
    """

    _MAX_CODE_ATTEMPTS = 20

    def __init__(
        self,
        store: "MatchStore",
        match: Optional[Match] = None,
        defaults: Optional[MatchDefaults] = None,
    ):
        self._store = store
        self._state = match
        self._defaults = defaults or MatchDefaults()

    @classmethod
    def resume(cls, store: "MatchStore", match_id: str, defaults: Optional[MatchDefaults] = None) -> "MatchStateEngine":
        """Pick up scoring a match already in the store."""
        match = store.load(match_id)
        if match is None:
            raise ScorebookError(f"No stored match with id {match_id}")
        return cls(store, match=match, defaults=defaults)

    @property
    def state(self) -> Match:
        if self._state is None:
            raise InvalidTransition("No match created yet")
        return self._state

    @property
    def has_match(self) -> bool:
        return self._state is not None

    # ── Match lifecycle ─────────────────────────────────────────────

    def create_match(self, total_overs: Union[int, str, None] = None) -> Match:
        """Start a new match in SETUP, replacing any current one."""
        overs = self._defaults.total_overs if total_overs is None else total_overs
        match = self._commit(
            new_match(overs, self._defaults, code=self._unused_code())
        )
        logger.info(
            "Match created (%d overs). Share code: %s", match.total_overs, match.code
        )
        return match

    def perform_toss(self, winner: TeamSlot, decision: TossDecision) -> Match:
        match = self.state
        self._require_status(match, MatchStatus.SETUP, action="perform the toss")
        batting = winner if decision is TossDecision.BAT else winner.other
        updated = self._commit(
            replace(
                match,
                status=MatchStatus.TOSS,
                toss=Toss(winner=winner, decision=decision),
                batting_team=batting,
            )
        )
        logger.info(
            "%s won the toss and chose to %s",
            match.teams[winner].name, decision.value,
        )
        return updated

    def start_innings(self) -> Match:
        match = self.state
        self._require_status(
            match, MatchStatus.TOSS, MatchStatus.INNINGS_BREAK, action="start an innings"
        )
        updated = self._commit(replace(match, status=MatchStatus.IN_PROGRESS))
        logger.info(
            "%s innings started: %s batting",
            match.current_innings.value.capitalize(), match.batting_side.name,
        )
        return updated

    def end_innings(self) -> Match:
        match = self.state
        self._require_status(match, MatchStatus.IN_PROGRESS, action="end an innings")
        closing = match.current_innings_state
        if match.current_innings is InningsNumber.FIRST:
            updated = self._commit(
                replace(
                    match,
                    status=MatchStatus.INNINGS_BREAK,
                    current_innings=InningsNumber.SECOND,
                    batting_team=match.batting_team.other,
                )
            )
            logger.info(
                "First innings closed at %s (%s ov). Target %d",
                closing.score_str, closing.overs_str, updated.target,
            )
        else:
            updated = self._commit(replace(match, status=MatchStatus.COMPLETED))
            logger.info(
                "Match completed. Second innings closed at %s (%s ov)",
                closing.score_str, closing.overs_str,
            )
        return updated

    # ── Roster ──────────────────────────────────────────────────────

    def set_team_name(self, slot: TeamSlot, name: str) -> Match:
        return self._update_team(slot, lambda team: roster.rename_team(team, name))

    def add_player(self, slot: TeamSlot, name: str, player_id: Optional[str] = None) -> Match:
        return self._update_team(slot, lambda team: roster.add_player(team, name, player_id))

    def remove_player(self, slot: TeamSlot, player_id: str) -> Match:
        return self._update_team(slot, lambda team: roster.remove_player(team, player_id))

    def set_captain(self, slot: TeamSlot, player_id: str) -> Match:
        self._require_player(self.state.teams[slot], player_id)
        return self._update_team(slot, lambda team: roster.set_captain(team, player_id))

    def set_wicketkeeper(self, slot: TeamSlot, player_id: str) -> Match:
        self._require_player(self.state.teams[slot], player_id)
        return self._update_team(slot, lambda team: roster.set_wicketkeeper(team, player_id))

    # ── Scoring ─────────────────────────────────────────────────────

    def record_runs(self, runs: int) -> Match:
        match = self._update_innings(
            "record runs", lambda inn: processor.record_runs(inn, runs), scoring=True
        )
        logger.info(
            "%s | %s (%s)",
            "Dot ball" if runs == 0 else f"{runs} run{'s' if runs > 1 else ''}",
            match.current_innings_state.score_str,
            match.current_innings_state.overs_str,
        )
        return match

    def record_extra(self, extra_type: ExtraType, runs: int) -> Match:
        match = self._update_innings(
            "record an extra",
            lambda inn: processor.record_extra(inn, extra_type, runs),
            scoring=True,
        )
        logger.info(
            "%s %d | %s (%s)",
            extra_type.value.replace("_", " "), runs,
            match.current_innings_state.score_str,
            match.current_innings_state.overs_str,
        )
        return match

    def record_wicket(self, wicket_type: WicketType, dismissed: Optional[str] = None) -> Match:
        match = self._update_innings(
            "record a wicket",
            lambda inn: processor.record_wicket(inn, wicket_type, dismissed),
            scoring=True,
        )
        inn = match.current_innings_state
        out_id = inn.balls[-1].dismissed
        out = match.batting_side.get_player(out_id)
        logger.info(
            "WICKET! %s is out - %s | %s (%s)",
            out.name if out else out_id, wicket_type.value,
            inn.score_str, inn.overs_str,
        )
        return match

    def undo_last_ball(self) -> Match:
        match = self._update_innings("undo", undo.undo_last_ball)
        logger.info("Last ball undone | %s", match.current_innings_state.score_str)
        return match

    # ── Crease and bowling slots ────────────────────────────────────

    def change_bowler(self, player_id: str) -> Match:
        self._require_player(self.state.bowling_side, player_id)
        match = self._update_innings(
            "change bowler", lambda inn: replace(inn, bowler=player_id)
        )
        logger.info("Bowler changed to %s", match.current_bowler.name)
        return match

    def change_striker(self, player_id: Optional[str] = None) -> Match:
        """Assign (or with ``None`` clear) the striker's slot."""
        if player_id is not None:
            self._require_player(self.state.batting_side, player_id)
        return self._update_innings(
            "change striker", lambda inn: replace(inn, striker=player_id)
        )

    def change_non_striker(self, player_id: Optional[str] = None) -> Match:
        if player_id is not None:
            self._require_player(self.state.batting_side, player_id)
        return self._update_innings(
            "change non-striker", lambda inn: replace(inn, non_striker=player_id)
        )

    # ── Internals ───────────────────────────────────────────────────

    def _update_innings(
        self,
        action: str,
        fn: Callable[[InningsState], InningsState],
        scoring: bool = False,
    ) -> Match:
        match = self.state
        if match.is_complete:
            logger.warning("Rejected %s: match already completed", action)
            raise MatchCompleted(f"Cannot {action}: match already completed")
        if scoring and match.is_innings_complete:
            logger.warning(
                "Rejected %s: innings complete at %s",
                action, match.current_innings_state.score_str,
            )
            raise InningsComplete(f"Cannot {action}: innings is complete, end the innings")
        try:
            innings = fn(match.current_innings_state)
        except ScorebookError as e:
            logger.warning("Rejected %s: %s", action, e)
            raise
        return self._commit(
            replace(
                match,
                innings={**match.innings, match.current_innings: innings},
            )
        )

    def _update_team(self, slot: TeamSlot, fn: Callable[[Team], Team]) -> Match:
        match = self.state
        return self._commit(
            replace(match, teams={**match.teams, slot: fn(match.teams[slot])})
        )

    def _commit(self, match: Match) -> Match:
        match = replace(match, updated_at=_utcnow())
        self._store.save(match)
        self._state = match
        return match

    def _unused_code(self) -> str:
        for _ in range(self._MAX_CODE_ATTEMPTS):
            code = generate_join_code(self._defaults.join_code_length)
            if self._store.find_by_code(code) is None:
                return code
        raise ScorebookError("Could not allocate an unused join code")

    @staticmethod
    def _require_status(match: Match, *allowed: MatchStatus, action: str) -> None:
        if match.status not in allowed:
            logger.warning("Rejected %s in status %s", action, match.status.value)
            raise InvalidTransition(
                f"Cannot {action} while match is {match.status.value}"
            )

    @staticmethod
    def _require_player(team: Team, player_id: str) -> None:
        if not team.has_player(player_id):
            raise UnknownPlayer(f"Player {player_id} is not in {team.name}")


class SpectatorView:
    """Read-only follower of a match, refreshed by polling the store."""

    def __init__(self, store: "MatchStore", match: Match):
        self._store = store
        self._state = match

    @property
    def state(self) -> Match:
        return self._state

    def refresh(self) -> Match:
        """Pick up the scorer's latest write (last writer wins)."""
        latest = self._store.load(self._state.match_id)
        if latest is not None:
            self._state = latest
        return self._state


def join_match(store: "MatchStore", code: str) -> SpectatorView:
    match = store.find_by_code(code.strip().upper())
    if match is None:
        logger.warning("Join attempt with unknown code %r", code)
        raise InvalidJoinCode(f"No match found for code {code!r}")
    logger.info("Spectator joined match %s", match.code)
    return SpectatorView(store, match)
