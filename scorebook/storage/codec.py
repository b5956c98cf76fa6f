"""
Match document codec.

The whole match is stored and broadcast as one JSON document. Enums are
written as their string values and datetimes as ISO 8601.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Any, Optional

from scorebook.data.ball_event import BallEvent, ExtraType, WicketType
from scorebook.data.roster import Player, Team, TeamSlot
from scorebook.state.innings import InningsState
from scorebook.state.match_state import (
    InningsNumber,
    Match,
    MatchStatus,
    Toss,
    TossDecision,
)
from scorebook.stats.ledger import BattingAggregate, BowlingAggregate

SCHEMA_VERSION = 1


def _enum_value(value: Any) -> Optional[str]:
    return value.value if value is not None else None


# ─── Encode ─────────────────────────────────────────────────────────────────

def event_to_dict(event: BallEvent) -> dict[str, Any]:
    return {
        "event_id": event.event_id,
        "over": event.over,
        "ball": event.ball,
        "striker": event.striker,
        "non_striker": event.non_striker,
        "bowler": event.bowler,
        "runs": event.runs,
        "extras": event.extras,
        "extra_type": event.extra_type.value,
        "is_wicket": event.is_wicket,
        "wicket_type": _enum_value(event.wicket_type),
        "dismissed": event.dismissed,
        "timestamp": event.timestamp.isoformat(),
    }


def innings_to_dict(innings: InningsState) -> dict[str, Any]:
    batting = {}
    for pid, agg in innings.batting.items():
        row = asdict(agg)
        row["wicket_type"] = _enum_value(agg.wicket_type)
        batting[pid] = row
    return {
        "balls": [event_to_dict(e) for e in innings.balls],
        "current_over": innings.current_over,
        "current_ball": innings.current_ball,
        "total_runs": innings.total_runs,
        "wickets": innings.wickets,
        "batting": batting,
        "bowling": {pid: asdict(agg) for pid, agg in innings.bowling.items()},
        "striker": innings.striker,
        "non_striker": innings.non_striker,
        "bowler": innings.bowler,
    }


def team_to_dict(team: Team) -> dict[str, Any]:
    return {
        "team_id": team.team_id,
        "name": team.name,
        "players": [asdict(p) for p in team.players],
    }


def match_to_dict(match: Match) -> dict[str, Any]:
    return {
        "schema_version": SCHEMA_VERSION,
        "match_id": match.match_id,
        "code": match.code,
        "status": match.status.value,
        "total_overs": match.total_overs,
        "teams": {slot.value: team_to_dict(t) for slot, t in match.teams.items()},
        "toss": (
            {"winner": match.toss.winner.value, "decision": match.toss.decision.value}
            if match.toss
            else None
        ),
        "current_innings": match.current_innings.value,
        "batting_team": match.batting_team.value,
        "innings": {n.value: innings_to_dict(i) for n, i in match.innings.items()},
        "created_at": match.created_at.isoformat(),
        "updated_at": match.updated_at.isoformat(),
    }


# ─── Decode ─────────────────────────────────────────────────────────────────

def event_from_dict(data: dict[str, Any]) -> BallEvent:
    wicket_type = data.get("wicket_type")
    return BallEvent(
        event_id=data["event_id"],
        over=int(data["over"]),
        ball=int(data["ball"]),
        striker=data.get("striker"),
        non_striker=data.get("non_striker"),
        bowler=data["bowler"],
        runs=int(data.get("runs", 0)),
        extras=int(data.get("extras", 0)),
        extra_type=ExtraType(data.get("extra_type", ExtraType.NONE.value)),
        is_wicket=bool(data.get("is_wicket", False)),
        wicket_type=WicketType(wicket_type) if wicket_type else None,
        dismissed=data.get("dismissed"),
        timestamp=datetime.fromisoformat(data["timestamp"]),
    )


def _batting_from_dict(data: dict[str, Any]) -> BattingAggregate:
    wicket_type = data.get("wicket_type")
    return BattingAggregate(
        **{**data, "wicket_type": WicketType(wicket_type) if wicket_type else None}
    )


def innings_from_dict(data: dict[str, Any]) -> InningsState:
    return InningsState(
        balls=tuple(event_from_dict(e) for e in data.get("balls", [])),
        current_over=int(data.get("current_over", 0)),
        current_ball=int(data.get("current_ball", 0)),
        total_runs=int(data.get("total_runs", 0)),
        wickets=int(data.get("wickets", 0)),
        batting={pid: _batting_from_dict(row) for pid, row in data.get("batting", {}).items()},
        bowling={pid: BowlingAggregate(**row) for pid, row in data.get("bowling", {}).items()},
        striker=data.get("striker"),
        non_striker=data.get("non_striker"),
        bowler=data.get("bowler"),
    )


def team_from_dict(data: dict[str, Any]) -> Team:
    return Team(
        team_id=data["team_id"],
        name=data["name"],
        players=tuple(Player(**p) for p in data.get("players", [])),
    )


def match_from_dict(data: dict[str, Any]) -> Match:
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(f"Unsupported match document version: {version}")

    toss = data.get("toss")
    return Match(
        match_id=data["match_id"],
        code=data["code"],
        total_overs=int(data["total_overs"]),
        status=MatchStatus(data["status"]),
        teams={TeamSlot(k): team_from_dict(v) for k, v in data["teams"].items()},
        toss=(
            Toss(winner=TeamSlot(toss["winner"]), decision=TossDecision(toss["decision"]))
            if toss
            else None
        ),
        current_innings=InningsNumber(data["current_innings"]),
        batting_team=TeamSlot(data["batting_team"]),
        innings={InningsNumber(k): innings_from_dict(v) for k, v in data["innings"].items()},
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
    )
