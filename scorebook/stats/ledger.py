"""
Statistic Ledger.

Per-player batting and bowling aggregates and the pure functions that move
them forward for one delivery, or back again on undo. The ledger knows
nothing about overs or innings as a whole: it is handed an aggregate and a
``BallEvent`` and returns the new aggregate.

Forward and reverse functions share one delta per event so that reversal
is exact subtraction of what was added.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping, Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import (
    FACED_BY_STRIKER,
    BallEvent,
    ExtraType,
    WicketType,
    credits_bowler,
)
from scorebook.errors import InvalidDelivery


@dataclass(frozen=True)
class BattingAggregate:
    player_id: str
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    dot_balls: int = 0
    is_out: bool = False
    wicket_type: Optional[WicketType] = None
    bowler: Optional[str] = None  # credited bowler when out

    @property
    def strike_rate(self) -> float:
        if self.balls_faced == 0:
            return 0.0
        return round(self.runs * 100 / self.balls_faced, 2)


@dataclass(frozen=True)
class BowlingAggregate:
    player_id: str
    balls: int = 0  # legal deliveries bowled
    maidens: int = 0
    runs: int = 0
    wickets: int = 0
    dots: int = 0
    economy: float = 0.0

    @property
    def overs(self) -> int:
        """Completed overs; a spell split by a mid-over change counts its balls only."""
        return self.balls // BALLS_PER_OVER

    @property
    def overs_str(self) -> str:
        return f"{self.overs}.{self.balls % BALLS_PER_OVER}"


@dataclass(frozen=True)
class _BattingDelta:
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    dot_balls: int = 0


@dataclass(frozen=True)
class _BowlingDelta:
    balls: int = 0
    runs: int = 0
    wickets: int = 0
    dots: int = 0


def economy(runs: int, balls: int) -> float:
    """Runs conceded per six legal deliveries, to 2dp; 0 before any ball."""
    if balls <= 0:
        return 0.0
    return round(runs / (balls / BALLS_PER_OVER), 2)


def batting_for(batting: Mapping[str, BattingAggregate], player_id: str) -> BattingAggregate:
    return batting.get(player_id) or BattingAggregate(player_id=player_id)


def bowling_for(bowling: Mapping[str, BowlingAggregate], player_id: str) -> BowlingAggregate:
    return bowling.get(player_id) or BowlingAggregate(player_id=player_id)


def is_blank(agg: BattingAggregate | BowlingAggregate) -> bool:
    """True when the aggregate carries nothing beyond its player id."""
    return agg == type(agg)(player_id=agg.player_id)


# ─── Batting ────────────────────────────────────────────────────────────────

def _striker_delta(event: BallEvent) -> _BattingDelta:
    if event.extra_type is ExtraType.NONE:
        return _BattingDelta(
            runs=event.runs,
            balls_faced=1,
            fours=1 if event.runs == 4 else 0,
            sixes=1 if event.runs == 6 else 0,
            dot_balls=1 if event.runs == 0 else 0,
        )
    if FACED_BY_STRIKER[event.extra_type]:
        return _BattingDelta(balls_faced=1)
    return _BattingDelta()


def _shift_batting(agg: BattingAggregate, delta: _BattingDelta, sign: int) -> BattingAggregate:
    return replace(
        agg,
        runs=agg.runs + sign * delta.runs,
        balls_faced=agg.balls_faced + sign * delta.balls_faced,
        fours=agg.fours + sign * delta.fours,
        sixes=agg.sixes + sign * delta.sixes,
        dot_balls=agg.dot_balls + sign * delta.dot_balls,
    )


def apply_to_striker(agg: BattingAggregate, event: BallEvent) -> BattingAggregate:
    """Credit a scoring shot or extra to the striker.

    Runs off the bat add runs, one ball faced, a boundary for 4 or 6 and a
    dot for 0. No-balls, byes and leg-byes add a ball faced but no runs.
    Wides leave the striker untouched.
    """
    return _shift_batting(agg, _striker_delta(event), 1)


def reverse_on_striker(agg: BattingAggregate, event: BallEvent) -> BattingAggregate:
    return _shift_batting(agg, _striker_delta(event), -1)


_DISMISSAL_DELTA = _BattingDelta(balls_faced=1, dot_balls=1)


def apply_dismissal(agg: BattingAggregate, event: BallEvent) -> BattingAggregate:
    """Mark the dismissed batter out; the bowler is credited only for
    bowled, caught, lbw and stumped."""
    if event.wicket_type is None:
        raise InvalidDelivery("Dismissal event carries no wicket type")
    shifted = _shift_batting(agg, _DISMISSAL_DELTA, 1)
    return replace(
        shifted,
        is_out=True,
        wicket_type=event.wicket_type,
        bowler=event.bowler if credits_bowler(event.wicket_type) else None,
    )


def reverse_dismissal(
    agg: BattingAggregate,
    event: BallEvent,
    previous: Optional[BallEvent] = None,
) -> BattingAggregate:
    """Undo ``apply_dismissal``.

    ``previous`` is an earlier dismissal of the same player still in the
    log (a batter re-sent to the crease after being out); when given, the
    out flag and its details are restored from it rather than cleared.
    """
    shifted = _shift_batting(agg, _DISMISSAL_DELTA, -1)
    if previous is not None and previous.wicket_type is not None:
        return replace(
            shifted,
            is_out=True,
            wicket_type=previous.wicket_type,
            bowler=previous.bowler if credits_bowler(previous.wicket_type) else None,
        )
    return replace(shifted, is_out=False, wicket_type=None, bowler=None)


# ─── Bowling ────────────────────────────────────────────────────────────────

def _bowler_delta(event: BallEvent) -> _BowlingDelta:
    return _BowlingDelta(
        balls=1 if event.is_legal_delivery else 0,
        runs=event.bowler_runs,
        wickets=1 if event.is_bowler_wicket else 0,
        dots=1 if event.is_dot_ball else 0,
    )


def _shift_bowling(agg: BowlingAggregate, delta: _BowlingDelta, sign: int) -> BowlingAggregate:
    runs = agg.runs + sign * delta.runs
    balls = agg.balls + sign * delta.balls
    return replace(
        agg,
        balls=balls,
        runs=runs,
        wickets=agg.wickets + sign * delta.wickets,
        dots=agg.dots + sign * delta.dots,
        economy=economy(runs, balls),
    )


def apply_to_bowler(agg: BowlingAggregate, event: BallEvent) -> BowlingAggregate:
    """Charge a delivery to the bowler and recompute economy.

    Wides and no-balls are conceded by the bowler, byes and leg-byes are
    not. Wickets count for the credited kinds only; every wicket ball is a
    dot for the bowler.
    """
    return _shift_bowling(agg, _bowler_delta(event), 1)


def reverse_on_bowler(agg: BowlingAggregate, event: BallEvent) -> BowlingAggregate:
    return _shift_bowling(agg, _bowler_delta(event), -1)


def complete_over(agg: BowlingAggregate, maiden: bool) -> BowlingAggregate:
    """Close an over for the bowler who finished it, crediting any maiden."""
    return replace(agg, maidens=agg.maidens + (1 if maiden else 0))


def reverse_complete_over(agg: BowlingAggregate, maiden: bool) -> BowlingAggregate:
    return replace(agg, maidens=agg.maidens - (1 if maiden else 0))


def is_maiden(over_events: Iterable[BallEvent], bowler: str) -> bool:
    """An over is a maiden when one bowler sent down every delivery of it
    and none of them cost the bowler a run."""
    events = list(over_events)
    return bool(events) and all(
        e.bowler == bowler and e.bowler_runs == 0 for e in events
    )
