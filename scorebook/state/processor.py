"""
Event Processor.

Turns one scoring intent (runs, an extra or a wicket) into a ``BallEvent``
and a new ``InningsState``. Validation happens before anything is built, so
a rejected call leaves no trace.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from scorebook.config import MAX_EXTRA_RUNS, MAX_RUNS_OFF_BAT, MAX_WICKETS
from scorebook.data.ball_event import FACED_BY_STRIKER, BallEvent, ExtraType, WicketType
from scorebook.errors import AllOut, IncompleteLineup, InvalidDelivery, UnknownPlayer
from scorebook.state.innings import InningsState
from scorebook.state.over_tracker import advance, should_swap
from scorebook.stats import ledger

logger = logging.getLogger(__name__)


def record_runs(innings: InningsState, runs: int) -> InningsState:
    """Record a legal delivery with ``runs`` scored off the bat (0-6)."""
    if not 0 <= runs <= MAX_RUNS_OFF_BAT:
        raise InvalidDelivery(f"Runs off the bat must be 0-{MAX_RUNS_OFF_BAT}, got {runs}")
    _require_full_lineup(innings)

    return apply_event(innings, _new_event(innings, runs=runs))


def record_extra(innings: InningsState, extra_type: ExtraType, runs: int) -> InningsState:
    """Record a wide, no-ball, bye or leg-bye worth ``runs`` extras.

    Only the bowler must be assigned; a wide does not involve the striker.
    """
    if extra_type is ExtraType.NONE:
        raise InvalidDelivery("Extra type required; use record_runs for runs off the bat")
    if not 1 <= runs <= MAX_EXTRA_RUNS:
        raise InvalidDelivery(f"Extra runs must be 1-{MAX_EXTRA_RUNS}, got {runs}")
    if innings.bowler is None:
        raise IncompleteLineup("Select a bowler before recording extras")

    return apply_event(
        innings, _new_event(innings, extras=runs, extra_type=extra_type)
    )


def record_wicket(
    innings: InningsState,
    wicket_type: WicketType,
    dismissed: Optional[str] = None,
) -> InningsState:
    """Record a dismissal on a legal delivery.

    The dismissed batter defaults to the striker; a run-out of the
    non-striker has to name them. Their slot is emptied and must be filled
    before the next delivery.
    """
    _require_full_lineup(innings)
    if innings.wickets >= MAX_WICKETS:
        raise AllOut(f"{MAX_WICKETS} wickets have already fallen")

    out_id = dismissed or innings.striker
    if out_id not in (innings.striker, innings.non_striker):
        raise UnknownPlayer(f"Player {out_id} is not at the crease")

    return apply_event(
        innings,
        _new_event(
            innings,
            is_wicket=True,
            wicket_type=wicket_type,
            dismissed=out_id,
        ),
    )


def apply_event(innings: InningsState, event: BallEvent) -> InningsState:
    """Fold one event into the innings and append it to the log."""
    batting = dict(innings.batting)
    if event.is_wicket:
        if event.dismissed is None:
            raise InvalidDelivery("Wicket event does not name the dismissed batter")
        batting[event.dismissed] = ledger.apply_dismissal(
            ledger.batting_for(batting, event.dismissed), event
        )
    elif event.striker is not None and FACED_BY_STRIKER[event.extra_type]:
        batting[event.striker] = ledger.apply_to_striker(
            ledger.batting_for(batting, event.striker), event
        )

    bowling = dict(innings.bowling)
    bowler = ledger.apply_to_bowler(ledger.bowling_for(bowling, event.bowler), event)

    step = advance(innings.position, event.extra_type)
    if step.over_completed:
        over_events = innings.events_in_over(event.over) + [event]
        bowler = ledger.complete_over(bowler, ledger.is_maiden(over_events, event.bowler))
    bowling[event.bowler] = bowler

    striker, non_striker = innings.striker, innings.non_striker
    if event.is_wicket:
        if event.dismissed == striker:
            striker = None
        else:
            non_striker = None
    if should_swap(step.over_completed, event.swap_runs):
        striker, non_striker = non_striker, striker

    updated = replace(
        innings,
        balls=innings.balls + (event,),
        current_over=step.position.over,
        current_ball=step.position.ball,
        total_runs=innings.total_runs + event.total_runs,
        wickets=innings.wickets + (1 if event.is_wicket else 0),
        batting=batting,
        bowling=bowling,
        striker=striker,
        non_striker=non_striker,
    )

    if step.over_completed:
        logger.info(
            "End of over %d: %s | change bowler and swap ends",
            step.position.over, updated.score_str,
        )
    return updated


def _require_full_lineup(innings: InningsState) -> None:
    missing = [
        name
        for name, value in (
            ("striker", innings.striker),
            ("non-striker", innings.non_striker),
            ("bowler", innings.bowler),
        )
        if value is None
    ]
    if missing:
        raise IncompleteLineup(f"Select {', '.join(missing)} first")


def _new_event(innings: InningsState, **outcome) -> BallEvent:
    if innings.bowler is None:
        raise IncompleteLineup("Select a bowler first")
    return BallEvent(
        event_id=str(uuid.uuid4()),
        over=innings.current_over,
        ball=innings.current_ball,
        striker=innings.striker,
        non_striker=innings.non_striker,
        bowler=innings.bowler,
        timestamp=datetime.now(timezone.utc),
        **outcome,
    )
