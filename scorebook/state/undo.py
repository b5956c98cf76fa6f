"""
Undo Engine.

Reverses the most recent ``BallEvent`` by exact inverse arithmetic on the
current snapshot, using only what the event itself recorded. Nothing is
replayed from the start of the innings.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, Optional

from scorebook.data.ball_event import FACED_BY_STRIKER, BallEvent, ExtraType
from scorebook.errors import InvalidDelivery, NothingToUndo
from scorebook.state.innings import InningsState
from scorebook.state.over_tracker import retreat
from scorebook.stats import ledger

logger = logging.getLogger(__name__)


def undo_last_ball(innings: InningsState) -> InningsState:
    """Return the snapshot as it was immediately before the last event.

    Striker, non-striker and bowler are restored from the identities the
    event recorded, so a change of ends caused by the event is reversed too.
    """
    event = innings.last_event
    if event is None:
        raise NothingToUndo("No balls to undo")

    remaining = innings.balls[:-1]
    # wides and no-balls never moved the position
    position = retreat(innings.position) if event.is_legal_delivery else innings.position

    batting = dict(innings.batting)
    if event.is_wicket:
        if event.dismissed is None:
            raise InvalidDelivery("Wicket event does not name the dismissed batter")
        _put(
            batting,
            ledger.reverse_dismissal(
                ledger.batting_for(batting, event.dismissed),
                event,
                previous=_previous_dismissal(remaining, event.dismissed),
            ),
        )
    elif event.striker is not None and FACED_BY_STRIKER[event.extra_type]:
        _put(
            batting,
            ledger.reverse_on_striker(ledger.batting_for(batting, event.striker), event),
        )

    bowling = dict(innings.bowling)
    bowler = ledger.reverse_on_bowler(ledger.bowling_for(bowling, event.bowler), event)
    if event.completes_over:
        maiden = ledger.is_maiden(innings.events_in_over(event.over), event.bowler)
        bowler = ledger.reverse_complete_over(bowler, maiden)
    _put(bowling, bowler)

    logger.info("Undid %s delivery %s", _describe(event), event.over_ball_str)

    return replace(
        innings,
        balls=remaining,
        current_over=position.over,
        current_ball=position.ball,
        total_runs=innings.total_runs - event.total_runs,
        wickets=innings.wickets - (1 if event.is_wicket else 0),
        batting=batting,
        bowling=bowling,
        striker=event.striker,
        non_striker=event.non_striker,
        bowler=event.bowler,
    )


def _put(mapping: dict, agg) -> None:
    # an aggregate reversed back to nothing was created by the undone event
    if ledger.is_blank(agg):
        mapping.pop(agg.player_id, None)
    else:
        mapping[agg.player_id] = agg


def _previous_dismissal(events: Iterable[BallEvent], player_id: str) -> Optional[BallEvent]:
    previous = None
    for event in events:
        if event.is_wicket and event.dismissed == player_id:
            previous = event
    return previous


def _describe(event: BallEvent) -> str:
    if event.is_wicket and event.wicket_type is not None:
        return f"wicket ({event.wicket_type.value})"
    if event.extra_type is not ExtraType.NONE:
        return f"{event.extra_type.value} {event.extras}"
    return f"{event.runs} run(s)"
