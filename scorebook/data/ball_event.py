"""
Ball-by-ball event data model.

Defines the immutable record appended to an innings log for every delivery
or extra the scorer enters. Undo works from these fields alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from scorebook.config import BALLS_PER_OVER


class WicketType(Enum):
    BOWLED = "bowled"
    CAUGHT = "caught"
    LBW = "lbw"
    STUMPED = "stumped"
    RUN_OUT = "run_out"
    HIT_WICKET = "hit_wicket"
    RETIRED = "retired"
    OBSTRUCTING = "obstructing"
    HANDLED_BALL = "handled_ball"
    TIMED_OUT = "timed_out"
    OTHER = "other"


class ExtraType(Enum):
    NONE = "none"
    WIDE = "wide"
    NO_BALL = "no_ball"
    BYE = "bye"
    LEG_BYE = "leg_bye"


# Every member must appear in these tables; a lookup on a new member raises
# KeyError instead of silently falling into a default branch.
BOWLER_CREDITED: dict[WicketType, bool] = {
    WicketType.BOWLED: True,
    WicketType.CAUGHT: True,
    WicketType.LBW: True,
    WicketType.STUMPED: True,
    WicketType.RUN_OUT: False,
    WicketType.HIT_WICKET: False,
    WicketType.RETIRED: False,
    WicketType.OBSTRUCTING: False,
    WicketType.HANDLED_BALL: False,
    WicketType.TIMED_OUT: False,
    WicketType.OTHER: False,
}

LEGAL_DELIVERY: dict[ExtraType, bool] = {
    ExtraType.NONE: True,
    ExtraType.WIDE: False,
    ExtraType.NO_BALL: False,
    ExtraType.BYE: True,
    ExtraType.LEG_BYE: True,
}

# Extras conceded by the bowler; byes and leg-byes only count to the innings
CHARGED_TO_BOWLER: dict[ExtraType, bool] = {
    ExtraType.NONE: True,
    ExtraType.WIDE: True,
    ExtraType.NO_BALL: True,
    ExtraType.BYE: False,
    ExtraType.LEG_BYE: False,
}

# Extras the batters physically run, so odd amounts change ends
RUN_BETWEEN_WICKETS: dict[ExtraType, bool] = {
    ExtraType.NONE: True,
    ExtraType.WIDE: False,
    ExtraType.NO_BALL: False,
    ExtraType.BYE: True,
    ExtraType.LEG_BYE: True,
}

# Deliveries the striker is considered to have faced
FACED_BY_STRIKER: dict[ExtraType, bool] = {
    ExtraType.NONE: True,
    ExtraType.WIDE: False,
    ExtraType.NO_BALL: True,
    ExtraType.BYE: True,
    ExtraType.LEG_BYE: True,
}


def credits_bowler(wicket_type: WicketType) -> bool:
    """Whether a dismissal of this kind goes to the bowler's wicket column."""
    return BOWLER_CREDITED[wicket_type]


@dataclass(frozen=True)
class BallEvent:
    """A single recorded delivery or extra.

    ``over`` and ``ball`` are the innings position *before* the delivery,
    and ``striker`` / ``non_striker`` / ``bowler`` are the players occupying
    those slots at that moment.
    """

    event_id: str
    over: int  # completed overs when the ball was bowled
    ball: int  # legal balls already bowled in this over (0-5)
    striker: Optional[str]
    non_striker: Optional[str]
    bowler: str

    runs: int = 0  # off the bat
    extras: int = 0
    extra_type: ExtraType = ExtraType.NONE

    is_wicket: bool = False
    wicket_type: Optional[WicketType] = None
    dismissed: Optional[str] = None

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def over_ball_str(self) -> str:
        """Human-readable over.ball string of the delivery, e.g. '5.3'."""
        ball = self.ball + 1 if self.is_legal_delivery else self.ball
        return f"{self.over}.{ball}"

    @property
    def total_runs(self) -> int:
        return self.runs + self.extras

    @property
    def is_legal_delivery(self) -> bool:
        return LEGAL_DELIVERY[self.extra_type]

    @property
    def bowler_runs(self) -> int:
        """Runs this delivery adds to the bowler's conceded column."""
        if CHARGED_TO_BOWLER[self.extra_type]:
            return self.total_runs
        return self.runs

    @property
    def is_dot_ball(self) -> bool:
        return self.total_runs == 0

    @property
    def completes_over(self) -> bool:
        return self.is_legal_delivery and self.ball == BALLS_PER_OVER - 1

    @property
    def swap_runs(self) -> int:
        """Runs that count towards a change of ends."""
        if self.is_wicket:
            return 0
        if self.extra_type is ExtraType.NONE:
            return self.runs
        if RUN_BETWEEN_WICKETS[self.extra_type]:
            return self.extras
        return 0

    @property
    def is_bowler_wicket(self) -> bool:
        return self.is_wicket and self.wicket_type is not None and credits_bowler(self.wicket_type)
