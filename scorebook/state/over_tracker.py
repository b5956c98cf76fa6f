"""
Over/Strike Tracker.

Decides where the innings stands after a delivery (over number and legal
balls in the current over), whether the bowler just completed an over, and
whether the batters changed ends.
"""

from __future__ import annotations

from dataclasses import dataclass

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import LEGAL_DELIVERY, ExtraType


@dataclass(frozen=True)
class OverPosition:
    over: int = 0  # completed overs
    ball: int = 0  # legal balls bowled in the current over

    def __str__(self) -> str:
        return f"{self.over}.{self.ball}"

    @property
    def legal_balls(self) -> int:
        return self.over * BALLS_PER_OVER + self.ball


@dataclass(frozen=True)
class OverAdvance:
    position: OverPosition
    over_completed: bool = False


def advance(position: OverPosition, extra_type: ExtraType) -> OverAdvance:
    """Position after one delivery.

    Wides and no-balls are not legal deliveries and leave the position
    where it was. Anything else moves on one ball, wrapping to the next
    over after the sixth.
    """
    if not LEGAL_DELIVERY[extra_type]:
        return OverAdvance(position=position)

    ball = position.ball + 1
    if ball == BALLS_PER_OVER:
        return OverAdvance(
            position=OverPosition(over=position.over + 1, ball=0),
            over_completed=True,
        )
    return OverAdvance(position=OverPosition(over=position.over, ball=ball))


def retreat(position: OverPosition) -> OverPosition:
    """Position before the last legal delivery."""
    if position.ball > 0:
        return OverPosition(over=position.over, ball=position.ball - 1)
    if position.over > 0:
        return OverPosition(over=position.over - 1, ball=BALLS_PER_OVER - 1)
    return position


def should_swap(over_completed: bool, swap_runs: int) -> bool:
    """Batters change ends at the end of an over or after an odd number of
    runs run. Both together still mean a single change of ends."""
    return over_completed or swap_runs % 2 == 1
