"""
Innings snapshot.

An ``InningsState`` is an immutable value: the event processor and undo
engine take one and return a new one. Aggregate mappings are rebuilt on
every change and never mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from scorebook.config import BALLS_PER_OVER
from scorebook.data.ball_event import BallEvent
from scorebook.state.over_tracker import OverPosition
from scorebook.stats.ledger import BattingAggregate, BowlingAggregate


@dataclass(frozen=True)
class OverSummary:
    over_number: int  # 1-based, as shown on a scoreboard
    runs: int
    wickets: int


@dataclass(frozen=True)
class InningsState:
    """Scoring state for one side's batting turn."""

    balls: tuple[BallEvent, ...] = ()
    current_over: int = 0
    current_ball: int = 0
    total_runs: int = 0
    wickets: int = 0

    batting: dict[str, BattingAggregate] = field(default_factory=dict)
    bowling: dict[str, BowlingAggregate] = field(default_factory=dict)

    striker: Optional[str] = None
    non_striker: Optional[str] = None
    bowler: Optional[str] = None

    @property
    def position(self) -> OverPosition:
        return OverPosition(over=self.current_over, ball=self.current_ball)

    @property
    def last_event(self) -> Optional[BallEvent]:
        return self.balls[-1] if self.balls else None

    @property
    def legal_balls(self) -> int:
        return self.current_over * BALLS_PER_OVER + self.current_ball

    @property
    def overs_str(self) -> str:
        return f"{self.current_over}.{self.current_ball}"

    @property
    def score_str(self) -> str:
        return f"{self.total_runs}/{self.wickets}"

    @property
    def run_rate(self) -> float:
        overs = self.legal_balls / BALLS_PER_OVER
        return round(self.total_runs / overs, 2) if overs > 0 else 0.0

    @property
    def extras(self) -> int:
        return sum(b.extras for b in self.balls)

    def events_in_over(self, over: int) -> list[BallEvent]:
        """Logged events of one over (0-based), in recording order.

        Events are appended in position order, so the over is a contiguous
        run at the tail of the log for any over still being undone.
        """
        events: list[BallEvent] = []
        for event in reversed(self.balls):
            if event.over < over:
                break
            if event.over == over:
                events.append(event)
        events.reverse()
        return events

    def over_summaries(self) -> list[OverSummary]:
        summaries: dict[int, OverSummary] = {}
        for event in self.balls:
            prev = summaries.get(event.over, OverSummary(event.over + 1, 0, 0))
            summaries[event.over] = OverSummary(
                over_number=prev.over_number,
                runs=prev.runs + event.total_runs,
                wickets=prev.wickets + (1 if event.is_wicket else 0),
            )
        return [summaries[k] for k in sorted(summaries)]
