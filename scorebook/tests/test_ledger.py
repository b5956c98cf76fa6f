"""Tests for the Statistic Ledger."""

from __future__ import annotations

from dataclasses import replace

import pytest

from scorebook.data.ball_event import (
    BOWLER_CREDITED,
    CHARGED_TO_BOWLER,
    FACED_BY_STRIKER,
    LEGAL_DELIVERY,
    RUN_BETWEEN_WICKETS,
    BallEvent,
    ExtraType,
    WicketType,
)
from scorebook.errors import InvalidDelivery
from scorebook.stats import ledger
from scorebook.stats.ledger import BattingAggregate, BowlingAggregate


def make_event(
    runs: int = 0,
    extras: int = 0,
    extra_type: ExtraType = ExtraType.NONE,
    wicket_type: WicketType | None = None,
    dismissed: str | None = None,
    over: int = 0,
    ball: int = 0,
    bowler: str = "B",
) -> BallEvent:
    return BallEvent(
        event_id=f"e{over}.{ball}.{runs}.{extras}",
        over=over,
        ball=ball,
        striker="S",
        non_striker="N",
        bowler=bowler,
        runs=runs,
        extras=extras,
        extra_type=extra_type,
        is_wicket=wicket_type is not None,
        wicket_type=wicket_type,
        dismissed=dismissed or ("S" if wicket_type else None),
    )


class TestDecisionTables:
    def test_every_wicket_kind_has_a_credit_rule(self):
        assert set(BOWLER_CREDITED) == set(WicketType)

    @pytest.mark.parametrize(
        "table", [LEGAL_DELIVERY, CHARGED_TO_BOWLER, RUN_BETWEEN_WICKETS, FACED_BY_STRIKER]
    )
    def test_every_extra_kind_is_covered(self, table):
        assert set(table) == set(ExtraType)

    def test_credited_kinds(self):
        credited = {w for w, c in BOWLER_CREDITED.items() if c}
        assert credited == {
            WicketType.BOWLED,
            WicketType.CAUGHT,
            WicketType.LBW,
            WicketType.STUMPED,
        }


class TestBatting:
    def test_runs_off_bat(self):
        agg = ledger.apply_to_striker(BattingAggregate("S"), make_event(runs=4))
        assert agg.runs == 4
        assert agg.balls_faced == 1
        assert agg.fours == 1
        assert agg.sixes == 0
        assert agg.dot_balls == 0

    def test_six_and_dot(self):
        agg = ledger.apply_to_striker(BattingAggregate("S"), make_event(runs=6))
        agg = ledger.apply_to_striker(agg, make_event(runs=0))
        assert agg.sixes == 1
        assert agg.dot_balls == 1
        assert agg.balls_faced == 2

    def test_wide_not_faced(self):
        agg = BattingAggregate("S", runs=10, balls_faced=8)
        after = ledger.apply_to_striker(agg, make_event(extras=1, extra_type=ExtraType.WIDE))
        assert after == agg

    @pytest.mark.parametrize("extra", [ExtraType.NO_BALL, ExtraType.BYE, ExtraType.LEG_BYE])
    def test_other_extras_count_a_ball_but_no_runs(self, extra):
        agg = ledger.apply_to_striker(BattingAggregate("S"), make_event(extras=1, extra_type=extra))
        assert agg.balls_faced == 1
        assert agg.runs == 0
        assert agg.dot_balls == 0

    def test_strike_rate(self):
        assert BattingAggregate("S").strike_rate == 0.0
        assert BattingAggregate("S", runs=7, balls_faced=3).strike_rate == pytest.approx(233.33)

    def test_reverse_is_exact(self):
        agg = BattingAggregate("S", runs=12, balls_faced=9, fours=1, dot_balls=3)
        event = make_event(runs=4)
        assert ledger.reverse_on_striker(ledger.apply_to_striker(agg, event), event) == agg


class TestDismissal:
    @pytest.mark.parametrize(
        "kind", [WicketType.BOWLED, WicketType.CAUGHT, WicketType.LBW, WicketType.STUMPED]
    )
    def test_credited_dismissal(self, kind):
        agg = ledger.apply_dismissal(BattingAggregate("S"), make_event(wicket_type=kind))
        assert agg.is_out
        assert agg.wicket_type == kind
        assert agg.bowler == "B"
        assert agg.balls_faced == 1
        assert agg.dot_balls == 1

    def test_run_out_not_credited(self):
        agg = ledger.apply_dismissal(
            BattingAggregate("S"), make_event(wicket_type=WicketType.RUN_OUT)
        )
        assert agg.is_out
        assert agg.bowler is None

    def test_wicket_event_without_kind_rejected(self):
        event = replace(make_event(), is_wicket=True, dismissed="S")
        with pytest.raises(InvalidDelivery):
            ledger.apply_dismissal(BattingAggregate("S"), event)

    def test_reverse_clears_out_flag(self):
        before = BattingAggregate("S", runs=20, balls_faced=15)
        event = make_event(wicket_type=WicketType.CAUGHT)
        assert ledger.reverse_dismissal(ledger.apply_dismissal(before, event), event) == before

    def test_reverse_restores_earlier_dismissal(self):
        first = make_event(wicket_type=WicketType.LBW, over=1)
        second = make_event(wicket_type=WicketType.RUN_OUT, over=3)
        once = ledger.apply_dismissal(BattingAggregate("S"), first)
        twice = ledger.apply_dismissal(once, second)
        assert ledger.reverse_dismissal(twice, second, previous=first) == once


class TestBowling:
    def test_runs_and_economy(self):
        agg = BowlingAggregate("B")
        for runs in (1, 4, 0):
            agg = ledger.apply_to_bowler(agg, make_event(runs=runs))
        assert agg.runs == 5
        assert agg.balls == 3
        assert agg.dots == 1
        assert agg.economy == pytest.approx(10.0)

    def test_wide_charged_but_not_a_ball(self):
        agg = ledger.apply_to_bowler(
            BowlingAggregate("B"), make_event(extras=1, extra_type=ExtraType.WIDE)
        )
        assert agg.runs == 1
        assert agg.balls == 0
        assert agg.economy == 0.0

    @pytest.mark.parametrize("extra", [ExtraType.BYE, ExtraType.LEG_BYE])
    def test_byes_not_charged(self, extra):
        agg = ledger.apply_to_bowler(BowlingAggregate("B"), make_event(extras=2, extra_type=extra))
        assert agg.runs == 0
        assert agg.balls == 1
        assert agg.dots == 0

    def test_wicket_credit(self):
        agg = ledger.apply_to_bowler(BowlingAggregate("B"), make_event(wicket_type=WicketType.STUMPED))
        assert agg.wickets == 1
        assert agg.dots == 1

    def test_uncredited_wicket_only_a_dot(self):
        agg = ledger.apply_to_bowler(BowlingAggregate("B"), make_event(wicket_type=WicketType.RUN_OUT))
        assert agg.wickets == 0
        assert agg.dots == 1

    def test_economy_helper(self):
        assert ledger.economy(0, 0) == 0.0
        assert ledger.economy(7, 4) == pytest.approx(10.5)
        assert ledger.economy(10, 7) == pytest.approx(8.57)

    def test_overs_str(self):
        assert BowlingAggregate("B", balls=14).overs_str == "2.2"

    def test_overs_come_from_legal_balls(self):
        agg = BowlingAggregate("B", balls=9)
        assert agg.overs == 1
        assert agg.overs_str == "1.3"

    def test_complete_over_round_trip(self):
        agg = BowlingAggregate("B", balls=6, runs=0, dots=6)
        done = ledger.complete_over(agg, maiden=True)
        assert done.overs == 1
        assert done.maidens == 1
        assert ledger.reverse_complete_over(done, maiden=True) == agg


class TestMaiden:
    def test_all_dots_by_one_bowler(self):
        events = [make_event(runs=0, ball=i) for i in range(6)]
        assert ledger.is_maiden(events, "B")

    def test_leg_byes_still_maiden(self):
        events = [make_event(runs=0, ball=i) for i in range(5)]
        events.append(make_event(extras=1, extra_type=ExtraType.LEG_BYE, ball=5))
        assert ledger.is_maiden(events, "B")

    def test_wide_spoils_maiden(self):
        events = [make_event(runs=0, ball=i) for i in range(6)]
        events.insert(2, make_event(extras=1, extra_type=ExtraType.WIDE, ball=2))
        assert not ledger.is_maiden(events, "B")

    def test_shared_over_is_not_a_maiden(self):
        events = [make_event(runs=0, ball=i, bowler="B" if i < 3 else "C") for i in range(6)]
        assert not ledger.is_maiden(events, "C")

    def test_blank_detection(self):
        assert ledger.is_blank(BattingAggregate("S"))
        assert ledger.is_blank(BowlingAggregate("B"))
        assert not ledger.is_blank(BowlingAggregate("B", balls=1))
