"""
Scorebook command-line entry point.

Usage:
    python -m scorebook.orchestrator --demo --overs 5
    python -m scorebook.orchestrator --show ABC123 --data-dir data/matches
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
from pathlib import Path
from typing import Optional

from scorebook.config import ScorebookConfig, StorageConfig, StoreBackend
from scorebook.data.ball_event import ExtraType, WicketType
from scorebook.data.roster import TeamSlot
from scorebook.errors import InvalidJoinCode, ScorebookError
from scorebook.state.match_state import (
    InningsNumber,
    Match,
    MatchStateEngine,
    TossDecision,
    join_match,
)
from scorebook.storage.store import MatchStore, build_store

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("scorebook.orchestrator")

DISMISSALS = [
    WicketType.BOWLED,
    WicketType.CAUGHT,
    WicketType.LBW,
    WicketType.RUN_OUT,
    WicketType.STUMPED,
]


def format_scoreboard(match: Match) -> str:
    """Plain-text scoreboard of both innings."""
    lines = [f"Match {match.code} | {match.status.value} | {match.total_overs} overs"]
    first_batting = match.batting_team
    if match.current_innings is InningsNumber.SECOND:
        first_batting = first_batting.other

    for number, slot in ((InningsNumber.FIRST, first_batting), (InningsNumber.SECOND, first_batting.other)):
        inn = match.innings[number]
        batting_side, bowling_side = match.teams[slot], match.teams[slot.other]
        lines.append("")
        lines.append(
            f"{batting_side.name}: {inn.score_str} ({inn.overs_str} ov, RR {inn.run_rate:.2f}, extras {inn.extras})"
        )
        for pid, bat in inn.batting.items():
            player = batting_side.get_player(pid)
            status = bat.wicket_type.value if bat.is_out and bat.wicket_type else "not out"
            lines.append(
                f"  {player.name if player else pid:<16} {bat.runs:>3} ({bat.balls_faced}) "
                f"4s:{bat.fours} 6s:{bat.sixes} SR:{bat.strike_rate:.2f}  {status}"
            )
        for pid, bowl in inn.bowling.items():
            player = bowling_side.get_player(pid)
            lines.append(
                f"  {player.name if player else pid:<16} {bowl.overs_str}-{bowl.maidens}-{bowl.runs}-{bowl.wickets} "
                f"econ {bowl.economy:.2f}"
            )
    if match.target is not None:
        lines.append("")
        lines.append(
            f"Target {match.target}, {match.runs_needed} needed from {match.balls_remaining} balls"
        )
    return "\n".join(lines)


def _next_batter(engine: MatchStateEngine, used: list[str]) -> Optional[str]:
    for player in engine.state.batting_side.players:
        if player.player_id not in used:
            used.append(player.player_id)
            return player.player_id
    return None


def _play_innings(engine: MatchStateEngine, rng: random.Random, correction: bool = False) -> None:
    match = engine.state
    used: list[str] = []
    engine.change_striker(_next_batter(engine, used))
    engine.change_non_striker(_next_batter(engine, used))
    bowlers = [p.player_id for p in match.bowling_side.players[-5:]]

    for over in range(match.total_overs):
        engine.change_bowler(bowlers[over % len(bowlers)])
        if correction and over == 0:
            # the scorer mis-enters a boundary and takes it back
            engine.record_runs(4)
            engine.undo_last_ball()
        while engine.state.current_innings_state.current_over == over:
            if engine.state.is_innings_complete:
                return

            r = rng.random()
            if r < 0.05:
                engine.record_extra(rng.choice([ExtraType.WIDE, ExtraType.NO_BALL]), 1)
            elif r < 0.08:
                engine.record_extra(rng.choice([ExtraType.BYE, ExtraType.LEG_BYE]), rng.choice([1, 2]))
            elif r < 0.14:
                engine.record_wicket(rng.choice(DISMISSALS))
                if engine.state.is_innings_complete:
                    return
                inn = engine.state.current_innings_state
                batter = _next_batter(engine, used)
                if inn.striker is None:
                    engine.change_striker(batter)
                else:
                    engine.change_non_striker(batter)
            else:
                engine.record_runs(rng.choice([0, 0, 1, 1, 1, 2, 3, 4, 6]))


def run_demo(config: ScorebookConfig, overs: int, seed: Optional[int]) -> Match:
    """Score a synthetic match end to end and print the scoreboard."""
    rng = random.Random(seed)
    store = build_store(config.storage)
    engine = MatchStateEngine(store, defaults=config.match)

    logger.info("=" * 60)
    logger.info("SCOREBOOK - DEMO MODE")
    logger.info("=" * 60)

    engine.create_match(overs)
    engine.set_team_name(TeamSlot.TEAM1, "Thunder")
    engine.set_team_name(TeamSlot.TEAM2, "Strikers")
    for slot, prefix in ((TeamSlot.TEAM1, "Thu"), (TeamSlot.TEAM2, "Str")):
        for i in range(11):
            engine.add_player(slot, f"{prefix}_{i + 1}")
        team = engine.state.teams[slot]
        engine.set_captain(slot, team.players[0].player_id)
        engine.set_wicketkeeper(slot, team.players[1].player_id)

    engine.perform_toss(rng.choice(list(TeamSlot)), rng.choice(list(TossDecision)))
    engine.start_innings()
    _play_innings(engine, rng, correction=True)
    engine.end_innings()
    engine.start_innings()
    _play_innings(engine, rng)
    match = engine.end_innings()

    print("\n" + "=" * 60)
    print(format_scoreboard(match))
    print("=" * 60)
    if config.storage.backend is StoreBackend.JSON:
        print(f"Saved under {config.storage.data_dir} - follow with --show {match.code}")
    return match


def run_show(store: MatchStore, code: str) -> None:
    view = join_match(store, code)
    print(format_scoreboard(view.state))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Ball-by-ball cricket scorebook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m scorebook.orchestrator --demo --overs 5 --seed 7
  python -m scorebook.orchestrator --show ABC123
        """,
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--demo", action="store_true", help="Score a synthetic match")
    mode.add_argument("--show", metavar="CODE", help="Print the scoreboard of a stored match")

    parser.add_argument("--overs", type=int, help="Overs per innings for the demo")
    parser.add_argument("--seed", type=int, help="Random seed for the demo")
    parser.add_argument("--data-dir", type=str, help="Directory holding match documents")
    parser.add_argument("--store", choices=[b.value for b in StoreBackend], help="Storage backend")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    config = ScorebookConfig.from_env()
    logging.getLogger().setLevel(logging.DEBUG if args.verbose else config.log_level)
    config = ScorebookConfig(
        match=config.match,
        storage=StorageConfig(
            backend=StoreBackend(args.store) if args.store else config.storage.backend,
            data_dir=Path(args.data_dir) if args.data_dir else config.storage.data_dir,
        ),
        log_level=config.log_level,
    )

    try:
        if args.demo:
            run_demo(config, args.overs or config.match.total_overs, args.seed)
        else:
            run_show(build_store(config.storage), args.show)
    except InvalidJoinCode as e:
        logger.error("%s", e)
        sys.exit(1)
    except ScorebookError as e:
        logger.error("Scoring error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
