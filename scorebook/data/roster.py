"""
Team and player records.

Roster editing happens before the toss; the scoring engine only reads the
resulting records. Every helper returns a new ``Team``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class TeamSlot(Enum):
    TEAM1 = "team1"
    TEAM2 = "team2"

    @property
    def other(self) -> "TeamSlot":
        return TeamSlot.TEAM2 if self is TeamSlot.TEAM1 else TeamSlot.TEAM1


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    is_captain: bool = False
    is_wicketkeeper: bool = False


@dataclass(frozen=True)
class Team:
    """A side; player order is the batting-order hint."""

    team_id: str
    name: str
    players: tuple[Player, ...] = ()

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def has_player(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    @property
    def captain(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_captain), None)

    @property
    def wicketkeeper(self) -> Optional[Player]:
        return next((p for p in self.players if p.is_wicketkeeper), None)


def rename_team(team: Team, name: str) -> Team:
    return replace(team, name=name)


def add_player(team: Team, name: str, player_id: Optional[str] = None) -> Team:
    player = Player(player_id=player_id or str(uuid.uuid4()), name=name)
    return replace(team, players=team.players + (player,))


def remove_player(team: Team, player_id: str) -> Team:
    return replace(
        team,
        players=tuple(p for p in team.players if p.player_id != player_id),
    )


def set_captain(team: Team, player_id: str) -> Team:
    """Flag one player as captain, clearing the flag everywhere else."""
    return replace(
        team,
        players=tuple(
            replace(p, is_captain=p.player_id == player_id) for p in team.players
        ),
    )


def set_wicketkeeper(team: Team, player_id: str) -> Team:
    """Flag one player as wicketkeeper, clearing the flag everywhere else."""
    return replace(
        team,
        players=tuple(
            replace(p, is_wicketkeeper=p.player_id == player_id)
            for p in team.players
        ),
    )
