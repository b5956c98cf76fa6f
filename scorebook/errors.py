"""
Error kinds raised by the scoring engine.

All of them are recoverable: the engine raises before touching any state, so
the caller can surface the message and resubmit a corrected request.
"""

from __future__ import annotations


class ScorebookError(Exception):
    """Base class for every scoring error."""


class IncompleteLineup(ScorebookError):
    """Striker, non-striker or bowler missing for an operation that needs them."""


class NothingToUndo(ScorebookError):
    """Undo requested on an innings with an empty event log."""


class InvalidJoinCode(ScorebookError):
    """No stored match carries the requested join code."""


class InvalidOversCount(ScorebookError, ValueError):
    """Overs per innings must be a positive whole number."""


class InvalidDelivery(ScorebookError, ValueError):
    """Run or extra amount outside what a single delivery can produce."""


class InvalidTransition(ScorebookError):
    """Match status change not allowed from the current status."""


class MatchCompleted(ScorebookError):
    """Scoring attempted after the match reached its terminal status."""


class UnknownPlayer(ScorebookError):
    """Player id not found where the operation expects it."""


class AllOut(ScorebookError):
    """Ten wickets have already fallen in this innings."""


class InningsComplete(ScorebookError):
    """The innings is over: all out, overs bowled or target reached."""
