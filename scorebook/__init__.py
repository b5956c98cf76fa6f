"""
Scorebook - ball-by-ball cricket scoring engine.

One scorer records runs, extras and wickets for a two-innings match while
spectators follow the same match by join code. Every event produces a new
immutable innings snapshot and the last event can be undone exactly.
"""

__version__ = "0.1.0"
