"""Round resolution and session statistics."""

from .models import Choice, Outcome
from .rules import beats, choose_random, resolve
from .stats import SessionStats, record_round, reset, win_rate

__all__ = [
    "Choice",
    "Outcome",
    "SessionStats",
    "beats",
    "choose_random",
    "record_round",
    "reset",
    "resolve",
    "win_rate",
]
