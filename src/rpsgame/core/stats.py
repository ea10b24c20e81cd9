from __future__ import annotations

from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

from .models import Outcome

__all__ = ["SessionStats", "record_round", "reset", "win_rate"]


@dataclass
class SessionStats:
    """Cumulative counters for one player's session.

    ``games_played == wins + losses + ties`` and ``best_streak >=
    current_streak`` hold after every update. A tie leaves the current streak
    untouched; only a loss breaks it.
    """

    player_score: int = 0
    computer_score: int = 0
    games_played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    current_streak: int = 0
    best_streak: int = 0

    @property
    def win_rate(self) -> int:
        return win_rate(self)

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SessionStats:
        """Build a record from a persisted mapping, rejecting anything inconsistent."""

        if not isinstance(data, Mapping):
            raise ValueError("stats payload must be a mapping")
        values: dict[str, int] = {}
        for item in fields(cls):
            raw = data.get(item.name, 0)
            # bool is an int subclass; a persisted true/false is not a counter
            if isinstance(raw, bool) or not isinstance(raw, int):
                raise ValueError(f"{item.name} must be an integer, got {raw!r}")
            if raw < 0:
                raise ValueError(f"{item.name} must be non-negative, got {raw}")
            values[item.name] = raw
        stats = cls(**values)
        if stats.games_played != stats.wins + stats.losses + stats.ties:
            raise ValueError("games_played does not match wins + losses + ties")
        if stats.best_streak < stats.current_streak:
            raise ValueError("best_streak is below current_streak")
        return stats


def record_round(outcome: Outcome, stats: SessionStats) -> SessionStats:
    """Fold *outcome* into *stats* in place and return it."""

    stats.games_played += 1
    if outcome is Outcome.WIN:
        stats.player_score += 1
        stats.wins += 1
        stats.current_streak += 1
        stats.best_streak = max(stats.best_streak, stats.current_streak)
    elif outcome is Outcome.LOSE:
        stats.computer_score += 1
        stats.losses += 1
        stats.current_streak = 0
    elif outcome is Outcome.TIE:
        stats.ties += 1
    else:
        raise ValueError(f"unknown outcome {outcome!r}")
    return stats


def win_rate(stats: SessionStats) -> int:
    """Integer win percentage, rounded half up; 0 before the first game."""

    games = stats.games_played
    if games <= 0:
        return 0
    # (100 * wins / games) + 0.5, floored, in integer arithmetic
    return (200 * stats.wins + games) // (2 * games)


def reset() -> SessionStats:
    return SessionStats()
