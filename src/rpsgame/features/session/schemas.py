from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from ...core.models import Choice, Outcome
from ...core.stats import SessionStats, win_rate

__all__ = [
    "RoundPayload",
    "SessionPayload",
    "StatsPayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class StatsPayload(_APIModel):
    player_score: int
    computer_score: int
    games_played: int
    wins: int
    losses: int
    ties: int
    current_streak: int
    best_streak: int
    win_rate: int

    @classmethod
    def from_stats(cls, stats: SessionStats) -> StatsPayload:
        return cls(**stats.to_dict(), win_rate=win_rate(stats))


class RoundPayload(_APIModel):
    player_choice: Choice
    computer_choice: Choice
    outcome: Outcome
    message: str
    stats: StatsPayload


class SessionPayload(_APIModel):
    session: str
    stats: StatsPayload
