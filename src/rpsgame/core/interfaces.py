from __future__ import annotations

from typing import Final, Literal, Protocol

from .models import Choice, Outcome
from .stats import SessionStats

RESET: Final = "reset"

PromptResult = Choice | Literal["reset"] | None


class Presenter(Protocol):
    def start_session(self, stats: SessionStats) -> None: ...

    def prompt_choice(self) -> PromptResult:
        """Return the player's choice, ``RESET`` to zero the stats, or ``None`` to quit."""
        ...

    def show_thinking(self, player: Choice) -> None: ...

    def show_round(self, player: Choice, computer: Choice, outcome: Outcome, stats: SessionStats) -> None: ...

    def show_reset(self, stats: SessionStats) -> None: ...

    def summary(self, stats: SessionStats) -> None: ...
