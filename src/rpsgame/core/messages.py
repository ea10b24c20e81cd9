from __future__ import annotations

import random

from .models import Outcome

IDLE_MESSAGE = "Make your move!"
THINKING_MESSAGE = "Computer is thinking..."

RESULT_MESSAGES: dict[Outcome, tuple[str, ...]] = {
    Outcome.WIN: ("You Win! 🎉", "Victory! 💪", "Nice One! 🔥", "Champion! 🏆"),
    Outcome.LOSE: ("You Lose! 😢", "Too Bad! 💔", "Try Again! 🎯", "So Close! 😅"),
    Outcome.TIE: ("It's a Tie! 🤝", "Draw! ⚖️", "Equal! 🔄", "Matched! ♻️"),
}


def result_message(outcome: Outcome, rng: random.Random | None = None) -> str:
    source = rng if rng is not None else random
    return source.choice(RESULT_MESSAGES[outcome])
