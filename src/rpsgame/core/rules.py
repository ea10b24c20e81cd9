"""Round resolution.

The relation is cyclic: each choice defeats exactly one other and loses to the
remaining one. Everything here is pure apart from :func:`choose_random`, which
draws from the supplied RNG (or the module-level ``random`` state).
"""

from __future__ import annotations

import random

from .models import CHOICES, Choice, Outcome

_BEATS: dict[Choice, Choice] = {
    Choice.ROCK: Choice.SCISSORS,
    Choice.PAPER: Choice.ROCK,
    Choice.SCISSORS: Choice.PAPER,
}


def beats(choice: Choice) -> Choice:
    """Return the choice defeated by *choice*."""

    return _BEATS[choice]


def resolve(player: Choice, computer: Choice) -> Outcome:
    if player == computer:
        return Outcome.TIE
    if _BEATS[player] == computer:
        return Outcome.WIN
    return Outcome.LOSE


def choose_random(rng: random.Random | None = None) -> Choice:
    source = rng if rng is not None else random
    return source.choice(CHOICES)
