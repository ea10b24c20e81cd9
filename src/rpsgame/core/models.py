from __future__ import annotations

from enum import Enum


class Choice(str, Enum):
    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"

    @property
    def emoji(self) -> str:
        return CHOICE_EMOJIS[self]

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def parse(cls, raw: object) -> Choice:
        """Map user input (name, initial or 1-3 digit) to a choice."""

        if isinstance(raw, Choice):
            return raw
        token = str(raw or "").strip().lower()
        choice = _TOKENS.get(token)
        if choice is None:
            raise ValueError(f"unknown choice '{raw}'")
        return choice


class Outcome(str, Enum):
    WIN = "win"
    LOSE = "lose"
    TIE = "tie"


CHOICES: tuple[Choice, ...] = (Choice.ROCK, Choice.PAPER, Choice.SCISSORS)

CHOICE_EMOJIS: dict[Choice, str] = {
    Choice.ROCK: "🪨",
    Choice.PAPER: "📄",
    Choice.SCISSORS: "✂️",
}

PLACEHOLDER_EMOJI = "❓"
THINKING_EMOJI = "🤔"

_TOKENS: dict[str, Choice] = {}
for _index, _choice in enumerate(CHOICES, 1):
    _TOKENS[_choice.value] = _choice
    _TOKENS[_choice.value[0]] = _choice
    _TOKENS[str(_index)] = _choice
del _index, _choice
