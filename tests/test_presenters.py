from __future__ import annotations

import io

from rich.console import Console

from rpsgame.core.interfaces import RESET
from rpsgame.core.models import Choice, Outcome
from rpsgame.core.stats import SessionStats
from rpsgame.ui.presenters import RichPresenter


def _presenter(inputs: list[str]) -> tuple[RichPresenter, io.StringIO]:
    buffer = io.StringIO()
    console = Console(file=buffer, force_terminal=False, color_system=None, width=120)
    feed = iter(inputs)

    def _input(_prompt: str) -> str:
        try:
            return next(feed)
        except StopIteration:
            raise EOFError from None

    return RichPresenter(console=console, input_func=_input), buffer


def test_prompt_choice_maps_keys():
    presenter, _ = _presenter(["r", "2", "Scissors", "x", "q"])
    assert presenter.prompt_choice() is Choice.ROCK
    assert presenter.prompt_choice() is Choice.PAPER
    assert presenter.prompt_choice() is Choice.SCISSORS
    assert presenter.prompt_choice() == RESET
    assert presenter.prompt_choice() is None


def test_prompt_choice_retries_after_invalid_input_and_help():
    presenter, buffer = _presenter(["lizard", "h", "p"])
    assert presenter.prompt_choice() is Choice.PAPER
    output = buffer.getvalue()
    assert "Invalid input" in output
    assert "Controls" in output


def test_prompt_choice_treats_eof_as_quit():
    presenter, _ = _presenter([])
    assert presenter.prompt_choice() is None


def test_show_round_explains_the_winner():
    presenter, buffer = _presenter([])
    stats = SessionStats(games_played=1, wins=1, player_score=1, current_streak=1, best_streak=1)
    presenter.show_round(Choice.PAPER, Choice.ROCK, Outcome.WIN, stats)
    output = buffer.getvalue()
    assert "Paper beats Rock." in output
    assert "win rate 100%" in output


def test_show_round_tie():
    presenter, buffer = _presenter([])
    presenter.show_round(Choice.ROCK, Choice.ROCK, Outcome.TIE, SessionStats(games_played=1, ties=1))
    assert "Same pick." in buffer.getvalue()


def test_summary_table():
    presenter, buffer = _presenter([])
    presenter.summary(SessionStats())
    assert "No rounds played." in buffer.getvalue()

    stats = SessionStats(games_played=3, wins=1, losses=1, ties=1, player_score=1, computer_score=1, best_streak=1)
    presenter.summary(stats)
    output = buffer.getvalue()
    assert "Session Summary" in output
    assert "33%" in output
