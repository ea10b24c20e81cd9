from __future__ import annotations

import logging
import random

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Footer, Header, Label, Static

from ..core.messages import IDLE_MESSAGE, THINKING_MESSAGE, result_message
from ..core.models import CHOICES, PLACEHOLDER_EMOJI, THINKING_EMOJI, Choice, Outcome
from ..core.rules import choose_random, resolve
from ..core.stats import SessionStats, record_round, reset, win_rate
from ..features.session.store import DEFAULT_KEY, StatsStore

logger = logging.getLogger(__name__)

_OUTCOME_CLASSES = tuple(outcome.value for outcome in Outcome)


class RpsApp(App[None]):
    """Keyboard-first terminal version of the game."""

    TITLE = "Rock Paper Scissors"

    CSS = """
    Screen {
        layout: vertical;
        background: #f4f6fb;
        color: #1b233d;
    }
    #board {
        width: 100%;
        max-width: 72;
        margin: 1 2;
        padding: 1 2;
        background: #ffffff;
        border: round #d9e2f5;
    }
    #title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin: 0 0 1 0;
    }
    #arena {
        height: auto;
        align: center middle;
    }
    .choice-icon {
        width: 12;
        height: 3;
        content-align: center middle;
        border: round #c3cde3;
    }
    .choice-icon.thinking { border: round #5b76f8; }
    #result {
        width: 1fr;
        height: 3;
        content-align: center middle;
        text-style: bold;
    }
    #result.win { color: #2f8a5e; }
    #result.lose { color: #c14657; }
    #result.tie { color: #2f73d2; }
    #controls {
        height: auto;
        align: center middle;
        margin: 1 0;
    }
    .choice-btn { margin: 0 1; min-width: 14; }
    #stats {
        width: 100%;
        text-align: center;
        color: #4a5678;
        margin: 0 0 1 0;
    }
    #btn-reset { width: 100%; }
    """

    BINDINGS = [
        Binding("r", "play('rock')", "Rock"),
        Binding("p", "play('paper')", "Paper"),
        Binding("s", "play('scissors')", "Scissors"),
        Binding("1", "play('rock')", "Rock", show=False),
        Binding("2", "play('paper')", "Paper", show=False),
        Binding("3", "play('scissors')", "Scissors", show=False),
        Binding("escape", "reset", "Reset"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        *,
        store: StatsStore | None = None,
        store_key: str = DEFAULT_KEY,
        reveal_delay: float = 0.8,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__()
        self._stats_store = store
        self._stats_key = store_key
        self._reveal_delay = max(0.0, reveal_delay)
        self._round_rng = rng or random.Random()
        self.stats = SessionStats()
        self.round_in_progress = False

    def compose(self) -> ComposeResult:  # type: ignore[override]
        yield Header()
        with Vertical(id="board"):
            yield Label(self.TITLE, id="title")
            with Horizontal(id="arena"):
                yield Static(PLACEHOLDER_EMOJI, id="player-choice", classes="choice-icon")
                yield Static(IDLE_MESSAGE, id="result")
                yield Static(PLACEHOLDER_EMOJI, id="computer-choice", classes="choice-icon")
            with Horizontal(id="controls"):
                for choice in CHOICES:
                    yield Button(f"{choice.emoji} {choice.label}", id=f"btn-{choice.value}", classes="choice-btn")
            yield Static(self.format_stats(self.stats), id="stats")
            yield Button("↻ Reset", id="btn-reset", variant="error")
        yield Footer()

    def on_mount(self) -> None:  # type: ignore[override]
        if self._stats_store is not None:
            restored = self._stats_store.load(self._stats_key)
            if restored is not None:
                self.stats = restored
        self._refresh_stats()

    @staticmethod
    def format_stats(stats: SessionStats) -> str:
        return (
            f"[b]You {stats.player_score}[/] - [b]{stats.computer_score} Computer[/]\n"
            f"Games {stats.games_played} • Win rate {win_rate(stats)}% • "
            f"Streak {stats.current_streak} (best {stats.best_streak})"
        )

    @on(Button.Pressed, ".choice-btn")
    def _choice_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""
        self.action_play(button_id.removeprefix("btn-"))

    @on(Button.Pressed, "#btn-reset")
    def _reset_pressed(self) -> None:
        self.action_reset()

    def action_play(self, choice: str) -> None:
        if self.round_in_progress:
            return
        player = Choice.parse(choice)
        self.round_in_progress = True
        self.query_one("#player-choice", Static).update(player.emoji)
        computer_icon = self.query_one("#computer-choice", Static)
        computer_icon.update(THINKING_EMOJI)
        computer_icon.add_class("thinking")
        result = self.query_one("#result", Static)
        result.remove_class(*_OUTCOME_CLASSES)
        result.update(THINKING_MESSAGE)
        if self._reveal_delay > 0:
            self.set_timer(self._reveal_delay, lambda: self._reveal(player))
        else:
            self._reveal(player)

    def action_reset(self) -> None:
        if self.round_in_progress:
            return
        self.stats = reset()
        if self._stats_store is not None:
            self._stats_store.clear(self._stats_key)
        self.query_one("#player-choice", Static).update(PLACEHOLDER_EMOJI)
        self.query_one("#computer-choice", Static).update(PLACEHOLDER_EMOJI)
        result = self.query_one("#result", Static)
        result.remove_class(*_OUTCOME_CLASSES)
        result.update(IDLE_MESSAGE)
        self._refresh_stats()

    def _reveal(self, player: Choice) -> None:
        try:
            computer = choose_random(self._round_rng)
            outcome = resolve(player, computer)
            record_round(outcome, self.stats)
            if self._stats_store is not None:
                self._stats_store.save(self._stats_key, self.stats)
            computer_icon = self.query_one("#computer-choice", Static)
            computer_icon.remove_class("thinking")
            computer_icon.update(computer.emoji)
            result = self.query_one("#result", Static)
            result.add_class(outcome.value)
            result.update(result_message(outcome, self._round_rng))
            self._refresh_stats()
            logger.debug("round played", extra={"player": player.value, "computer": computer.value})
        finally:
            self.round_in_progress = False

    def _refresh_stats(self) -> None:
        self.query_one("#stats", Static).update(self.format_stats(self.stats))
