from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.interfaces import RESET, Presenter, PromptResult
from ..core.messages import IDLE_MESSAGE, THINKING_MESSAGE, result_message
from ..core.models import CHOICES, THINKING_EMOJI, Choice, Outcome
from ..core.rules import beats
from ..core.stats import SessionStats, win_rate

_OUTCOME_STYLE: dict[Outcome, str] = {
    Outcome.WIN: "bold green",
    Outcome.LOSE: "bold red",
    Outcome.TIE: "bold blue",
}


class RichPresenter(Presenter):
    def __init__(
        self,
        *,
        no_color: bool = False,
        console: Console | None = None,
        input_func: Callable[[str], str] = input,
    ):
        # Default: color ON (forced), unless explicitly disabled via --no-color.
        if console is not None:
            self.console = console
        elif no_color:
            self.console = Console(force_terminal=False, color_system=None)
        else:
            self.console = Console(force_terminal=True, color_system="auto")
        self._input = input_func

    def start_session(self, stats: SessionStats) -> None:
        guide = (
            "[bold]Welcome![/] Pick a symbol and the computer picks one at random.\n"
            "Rock crushes Scissors, Paper covers Rock, Scissors cut Paper.\n\n"
            "[bold]Controls[/]: r/1 = Rock • p/2 = Paper • s/3 = Scissors • x = reset • h = help • q = quit"
        )
        self.console.print(Panel(guide, title="Rock Paper Scissors", border_style="green"))
        if stats.games_played:
            self.console.print("[dim]Restored your previous session.[/]")
            self._print_scoreboard(stats)
        self.console.print(IDLE_MESSAGE)

    def prompt_choice(self) -> PromptResult:
        while True:
            try:
                raw = self._input("Your move (r/p/s, 1-3), x to reset, q to quit: ")
            except EOFError:
                return None
            token = raw.strip().lower()
            if token in {"q", "quit", "exit"}:
                return None
            if token in {"x", "reset", "esc"}:
                return RESET
            if token in {"h", "help", "?"}:
                self._print_help()
                continue
            try:
                return Choice.parse(token)
            except ValueError:
                self.console.print("[red]Invalid input[/]. Enter r, p, s (or 1-3), x to reset, q to quit.")

    def show_thinking(self, player: Choice) -> None:
        self.console.print(f"You: {player.emoji}  Computer: {THINKING_EMOJI}  [dim]{THINKING_MESSAGE}[/]")

    def show_round(self, player: Choice, computer: Choice, outcome: Outcome, stats: SessionStats) -> None:
        style = _OUTCOME_STYLE[outcome]
        self.console.print(f"You: {player.emoji} {player.label}  vs  Computer: {computer.emoji} {computer.label}")
        self.console.print(f"[{style}]{result_message(outcome)}[/]  [dim]{self._explain(player, computer)}[/]")
        self._print_scoreboard(stats)

    def show_reset(self, stats: SessionStats) -> None:
        self.console.print("[yellow]Scores reset.[/]")
        self._print_scoreboard(stats)
        self.console.print(IDLE_MESSAGE)

    def summary(self, stats: SessionStats) -> None:
        if not stats.games_played:
            self.console.print("No rounds played.")
            return
        table = Table(title="Session Summary", show_header=False)
        table.add_row("Games played:", str(stats.games_played))
        table.add_row("Wins / Losses / Ties:", f"{stats.wins} / {stats.losses} / {stats.ties}")
        table.add_row("Score (you - computer):", f"{stats.player_score} - {stats.computer_score}")
        table.add_row("Win rate:", f"{win_rate(stats)}%")
        table.add_row("Current streak:", str(stats.current_streak))
        table.add_row("Best streak:", str(stats.best_streak))
        self.console.print()
        self.console.print(table)

    # --- helpers ---
    def _print_scoreboard(self, stats: SessionStats) -> None:
        self.console.print(
            f"[bold]You {stats.player_score}[/] - [bold]{stats.computer_score} Computer[/]"
            f"  [dim]games {stats.games_played} • win rate {win_rate(stats)}% • streak {stats.current_streak}"
            f" (best {stats.best_streak})[/]"
        )

    def _print_help(self) -> None:
        table = Table(show_header=False)
        for index, choice in enumerate(CHOICES, 1):
            table.add_row(f"{choice.label}:", f"{choice.value[0]} or {index}")
        table.add_row("Reset scores:", "x")
        table.add_row("Help:", "h")
        table.add_row("Quit:", "q")
        self.console.print(Panel.fit(table, title="Controls", style="dim"))

    @staticmethod
    def _explain(player: Choice, computer: Choice) -> str:
        if beats(player) == computer:
            return f"{player.label} beats {computer.label}."
        if beats(computer) == player:
            return f"{computer.label} beats {player.label}."
        return "Same pick."
