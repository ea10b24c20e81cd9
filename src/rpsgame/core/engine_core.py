from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable

from ..features.session.store import DEFAULT_KEY, StatsStore
from .interfaces import RESET, Presenter
from .rules import choose_random, resolve
from .stats import SessionStats, record_round, reset

logger = logging.getLogger(__name__)


def run_core(
    presenter: Presenter,
    *,
    rng: random.Random,
    stats: SessionStats | None = None,
    store: StatsStore | None = None,
    store_key: str = DEFAULT_KEY,
    rounds: int | None = None,
    reveal_delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> SessionStats:
    """Play rounds until the presenter quits or *rounds* have been resolved."""

    stats = stats if stats is not None else SessionStats()
    presenter.start_session(stats)
    played = 0

    while rounds is None or played < rounds:
        picked = presenter.prompt_choice()
        if picked is None:
            break
        if picked == RESET:
            stats = reset()
            if store is not None:
                store.clear(store_key)
            presenter.show_reset(stats)
            continue

        presenter.show_thinking(picked)
        if reveal_delay > 0:
            sleep(reveal_delay)
        computer = choose_random(rng)
        outcome = resolve(picked, computer)
        record_round(outcome, stats)
        played += 1
        if store is not None:
            store.save(store_key, stats)
        logger.debug(
            "round played",
            extra={"player": picked.value, "computer": computer.value, "outcome": outcome.value},
        )
        presenter.show_round(picked, computer, outcome, stats)

    presenter.summary(stats)
    return stats
