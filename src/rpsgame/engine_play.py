from __future__ import annotations

import logging
import random
import secrets
from pathlib import Path

from .core.engine_core import run_core
from .core.stats import SessionStats
from .features.session.store import DEFAULT_KEY, JsonFileStore, StatsStore
from .ui.presenters import RichPresenter

logger = logging.getLogger(__name__)


def open_store(path: Path | None) -> StatsStore | None:
    return JsonFileStore(path) if path is not None else None


def run_play(
    *,
    seed: int | None = None,
    rounds: int | None = None,
    reveal_delay: float = 0.0,
    store_path: Path | None = None,
    no_color: bool = False,
) -> SessionStats:
    seed = seed if seed is not None else secrets.SystemRandom().getrandbits(32)
    store = open_store(store_path)
    restored = store.load(DEFAULT_KEY) if store is not None else None
    logger.debug("starting CLI session", extra={"seed": seed, "restored": restored is not None})
    return run_core(
        RichPresenter(no_color=no_color),
        rng=random.Random(seed),
        stats=restored,
        store=store,
        rounds=rounds,
        reveal_delay=reveal_delay,
    )
