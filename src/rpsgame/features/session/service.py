from __future__ import annotations

import asyncio
import logging
import random
import re
import secrets
import string
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from functools import partial

from ...core.messages import result_message
from ...core.models import Choice
from ...core.rules import choose_random, resolve
from ...core.stats import SessionStats, record_round
from .concurrency import run_store_io, submit_store_io
from .schemas import RoundPayload, SessionPayload, StatsPayload
from .store import DEFAULT_KEY, MemoryStore, StatsStore

__all__ = [
    "GameSession",
    "RoundInProgressError",
    "SessionConfig",
    "SessionManager",
    "store_key_for",
]

logger = logging.getLogger(__name__)

_PROFILE_RE = re.compile(r"^[A-Za-z0-9_-]{1,32}$")


class RoundInProgressError(RuntimeError):
    """Raised when a round is requested while the previous one is still pending."""


def store_key_for(profile: str | None) -> str:
    """Return the persistence key for *profile*; blank or unusable names share the default key."""

    name = (profile or "").strip()
    if not name or not _PROFILE_RE.match(name):
        return DEFAULT_KEY
    return f"{DEFAULT_KEY}:{name.lower()}"


@dataclass(frozen=True)
class SessionConfig:
    """Options for a new game session."""

    restore: bool = True
    store_key: str = DEFAULT_KEY
    seed: int | None = None


@dataclass
class GameSession:
    config: SessionConfig
    rng: random.Random
    stats: SessionStats = field(default_factory=SessionStats)
    round_in_progress: bool = False


class SessionManager:
    """Owns game sessions independent of the presentation layer.

    A session admits one round at a time. ``play_round`` marks the session
    busy, waits out the reveal delay, resolves the round against a random
    computer choice, folds it into the stats and persists them. The busy flag
    is cleared on every exit path, so a failure mid-round never wedges the
    session. On the async path it stays set until the worker has saved the
    round, even if the awaiting request is cancelled first. ``reset`` holds
    the same flag while it clears the stored record, so a round cannot save
    into that window.
    """

    def __init__(
        self,
        store: StatsStore | None = None,
        *,
        reveal_delay: float = 0.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store: StatsStore = store if store is not None else MemoryStore()
        self._reveal_delay = max(0.0, reveal_delay)
        self._sleep = sleep
        self._sessions: dict[str, GameSession] = {}
        self._lock = threading.Lock()

    @property
    def reveal_delay(self) -> float:
        return self._reveal_delay

    def create_session(self, config: SessionConfig | None = None) -> str:
        config = config or SessionConfig()
        seed = config.seed if config.seed is not None else secrets.SystemRandom().getrandbits(32)
        stats = self._store.load(config.store_key) if config.restore else None
        session = GameSession(
            config=replace(config, seed=seed),
            rng=random.Random(seed),
            stats=stats if stats is not None else SessionStats(),
        )
        session_id = _sid()
        with self._lock:
            self._sessions[session_id] = session
        logger.debug(
            "session created",
            extra={"session_id": session_id, "restored": stats is not None, "store_key": config.store_key},
        )
        return session_id

    async def create_session_async(self, config: SessionConfig | None = None) -> str:
        return await run_store_io(self.create_session, config)

    def session_payload(self, session_id: str) -> SessionPayload:
        return SessionPayload(session=session_id, stats=self.stats(session_id))

    def stats(self, session_id: str) -> StatsPayload:
        with self._lock:
            session = self._require_session(session_id)
            return StatsPayload.from_stats(session.stats)

    def is_round_in_progress(self, session_id: str) -> bool:
        with self._lock:
            return self._require_session(session_id).round_in_progress

    def play_round(self, session_id: str, choice: Choice | str) -> RoundPayload:
        session, player = self._begin_round(session_id, choice)
        try:
            if self._reveal_delay > 0:
                self._sleep(self._reveal_delay)
            return self._finish_round(session_id, session, player)
        finally:
            self._end_round(session)

    async def play_round_async(self, session_id: str, choice: Choice | str) -> RoundPayload:
        session, player = self._begin_round(session_id, choice)
        try:
            if self._reveal_delay > 0:
                await asyncio.sleep(self._reveal_delay)
            pending = submit_store_io(self._finish_round, session_id, session, player)
        except BaseException:
            self._end_round(session)
            raise
        # The worker keeps running if this request is cancelled; release the
        # session only once it has recorded and saved the round.
        pending.add_done_callback(partial(self._release_after_round, session))
        return await asyncio.shield(pending)

    def reset(self, session_id: str) -> StatsPayload:
        with self._lock:
            session = self._require_session(session_id)
            self._claim(session, "cannot reset while a round is in progress")
            session.stats = SessionStats()
            payload = StatsPayload.from_stats(session.stats)
        try:
            self._store.clear(session.config.store_key)
        finally:
            self._end_round(session)
        logger.debug("session reset", extra={"session_id": session_id})
        return payload

    async def reset_async(self, session_id: str) -> StatsPayload:
        return await run_store_io(self.reset, session_id)

    def _begin_round(self, session_id: str, choice: Choice | str) -> tuple[GameSession, Choice]:
        with self._lock:
            session = self._require_session(session_id)
            player = Choice.parse(choice)
            self._claim(session, "a round is already in progress")
            return session, player

    @staticmethod
    def _claim(session: GameSession, busy_message: str) -> None:
        # caller holds self._lock
        if session.round_in_progress:
            raise RoundInProgressError(busy_message)
        session.round_in_progress = True

    def _end_round(self, session: GameSession) -> None:
        with self._lock:
            session.round_in_progress = False

    def _release_after_round(self, session: GameSession, future: asyncio.Future[RoundPayload]) -> None:
        self._end_round(session)
        if not future.cancelled() and future.exception() is not None:
            logger.debug("round failed", exc_info=future.exception())

    def _finish_round(self, session_id: str, session: GameSession, player: Choice) -> RoundPayload:
        with self._lock:
            computer = choose_random(session.rng)
            outcome = resolve(player, computer)
            record_round(outcome, session.stats)
            snapshot = replace(session.stats)
            message = result_message(outcome, session.rng)
        self._store.save(session.config.store_key, snapshot)
        logger.debug(
            "round played",
            extra={
                "session_id": session_id,
                "player": player.value,
                "computer": computer.value,
                "outcome": outcome.value,
                "games_played": snapshot.games_played,
            },
        )
        return RoundPayload(
            player_choice=player,
            computer_choice=computer,
            outcome=outcome,
            message=message,
            stats=StatsPayload.from_stats(snapshot),
        )

    def _require_session(self, session_id: str) -> GameSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise KeyError(f"session '{session_id}' not found")
        return session


def _sid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
