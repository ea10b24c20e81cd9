from __future__ import annotations

import asyncio
import threading

import pytest

from rpsgame.core.models import Choice
from rpsgame.core.stats import SessionStats
from rpsgame.features.session import (
    DEFAULT_KEY,
    MemoryStore,
    RoundInProgressError,
    RoundPayload,
    SessionConfig,
    SessionManager,
)
from rpsgame.features.session.service import store_key_for


def test_session_manager_basic_flow():
    store = MemoryStore()
    manager = SessionManager(store)
    sid = manager.create_session(SessionConfig(seed=1234))

    assert manager.stats(sid).to_dict()["games_played"] == 0

    for n, choice in enumerate(["rock", "p", "3", Choice.ROCK, "paper"], 1):
        result = manager.play_round(sid, choice)
        assert isinstance(result, RoundPayload)
        payload = result.to_dict()
        assert payload["player_choice"] in {"rock", "paper", "scissors"}
        assert payload["computer_choice"] in {"rock", "paper", "scissors"}
        assert payload["outcome"] in {"win", "lose", "tie"}
        assert payload["message"]
        stats = payload["stats"]
        assert stats["games_played"] == n
        assert stats["wins"] + stats["losses"] + stats["ties"] == n
        assert stats["best_streak"] >= stats["current_streak"]

    persisted = store.load(DEFAULT_KEY)
    assert persisted is not None
    assert persisted.games_played == 5
    assert manager.stats(sid).to_dict()["games_played"] == 5


def test_same_seed_replays_same_computer_choices():
    manager = SessionManager()
    first = manager.create_session(SessionConfig(seed=99, restore=False))
    second = manager.create_session(SessionConfig(seed=99, restore=False))

    picks_a = [manager.play_round(first, "rock").computer_choice for _ in range(10)]
    picks_b = [manager.play_round(second, "rock").computer_choice for _ in range(10)]
    assert picks_a == picks_b


def test_create_session_restores_persisted_stats():
    store = MemoryStore()
    store.save(DEFAULT_KEY, SessionStats(games_played=2, wins=1, ties=1, player_score=1, current_streak=1, best_streak=1))
    manager = SessionManager(store)

    restored = manager.create_session(SessionConfig(restore=True))
    fresh = manager.create_session(SessionConfig(restore=False))

    assert manager.stats(restored).games_played == 2
    assert manager.stats(restored).win_rate == 50
    assert manager.stats(fresh).games_played == 0


def test_create_session_with_corrupt_store_starts_fresh():
    store = MemoryStore({DEFAULT_KEY: {"games_played": "lots"}})
    manager = SessionManager(store)
    sid = manager.create_session()
    assert manager.stats(sid).to_dict() == SessionStats().to_dict() | {"win_rate": 0}


def test_reset_zeroes_stats_and_clears_store():
    store = MemoryStore()
    manager = SessionManager(store)
    sid = manager.create_session(SessionConfig(seed=5))
    for _ in range(4):
        manager.play_round(sid, "scissors")

    stats = manager.reset(sid)

    assert stats.games_played == 0
    assert stats.best_streak == 0
    assert store.load(DEFAULT_KEY) is None
    assert manager.stats(sid).to_dict() == stats.to_dict()


def test_unknown_session_raises_key_error():
    manager = SessionManager()
    with pytest.raises(KeyError):
        manager.stats("missing")
    with pytest.raises(KeyError):
        manager.play_round("missing", "rock")
    with pytest.raises(KeyError):
        manager.reset("missing")


def test_invalid_choice_raises_value_error_and_leaves_guard_clear():
    manager = SessionManager()
    sid = manager.create_session()
    with pytest.raises(ValueError):
        manager.play_round(sid, "lizard")
    assert not manager.is_round_in_progress(sid)
    assert manager.stats(sid).games_played == 0


def test_overlapping_round_is_rejected():
    attempts: list[type[BaseException]] = []
    manager: SessionManager

    def _sleep(_seconds: float):
        # a second request arriving while the first is still pacing its reveal
        assert manager.is_round_in_progress(sid)
        for action in (lambda: manager.play_round(sid, "paper"), lambda: manager.reset(sid)):
            try:
                action()
            except RoundInProgressError as exc:
                attempts.append(type(exc))

    manager = SessionManager(reveal_delay=0.5, sleep=_sleep)
    sid = manager.create_session(SessionConfig(seed=3))

    result = manager.play_round(sid, "rock")

    assert attempts == [RoundInProgressError, RoundInProgressError]
    assert result.stats.games_played == 1
    assert not manager.is_round_in_progress(sid)


def test_guard_is_cleared_when_round_fails():
    calls = {"count": 0}

    def _sleep(_seconds: float):
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("timer exploded")

    manager = SessionManager(reveal_delay=0.1, sleep=_sleep)
    sid = manager.create_session()

    with pytest.raises(RuntimeError, match="timer exploded"):
        manager.play_round(sid, "rock")

    assert not manager.is_round_in_progress(sid)
    assert manager.stats(sid).games_played == 0
    assert manager.play_round(sid, "rock").stats.games_played == 1


def test_sessions_are_isolated():
    manager = SessionManager()
    a = manager.create_session(SessionConfig(restore=False))
    b = manager.create_session(SessionConfig(restore=False))
    manager.play_round(a, "rock")
    assert manager.stats(a).games_played == 1
    assert manager.stats(b).games_played == 0


def test_store_key_for_profiles():
    assert store_key_for(None) == DEFAULT_KEY
    assert store_key_for("   ") == DEFAULT_KEY
    assert store_key_for("Alice") == f"{DEFAULT_KEY}:alice"
    assert store_key_for("../etc/passwd") == DEFAULT_KEY


def test_async_paths_match_sync_behaviour():
    manager = SessionManager(reveal_delay=0.01)

    async def _exercise():
        sid = await manager.create_session_async(SessionConfig(seed=42, restore=False))
        first = await manager.play_round_async(sid, "rock")
        assert first.stats.games_played == 1
        assert not manager.is_round_in_progress(sid)

        pending = asyncio.create_task(manager.play_round_async(sid, "paper"))
        await asyncio.sleep(0)
        assert manager.is_round_in_progress(sid)
        with pytest.raises(RoundInProgressError):
            await manager.play_round_async(sid, "scissors")
        second = await pending
        assert second.stats.games_played == 2

        stats = await manager.reset_async(sid)
        assert stats.games_played == 0

    asyncio.run(_exercise())


def test_unknown_session_wins_over_invalid_choice():
    manager = SessionManager()
    with pytest.raises(KeyError):
        manager.play_round("missing", "lizard")

    async def _exercise():
        with pytest.raises(KeyError):
            await manager.play_round_async("missing", "lizard")

    asyncio.run(_exercise())


def test_cancelled_async_round_holds_guard_until_saved():
    release = threading.Event()

    class _SlowSaveStore(MemoryStore):
        def save(self, key, stats):
            release.wait(5)
            super().save(key, stats)

    store = _SlowSaveStore()
    manager = SessionManager(store)

    async def _exercise():
        sid = await manager.create_session_async(SessionConfig(seed=7, restore=False))
        task = asyncio.create_task(manager.play_round_async(sid, "rock"))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        # the worker is still saving the round
        assert manager.is_round_in_progress(sid)
        with pytest.raises(RoundInProgressError):
            await manager.play_round_async(sid, "paper")

        release.set()
        for _ in range(500):
            if not manager.is_round_in_progress(sid):
                break
            await asyncio.sleep(0.01)

        assert not manager.is_round_in_progress(sid)
        assert manager.stats(sid).games_played == 1
        assert store.load(DEFAULT_KEY).games_played == 1

    asyncio.run(_exercise())


def test_reset_blocks_rounds_until_store_is_cleared():
    clearing = threading.Event()
    release = threading.Event()

    class _SlowClearStore(MemoryStore):
        def clear(self, key=DEFAULT_KEY):
            clearing.set()
            release.wait(5)
            super().clear(key)

    store = _SlowClearStore()
    manager = SessionManager(store)
    sid = manager.create_session(SessionConfig(seed=11))
    manager.play_round(sid, "rock")

    worker = threading.Thread(target=manager.reset, args=(sid,))
    worker.start()
    try:
        assert clearing.wait(5)
        with pytest.raises(RoundInProgressError):
            manager.play_round(sid, "paper")
    finally:
        release.set()
        worker.join(5)

    assert not manager.is_round_in_progress(sid)
    assert manager.stats(sid).games_played == 0
    assert store.load(DEFAULT_KEY) is None

    manager.play_round(sid, "paper")
    assert store.load(DEFAULT_KEY).games_played == 1
