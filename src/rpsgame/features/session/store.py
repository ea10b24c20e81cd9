"""Persistence for session statistics.

Stores never raise into gameplay: a missing file, unreadable JSON or a record
that fails validation is logged and reported as "no prior session", and failed
writes are logged and dropped. The in-memory stats stay authoritative.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Protocol

from ...core.stats import SessionStats

__all__ = ["DEFAULT_KEY", "JsonFileStore", "MemoryStore", "StatsStore"]

DEFAULT_KEY = "rpsGameState"

logger = logging.getLogger(__name__)


class StatsStore(Protocol):
    def load(self, key: str = DEFAULT_KEY) -> SessionStats | None: ...

    def save(self, key: str, stats: SessionStats) -> None: ...

    def clear(self, key: str = DEFAULT_KEY) -> None: ...


class MemoryStore:
    """Dict-backed store; contents live as long as the process."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})
        self._lock = threading.Lock()

    def load(self, key: str = DEFAULT_KEY) -> SessionStats | None:
        with self._lock:
            raw = self._data.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def save(self, key: str, stats: SessionStats) -> None:
        with self._lock:
            self._data[key] = stats.to_dict()

    def clear(self, key: str = DEFAULT_KEY) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore:
    """One JSON document on disk mapping store keys to stats records."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()
        self._lock = threading.Lock()

    def load(self, key: str = DEFAULT_KEY) -> SessionStats | None:
        with self._lock:
            document = self._read()
        raw = document.get(key)
        if raw is None:
            return None
        return _decode(key, raw)

    def save(self, key: str, stats: SessionStats) -> None:
        with self._lock:
            document = self._read()
            document[key] = stats.to_dict()
            self._write(document)

    def clear(self, key: str = DEFAULT_KEY) -> None:
        with self._lock:
            document = self._read()
            if key not in document:
                return
            del document[key]
            self._write(document)

    def _read(self) -> dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable stats file", extra={"path": str(self.path), "error": str(exc)})
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring stats file with non-object payload", extra={"path": str(self.path)})
            return {}
        return data

    def _write(self, document: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=".rps-", suffix=".json", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(document, fh, indent=2, sort_keys=True)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            logger.warning("Failed to persist stats", extra={"path": str(self.path), "error": str(exc)})


def _decode(key: str, raw: Any) -> SessionStats | None:
    try:
        return SessionStats.from_mapping(raw)
    except ValueError as exc:
        logger.warning("Discarding invalid persisted stats", extra={"key": key, "error": str(exc)})
        return None
