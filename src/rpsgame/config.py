"""Runtime settings read from the environment.

``BIND`` and ``PORT`` drive the web server; the ``RPS_*`` variables control
persistence, pacing and logging. CLI flags override whatever is read here.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Final

DEFAULT_STORE_PATH: Final = Path("~/.rpsgame/state.json")
DEFAULT_REVEAL_DELAY: Final = 0.8
DEFAULT_LOG_LEVEL: Final = "WARNING"


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0.0 else default


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    store_path: Path | None = DEFAULT_STORE_PATH
    reveal_delay: float = DEFAULT_REVEAL_DELAY
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        source = os.environ if env is None else env
        raw_store = source.get("RPS_STORE_PATH")
        if raw_store is None:
            store_path: Path | None = DEFAULT_STORE_PATH
        elif raw_store.strip():
            store_path = Path(raw_store.strip())
        else:
            store_path = None
        return cls(
            host=source.get("BIND", "0.0.0.0"),
            port=_env_int(source, "PORT", 8000),
            store_path=store_path.expanduser() if store_path is not None else None,
            reveal_delay=_env_float(source, "RPS_REVEAL_DELAY", DEFAULT_REVEAL_DELAY),
            log_level=(source.get("RPS_LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper(),
        )


def configure_logging(level: str | int) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
