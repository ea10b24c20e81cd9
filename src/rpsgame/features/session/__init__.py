"""Session feature: service layer, persistence, schemas, and API router."""

from .router import create_session_routers
from .schemas import RoundPayload, SessionPayload, StatsPayload
from .service import GameSession, RoundInProgressError, SessionConfig, SessionManager
from .store import DEFAULT_KEY, JsonFileStore, MemoryStore, StatsStore

__all__ = [
    "DEFAULT_KEY",
    "GameSession",
    "JsonFileStore",
    "MemoryStore",
    "RoundInProgressError",
    "RoundPayload",
    "SessionConfig",
    "SessionManager",
    "SessionPayload",
    "StatsPayload",
    "StatsStore",
    "create_session_routers",
]
