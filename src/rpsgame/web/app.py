from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from ..config import Settings, configure_logging
from ..core.messages import IDLE_MESSAGE, THINKING_MESSAGE
from ..core.models import PLACEHOLDER_EMOJI, THINKING_EMOJI
from ..features.session import JsonFileStore, MemoryStore, SessionManager, StatsStore, create_session_routers

__all__ = ["app", "build_manager", "create_app", "main", "templates"]

logger = logging.getLogger(__name__)

TITLE = "Rock Paper Scissors"
API_BASE = "/api/v1/session"

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def build_manager(settings: Settings) -> SessionManager:
    store: StatsStore
    if settings.store_path is None:
        store = MemoryStore()
    else:
        store = JsonFileStore(settings.store_path)
    return SessionManager(store, reveal_delay=settings.reveal_delay)


def create_app(settings: Settings | None = None, *, manager: SessionManager | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    manager = manager or build_manager(settings)

    application = FastAPI(title=TITLE)
    application.state.manager = manager
    application.state.settings = settings

    router_v1, router_legacy = create_session_routers(manager, templates)
    application.include_router(router_v1)
    application.include_router(router_legacy)

    @application.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @application.get("/", response_class=HTMLResponse)
    def index(request: Request) -> Response:
        return templates.TemplateResponse(
            request,
            "index.html",
            {
                "request": request,
                "title": TITLE,
                "api_base": API_BASE,
                "thinking": THINKING_EMOJI,
                "thinking_message": THINKING_MESSAGE,
                "placeholder": PLACEHOLDER_EMOJI,
                "idle_message": IDLE_MESSAGE,
            },
        )

    return application


app = create_app()


def main(settings: Settings | None = None) -> None:  # pragma: no cover - runner
    import uvicorn

    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)
    logger.info("Serving %s on %s:%s", TITLE, settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":  # pragma: no cover
    main()
