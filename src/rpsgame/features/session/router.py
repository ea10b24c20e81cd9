from __future__ import annotations

import json

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, field_validator, model_validator

from ...core.messages import IDLE_MESSAGE
from ...core.models import CHOICE_EMOJIS, CHOICES, PLACEHOLDER_EMOJI
from .schemas import RoundPayload, SessionPayload, StatsPayload
from .service import RoundInProgressError, SessionConfig, SessionManager, store_key_for

__all__ = ["CreateSessionRequest", "PlayRequest", "create_session_routers"]

_HX_HEADER = "HX-Request"

_EMOJI_BY_VALUE = {choice.value: emoji for choice, emoji in CHOICE_EMOJIS.items()}


class CreateSessionRequest(BaseModel):
    restore: bool | None = None
    profile: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, data: dict[str, object]) -> dict[str, object]:
        if not isinstance(data, dict):
            return data
        cleaned: dict[str, object] = dict(data)
        value = cleaned.get("restore")
        if value in (None, ""):
            cleaned["restore"] = None
        elif isinstance(value, str):
            cleaned["restore"] = value.strip().lower() not in {"0", "false", "no", "off"}
        return cleaned

    @model_validator(mode="after")
    def _normalize(self) -> CreateSessionRequest:
        if self.restore is None:
            self.restore = True
        profile = (self.profile or "").strip()
        self.profile = profile or None
        return self


class PlayRequest(BaseModel):
    choice: str

    @field_validator("choice", mode="before")
    @classmethod
    def _coerce_choice(cls, value: object) -> object:
        # keypad clients post 1-3 as numbers
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class _SessionController:
    def __init__(self, manager: SessionManager, templates: Jinja2Templates) -> None:
        self.manager = manager
        self.templates = templates

    # ------------------------------------------------------------------ helpers
    def _is_hx(self, request: Request) -> bool:
        return request.headers.get(_HX_HEADER, "").lower() == "true"

    def _json_response(self, data: dict[str, object]) -> JSONResponse:
        response = JSONResponse(data)
        response.headers.setdefault("Vary", _HX_HEADER)
        return response

    def _template_response(
        self,
        request: Request,
        template: str,
        context: dict[str, object],
        *,
        trigger: dict[str, str] | None = None,
    ) -> Response:
        headers: dict[str, str] = {"Vary": _HX_HEADER}
        if trigger:
            headers["HX-Trigger"] = json.dumps(trigger)
        return self.templates.TemplateResponse(
            request,
            template,
            {**context, "request": request},
            headers=headers,
        )

    def _board_fragment(self, request: Request, payload: SessionPayload) -> Response:
        return self._template_response(
            request,
            "session/board.html",
            {
                "session_id": payload.session,
                "stats": payload.stats,
                "choices": CHOICES,
                "emojis": _EMOJI_BY_VALUE,
                "placeholder": PLACEHOLDER_EMOJI,
                "message": IDLE_MESSAGE,
            },
            trigger={"sessionCreated": payload.session},
        )

    def _live_fragment(
        self,
        request: Request,
        stats: StatsPayload,
        result: RoundPayload | None,
        *,
        trigger: dict[str, str],
    ) -> Response:
        return self._template_response(
            request,
            "session/live.html",
            {
                "round": result,
                "stats": stats,
                "emojis": _EMOJI_BY_VALUE,
                "placeholder": PLACEHOLDER_EMOJI,
                "message": result.message if result else IDLE_MESSAGE,
            },
            trigger=trigger,
        )

    def _stats_fragment(self, request: Request, stats: StatsPayload) -> Response:
        return self._template_response(request, "session/stats.html", {"stats": stats})

    # ------------------------------------------------------------------ actions
    async def create(self, request: Request, body: CreateSessionRequest | None) -> Response:
        body = body or CreateSessionRequest()
        config = SessionConfig(restore=bool(body.restore), store_key=store_key_for(body.profile))
        session_id = await self.manager.create_session_async(config)
        payload = self.manager.session_payload(session_id)
        if self._is_hx(request):
            return self._board_fragment(request, payload)
        return self._json_response(payload.to_dict())

    async def stats(self, request: Request, sid: str) -> Response:
        try:
            stats = self.manager.stats(sid)
        except KeyError as exc:
            raise HTTPException(404, str(exc)) from exc
        if self._is_hx(request):
            return self._stats_fragment(request, stats)
        return self._json_response(stats.to_dict())

    async def play(self, request: Request, sid: str, body: PlayRequest) -> Response:
        try:
            result = await self.manager.play_round_async(sid, body.choice)
        except KeyError as exc:
            raise HTTPException(404, str(exc)) from exc
        except ValueError as exc:
            raise HTTPException(400, str(exc)) from exc
        except RoundInProgressError as exc:
            raise HTTPException(409, str(exc)) from exc
        if self._is_hx(request):
            return self._live_fragment(request, result.stats, result, trigger={"roundPlayed": sid})
        return self._json_response(result.to_dict())

    async def reset(self, request: Request, sid: str) -> Response:
        try:
            stats = await self.manager.reset_async(sid)
        except KeyError as exc:
            raise HTTPException(404, str(exc)) from exc
        except RoundInProgressError as exc:
            raise HTTPException(409, str(exc)) from exc
        if self._is_hx(request):
            return self._live_fragment(request, stats, None, trigger={"sessionReset": sid})
        return self._json_response(stats.to_dict())


def create_session_routers(
    manager: SessionManager,
    templates: Jinja2Templates,
) -> tuple[APIRouter, APIRouter]:
    controller = _SessionController(manager, templates)

    router_v1 = APIRouter(prefix="/api/v1/session", tags=["session"])
    router_legacy = APIRouter(prefix="/api/session", tags=["session-legacy"])

    @router_v1.post("")
    async def create_session(request: Request, body: CreateSessionRequest | None = None) -> Response:
        return await controller.create(request, body)

    @router_legacy.post("")
    async def create_session_legacy(request: Request, body: CreateSessionRequest | None = None) -> Response:
        return await controller.create(request, body)

    @router_v1.get("/{sid}/stats")
    async def get_stats(request: Request, sid: str) -> Response:
        return await controller.stats(request, sid)

    @router_legacy.get("/{sid}/stats")
    async def get_stats_legacy(request: Request, sid: str) -> Response:
        return await controller.stats(request, sid)

    @router_v1.post("/{sid}/play")
    async def post_play(request: Request, sid: str, body: PlayRequest) -> Response:
        return await controller.play(request, sid, body)

    @router_legacy.post("/{sid}/play")
    async def post_play_legacy(request: Request, sid: str, body: PlayRequest) -> Response:
        return await controller.play(request, sid, body)

    @router_v1.post("/{sid}/reset")
    async def post_reset(request: Request, sid: str) -> Response:
        return await controller.reset(request, sid)

    @router_legacy.post("/{sid}/reset")
    async def post_reset_legacy(request: Request, sid: str) -> Response:
        return await controller.reset(request, sid)

    return router_v1, router_legacy
