"""Rotas HTTP principais (webhook WhatsApp e diagnóstico)."""

from __future__ import annotations

import json
from datetime import timedelta
from typing import Any

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    HTTPException,
    Query,
    Request,
    Response,
    status,
)

from domipets_bot.adapters.whatsapp.inbound import extract_inbound_events
from domipets_bot.adapters.whatsapp.signature import verify_meta_signature
from domipets_bot.api.dependencies import (
    get_dedupe_store,
    get_engine,
    get_session_manager,
    get_settings,
)
from domipets_bot.application.engine import ConversationEngine
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.config.settings import Settings
from domipets_bot.domain.events import InboundEvent
from domipets_bot.infra.dedupe import DedupeError, DedupeStore
from domipets_bot.observability.logging import get_logger
from domipets_bot.observability.middleware import bind_correlation_id, get_correlation_id

logger = get_logger(__name__)

router = APIRouter()
debug_router = APIRouter(prefix="/debug", tags=["debug"])

PREVIEW_USER_AGENT = "facebookexternalhit"


def inbound_dedupe_key(message_id: str) -> str:
    return f"inbound:{message_id}"


async def process_inbound_events(
    engine: ConversationEngine, events: list[InboundEvent], correlation_id: str
) -> None:
    """Entrega os eventos ao motor, em ordem, fora do ciclo da request."""
    with bind_correlation_id(correlation_id):
        for event in events:
            await engine.handle_event(event)


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples para Cloud Run."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.get("/webhooks/whatsapp")
def whatsapp_verify(
    request: Request,
    hub_mode: str | None = Query(None, alias="hub.mode"),
    hub_verify_token: str | None = Query(None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(None, alias="hub.challenge"),
    settings: Settings = Depends(get_settings),
) -> Response:
    """Verificação de webhook exigida pela Meta."""
    if PREVIEW_USER_AGENT in request.headers.get("user-agent", "").lower():
        return Response(status_code=status.HTTP_200_OK)

    if not settings.whatsapp_verify_token:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="missing_verify_token",
        )

    if hub_mode != "subscribe" or hub_verify_token != settings.whatsapp_verify_token:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="verification_failed",
        )

    return Response(content=hub_challenge or "", media_type="text/plain")


@router.post("/webhooks/whatsapp")
async def whatsapp_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    dedupe_store: DedupeStore = Depends(get_dedupe_store),
    engine: ConversationEngine = Depends(get_engine),
) -> dict[str, Any]:
    """Recebe eventos do WhatsApp e agenda o processamento de cada mensagem nova."""
    raw_body = await request.body()
    signature_result = verify_meta_signature(
        raw_body, request.headers, settings.whatsapp_webhook_secret
    )

    if not signature_result.valid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_signature")

    try:
        payload = json.loads(raw_body or b"{}")
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_json") from exc

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_payload")

    correlation_id = get_correlation_id()
    events = extract_inbound_events(payload)
    accepted: list[InboundEvent] = []
    duplicates = 0
    for event in events:
        if event.message_id:
            try:
                is_new = dedupe_store.mark_if_new(inbound_dedupe_key(event.message_id))
            except DedupeError as exc:
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail={
                        "error": "inbound_dedupe_unavailable",
                        "correlation_id": correlation_id,
                    },
                ) from exc
            if not is_new:
                duplicates += 1
                logger.info("inbound_duplicate_skipped", extra={"message_id": event.message_id})
                continue
        accepted.append(event)

    if accepted:
        background_tasks.add_task(process_inbound_events, engine, accepted, correlation_id)

    return {
        "ok": True,
        "received": len(events),
        "accepted": len(accepted),
        "duplicates": duplicates,
        "correlation_id": correlation_id,
        "signature_validated": signature_result.valid and not signature_result.skipped,
        "signature_skipped": signature_result.skipped,
    }


@debug_router.get("/sessions")
async def list_sessions(
    session_manager: SessionManager = Depends(get_session_manager),
) -> list[dict[str, Any]]:
    """Resumo de todas as sessões persistidas (sem conteúdo de mensagens)."""
    summaries = await session_manager.list_all()
    return [summary.model_dump(mode="json") for summary in summaries]


@debug_router.post("/sessions/sweep")
async def sweep_sessions(
    max_age_minutes: int | None = Query(None, ge=0),
    settings: Settings = Depends(get_settings),
    session_manager: SessionManager = Depends(get_session_manager),
) -> dict[str, int]:
    """Remove sessões inativas há mais de ``max_age_minutes`` (padrão: retenção)."""
    minutes = (
        settings.session_retention_minutes if max_age_minutes is None else max_age_minutes
    )
    removed = await session_manager.sweep_inactive(timedelta(minutes=minutes))
    return {"removed": removed, "max_age_minutes": minutes}
