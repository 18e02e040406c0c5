"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from datetime import timedelta
from typing import Any

import redis
from fastapi import FastAPI

from domipets_bot.adapters.whatsapp.composer import create_composer
from domipets_bot.api.routes import debug_router, router
from domipets_bot.application.context import EngineConfig
from domipets_bot.application.engine import ConversationEngine
from domipets_bot.application.notifier import OperatorNotifier
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.config.settings import Settings, get_settings
from domipets_bot.infra.catalog import create_catalog_gateway
from domipets_bot.infra.db import create_db_engine, create_session_factory, init_schema
from domipets_bot.infra.dedupe import create_dedupe_store
from domipets_bot.infra.ledger import create_order_ledger
from domipets_bot.infra.session_store import create_session_store
from domipets_bot.observability.logging import configure_logging, get_logger
from domipets_bot.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def _create_redis_client(redis_url: str | None):
    """Cria cliente Redis se URL disponível."""
    if not redis_url:
        return None
    return redis.from_url(redis_url, decode_responses=True)


def _create_firestore_client(settings: Settings) -> Any:
    from google.cloud import firestore

    return firestore.Client(
        project=settings.firestore_project_id,
        database=settings.firestore_database_id,
    )


def _uses_backend(settings: Settings, name: str, *fields: str) -> bool:
    return any(getattr(settings, f).lower() == name for f in fields)


async def sweep_periodically(manager: SessionManager, settings: Settings) -> None:
    """Remove sessões antigas a cada intervalo; falhas só geram log."""
    interval = settings.session_sweep_interval_seconds
    max_age = timedelta(minutes=settings.session_retention_minutes)
    while True:
        await asyncio.sleep(interval)
        try:
            await manager.sweep_inactive(max_age)
        except Exception as exc:  # noqa: BLE001
            logger.error("session_sweep_failed", extra={"error": type(exc).__name__})


@contextlib.asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings: Settings = app.state.settings
    sweeper: asyncio.Task | None = None
    if settings.session_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(sweep_periodically(app.state.session_manager, settings))
    try:
        yield
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await app.state.engine.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name, settings.environment)

    validation_errors = settings.validate_all()
    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=_lifespan)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)
    if settings.debug_endpoints_active:
        app.include_router(debug_router)

    redis_client = None
    if _uses_backend(settings, "redis", "session_store_backend", "dedupe_backend"):
        redis_client = _create_redis_client(settings.redis_url)

    firestore_client = None
    if _uses_backend(settings, "firestore", "session_store_backend"):
        firestore_client = _create_firestore_client(settings)

    session_factory = None
    if _uses_backend(settings, "sql", "session_store_backend", "ledger_backend"):
        db_engine = create_db_engine(settings.database_url or "")
        init_schema(db_engine)
        session_factory = create_session_factory(db_engine)

    session_store = create_session_store(
        settings,
        redis_client=redis_client,
        firestore_client=firestore_client,
        session_factory=session_factory,
    )
    composer = create_composer(settings)

    app.state.settings = settings
    app.state.dedupe_store = create_dedupe_store(settings, redis_client=redis_client)
    app.state.session_manager = SessionManager(session_store)
    app.state.composer = composer
    app.state.engine = ConversationEngine(
        sessions=app.state.session_manager,
        catalog=create_catalog_gateway(settings),
        ledger=create_order_ledger(settings, session_factory=session_factory),
        composer=composer,
        dedupe_store=app.state.dedupe_store,
        config=EngineConfig.from_settings(settings),
        notifier=OperatorNotifier(composer, settings.operator_phone_number),
    )

    logger.info(
        "app_created",
        extra={
            "environment": settings.environment,
            "session_store_backend": settings.session_store_backend,
            "ledger_backend": settings.ledger_backend,
            "catalog_backend": settings.catalog_backend,
            "outbound_backend": settings.outbound_backend,
        },
    )
    return app


app = create_app()
