"""Factory de SessionStore conforme SESSION_STORE_BACKEND."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from domipets_bot.infra.session_contract import SessionStore
from domipets_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.orm import sessionmaker

    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_session_store(
    settings: Settings,
    *,
    redis_client: Any | None = None,
    firestore_client: Any | None = None,
    session_factory: sessionmaker | None = None,
) -> SessionStore:
    """Cria o session store do backend configurado.

    Clientes de infraestrutura são injetados pelo app (um por processo).

    Raises:
        ValueError: backend desconhecido ou cliente ausente
    """
    backend = settings.session_store_backend.lower()
    retention_seconds = settings.session_retention_minutes * 60

    if backend == "memory":
        from domipets_bot.infra.session_store_memory import InMemorySessionStore

        logger.info("Usando InMemorySessionStore (apenas dev/testes)")
        return InMemorySessionStore()

    if backend == "redis":
        if redis_client is None:
            raise ValueError("redis_client é obrigatório para SESSION_STORE_BACKEND=redis")
        from domipets_bot.infra.session_store_redis import RedisSessionStore

        logger.info("Usando RedisSessionStore", extra={"ttl_seconds": retention_seconds})
        return RedisSessionStore(redis_client, ttl_seconds=retention_seconds)

    if backend == "firestore":
        if firestore_client is None:
            raise ValueError("firestore_client é obrigatório para SESSION_STORE_BACKEND=firestore")
        from domipets_bot.infra.session_store_firestore import FirestoreSessionStore

        logger.info(
            "Usando FirestoreSessionStore",
            extra={"collection": settings.sessions_collection},
        )
        return FirestoreSessionStore(
            firestore_client,
            collection=settings.sessions_collection,
            ttl_seconds=retention_seconds,
        )

    if backend == "sql":
        if session_factory is None:
            raise ValueError("session_factory é obrigatório para SESSION_STORE_BACKEND=sql")
        from domipets_bot.infra.session_store_sql import SqlSessionStore

        logger.info("Usando SqlSessionStore")
        return SqlSessionStore(session_factory)

    raise ValueError(f"Backend de session store não reconhecido: {backend}")
