"""Dedupe e idempotência.

Dois usos no bot:
- mensagens inbound repetidas pela Meta (chave = message id)
- guarda de commit de pedido (chave = ``order-commit:{token}``), garantindo
  que uma confirmação duplicada não grave o pedido duas vezes, mesmo entre
  instâncias

Redis é o backend de produção; em memória só para dev/testes.
Fail-closed: em staging/produção, erro do backend levanta DedupeError.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from domipets_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


class DedupeError(Exception):
    """Falha no backend de dedupe; em modo fail-closed o evento NÃO é processado."""


class DedupeStore(ABC):
    """Contrato abstrato para stores de deduplicação."""

    @abstractmethod
    def mark_if_new(self, key: str) -> bool:
        """Marca a chave se não existir (set-if-not-exists).

        Returns:
            True se a chave foi marcada agora (evento novo)
            False se a chave já existia (duplicado)

        Raises:
            DedupeError: Em caso de falha no backend (fail-closed)
        """
        ...

    @abstractmethod
    def clear(self, key: str) -> bool:
        """Remove uma chave (rollback quando o trabalho protegido falha)."""
        ...


@dataclass(slots=True)
class InMemoryDedupeStore(DedupeStore):
    """Dedupe em memória para desenvolvimento e testes.

    Não persiste entre restarts nem é compartilhado entre instâncias.
    """

    ttl_seconds: int = 86400
    _seen: dict[str, float] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def mark_if_new(self, key: str) -> bool:
        with self._lock:
            self._cleanup_expired()
            if key in self._seen:
                logger.debug(
                    "Dedupe hit (in-memory)",
                    extra={"key": key[:24], "is_duplicate": True},
                )
                return False
            self._seen[key] = time.time()
        return True

    def clear(self, key: str) -> bool:
        with self._lock:
            return self._seen.pop(key, None) is not None

    def _cleanup_expired(self) -> None:
        now = time.time()
        expired = [k for k, ts in self._seen.items() if now - ts > self.ttl_seconds]
        for k in expired:
            del self._seen[k]


class RedisDedupeStore(DedupeStore):
    """Dedupe via Redis: ``SET NX EX`` atômico, TTL nativo."""

    def __init__(
        self,
        redis_client: Any,
        ttl_seconds: int = 86400,
        fail_closed: bool = True,
        key_prefix: str = "dedupe:",
    ) -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds
        self._fail_closed = fail_closed
        self._key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    def mark_if_new(self, key: str) -> bool:
        try:
            was_set = self._redis.set(self._make_key(key), "1", nx=True, ex=self._ttl_seconds)
        except Exception as e:
            logger.error(
                "Erro em operação Redis",
                extra={"operation": "mark_if_new", "error_type": type(e).__name__},
            )
            if self._fail_closed:
                raise DedupeError(f"Falha ao verificar dedupe: {e}") from e
            return True

        is_new = bool(was_set)
        logger.debug(
            "Dedupe check (Redis)",
            extra={"key": key[:24], "is_duplicate": not is_new},
        )
        return is_new

    def clear(self, key: str) -> bool:
        try:
            return self._redis.delete(self._make_key(key)) > 0
        except Exception as e:
            logger.warning("Erro ao remover chave", extra={"error_type": type(e).__name__})
            return False


def create_dedupe_store(settings: Settings, redis_client: Any | None = None) -> DedupeStore:
    """Factory do store de dedupe conforme settings.dedupe_backend.

    Raises:
        ValueError: Se backend não reconhecido ou cliente Redis ausente
    """
    backend = settings.dedupe_backend.lower()
    if backend == "memory":
        logger.info(
            "Usando InMemoryDedupeStore (apenas dev/testes)",
            extra={"ttl_seconds": settings.dedupe_ttl_seconds},
        )
        return InMemoryDedupeStore(ttl_seconds=settings.dedupe_ttl_seconds)

    if backend == "redis":
        if redis_client is None:
            raise ValueError("REDIS_URL é obrigatório quando dedupe_backend=redis")
        fail_closed = settings.is_production or settings.is_staging
        logger.info(
            "Usando RedisDedupeStore",
            extra={"ttl_seconds": settings.dedupe_ttl_seconds, "fail_closed": fail_closed},
        )
        return RedisDedupeStore(
            redis_client,
            ttl_seconds=settings.dedupe_ttl_seconds,
            fail_closed=fail_closed,
        )

    raise ValueError(f"Backend de dedupe não reconhecido: {backend}")
