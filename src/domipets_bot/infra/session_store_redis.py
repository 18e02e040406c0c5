"""Implementação de SessionStore usando Redis (produção).

Layout:
- ``session:{identifier}``: payload JSON da sessão
- ``sessions:activity``: sorted set identifier → timestamp da última atividade,
  usado pela varredura de sessões abandonadas e pela listagem de diagnóstico
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta
from typing import Any

from domipets_bot.domain.session import ConversationSession, SessionSummary, session_from_payload
from domipets_bot.infra.session_contract import (
    SessionStore,
    SessionStoreError,
    cutoff_for,
    summarize,
)
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

ACTIVITY_INDEX_KEY = "sessions:activity"

# ARGV[1] = corte; ARGV[2..] = candidatos. Só remove quem ainda está abaixo do corte.
SWEEP_SCRIPT = """
local removed = 0
local cutoff = tonumber(ARGV[1])
for i = 2, #ARGV do
    local score = redis.call('ZSCORE', KEYS[1], ARGV[i])
    if score and tonumber(score) < cutoff then
        redis.call('DEL', 'session:' .. ARGV[i])
        redis.call('ZREM', KEYS[1], ARGV[i])
        removed = removed + 1
    end
end
return removed
"""


def _session_key(identifier: str) -> str:
    return f"session:{identifier}"


class RedisSessionStore(SessionStore):
    """Armazenamento em Redis com índice de atividade."""

    def __init__(self, redis_client: Any, ttl_seconds: int | None = None) -> None:
        self._redis = redis_client
        self._ttl_seconds = ttl_seconds
        self._sweep_script = redis_client.register_script(SWEEP_SCRIPT)

    def save(self, session: ConversationSession) -> None:
        key = _session_key(session.identifier)
        payload = session.model_dump_json()

        try:
            pipe = self._redis.pipeline()
            if self._ttl_seconds:
                pipe.setex(key, self._ttl_seconds, payload)
            else:
                pipe.set(key, payload)
            pipe.zadd(
                ACTIVITY_INDEX_KEY,
                {session.identifier: session.last_activity_at.timestamp()},
            )
            pipe.execute()
            logger.debug(
                "Session saved (Redis)",
                extra={"identifier": mask_identifier(session.identifier)},
            )
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to save session to Redis",
                extra={"identifier": mask_identifier(session.identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Redis save failed: {e}") from e

    def load(self, identifier: str) -> ConversationSession | None:
        try:
            payload = self._redis.get(_session_key(identifier))
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to load session from Redis",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Redis load failed: {e}") from e

        if not payload:
            logger.debug(
                "Session not found (Redis)", extra={"identifier": mask_identifier(identifier)}
            )
            return None

        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")

        try:
            return session_from_payload(json.loads(payload), identifier)
        except ValueError as e:
            logger.error(
                "Corrupted session payload (Redis)",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Redis payload invalid: {e}") from e

    def delete(self, identifier: str) -> bool:
        try:
            pipe = self._redis.pipeline()
            pipe.delete(_session_key(identifier))
            pipe.zrem(ACTIVITY_INDEX_KEY, identifier)
            deleted, _ = pipe.execute()
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error(
                "Failed to delete session from Redis",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise SessionStoreError(f"Redis delete failed: {e}") from e

        if deleted:
            logger.debug(
                "Session deleted (Redis)", extra={"identifier": mask_identifier(identifier)}
            )
        return bool(deleted)

    def exists(self, identifier: str) -> bool:
        try:
            return bool(self._redis.exists(_session_key(identifier)))
        except Exception as e:  # pragma: no cover - log + wrap
            raise SessionStoreError(f"Redis exists failed: {e}") from e

    def sweep_inactive(self, max_age: timedelta, now: datetime | None = None) -> int:
        cutoff = cutoff_for(max_age, now).timestamp()
        try:
            stale = self._redis.zrangebyscore(ACTIVITY_INDEX_KEY, "-inf", f"({cutoff}")
            if not stale:
                return 0
            # O score é conferido de novo no script: save concorrente vence a varredura.
            removed = self._sweep_script(keys=[ACTIVITY_INDEX_KEY], args=[cutoff, *stale])
        except Exception as e:  # pragma: no cover - log + wrap
            logger.error("Failed to sweep sessions in Redis", extra={"error": str(e)})
            raise SessionStoreError(f"Redis sweep failed: {e}") from e
        return int(removed)

    def list_all(self) -> list[SessionSummary]:
        try:
            identifiers = self._redis.zrevrange(ACTIVITY_INDEX_KEY, 0, -1)
            if not identifiers:
                return []
            payloads = self._redis.mget([_session_key(i) for i in identifiers])
        except Exception as e:  # pragma: no cover - log + wrap
            raise SessionStoreError(f"Redis list failed: {e}") from e

        summaries: list[SessionSummary] = []
        for identifier, payload in zip(identifiers, payloads, strict=True):
            if not payload:
                # Chave expirou pelo TTL; o índice é limpo na próxima varredura.
                continue
            summaries.append(summarize(session_from_payload(json.loads(payload), identifier)))
        return summaries
