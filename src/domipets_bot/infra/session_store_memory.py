"""Implementação de SessionStore em memória (apenas dev/testes)."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any

from domipets_bot.domain.session import ConversationSession, SessionSummary, session_from_payload
from domipets_bot.infra.session_contract import SessionStore, cutoff_for, summarize
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)


class InMemorySessionStore(SessionStore):
    """Armazenamento em memória (não usar em produção).

    Guarda o payload serializado: cada load devolve uma cópia de trabalho
    independente.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def save(self, session: ConversationSession) -> None:
        payload = session.model_dump(mode="json")
        with self._lock:
            self._sessions[session.identifier] = payload
        logger.debug(
            "Session saved (in-memory)",
            extra={"identifier": mask_identifier(session.identifier)},
        )

    def load(self, identifier: str) -> ConversationSession | None:
        with self._lock:
            payload = self._sessions.get(identifier)
        if payload is None:
            logger.debug(
                "Session not found (in-memory)",
                extra={"identifier": mask_identifier(identifier)},
            )
            return None
        return session_from_payload(payload, identifier)

    def delete(self, identifier: str) -> bool:
        with self._lock:
            removed = self._sessions.pop(identifier, None)
        if removed is not None:
            logger.debug(
                "Session deleted (in-memory)",
                extra={"identifier": mask_identifier(identifier)},
            )
        return removed is not None

    def sweep_inactive(self, max_age: timedelta, now: datetime | None = None) -> int:
        cutoff = cutoff_for(max_age, now)
        with self._lock:
            stale = [
                identifier
                for identifier, payload in self._sessions.items()
                if session_from_payload(payload, identifier).last_activity_at < cutoff
            ]
            for identifier in stale:
                del self._sessions[identifier]
        return len(stale)

    def list_all(self) -> list[SessionSummary]:
        with self._lock:
            payloads = list(self._sessions.items())
        summaries = [summarize(session_from_payload(p, i)) for i, p in payloads]
        return sorted(summaries, key=lambda s: s.last_activity_at, reverse=True)
