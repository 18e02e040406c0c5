"""SessionManager: ciclo de vida da sessão sobre um SessionStore síncrono.

Centraliza load/create, reset, persistência e varredura. As chamadas ao
store (Redis, Firestore, SQL) rodam fora do event loop via anyio.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import anyio

from domipets_bot.domain.session import ConversationSession, ConversationState, SessionSummary
from domipets_bot.infra.session_contract import SessionStore
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier


class SessionManager:
    """Load/create, reset, persist e sweep assíncronos."""

    def __init__(self, session_store: SessionStore, logger: logging.Logger | None = None) -> None:
        self._sessions = session_store
        self._logger = logger or get_logger(__name__)

    @property
    def store(self) -> SessionStore:
        return self._sessions

    async def get_or_create(self, identifier: str) -> ConversationSession:
        """Carrega a sessão ou cria uma nova em INIT (ainda não persistida).

        Raises:
            SessionStoreError: falha do backend (tratada pelo motor como fatal)
        """
        session = await anyio.to_thread.run_sync(self._sessions.load, identifier)
        if session is not None:
            self._logger.debug(
                "Session loaded", extra={"identifier": mask_identifier(identifier)}
            )
            return session

        self._logger.info("New session created", extra={"identifier": mask_identifier(identifier)})
        return ConversationSession.new(identifier)

    async def persist(self, session: ConversationSession) -> None:
        await anyio.to_thread.run_sync(self._sessions.save, session)

    async def discard(self, identifier: str) -> bool:
        return await anyio.to_thread.run_sync(self._sessions.delete, identifier)

    async def reset(self, identifier: str, now: datetime | None = None) -> ConversationSession:
        """Apaga o registro e persiste uma sessão nova já no MENU."""
        await self.discard(identifier)
        session = ConversationSession.new(identifier, state=ConversationState.MENU, now=now)
        await self.persist(session)
        self._logger.info("Session reset", extra={"identifier": mask_identifier(identifier)})
        return session

    async def sweep_inactive(self, max_age: timedelta) -> int:
        removed = await anyio.to_thread.run_sync(self._sessions.sweep_inactive, max_age)
        self._logger.info(
            "Inactive sessions swept",
            extra={"removed": removed, "max_age_minutes": max_age.total_seconds() / 60},
        )
        return removed

    async def list_all(self) -> list[SessionSummary]:
        return await anyio.to_thread.run_sync(self._sessions.list_all)
