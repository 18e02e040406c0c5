"""Contrato de persistência de sessão (SessionStore).

Separado para manter SRP e permitir reuso entre implementações.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

from domipets_bot.domain.session import ConversationSession, SessionSummary
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class SessionStoreError(Exception):
    """Erro ao persistir ou recuperar sessão."""


def summarize(session: ConversationSession) -> SessionSummary:
    """Resumo sem PII de conteúdo (só estado e contadores)."""
    return SessionSummary(
        identifier=session.identifier,
        state=session.state.value,
        support_action=session.support_action.value if session.support_action else None,
        cart_items=len(session.cart),
        last_activity_at=session.last_activity_at,
    )


def cutoff_for(max_age: timedelta, now: datetime | None = None) -> datetime:
    """Instante antes do qual uma sessão é considerada abandonada."""
    return (now or datetime.now(tz=UTC)) - max_age


class SessionStore(ABC):
    """Contrato abstrato para armazenamento de ConversationSession.

    A chave é o identificador do cliente (telefone). Implementações devem
    levantar SessionStoreError em falhas de backend.
    """

    @abstractmethod
    def save(self, session: ConversationSession) -> None:
        """Persiste a sessão (upsert)."""
        ...

    @abstractmethod
    def load(self, identifier: str) -> ConversationSession | None:
        """Carrega sessão por identificador."""
        ...

    @abstractmethod
    def delete(self, identifier: str) -> bool:
        """Remove sessão do armazenamento."""
        ...

    @abstractmethod
    def sweep_inactive(self, max_age: timedelta, now: datetime | None = None) -> int:
        """Remove sessões sem atividade há mais de ``max_age``; retorna a contagem."""
        ...

    @abstractmethod
    def list_all(self) -> list[SessionSummary]:
        """Lista resumos de todas as sessões (diagnóstico, mais recentes primeiro)."""
        ...

    def exists(self, identifier: str) -> bool:
        return self.load(identifier) is not None

    def get(self, identifier: str) -> ConversationSession:
        """Carrega a sessão ou cria uma nova em INIT (sem persistir)."""
        session = self.load(identifier)
        if session is not None:
            return session
        return ConversationSession.new(identifier)
