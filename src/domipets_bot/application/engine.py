"""Motor de conversa: um turno por evento inbound.

Ordem de um turno (sob o lock do identificador):
1. carrega a sessão (cria em INIT se não existir)
2. sessão inativa além do limite: reset + "hola de nuevo", entrada descartada
3. normaliza a entrada em Command
4. "reiniciar" ignora o orçamento de erros; demais entradas passam por ele
5. despacha para o handler do estado atual
6. persiste a sessão
7. entrega a resposta ao Composer

Qualquer falha a partir do carregamento vira o caminho fatal: pedido de
desculpas, sessão apagada, erro não propagado ao transporte.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from domipets_bot.application import views
from domipets_bot.application.context import EngineConfig, TurnContext
from domipets_bot.application.handlers import HANDLERS, Handler
from domipets_bot.application.handlers.common import show_menu
from domipets_bot.application.locks import KeyedLock
from domipets_bot.application.normalizer import InputNormalizer
from domipets_bot.application.notifier import OperatorNotifier
from domipets_bot.application.services import CommitGuard, LedgerService
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.domain.catalog import CatalogGateway
from domipets_bot.domain.commands import Command, FreeText, is_action
from domipets_bot.domain.enums import ActionKind, SupportAction
from domipets_bot.domain.events import InboundEvent
from domipets_bot.domain.ledger import OrderLedger
from domipets_bot.domain.protocols import Composer
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import ConversationSession, ConversationState
from domipets_bot.infra.dedupe import DedupeStore
from domipets_bot.observability.logging import get_logger
from domipets_bot.observability.timing import timed
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

S = ConversationState


class TurnOutcome(StrEnum):
    """Como o turno terminou."""

    HANDLED = "handled"
    STALE_RESET = "stale_reset"
    RESTART = "restart"
    ERROR_BUDGET = "error_budget"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class TurnResult:
    identifier: str
    outcome: TurnOutcome
    response: ResponseDescriptor
    state: ConversationState | None = None
    """Estado persistido ao fim do turno; None quando a sessão foi apagada."""
    order_id: str | None = None


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def captures_free_text(session: ConversationSession) -> bool:
    """Estados em que texto livre é a resposta esperada."""
    if session.state == S.SEARCH:
        return True
    return session.state == S.SUPPORT and session.support_action in (
        SupportAction.CONTACT_AGENT,
        SupportAction.ORDER_STATUS,
    )


class ConversationEngine:
    """Máquina de estados da conversa de compra."""

    def __init__(
        self,
        sessions: SessionManager,
        catalog: CatalogGateway,
        ledger: OrderLedger,
        composer: Composer,
        dedupe_store: DedupeStore,
        config: EngineConfig | None = None,
        notifier: OperatorNotifier | None = None,
        locks: KeyedLock | None = None,
        clock: Callable[[], datetime] | None = None,
        handlers: dict[ConversationState, Handler] | None = None,
    ) -> None:
        self._sessions = sessions
        self._catalog = catalog
        self._ledger = LedgerService(ledger)
        self._commit_guard = CommitGuard(dedupe_store)
        self._composer = composer
        self._config = config or EngineConfig()
        self._notifier = notifier or OperatorNotifier(composer, None)
        self._locks = locks or KeyedLock()
        self._clock = clock or _utcnow
        self._handlers = handlers or HANDLERS
        self._normalizer = InputNormalizer(self._config.keywords)

    @property
    def config(self) -> EngineConfig:
        return self._config

    async def handle_event(self, event: InboundEvent) -> TurnResult:
        """Processa um evento inbound completo.

        Raises:
            ValueError: evento sem identificador (defeito do transporte)
        """
        if not event.identifier:
            raise ValueError("InboundEvent.identifier is required")

        identifier = event.identifier
        async with self._locks.hold(identifier):
            with timed("conversation_turn", identifier=mask_identifier(identifier)):
                try:
                    result = await self._run_turn(event)
                except Exception as exc:
                    result = await self._fatal(identifier, exc)
                await self._composer.dispatch(identifier, result.response)

        logger.info(
            "conversation_turn_completed",
            extra={
                "identifier": mask_identifier(identifier),
                "outcome": result.outcome.value,
                "state": result.state.value if result.state else None,
            },
        )
        return result

    async def _run_turn(self, event: InboundEvent) -> TurnResult:
        identifier = event.identifier
        copy = self._config.copy
        now = self._clock()
        session = await self._sessions.get_or_create(identifier)

        if self._is_stale(session, now):
            logger.info(
                "stale_session_reset",
                extra={
                    "identifier": mask_identifier(identifier),
                    "previous_state": session.state.value,
                },
            )
            session = await self._sessions.reset(identifier, now)
            return TurnResult(
                identifier=identifier,
                outcome=TurnOutcome.STALE_RESET,
                response=views.main_menu(copy, copy.welcome_back),
                state=session.state,
            )

        session.touch(now)
        command = self._normalizer.normalize(
            event.text,
            event.structured_reply,
            capture_free_text=captures_free_text(session),
        )

        if is_action(command, ActionKind.RESTART):
            session = await self._sessions.reset(identifier, now)
            return TurnResult(
                identifier=identifier,
                outcome=TurnOutcome.RESTART,
                response=views.main_menu(copy, copy.restart),
                state=session.state,
            )

        ctx = TurnContext(
            session=session,
            raw_text=(event.text or "").strip(),
            now=now,
            config=self._config,
            catalog=self._catalog,
            ledger=self._ledger,
            commit_guard=self._commit_guard,
            notifier=self._notifier,
        )

        if self._is_recognized(session, command):
            session.error_count = 0
        else:
            session.error_count += 1
            logger.info(
                "unrecognized_input",
                extra={
                    "identifier": mask_identifier(identifier),
                    "state": session.state.value,
                    "error_count": session.error_count,
                },
            )
            if session.error_count >= self._config.error_threshold:
                session.error_count = 0
                response = show_menu(ctx, copy.recovery)
                await self._sessions.persist(session)
                return TurnResult(
                    identifier=identifier,
                    outcome=TurnOutcome.ERROR_BUDGET,
                    response=response,
                    state=session.state,
                )

        handler = self._handlers[session.state]
        response = await handler(ctx, command)
        await self._sessions.persist(session)
        return TurnResult(
            identifier=identifier,
            outcome=TurnOutcome.HANDLED,
            response=response,
            state=session.state,
            order_id=ctx.order_id,
        )

    def _is_stale(self, session: ConversationSession, now: datetime) -> bool:
        if session.state == S.INIT:
            return False
        return now - session.last_activity_at > self._config.inactivity

    @staticmethod
    def _is_recognized(session: ConversationSession, command: Command) -> bool:
        if not isinstance(command, FreeText):
            return True
        return session.state == S.INIT or captures_free_text(session)

    async def _fatal(self, identifier: str, exc: Exception) -> TurnResult:
        logger.error(
            "conversation_turn_failed",
            extra={
                "identifier": mask_identifier(identifier),
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
        try:
            await self._sessions.discard(identifier)
        except Exception as cleanup_exc:  # pragma: no cover - log + continue
            logger.error(
                "fatal_session_reset_failed",
                extra={
                    "identifier": mask_identifier(identifier),
                    "error_type": type(cleanup_exc).__name__,
                },
            )
        return TurnResult(
            identifier=identifier,
            outcome=TurnOutcome.FATAL,
            response=ResponseDescriptor(text=self._config.copy.fatal),
        )

    async def close(self) -> None:
        await self._notifier.drain()
        await self._catalog.close()
        await self._composer.close()
