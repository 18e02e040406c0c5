"""Notificação best-effort ao operador (atendente humano)."""

from __future__ import annotations

import asyncio
import logging

from domipets_bot.domain.protocols import Composer
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class OperatorNotifier:
    """Agenda a entrega sem bloquear o handler.

    Falhas são registradas e nunca propagadas; sem telefone configurado a
    notificação é ignorada.
    """

    def __init__(self, composer: Composer, operator_identifier: str | None) -> None:
        self._composer = composer
        self._operator = operator_identifier
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def enabled(self) -> bool:
        return bool(self._operator)

    def notify(self, text: str) -> asyncio.Task[None] | None:
        if not self._operator:
            return None
        task = asyncio.create_task(self._deliver(self._operator, text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _deliver(self, operator: str, text: str) -> None:
        try:
            await self._composer.dispatch(operator, ResponseDescriptor(text=text))
        except Exception as exc:  # pragma: no cover - log + swallow
            logger.warning("operator_notification_failed", extra={"error_type": type(exc).__name__})

    async def drain(self) -> None:
        """Aguarda notificações pendentes (shutdown e testes)."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
