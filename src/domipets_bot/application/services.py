"""Acesso assíncrono ao ledger e guarda de commit de pedido.

Os backends de ledger e dedupe são síncronos (SQLAlchemy, redis-py);
aqui eles são chamados fora do event loop.
"""

from __future__ import annotations

import logging
from decimal import Decimal

import anyio

from domipets_bot.domain.cart import CartLineItem
from domipets_bot.domain.ledger import Faq, Order, OrderLedger
from domipets_bot.infra.dedupe import DedupeStore
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

ORDER_COMMIT_PREFIX = "order-commit:"


class LedgerService:
    """Fachada async do OrderLedger."""

    def __init__(self, ledger: OrderLedger) -> None:
        self._ledger = ledger

    async def create_order(
        self, identifier: str, items: list[CartLineItem], total: Decimal
    ) -> str:
        return await anyio.to_thread.run_sync(self._ledger.create_order, identifier, items, total)

    async def get_order(self, identifier: str, order_id: str) -> Order | None:
        return await anyio.to_thread.run_sync(self._ledger.get_order, identifier, order_id)

    async def create_support_request(self, identifier: str, message: str) -> str:
        return await anyio.to_thread.run_sync(
            self._ledger.create_support_request, identifier, message
        )

    async def list_faqs(self, limit: int) -> list[Faq]:
        return await anyio.to_thread.run_sync(self._ledger.list_faqs, limit)


class CommitGuard:
    """Garante no máximo um commit por token de pedido (entre instâncias)."""

    def __init__(self, dedupe_store: DedupeStore) -> None:
        self._dedupe = dedupe_store

    @staticmethod
    def key_for(order_token: str) -> str:
        return f"{ORDER_COMMIT_PREFIX}{order_token}"

    async def acquire(self, order_token: str) -> bool:
        """True se este é o primeiro commit do token."""
        return await anyio.to_thread.run_sync(self._dedupe.mark_if_new, self.key_for(order_token))

    async def release(self, order_token: str) -> None:
        """Libera o token quando a gravação do pedido falhou."""
        released = await anyio.to_thread.run_sync(self._dedupe.clear, self.key_for(order_token))
        logger.info("order_commit_released", extra={"released": released})
