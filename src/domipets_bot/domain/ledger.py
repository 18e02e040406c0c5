"""Contrato de pedidos, tickets de suporte e FAQs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from domipets_bot.domain.cart import CartLineItem

ORDER_STATUS_PENDING = "pending"
SUPPORT_STATUS_OPEN = "open"


class LedgerError(Exception):
    """Falha ao gravar ou ler pedidos/tickets."""


class Order(BaseModel):
    """Pedido registrado (nunca pago pelo bot)."""

    id: str
    identifier: str
    items: list[CartLineItem]
    total: Decimal
    status: str = ORDER_STATUS_PENDING
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class SupportRequest(BaseModel):
    """Ticket aberto para um atendente humano."""

    id: str
    identifier: str
    message: str
    status: str = SUPPORT_STATUS_OPEN
    created_at: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))


class Faq(BaseModel):
    question: str
    answer: str


class OrderLedger(ABC):
    """Contrato síncrono do registro de pedidos e suporte."""

    @abstractmethod
    def create_order(
        self, identifier: str, items: list[CartLineItem], total: Decimal
    ) -> str:
        """Grava um pedido pendente e retorna seu id."""

    @abstractmethod
    def get_order(self, identifier: str, order_id: str) -> Order | None:
        """Retorna o pedido somente se pertencer ao identificador."""

    @abstractmethod
    def create_support_request(self, identifier: str, message: str) -> str:
        """Grava um ticket de suporte e retorna seu id."""

    @abstractmethod
    def list_faqs(self, limit: int) -> list[Faq]:
        """Lista até ``limit`` perguntas frequentes."""
