"""Registro versionado da sessão de conversa.

A sessão é o único estado mutável do bot: estado atual, carrinho, cursor
do catálogo, seleção em andamento e contadores. É serializada em JSON
pelos session stores (memória, Redis, Firestore, SQL).
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from domipets_bot.domain.cart import CartLineItem
from domipets_bot.domain.catalog import Product
from domipets_bot.domain.enums import SupportAction
from domipets_bot.domain.ledger import Faq
from domipets_bot.domain.session.states import INITIAL_STATE, ConversationState

CURRENT_SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class CatalogCursor(BaseModel):
    """Posição atual no catálogo (filtros + paginação)."""

    offset: int = Field(default=0, ge=0)
    category: str | None = None
    segment: str | None = None
    subtype: str | None = None
    search_term: str | None = None


class ConversationSession(BaseModel):
    """Sessão de um cliente (chave = telefone)."""

    schema_version: int = CURRENT_SCHEMA_VERSION
    identifier: str
    state: ConversationState = INITIAL_STATE
    cart: list[CartLineItem] = Field(default_factory=list)
    cursor: CatalogCursor = Field(default_factory=CatalogCursor)
    catalog_visited: bool = False
    selected_product: Product | None = None
    selected_size: str | None = None
    support_action: SupportAction | None = None
    faqs: list[Faq] = Field(default_factory=list)
    error_count: int = Field(default=0, ge=0)
    pending_order_token: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    last_activity_at: datetime = Field(default_factory=_utcnow)

    @classmethod
    def new(
        cls,
        identifier: str,
        state: ConversationState = INITIAL_STATE,
        now: datetime | None = None,
    ) -> ConversationSession:
        moment = now or _utcnow()
        return cls(identifier=identifier, state=state, created_at=moment, last_activity_at=moment)

    @property
    def cart_total(self) -> Decimal:
        return sum((line.line_total for line in self.cart), Decimal("0"))

    def quantity_in_cart(self, product_id: str, size: str) -> int:
        return sum(
            line.quantity
            for line in self.cart
            if line.product_id == product_id and line.size == size
        )

    def touch(self, now: datetime | None = None) -> None:
        self.last_activity_at = now or _utcnow()

    def clear_selection(self) -> None:
        self.selected_product = None
        self.selected_size = None

    def clear_support(self) -> None:
        self.support_action = None
        self.faqs = []


class SessionSummary(BaseModel):
    """Resumo usado pelos endpoints de diagnóstico."""

    identifier: str
    state: str
    support_action: str | None = None
    cart_items: int = 0
    last_activity_at: datetime
