"""OrderLedger em memória (dev/testes)."""

from __future__ import annotations

import itertools
import logging
import threading
from decimal import Decimal

from domipets_bot.domain.cart import CartLineItem
from domipets_bot.domain.ledger import Faq, Order, OrderLedger, SupportRequest
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

DEFAULT_FAQS: tuple[Faq, ...] = (
    Faq(
        question="¿Cuánto tarda el envío?",
        answer="Entregamos en 24 a 48 horas hábiles dentro de la ciudad.",
    ),
    Faq(
        question="¿Qué medios de pago aceptan?",
        answer="Pagas contra entrega en efectivo o con transferencia.",
    ),
    Faq(
        question="¿Puedo cambiar un producto?",
        answer="Sí, tienes 5 días para cambios si el empaque está sellado.",
    ),
)


class InMemoryOrderLedger(OrderLedger):
    def __init__(self, faqs: list[Faq] | None = None) -> None:
        self._orders: dict[str, Order] = {}
        self._support: list[SupportRequest] = []
        self._faqs = list(DEFAULT_FAQS if faqs is None else faqs)
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def create_order(
        self, identifier: str, items: list[CartLineItem], total: Decimal
    ) -> str:
        with self._lock:
            order_id = str(next(self._ids))
            self._orders[order_id] = Order(
                id=order_id,
                identifier=identifier,
                items=[item.model_copy() for item in items],
                total=total,
            )
        logger.info(
            "order_created",
            extra={"order_id": order_id, "identifier": mask_identifier(identifier)},
        )
        return order_id

    def get_order(self, identifier: str, order_id: str) -> Order | None:
        order = self._orders.get(order_id)
        if order is None or order.identifier != identifier:
            return None
        return order

    def create_support_request(self, identifier: str, message: str) -> str:
        with self._lock:
            request_id = str(next(self._ids))
            self._support.append(
                SupportRequest(id=request_id, identifier=identifier, message=message)
            )
        return request_id

    def list_faqs(self, limit: int) -> list[Faq]:
        return self._faqs[:limit]

    @property
    def orders(self) -> list[Order]:
        return list(self._orders.values())

    @property
    def support_requests(self) -> list[SupportRequest]:
        return list(self._support)
