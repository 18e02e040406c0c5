"""OrderLedger em banco relacional (tabelas orders, support_requests, faqs)."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from domipets_bot.domain.cart import CartLineItem
from domipets_bot.domain.ledger import Faq, LedgerError, Order, OrderLedger
from domipets_bot.infra.db import FaqRow, OrderRow, SupportRequestRow, as_utc
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

# Maior valor da coluna INTEGER (PostgreSQL); ids acima disso não existem.
MAX_ORDER_ID = 2**31 - 1


class SqlOrderLedger(OrderLedger):
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def create_order(
        self, identifier: str, items: list[CartLineItem], total: Decimal
    ) -> str:
        row = OrderRow(
            phone=identifier,
            items=[item.model_dump(mode="json") for item in items],
            total=total,
        )
        try:
            with self._session_factory.begin() as db:
                db.add(row)
                db.flush()
                order_id = str(row.id)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create order",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise LedgerError(f"SQL order insert failed: {e}") from e

        logger.info(
            "order_created",
            extra={"order_id": order_id, "identifier": mask_identifier(identifier)},
        )
        return order_id

    def get_order(self, identifier: str, order_id: str) -> Order | None:
        if not (order_id.isascii() and order_id.isdigit()):
            return None
        numeric_id = int(order_id)
        if numeric_id > MAX_ORDER_ID:
            return None
        try:
            with self._session_factory() as db:
                row = db.scalars(
                    select(OrderRow).where(
                        OrderRow.id == numeric_id, OrderRow.phone == identifier
                    )
                ).first()
                if row is None:
                    return None
                return Order(
                    id=str(row.id),
                    identifier=row.phone,
                    items=[CartLineItem.model_validate(item) for item in row.items],
                    total=row.total,
                    status=row.status,
                    created_at=as_utc(row.created_at),
                )
        except SQLAlchemyError as e:
            raise LedgerError(f"SQL order lookup failed: {e}") from e

    def create_support_request(self, identifier: str, message: str) -> str:
        row = SupportRequestRow(phone=identifier, message=message)
        try:
            with self._session_factory.begin() as db:
                db.add(row)
                db.flush()
                return str(row.id)
        except SQLAlchemyError as e:
            logger.error(
                "Failed to create support request",
                extra={"identifier": mask_identifier(identifier), "error": str(e)},
            )
            raise LedgerError(f"SQL support insert failed: {e}") from e

    def list_faqs(self, limit: int) -> list[Faq]:
        try:
            with self._session_factory() as db:
                rows = db.scalars(select(FaqRow).order_by(FaqRow.id).limit(limit)).all()
                return [Faq(question=row.question, answer=row.answer) for row in rows]
        except SQLAlchemyError as e:
            raise LedgerError(f"SQL faq query failed: {e}") from e
