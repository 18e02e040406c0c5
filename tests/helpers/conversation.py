"""Utilitários para testes do motor de conversa."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from domipets_bot.domain.catalog import Product
from domipets_bot.domain.enums import InteractiveType
from domipets_bot.domain.events import InboundEvent, StructuredReply
from domipets_bot.domain.responses import ResponseDescriptor

PHONE = "573001112233"
OPERATOR = "573009998877"


class FakeClock:
    """Relógio controlado pelos testes."""

    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def catalog_products() -> list[Product]:
    return [
        Product(
            id="101",
            title="Croquetas adulto",
            price=Decimal("50000"),
            category="Pet Food",
            segment="dog",
            subtype="Adulto",
            sizes=["2 kg", "8 kg"],
            stock_by_size={"2 kg": 5, "8 kg": 1},
        ),
        Product(
            id="102",
            title="Croquetas cachorro",
            price=Decimal("40000"),
            special_price=Decimal("35000"),
            category="Pet Food",
            segment="dog",
            subtype="Cachorro",
            stock_by_size={"Única": 3},
        ),
        Product(
            id="201",
            title="Arena aglomerante",
            price=Decimal("30000"),
            category="Litter",
            segment="cat",
        ),
    ]


def text(body: str, identifier: str = PHONE) -> InboundEvent:
    return InboundEvent(identifier=identifier, text=body)


def reply(reply_id: str, identifier: str = PHONE) -> InboundEvent:
    return InboundEvent(
        identifier=identifier,
        structured_reply=StructuredReply(InteractiveType.LIST, reply_id),
    )


async def send(engine, *events: InboundEvent):
    """Processa os eventos em ordem e devolve o último TurnResult."""
    result = None
    for event in events:
        result = await engine.handle_event(event)
    return result


def option_ids(descriptor: ResponseDescriptor) -> list[str]:
    """Ids oferecidos ao usuário: linhas da lista primeiro, depois botões."""
    ids = [row.id for row in descriptor.list_menu.rows] if descriptor.list_menu else []
    ids.extend(button.id for button in descriptor.buttons)
    return ids


def last_option_ids(composer) -> list[str]:
    return option_ids(composer.sent[-1][1])
