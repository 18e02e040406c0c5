"""Testes do motor de conversa: confirmação e idempotência de pedidos."""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from domipets_bot.application.copy import DEFAULT_COPY
from domipets_bot.application.engine import ConversationEngine, TurnOutcome
from domipets_bot.application.services import CommitGuard
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.domain.ledger import LedgerError
from domipets_bot.domain.session import ConversationState
from domipets_bot.infra.ledger_memory import InMemoryOrderLedger
from tests.helpers.conversation import PHONE, reply, send, text

S = ConversationState


async def _reach_confirmation(engine):
    return await send(
        engine,
        text("hola"),
        reply("ver_catalogo"),
        reply("cat_Pet Food"),
        reply("seg_dog"),
        reply("sub_Adulto"),
        reply("prod_101"),
        reply("size_0"),
        text("2"),
        reply("ver_carrito"),
        reply("finalizar_pedido"),
    )


class FailingLedger(InMemoryOrderLedger):
    def create_order(self, identifier, items, total):
        raise LedgerError("database unavailable")


class TestOrderConfirmation:
    """Confirmação explícita do pedido."""

    @pytest.mark.asyncio
    async def test_checkout_requires_confirmation(self, engine, ledger, session_store):
        """Finalizar só abre a confirmação; nada é gravado ainda."""
        result = await _reach_confirmation(engine)

        assert result.state == S.CONFIRM_ORDER
        assert ledger.orders == []
        assert session_store.load(PHONE).pending_order_token

    @pytest.mark.asyncio
    async def test_confirm_records_order_and_clears_cart(
        self, engine, ledger, composer, session_store
    ):
        """Confirmar grava o pedido, limpa o carrinho e volta ao menu."""
        await _reach_confirmation(engine)
        result = await send(engine, reply("confirm_order"))

        assert result.state == S.MENU
        assert result.order_id == "1"
        assert len(ledger.orders) == 1
        order = ledger.orders[0]
        assert order.identifier == PHONE
        assert order.total == Decimal("100000")
        assert order.items[0].quantity == 2
        assert "Pedido #1 confirmado" in composer.sent[-1][1].text
        session = session_store.load(PHONE)
        assert session.cart == []
        assert session.pending_order_token is None

    @pytest.mark.asyncio
    async def test_other_input_cancels_confirmation(self, engine, ledger, session_store):
        """Qualquer outra entrada volta ao carrinho sem gravar."""
        await _reach_confirmation(engine)
        result = await send(engine, reply("ver_carrito"))

        assert result.state == S.VIEW_CART
        assert ledger.orders == []
        session = session_store.load(PHONE)
        assert session.pending_order_token is None
        assert len(session.cart) == 1


class TestOrderIdempotency:
    """Confirmação duplicada nunca grava dois pedidos."""

    @pytest.mark.asyncio
    async def test_duplicate_confirmation_is_not_recorded(
        self, engine, ledger, composer, session_store
    ):
        """Sessão antiga (outra instância) confirmando o mesmo pedido é recusada."""
        await _reach_confirmation(engine)
        stale_copy = session_store.load(PHONE)

        await send(engine, reply("confirm_order"))
        session_store.save(stale_copy)
        result = await send(engine, reply("confirm_order"))

        assert len(ledger.orders) == 1
        assert result.state == S.MENU
        assert result.order_id is None
        assert composer.sent[-1][1].text == DEFAULT_COPY.order_already_registered
        assert session_store.load(PHONE).cart == []

    @pytest.mark.asyncio
    async def test_simultaneous_confirmations_record_one_order(
        self, engine, ledger, composer, session_store
    ):
        """Dois "confirm" quase simultâneos gravam um único pedido."""
        await _reach_confirmation(engine)

        first, second = await asyncio.gather(
            engine.handle_event(reply("confirm_order")),
            engine.handle_event(reply("confirm_order")),
        )

        assert len(ledger.orders) == 1
        assert [first.order_id, second.order_id].count(None) == 1
        session = session_store.load(PHONE)
        assert session.state == S.MENU
        assert session.cart == []

    @pytest.mark.asyncio
    async def test_ledger_failure_releases_commit_guard(
        self, session_store, catalog, composer, dedupe_store, clock
    ):
        """Falha ao gravar deve liberar o token e seguir o caminho fatal."""
        engine = ConversationEngine(
            sessions=SessionManager(session_store),
            catalog=catalog,
            ledger=FailingLedger(),
            composer=composer,
            dedupe_store=dedupe_store,
            clock=clock,
        )
        await _reach_confirmation(engine)
        token = session_store.load(PHONE).pending_order_token

        result = await send(engine, reply("confirm_order"))

        assert result.outcome == TurnOutcome.FATAL
        assert dedupe_store.mark_if_new(CommitGuard.key_for(token)) is True
        assert session_store.load(PHONE) is None
