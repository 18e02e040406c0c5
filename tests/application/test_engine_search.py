"""Testes do motor de conversa: busca por texto livre."""

from __future__ import annotations

import pytest

from domipets_bot.application.copy import DEFAULT_COPY
from domipets_bot.domain.session import ConversationState
from tests.helpers.conversation import PHONE, last_option_ids, reply, send, text

S = ConversationState


class TestSearch:
    @pytest.mark.asyncio
    async def test_search_lists_matching_products(self, engine, composer, session_store):
        """Resultados viram uma página de produtos com o termo no cursor."""
        result = await send(engine, text("hola"), reply("buscar_productos"), text("Croquetas"))

        assert result.state == S.BROWSE_PRODUCTS
        assert last_option_ids(composer)[:2] == ["prod_101", "prod_102"]
        assert session_store.load(PHONE).cursor.search_term == "Croquetas"

    @pytest.mark.asyncio
    async def test_search_matches_category_label(self, engine, composer):
        """O rótulo exibido da categoria também é pesquisável."""
        await send(engine, text("hola"), reply("buscar_productos"), text("alimento"))

        assert "prod_101" in last_option_ids(composer)

    @pytest.mark.asyncio
    async def test_keyword_inside_search_term_is_not_a_command(self, engine, composer):
        """"productos" dentro da frase não abre o catálogo."""
        result = await send(
            engine, text("hola"), reply("buscar_productos"), text("Productos para perro")
        )

        assert result.state == S.SEARCH
        assert composer.sent[-1][1].text == DEFAULT_COPY.search_no_results.format(
            term="Productos para perro"
        )

    @pytest.mark.asyncio
    async def test_product_from_results_can_be_added(self, engine, session_store):
        await send(engine, text("hola"), reply("buscar_productos"), text("arena"))
        result = await send(engine, reply("prod_201"), text("2"))

        assert result.state == S.BROWSE_PRODUCTS
        assert session_store.load(PHONE).cart[0].product_id == "201"

    @pytest.mark.asyncio
    async def test_back_from_results_returns_to_search(self, engine, session_store):
        """Voltar dos resultados pede outro termo."""
        await send(engine, text("hola"), reply("buscar_productos"), text("croquetas"))
        result = await send(engine, reply("volver"))

        assert result.state == S.SEARCH
        assert session_store.load(PHONE).cursor.search_term is None

    @pytest.mark.asyncio
    async def test_back_from_search_returns_to_menu(self, engine):
        result = await send(engine, text("hola"), reply("buscar_productos"), reply("volver"))

        assert result.state == S.MENU
