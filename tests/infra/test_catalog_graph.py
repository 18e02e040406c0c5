"""Testes para GraphCatalogGateway (transporte httpx simulado)."""

from __future__ import annotations

from decimal import Decimal

import httpx
import pytest

from domipets_bot.domain.catalog import CatalogError
from domipets_bot.infra.catalog_graph import (
    GraphCatalogGateway,
    parse_graph_price,
    product_from_graph,
)
from domipets_bot.infra.http import HttpClient, HttpClientConfig

API = "https://graph.facebook.com/v22.0"

PAGE_1 = {
    "data": [
        {
            "id": "11",
            "name": "Croquetas adulto",
            "price": "$68,000.00 COP",
            "sale_price": "$60,000.00 COP",
            "availability": "in stock",
            "category": "Pet Food - dog - Adulto",
        }
    ],
    "paging": {"cursors": {"after": "abc"}, "next": f"{API}/cat/products?after=abc"},
}
PAGE_2 = {
    "data": [
        {
            "id": "12",
            "name": "Arena",
            "price": "$30,000.00 COP",
            "availability": "out of stock",
            "category": "Litter - cat",
        }
    ],
    "paging": {"cursors": {"after": "def"}},
}


def _gateway(handler) -> GraphCatalogGateway:
    client = HttpClient(
        HttpClientConfig(max_retries=0, backoff_base_seconds=0),
        transport=httpx.MockTransport(handler),
    )
    return GraphCatalogGateway(client, API, catalog_id="cat", access_token="secret")


class TestParsing:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("$68,000.00 COP", Decimal("68000.00")),
            (15000, Decimal("15000")),
            (None, None),
            ("gratis", None),
        ],
    )
    def test_parse_graph_price(self, raw, expected):
        assert parse_graph_price(raw) == expected

    def test_product_from_graph(self):
        """Categoria "A - B - C" vira os três níveis; estoque fixo se disponível."""
        product = product_from_graph(PAGE_1["data"][0], in_stock_units=7)

        assert (product.category, product.segment, product.subtype) == (
            "Pet Food",
            "dog",
            "Adulto",
        )
        assert product.effective_price == Decimal("60000.00")
        assert product.stock_for("Única") == 7

    def test_out_of_stock_and_missing_category(self):
        product = product_from_graph({"id": "1", "name": "X", "availability": "out of stock"}, 7)

        assert product.category == "Otros"
        assert product.stock_for("Única") == 0


class TestGraphCatalogGateway:
    @pytest.mark.asyncio
    async def test_follows_pagination_and_caches(self):
        """Lê todas as páginas uma vez e reaproveita o cache."""
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            page = PAGE_2 if request.url.params.get("after") == "abc" else PAGE_1
            return httpx.Response(200, json=page)

        gateway = _gateway(handler)

        categories = await gateway.list_top_categories()
        segments = await gateway.list_segments("Litter")

        assert [c.value for c in categories] == ["Pet Food", "Litter"]
        assert [s.value for s in segments] == ["cat"]
        assert len(calls) == 2
        assert calls[0].headers["Authorization"] == "Bearer secret"
        assert calls[0].url.path == "/v22.0/cat/products"
        await gateway.close()

    @pytest.mark.asyncio
    async def test_get_product_reads_directly(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v22.0/11"
            return httpx.Response(200, json=PAGE_1["data"][0])

        product = await _gateway(handler).get_product("11")

        assert product.title == "Croquetas adulto"

    @pytest.mark.asyncio
    async def test_get_product_not_found(self):
        gateway = _gateway(lambda request: httpx.Response(404, json={"error": {}}))

        assert await gateway.get_product("11") is None
        assert await gateway.get_product("not-a-number") is None

    @pytest.mark.asyncio
    async def test_api_failure_is_catalog_error(self):
        """Erro da Graph API vira CatalogError (caminho fatal do motor)."""
        gateway = _gateway(lambda request: httpx.Response(500))

        with pytest.raises(CatalogError):
            await gateway.list_top_categories()
