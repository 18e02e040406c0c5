"""CatalogGateway sobre o catálogo Meta Commerce (Graph API).

A Graph API devolve produtos planos; a taxonomia vem do campo ``category``
no formato ``"Principal - Segmento - Subtipo"`` (partes ausentes colapsam
os níveis correspondentes). Como a API não informa tamanhos nem estoque,
cada produto tem o tamanho único ``Única`` com estoque fixo quando
``availability == "in stock"``.
"""

from __future__ import annotations

import logging
import re
import time
from decimal import Decimal, InvalidOperation
from typing import Any

from domipets_bot.domain.catalog import DEFAULT_SIZE, CatalogError, Product
from domipets_bot.infra.catalog_memory import InMemoryCatalogGateway
from domipets_bot.infra.http import HttpClient, HttpError
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

PRODUCT_FIELDS = "id,name,description,price,sale_price,availability,category,image_url"
_NON_NUMERIC = re.compile(r"[^0-9.\-]+")


def parse_graph_price(raw: Any) -> Decimal | None:
    """Converte preços formatados da Graph API (``"$68,000.00 COP"``)."""
    if raw is None:
        return None
    if isinstance(raw, int | float):
        return Decimal(str(raw))
    cleaned = _NON_NUMERIC.sub("", str(raw))
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def product_from_graph(item: dict[str, Any], in_stock_units: int) -> Product:
    parts = [part.strip() for part in (item.get("category") or "").split(" - ") if part.strip()]
    stock = in_stock_units if item.get("availability") == "in stock" else 0
    return Product(
        id=str(item["id"]),
        title=item.get("name") or "",
        description=item.get("description") or "Sin descripción",
        price=parse_graph_price(item.get("price")) or Decimal("0"),
        special_price=parse_graph_price(item.get("sale_price")),
        sizes=[DEFAULT_SIZE],
        stock_by_size={DEFAULT_SIZE: stock},
        image_url=item.get("image_url"),
        category=parts[0] if parts else "Otros",
        segment=parts[1] if len(parts) > 1 else None,
        subtype=parts[2] if len(parts) > 2 else None,
    )


class GraphCatalogGateway(InMemoryCatalogGateway):
    """Lê o catálogo da Meta, com cache curto da listagem completa."""

    def __init__(
        self,
        http_client: HttpClient,
        api_endpoint: str,
        catalog_id: str,
        access_token: str,
        in_stock_units: int = 10,
        cache_ttl_seconds: float = 300.0,
        page_limit: int = 100,
    ) -> None:
        super().__init__(products=[])
        self._http = http_client
        self._api_endpoint = api_endpoint.rstrip("/")
        self._catalog_id = catalog_id
        self._access_token = access_token
        self._in_stock_units = in_stock_units
        self._cache_ttl_seconds = cache_ttl_seconds
        self._page_limit = page_limit
        self._loaded_at: float | None = None

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._http.get(url, params=params, headers=self._headers)
            return response.json()
        except (HttpError, ValueError) as e:
            logger.error(
                "Falha ao consultar catálogo Meta",
                extra={"catalog_id": self._catalog_id, "error": str(e)},
            )
            raise CatalogError(f"Graph catalog request failed: {e}") from e

    async def _fetch_all(self) -> list[Product]:
        url = f"{self._api_endpoint}/{self._catalog_id}/products"
        params: dict[str, Any] = {"fields": PRODUCT_FIELDS, "limit": self._page_limit}
        products: list[Product] = []
        while True:
            data = await self._get_json(url, params)
            products.extend(
                product_from_graph(item, self._in_stock_units) for item in data.get("data", [])
            )
            after = ((data.get("paging") or {}).get("cursors") or {}).get("after")
            if not after or not (data.get("paging") or {}).get("next"):
                break
            params = {**params, "after": after}
        logger.info(
            "Catálogo Meta carregado",
            extra={"catalog_id": self._catalog_id, "products": len(products)},
        )
        return products

    async def _all_products(self) -> list[Product]:
        now = time.monotonic()
        if self._loaded_at is None or now - self._loaded_at > self._cache_ttl_seconds:
            self._products = await self._fetch_all()
            self._loaded_at = now
        return self._products

    async def get_product(self, product_id: str) -> Product | None:
        """Leitura direta: preço e disponibilidade sempre atuais."""
        if not product_id.isdigit():
            return None
        url = f"{self._api_endpoint}/{product_id}"
        try:
            response = await self._http.get(
                url, params={"fields": PRODUCT_FIELDS}, headers=self._headers
            )
        except HttpError as e:
            if e.status_code in (400, 404):
                return None
            raise CatalogError(f"Graph product request failed: {e}") from e
        try:
            return product_from_graph(response.json(), self._in_stock_units)
        except (ValueError, KeyError) as e:
            raise CatalogError(f"Graph product payload invalid: {e}") from e

    async def close(self) -> None:
        await self._http.close()
