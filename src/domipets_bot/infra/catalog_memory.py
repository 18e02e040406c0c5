"""CatalogGateway sobre uma lista de produtos em memória.

A taxonomia é derivada dos campos ``category``/``segment``/``subtype`` dos
produtos. Também serve de base para o gateway da Graph API, que só troca a
origem da lista.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal
from pathlib import Path

from domipets_bot.domain.catalog import CatalogError, CatalogGateway, CatalogOption, Product
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

CATEGORY_LABELS: dict[str, str] = {
    "Litter": "🏖️ Areneras",
    "Pet Food": "🍖 Alimento Seco",
    "Pet Treats": "🍬 Snacks",
    "Accessories": "🎁 Accesorios",
    "Supplements": "💊 Suplementos",
    "Wet Food": "🥫 Comida Húmeda",
}

SEGMENT_LABELS: dict[str, str] = {
    "cat": "🐱 Gato",
    "dog": "🐶 Perro",
}


def option_label(value: str, labels: dict[str, str]) -> str:
    return labels.get(value) or labels.get(value.lower()) or value


def _distinct(values: list[str | None]) -> list[str]:
    seen: list[str] = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _matches(product: Product, category: str | None, segment: str | None, subtype: str | None):
    return (
        (category is None or product.category == category)
        and (segment is None or product.segment == segment)
        and (subtype is None or product.subtype == subtype)
    )


def _demo_products() -> list[Product]:
    def p(pid, title, price, category, segment, subtype=None, sizes=None, stock=None, **kw):
        return Product(
            id=pid,
            title=title,
            price=Decimal(price),
            category=category,
            segment=segment,
            subtype=subtype,
            sizes=sizes or [],
            stock_by_size=stock or {},
            **kw,
        )

    return [
        p("1001", "Arena aglomerante 10 kg", "42000", "Litter", "cat",
          stock={"Única": 15}),
        p("2001", "Croquetas adulto pollo", "68000", "Pet Food", "dog", "Adulto",
          sizes=["2 kg", "8 kg", "15 kg"], stock={"2 kg": 20, "8 kg": 6, "15 kg": 2}),
        p("2002", "Croquetas cachorro", "72000", "Pet Food", "dog", "Cachorro",
          sizes=["2 kg", "8 kg"], stock={"2 kg": 12, "8 kg": 4},
          special_price=Decimal("65000")),
        p("2003", "Croquetas gato esterilizado", "59000", "Pet Food", "cat", "Adulto",
          sizes=["1.5 kg", "7 kg"], stock={"1.5 kg": 10, "7 kg": 3}),
        p("3001", "Snack dental", "15000", "Pet Treats", "dog", stock={"Única": 40}),
        p("3002", "Snack cremoso atún", "9000", "Pet Treats", "cat", stock={"Única": 30}),
        p("4001", "Collar reflectivo", "25000", "Accessories", "dog",
          sizes=["S", "M", "L"], stock={"S": 5, "M": 5, "L": 0}),
        p("6001", "Lata salmón 85 g", "6500", "Wet Food", "cat"),
    ]


class InMemoryCatalogGateway(CatalogGateway):
    """Catálogo local (dev/testes ou catálogos pequenos carregados de JSON)."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self._products = list(_demo_products() if products is None else products)

    @classmethod
    def from_json(cls, path: str | Path) -> InMemoryCatalogGateway:
        """Carrega produtos de um arquivo JSON (lista de objetos Product)."""
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
            products = [Product.model_validate(item) for item in raw]
        except (OSError, ValueError) as e:
            raise CatalogError(f"Não foi possível carregar o catálogo: {e}") from e
        logger.info("Catálogo carregado de arquivo", extra={"products": len(products)})
        return cls(products)

    async def _all_products(self) -> list[Product]:
        return self._products

    async def list_top_categories(self, segment: str | None = None) -> list[CatalogOption]:
        products = await self._all_products()
        values = _distinct([p.category for p in products if _matches(p, None, segment, None)])
        return [CatalogOption(value=v, label=option_label(v, CATEGORY_LABELS)) for v in values]

    async def list_segments(self, category: str | None) -> list[CatalogOption]:
        products = await self._all_products()
        values = _distinct([p.segment for p in products if _matches(p, category, None, None)])
        return [CatalogOption(value=v, label=option_label(v, SEGMENT_LABELS)) for v in values]

    async def list_subtypes(
        self, category: str | None, segment: str | None
    ) -> list[CatalogOption]:
        products = await self._all_products()
        values = _distinct(
            [p.subtype for p in products if _matches(p, category, segment, None)]
        )
        return [CatalogOption(value=v, label=v) for v in values]

    async def list_products(
        self,
        category: str | None,
        segment: str | None,
        subtype: str | None,
        offset: int,
        limit: int,
    ) -> list[Product]:
        products = await self._all_products()
        filtered = [p for p in products if _matches(p, category, segment, subtype)]
        return filtered[offset : offset + limit]

    async def get_product(self, product_id: str) -> Product | None:
        for product in await self._all_products():
            if product.id == product_id:
                return product
        return None

    async def search(
        self, term: str, segment: str | None = None, limit: int = 10
    ) -> list[Product]:
        needle = term.strip().lower()
        if not needle:
            return []
        products = await self._all_products()

        def haystack(p: Product) -> list[str]:
            return [
                p.title,
                p.description,
                p.category or "",
                option_label(p.category, CATEGORY_LABELS) if p.category else "",
                p.subtype or "",
            ]

        hits = [
            p
            for p in products
            if (segment is None or p.segment == segment)
            and any(needle in field.lower() for field in haystack(p))
        ]
        # Ordenação estável: correspondências no título primeiro.
        hits.sort(key=lambda p: needle not in p.title.lower())
        return hits[:limit]
