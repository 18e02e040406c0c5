"""Contrato do catálogo de produtos.

O motor de conversa só conhece este contrato; as implementações concretas
(memória, Meta Commerce) ficam em infra/.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, Field

from domipets_bot.domain.enums import TaxonomyLevel

DEFAULT_SIZE = "Única"


class CatalogError(Exception):
    """Falha ao consultar o catálogo."""


class CatalogOption(BaseModel):
    """Uma opção de navegação (categoria, segmento ou subtipo)."""

    value: str
    label: str


class Product(BaseModel):
    """Produto do catálogo (snapshot guardado na sessão por valor)."""

    id: str
    title: str
    description: str = ""
    price: Decimal
    special_price: Decimal | None = None
    sizes: list[str] = Field(default_factory=list)
    stock_by_size: dict[str, int] = Field(default_factory=dict)
    image_url: str | None = None
    category: str | None = None
    segment: str | None = None
    subtype: str | None = None

    @property
    def effective_price(self) -> Decimal:
        """Preço cobrado: preço especial quando menor que o preço cheio."""
        if self.special_price is not None and self.special_price < self.price:
            return self.special_price
        return self.price

    @property
    def has_single_size(self) -> bool:
        return len(self.sizes) <= 1

    @property
    def default_size(self) -> str:
        return self.sizes[0] if self.sizes else DEFAULT_SIZE

    def stock_for(self, size: str) -> int | None:
        """Estoque do tamanho; None quando o produto não controla estoque."""
        if not self.stock_by_size:
            return None
        return max(self.stock_by_size.get(size, 0), 0)


@dataclass(frozen=True, slots=True)
class TaxonomyDescriptor:
    """Profundidade da navegação: 0 a 3 níveis, sempre nesta ordem."""

    levels: tuple[TaxonomyLevel, ...] = (
        TaxonomyLevel.CATEGORY,
        TaxonomyLevel.SEGMENT,
        TaxonomyLevel.SUBTYPE,
    )

    @classmethod
    def with_depth(cls, depth: int) -> TaxonomyDescriptor:
        if not 0 <= depth <= 3:
            raise ValueError("taxonomy depth must be between 0 and 3")
        return cls(levels=tuple(TaxonomyLevel)[:depth])

    @property
    def depth(self) -> int:
        return len(self.levels)

    def index_of(self, level: TaxonomyLevel) -> int:
        return self.levels.index(level)


class CatalogGateway(ABC):
    """Contrato assíncrono de leitura do catálogo."""

    @abstractmethod
    async def list_top_categories(self, segment: str | None = None) -> list[CatalogOption]:
        """Lista categorias de primeiro nível (opcionalmente filtradas)."""

    @abstractmethod
    async def list_segments(self, category: str | None) -> list[CatalogOption]:
        """Lista segmentos (ex.: animal) dentro da categoria."""

    @abstractmethod
    async def list_subtypes(
        self, category: str | None, segment: str | None
    ) -> list[CatalogOption]:
        """Lista subtipos para o par categoria/segmento."""

    @abstractmethod
    async def list_products(
        self,
        category: str | None,
        segment: str | None,
        subtype: str | None,
        offset: int,
        limit: int,
    ) -> list[Product]:
        """Lista uma página de produtos para o filtro."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Retorna o produto ou None se não existir."""

    @abstractmethod
    async def search(
        self, term: str, segment: str | None = None, limit: int = 10
    ) -> list[Product]:
        """Busca por texto, limitada a ``limit`` resultados."""

    async def list_options(
        self,
        level: TaxonomyLevel,
        category: str | None,
        segment: str | None,
    ) -> list[CatalogOption]:
        """Despacha a listagem para o nível pedido."""
        if level == TaxonomyLevel.CATEGORY:
            return await self.list_top_categories(segment)
        if level == TaxonomyLevel.SEGMENT:
            return await self.list_segments(category)
        return await self.list_subtypes(category, segment)

    async def close(self) -> None:  # noqa: B027
        """Libera recursos (clientes HTTP)."""
