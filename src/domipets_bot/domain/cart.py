"""Linha do carrinho e formatação de valores."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field

CURRENCY = "COP"


def format_price(amount: Decimal) -> str:
    """Formata um valor em pesos colombianos no padrão es-CO: ``$12.500,00 COP``."""
    quantized = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    integer, _, cents = f"{quantized:.2f}".partition(".")
    grouped = f"{int(integer):,}".replace(",", ".")
    return f"${grouped},{cents} {CURRENCY}"


class CartLineItem(BaseModel):
    """Linha do carrinho; o preço é congelado no momento da escolha."""

    product_id: str
    title: str
    size: str
    quantity: int = Field(..., gt=0)
    unit_price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity
