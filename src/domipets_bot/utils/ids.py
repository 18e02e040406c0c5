"""Geradores e máscaras de identificadores."""

from __future__ import annotations

import uuid


def new_order_token() -> str:
    """Gera o token que protege a confirmação de um pedido."""

    return uuid.uuid4().hex


def mask_identifier(identifier: str | None) -> str:
    """Mascara o telefone para logs: mantém só os 4 últimos dígitos."""

    if not identifier:
        return "<none>"
    if len(identifier) <= 4:
        return "***"
    return "***" + identifier[-4:]
