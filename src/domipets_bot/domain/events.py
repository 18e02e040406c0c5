"""Evento de entrada já desacoplado do transporte (webhook)."""

from __future__ import annotations

from dataclasses import dataclass

from domipets_bot.domain.enums import InteractiveType


@dataclass(frozen=True, slots=True)
class StructuredReply:
    """Resposta estruturada (botão ou item de lista) com seu id opaco."""

    kind: InteractiveType
    id: str


@dataclass(frozen=True, slots=True)
class InboundEvent:
    identifier: str
    text: str = ""
    structured_reply: StructuredReply | None = None
    message_id: str | None = None
