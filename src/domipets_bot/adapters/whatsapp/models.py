"""Modelos do adapter WhatsApp (envio)."""

from __future__ import annotations

from pydantic import BaseModel, Field

from domipets_bot.domain.enums import InteractiveType, MessageType


class OutboundMessageRequest(BaseModel):
    """Requisição para enviar uma mensagem outbound."""

    to: str  # Telefone E.164 (sem "+")
    message_type: MessageType
    text: str
    interactive_type: InteractiveType | None = None
    buttons: list[dict[str, str]] = Field(default_factory=list)  # [{id, title}]
    # [{title, rows: [{id, title, description}]}]
    sections: list[dict] = Field(default_factory=list)
    list_button_label: str | None = None
    footer: str | None = None
    idempotency_key: str | None = None


class OutboundMessageResponse(BaseModel):
    """Resposta do envio outbound."""

    success: bool
    message_id: str | None = None
    error_code: str | None = None
    error_message: str | None = None
