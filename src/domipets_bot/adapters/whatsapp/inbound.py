"""Extração de eventos inbound do payload de webhook da Meta.

Só texto e respostas interativas (botão/lista) viram eventos; status de
entrega e outros tipos de mensagem são ignorados.
"""

from __future__ import annotations

import logging
from typing import Any

from domipets_bot.domain.enums import InteractiveType
from domipets_bot.domain.events import InboundEvent, StructuredReply
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

WHATSAPP_OBJECT = "whatsapp_business_account"


def _interactive_reply(msg: dict[str, Any]) -> tuple[str, StructuredReply | None]:
    block = msg.get("interactive")
    if not isinstance(block, dict):
        return "", None
    button = block.get("button_reply")
    if isinstance(button, dict) and button.get("id"):
        return button.get("title") or "", StructuredReply(InteractiveType.BUTTON, button["id"])
    row = block.get("list_reply")
    if isinstance(row, dict) and row.get("id"):
        return row.get("title") or "", StructuredReply(InteractiveType.LIST, row["id"])
    return "", None


def _to_event(msg: dict[str, Any]) -> InboundEvent | None:
    sender = msg.get("from")
    message_type = msg.get("type")
    if not sender:
        return None

    if message_type == "text":
        body = (msg.get("text") or {}).get("body") or ""
        return InboundEvent(identifier=sender, text=body, message_id=msg.get("id"))

    if message_type == "interactive":
        title, reply = _interactive_reply(msg)
        if reply is None:
            return None
        return InboundEvent(
            identifier=sender, text=title, structured_reply=reply, message_id=msg.get("id")
        )

    if message_type == "button":
        # Quick reply de template: o payload é o id configurado no template.
        block = msg.get("button") or {}
        text = block.get("payload") or block.get("text") or ""
        return InboundEvent(identifier=sender, text=text, message_id=msg.get("id"))

    logger.info("unsupported_message_type_received", extra={"message_type": message_type})
    return None


def extract_inbound_events(payload: dict[str, Any]) -> list[InboundEvent]:
    """Percorre entry → changes → value → messages e normaliza cada mensagem."""
    if payload.get("object") != WHATSAPP_OBJECT:
        return []
    events: list[InboundEvent] = []
    for entry in payload.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            for msg in value.get("messages") or []:
                event = _to_event(msg)
                if event is not None:
                    events.append(event)
    return events
