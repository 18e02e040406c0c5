"""Construção de payloads da Cloud API (texto, botões, lista).

Os limites da Meta são aplicados aqui por truncamento: o motor de conversa
não conhece os limites do canal.
"""

from __future__ import annotations

from typing import Any

from domipets_bot.adapters.whatsapp.limits import (
    MAX_BUTTON_TEXT_LENGTH,
    MAX_BUTTONS_PER_MESSAGE,
    MAX_INTERACTIVE_BODY_LENGTH,
    MAX_LIST_BUTTON_LABEL_LENGTH,
    MAX_LIST_ROW_DESCRIPTION_LENGTH,
    MAX_LIST_ROW_TITLE_LENGTH,
    MAX_LIST_ROWS,
    MAX_LIST_SECTION_TITLE_LENGTH,
    MAX_TEXT_LENGTH,
    truncate,
)
from domipets_bot.adapters.whatsapp.models import OutboundMessageRequest
from domipets_bot.domain.enums import InteractiveType, MessageType

DEFAULT_LIST_BUTTON_LABEL = "Ver opciones"


def build_base_payload(request: OutboundMessageRequest) -> dict[str, Any]:
    """Campos obrigatórios comuns a todas as mensagens."""
    return {
        "messaging_product": "whatsapp",
        "recipient_type": "individual",
        "to": request.to,
        "type": request.message_type.value,
    }


def _text_part(request: OutboundMessageRequest) -> dict[str, Any]:
    return {"text": {"preview_url": False, "body": truncate(request.text, MAX_TEXT_LENGTH)}}


def _button_action(request: OutboundMessageRequest) -> dict[str, Any]:
    return {
        "buttons": [
            {
                "type": "reply",
                "reply": {
                    "id": btn["id"],
                    "title": truncate(btn["title"], MAX_BUTTON_TEXT_LENGTH),
                },
            }
            for btn in request.buttons[:MAX_BUTTONS_PER_MESSAGE]
        ]
    }


def _list_action(request: OutboundMessageRequest) -> dict[str, Any]:
    remaining = MAX_LIST_ROWS
    sections: list[dict[str, Any]] = []
    for section in request.sections:
        if remaining <= 0:
            break
        rows = []
        for row in section.get("rows", [])[:remaining]:
            item = {"id": row["id"], "title": truncate(row["title"], MAX_LIST_ROW_TITLE_LENGTH)}
            if row.get("description"):
                item["description"] = truncate(
                    row["description"], MAX_LIST_ROW_DESCRIPTION_LENGTH
                )
            rows.append(item)
        if not rows:
            continue
        remaining -= len(rows)
        sections.append(
            {"title": truncate(section.get("title") or "", MAX_LIST_SECTION_TITLE_LENGTH),
             "rows": rows}
        )
    label = request.list_button_label or DEFAULT_LIST_BUTTON_LABEL
    return {"button": truncate(label, MAX_LIST_BUTTON_LABEL_LENGTH), "sections": sections}


def _interactive_part(request: OutboundMessageRequest) -> dict[str, Any]:
    if request.interactive_type == InteractiveType.LIST:
        action = _list_action(request)
    elif request.interactive_type == InteractiveType.BUTTON:
        action = _button_action(request)
    else:
        raise ValueError(f"Tipo interativo não suportado: {request.interactive_type}")

    interactive: dict[str, Any] = {
        "type": request.interactive_type.value,
        "body": {"text": truncate(request.text, MAX_INTERACTIVE_BODY_LENGTH)},
        "action": action,
    }
    if request.footer:
        interactive["footer"] = {"text": truncate(request.footer, 60)}
    return {"interactive": interactive}


def build_full_payload(request: OutboundMessageRequest) -> dict[str, Any]:
    """Payload completo pronto para POST /{phone_number_id}/messages.

    Raises:
        ValueError: Se tipo de mensagem não suportado
    """
    payload = build_base_payload(request)
    if request.message_type == MessageType.TEXT:
        payload.update(_text_part(request))
    elif request.message_type == MessageType.INTERACTIVE:
        payload.update(_interactive_part(request))
    else:
        raise ValueError(f"Tipo de mensagem não suportado: {request.message_type}")
    return payload
