"""Testes de construção de payloads da Cloud API."""

from __future__ import annotations

import pytest

from domipets_bot.adapters.whatsapp.models import OutboundMessageRequest
from domipets_bot.adapters.whatsapp.payloads import build_full_payload
from domipets_bot.domain.enums import InteractiveType, MessageType

TO = "573001112233"


def _rows(prefix: str, count: int) -> list[dict[str, str]]:
    return [{"id": f"{prefix}{i}", "title": f"{prefix.upper()}{i}"} for i in range(count)]


class TestTextPayload:
    def test_text(self):
        payload = build_full_payload(
            OutboundMessageRequest(to=TO, message_type=MessageType.TEXT, text="Hola")
        )

        assert payload == {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": TO,
            "type": "text",
            "text": {"preview_url": False, "body": "Hola"},
        }

    def test_long_text_is_truncated(self):
        payload = build_full_payload(
            OutboundMessageRequest(to=TO, message_type=MessageType.TEXT, text="a" * 5000)
        )

        body = payload["text"]["body"]
        assert len(body) == 4096
        assert body.endswith("…")


class TestInteractivePayload:
    def test_buttons_are_capped_and_truncated(self):
        """No máximo 3 botões, títulos com até 20 caracteres."""
        request = OutboundMessageRequest(
            to=TO,
            message_type=MessageType.INTERACTIVE,
            interactive_type=InteractiveType.BUTTON,
            text="Elige",
            buttons=[{"id": f"b{i}", "title": "Un título bastante largo"} for i in range(4)],
        )

        action = build_full_payload(request)["interactive"]["action"]

        assert len(action["buttons"]) == 3
        assert action["buttons"][0]["reply"]["id"] == "b0"
        assert len(action["buttons"][0]["reply"]["title"]) == 20

    def test_list_rows_capped_at_ten(self):
        """A lista nunca passa de 10 linhas somando as seções."""
        request = OutboundMessageRequest(
            to=TO,
            message_type=MessageType.INTERACTIVE,
            interactive_type=InteractiveType.LIST,
            text="Productos",
            sections=[
                {"title": "Productos", "rows": _rows("p", 8)},
                {"title": "Opciones", "rows": _rows("o", 4)},
            ],
            list_button_label="Ver productos",
        )

        interactive = build_full_payload(request)["interactive"]

        rows = [row for section in interactive["action"]["sections"] for row in section["rows"]]
        assert len(rows) == 10
        assert rows[-1]["id"] == "o1"
        assert interactive["action"]["button"] == "Ver productos"
        assert interactive["type"] == "list"

    def test_row_description_is_optional(self):
        request = OutboundMessageRequest(
            to=TO,
            message_type=MessageType.INTERACTIVE,
            interactive_type=InteractiveType.LIST,
            text="Productos",
            sections=[{"title": "S", "rows": [{"id": "1", "title": "A", "description": "x"}]}],
        )

        row = build_full_payload(request)["interactive"]["action"]["sections"][0]["rows"][0]

        assert row == {"id": "1", "title": "A", "description": "x"}

    def test_interactive_without_type_is_rejected(self):
        request = OutboundMessageRequest(
            to=TO, message_type=MessageType.INTERACTIVE, text="Hola"
        )

        with pytest.raises(ValueError):
            build_full_payload(request)
