"""Testes do Composer do canal WhatsApp."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from domipets_bot.adapters.whatsapp.composer import (
    FALLBACK_NOTICE,
    LoggingComposer,
    WhatsAppComposer,
    build_request,
    create_composer,
    render_plain_text,
)
from domipets_bot.adapters.whatsapp.models import OutboundMessageResponse
from domipets_bot.config.settings import Settings
from domipets_bot.domain.enums import InteractiveType, MessageType
from domipets_bot.domain.responses import (
    Button,
    ListMenu,
    ListRow,
    ListSection,
    ResponseDescriptor,
)

TO = "573001112233"

BUTTONS = ResponseDescriptor(
    text="¿Confirmas?",
    buttons=(Button("confirm_order", "Confirmar"), Button("ver_carrito", "Editar")),
)
LIST = ResponseDescriptor(
    text="Productos",
    buttons=(Button("volver", "Volver"),),
    list_menu=ListMenu(
        button_label="Ver productos",
        sections=(
            ListSection(
                title="Productos",
                rows=tuple(ListRow(f"prod_{i}", f"Producto {i}") for i in range(10)),
            ),
        ),
    ),
)


class TestBuildRequest:
    def test_plain_text(self):
        request = build_request(TO, ResponseDescriptor(text="Hola"))

        assert request.message_type == MessageType.TEXT

    def test_buttons(self):
        request = build_request(TO, BUTTONS)

        assert request.interactive_type == InteractiveType.BUTTON
        assert [b["id"] for b in request.buttons] == ["confirm_order", "ver_carrito"]

    def test_list_with_buttons_respects_row_budget(self):
        """Botões viram seção "Opciones" só se couberem nas 10 linhas."""
        request = build_request(TO, LIST)

        assert request.interactive_type == InteractiveType.LIST
        assert [s["title"] for s in request.sections] == ["Productos"]
        assert request.list_button_label == "Ver productos"

    def test_buttons_section_when_room(self):
        descriptor = ResponseDescriptor(
            text="Menú",
            buttons=(Button("volver", "Volver"),),
            list_menu=ListMenu(
                button_label="Ver opciones",
                sections=(ListSection(title="Menú", rows=(ListRow("ver_catalogo", "Ver"),)),),
            ),
        )

        sections = build_request(TO, descriptor).sections

        assert sections[-1] == {"title": "Opciones", "rows": [{"id": "volver", "title": "Volver"}]}


class TestRenderPlainText:
    def test_numbers_options(self):
        text = render_plain_text(BUTTONS)

        assert text == f"¿Confirmas?\n\n1. Confirmar\n2. Editar\n\n{FALLBACK_NOTICE}"

    def test_no_options(self):
        assert render_plain_text(ResponseDescriptor(text="Hola")) == "Hola"


class TestWhatsAppComposer:
    @pytest.mark.asyncio
    async def test_interactive_success_sends_once(self):
        client = AsyncMock()
        client.send_message.return_value = OutboundMessageResponse(success=True, message_id="m")

        await WhatsAppComposer(client).dispatch(TO, BUTTONS)

        client.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_interactive_failure_falls_back_to_text(self):
        """Falha do interativo reenvia como texto numerado."""
        client = AsyncMock()
        client.send_message.side_effect = [
            OutboundMessageResponse(success=False, error_code="WHATSAPP_API_ERROR"),
            OutboundMessageResponse(success=True, message_id="m"),
        ]

        await WhatsAppComposer(client).dispatch(TO, BUTTONS)

        fallback = client.send_message.await_args_list[1].args[0]
        assert fallback.message_type == MessageType.TEXT
        assert "1. Confirmar" in fallback.text

    @pytest.mark.asyncio
    async def test_text_failure_is_not_retried(self):
        client = AsyncMock()
        client.send_message.return_value = OutboundMessageResponse(success=False)

        await WhatsAppComposer(client).dispatch(TO, ResponseDescriptor(text="Hola"))

        client.send_message.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fallback_failure_is_swallowed(self):
        """Erro inesperado no envio nunca propaga para o motor."""
        client = AsyncMock()
        client.send_message.side_effect = RuntimeError("boom")

        await WhatsAppComposer(client).dispatch(TO, BUTTONS)

        assert client.send_message.await_count == 2


class TestLoggingComposer:
    @pytest.mark.asyncio
    async def test_records_sent_descriptors(self):
        composer = LoggingComposer()

        await composer.dispatch(TO, BUTTONS)

        assert composer.sent == [(TO, BUTTONS)]


class TestCreateComposer:
    def test_log_backend(self):
        assert isinstance(create_composer(Settings(outbound_backend="log")), LoggingComposer)

    def test_whatsapp_backend(self):
        composer = create_composer(
            Settings(
                outbound_backend="whatsapp",
                whatsapp_access_token="token",
                whatsapp_phone_number_id="PHONE_NUMBER_ID_TEST",
            )
        )

        assert isinstance(composer, WhatsAppComposer)

    def test_whatsapp_backend_requires_token(self):
        with pytest.raises(ValueError):
            create_composer(
                Settings(outbound_backend="whatsapp", whatsapp_phone_number_id="PHONE")
            )
