"""Composer do canal WhatsApp.

Regras de renderização de um ResponseDescriptor:
- lista presente: mensagem interativa de lista (botões viram a seção
  "Opciones", máximo de 10 linhas no total)
- só botões: mensagem interativa de botões (máx. 3)
- caso contrário: texto simples

Se o envio interativo falhar, reenvia como texto com as opções numeradas.
Falhas do fallback são registradas e descartadas: a entrega nunca afeta
a sessão já persistida.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from domipets_bot.adapters.whatsapp.http_client import create_whatsapp_http_client
from domipets_bot.adapters.whatsapp.limits import MAX_LIST_ROWS
from domipets_bot.adapters.whatsapp.models import OutboundMessageRequest, OutboundMessageResponse
from domipets_bot.adapters.whatsapp.outbound import WhatsAppOutboundClient
from domipets_bot.domain.enums import InteractiveType, MessageType
from domipets_bot.domain.protocols import Composer
from domipets_bot.domain.responses import ListRow, ResponseDescriptor
from domipets_bot.observability.logging import get_logger, log_degraded
from domipets_bot.utils.ids import mask_identifier

if TYPE_CHECKING:
    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

BUTTONS_SECTION_TITLE = "Opciones"
FALLBACK_NOTICE = "(No se pudieron mostrar botones)"


def _list_sections(descriptor: ResponseDescriptor) -> list[dict]:
    assert descriptor.list_menu is not None
    sections: list[dict] = []
    budget = MAX_LIST_ROWS
    for section in descriptor.list_menu.sections:
        rows = [_row_payload(row) for row in section.rows[:budget]]
        if rows:
            sections.append({"title": section.title, "rows": rows})
            budget -= len(rows)
    if descriptor.buttons and budget > 0:
        sections.append(
            {
                "title": BUTTONS_SECTION_TITLE,
                "rows": [
                    {"id": button.id, "title": button.label}
                    for button in descriptor.buttons[:budget]
                ],
            }
        )
    return sections


def _row_payload(row: ListRow) -> dict[str, str]:
    payload = {"id": row.id, "title": row.label}
    if row.description:
        payload["description"] = row.description
    return payload


def build_request(identifier: str, descriptor: ResponseDescriptor) -> OutboundMessageRequest:
    """Converte o descritor na requisição outbound mais rica possível."""
    if descriptor.list_menu is not None and descriptor.list_menu.rows:
        return OutboundMessageRequest(
            to=identifier,
            message_type=MessageType.INTERACTIVE,
            interactive_type=InteractiveType.LIST,
            text=descriptor.text,
            sections=_list_sections(descriptor),
            list_button_label=descriptor.list_menu.button_label,
        )
    if descriptor.buttons:
        return OutboundMessageRequest(
            to=identifier,
            message_type=MessageType.INTERACTIVE,
            interactive_type=InteractiveType.BUTTON,
            text=descriptor.text,
            buttons=[{"id": b.id, "title": b.label} for b in descriptor.buttons],
        )
    return OutboundMessageRequest(
        to=identifier, message_type=MessageType.TEXT, text=descriptor.text
    )


def render_plain_text(descriptor: ResponseDescriptor) -> str:
    """Texto com as opções numeradas, usado quando o interativo falha."""
    labels: list[str] = []
    if descriptor.list_menu is not None:
        labels.extend(row.label for row in descriptor.list_menu.rows)
    labels.extend(button.label for button in descriptor.buttons)
    if not labels:
        return descriptor.text
    options = "\n".join(f"{i}. {label}" for i, label in enumerate(labels, start=1))
    return f"{descriptor.text}\n\n{options}\n\n{FALLBACK_NOTICE}"


class WhatsAppComposer(Composer):
    """Entrega descritores pela Cloud API com fallback para texto."""

    def __init__(self, client: WhatsAppOutboundClient) -> None:
        self._client = client

    async def dispatch(self, identifier: str, descriptor: ResponseDescriptor) -> None:
        request = build_request(identifier, descriptor)
        response = await self._send(request)
        if response.success or request.message_type == MessageType.TEXT:
            return

        logger.warning(
            "interactive_delivery_failed_fallback_text",
            extra={
                "identifier": mask_identifier(identifier),
                "interactive_type": request.interactive_type,
                "error_code": response.error_code,
            },
        )
        log_degraded(logger, "interactive_delivery", reason=response.error_code)
        fallback = OutboundMessageRequest(
            to=identifier,
            message_type=MessageType.TEXT,
            text=render_plain_text(descriptor),
        )
        await self._send(fallback)

    async def _send(self, request: OutboundMessageRequest) -> OutboundMessageResponse:
        try:
            response = await self._client.send_message(request)
        except Exception as exc:  # pragma: no cover - log + degrade
            logger.error(
                "composer_send_unexpected_error",
                extra={"error_type": type(exc).__name__},
            )
            return OutboundMessageResponse(
                success=False, error_code="UNEXPECTED_ERROR", error_message=str(exc)
            )
        if not response.success:
            logger.error(
                "composer_send_failed",
                extra={
                    "message_type": request.message_type,
                    "error_code": response.error_code,
                },
            )
        return response

    async def close(self) -> None:
        await self._client.close()


class LoggingComposer(Composer):
    """Composer de desenvolvimento: só registra o que seria enviado.

    Guarda as respostas em ``sent`` para inspeção em testes e no /debug.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[str, ResponseDescriptor]] = []

    async def dispatch(self, identifier: str, descriptor: ResponseDescriptor) -> None:
        self.sent.append((identifier, descriptor))
        logger.info(
            "outbound_logged",
            extra={
                "identifier": mask_identifier(identifier),
                "buttons": len(descriptor.buttons),
                "list_rows": len(descriptor.list_menu.rows) if descriptor.list_menu else 0,
            },
        )


def create_composer(settings: Settings) -> Composer:
    """Composer conforme OUTBOUND_BACKEND (whatsapp | log)."""
    if settings.outbound_backend.lower() == "log":
        logger.info("Usando LoggingComposer (apenas dev)")
        return LoggingComposer()
    if not settings.whatsapp_access_token:
        raise ValueError("WHATSAPP_ACCESS_TOKEN é obrigatório para OUTBOUND_BACKEND=whatsapp")
    client = WhatsAppOutboundClient(
        create_whatsapp_http_client(settings),
        messages_endpoint=settings.get_messages_endpoint(),
        access_token=settings.whatsapp_access_token,
    )
    return WhatsAppComposer(client)
