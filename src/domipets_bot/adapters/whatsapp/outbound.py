"""Cliente outbound: monta o payload e envia via Cloud API.

Nunca levanta exceção para o chamador: o resultado vem em
OutboundMessageResponse (success + error_code).
"""

from __future__ import annotations

import logging

from domipets_bot.adapters.whatsapp.http_client import WhatsAppHttpClient
from domipets_bot.adapters.whatsapp.models import OutboundMessageRequest, OutboundMessageResponse
from domipets_bot.adapters.whatsapp.payloads import build_full_payload
from domipets_bot.infra.http import HttpError
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class WhatsAppOutboundClient:
    """Envio de mensagens individuais para a API Meta/WhatsApp."""

    def __init__(
        self,
        http_client: WhatsAppHttpClient,
        messages_endpoint: str,
        access_token: str,
    ) -> None:
        self._http = http_client
        self._endpoint = messages_endpoint
        self._access_token = access_token

    async def send_message(self, request: OutboundMessageRequest) -> OutboundMessageResponse:
        try:
            payload = build_full_payload(request)
        except (ValueError, KeyError) as exc:
            # Nunca registrar "to" (telefone) em logs - é PII.
            logger.error(
                "Error building payload",
                extra={"message_type": request.message_type, "error": str(exc)},
            )
            return OutboundMessageResponse(
                success=False, error_code="PAYLOAD_BUILD_ERROR", error_message=str(exc)
            )

        try:
            data = await self._http.send_message(self._endpoint, self._access_token, payload)
        except HttpError as exc:
            logger.error(
                "whatsapp_send_failed",
                extra={
                    "message_type": request.message_type,
                    "status_code": exc.status_code,
                    "error": str(exc),
                },
            )
            return OutboundMessageResponse(
                success=False, error_code="WHATSAPP_API_ERROR", error_message=str(exc)
            )

        message_id = (data.get("messages") or [{}])[0].get("id", "unknown")
        logger.info(
            "message_sent_to_whatsapp_api",
            extra={"message_id": message_id, "message_type": request.message_type},
        )
        return OutboundMessageResponse(success=True, message_id=message_id)

    async def close(self) -> None:
        await self._http.close()
