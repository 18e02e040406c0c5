"""Cliente HTTP especializado para a Cloud API do WhatsApp.

Estende HttpClient com o tratamento de erros da Meta (error.type,
error.code) e logging sem tokens nem telefones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, NoReturn

from domipets_bot.infra.http import HttpClient, HttpClientConfig, HttpError, build_http_config
from domipets_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

_PERMANENT_CODES = {400, 401, 403, 404, 413}
_PERMANENT_TYPES = {"OAuthException", "InvalidRequest"}


@dataclass(frozen=True)
class WhatsAppApiError:
    """Erro retornado pela API Meta/WhatsApp."""

    error_type: str
    error_code: int
    error_message: str
    is_permanent: bool


def _parse_meta_error(response_data: dict[str, Any] | None) -> WhatsAppApiError | None:
    """Extrai o objeto ``error`` do corpo da Meta, se houver."""
    error_obj = (response_data or {}).get("error")
    if not isinstance(error_obj, dict):
        return None
    error_type = error_obj.get("type", "unknown")
    error_code = error_obj.get("code", 0)
    return WhatsAppApiError(
        error_type=error_type,
        error_code=error_code,
        error_message=error_obj.get("message", "Erro desconhecido"),
        is_permanent=error_code in _PERMANENT_CODES or error_type in _PERMANENT_TYPES,
    )


class WhatsAppHttpClient(HttpClient):
    """HttpClient com semântica de erro da Meta."""

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        phone_number_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(config, **kwargs)
        self.phone_number_id = phone_number_id

    async def send_message(
        self,
        endpoint: str,
        access_token: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        """POST da mensagem; retorna o JSON da Meta.

        Raises:
            HttpError: erro HTTP ou erro Meta (com is_retryable classificado)
        """
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        try:
            response = await self.post(endpoint, json=payload, headers=headers)
        except HttpError as exc:
            meta_error = _parse_meta_error(exc.payload)
            if meta_error is None:
                raise
            self._raise_meta_error(meta_error, endpoint)

        try:
            data = response.json()
        except ValueError as e:
            logger.error("Response JSON inválido", extra={"endpoint": endpoint})
            raise HttpError("Response JSON inválido") from e

        meta_error = _parse_meta_error(data)
        if meta_error:
            self._raise_meta_error(meta_error, endpoint)

        logger.debug("Envio WhatsApp bem-sucedido", extra={"endpoint": endpoint})
        return data

    def _raise_meta_error(self, meta_error: WhatsAppApiError, endpoint: str) -> NoReturn:
        logger.warning(
            "Erro da API Meta/WhatsApp",
            extra={
                "endpoint": endpoint,
                "error_type": meta_error.error_type,
                "error_code": meta_error.error_code,
                "is_permanent": meta_error.is_permanent,
            },
        )
        kind = "permanente" if meta_error.is_permanent else "transitório"
        raise HttpError(
            f"Erro {kind}: {meta_error.error_message}",
            status_code=meta_error.error_code,
            is_retryable=not meta_error.is_permanent,
        )


def create_whatsapp_http_client(settings: Settings) -> WhatsAppHttpClient:
    """Factory do cliente WhatsApp configurado por settings."""
    config = build_http_config(settings)
    logger.info(
        "Cliente WhatsApp HTTP criado",
        extra={"timeout": config.timeout_seconds, "max_retries": config.max_retries},
    )
    return WhatsAppHttpClient(config=config, phone_number_id=settings.whatsapp_phone_number_id)
