"""Testes do cliente outbound e do cliente HTTP da Cloud API."""

from __future__ import annotations

import httpx
import pytest

from domipets_bot.adapters.whatsapp.http_client import (
    WhatsAppHttpClient,
    _parse_meta_error,
    create_whatsapp_http_client,
)
from domipets_bot.adapters.whatsapp.models import OutboundMessageRequest
from domipets_bot.adapters.whatsapp.outbound import WhatsAppOutboundClient
from domipets_bot.config.settings import Settings
from domipets_bot.domain.enums import MessageType
from domipets_bot.infra.http import HttpClientConfig, HttpError

ENDPOINT = "https://graph.facebook.com/v22.0/PHONE_NUMBER_ID_TEST/messages"


def _http(handler) -> WhatsAppHttpClient:
    return WhatsAppHttpClient(
        HttpClientConfig(max_retries=0, backoff_base_seconds=0),
        transport=httpx.MockTransport(handler),
    )


def _text(body: str = "Hola") -> OutboundMessageRequest:
    return OutboundMessageRequest(to="573001112233", message_type=MessageType.TEXT, text=body)


class TestParseMetaError:
    def test_permanent_error(self):
        error = _parse_meta_error(
            {"error": {"type": "OAuthException", "code": 190, "message": "Invalid token"}}
        )

        assert error.is_permanent
        assert error.error_code == 190

    def test_transient_error(self):
        error = _parse_meta_error({"error": {"type": "Throttling", "code": 4}})

        assert not error.is_permanent

    def test_no_error(self):
        assert _parse_meta_error({"messages": []}) is None
        assert _parse_meta_error(None) is None


class TestWhatsAppHttpClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token_and_json(self):
        """Deve enviar o token no header e o payload como JSON."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"messages": [{"id": "wamid.1"}]})

        data = await _http(handler).send_message(ENDPOINT, "token", {"to": "573001112233"})

        assert data["messages"][0]["id"] == "wamid.1"
        assert seen[0].headers["Authorization"] == "Bearer token"
        assert seen[0].url == ENDPOINT

    @pytest.mark.asyncio
    async def test_meta_error_in_http_error_is_classified(self):
        """Erro Meta em resposta 4xx vira HttpError não retentável."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={"error": {"type": "OAuthException", "code": 190, "message": "x"}}
            )

        with pytest.raises(HttpError) as exc_info:
            await _http(handler).send_message(ENDPOINT, "token", {})

        assert exc_info.value.status_code == 190
        assert not exc_info.value.is_retryable

    @pytest.mark.asyncio
    async def test_invalid_json_response(self):
        handler = lambda request: httpx.Response(200, content=b"not json")  # noqa: E731

        with pytest.raises(HttpError):
            await _http(handler).send_message(ENDPOINT, "token", {})

    def test_factory_uses_settings(self):
        client = create_whatsapp_http_client(
            Settings(whatsapp_phone_number_id="PHONE_NUMBER_ID_TEST", whatsapp_max_retries=1)
        )

        assert client.phone_number_id == "PHONE_NUMBER_ID_TEST"
        assert client._config.max_retries == 1


class TestWhatsAppOutboundClient:
    @pytest.mark.asyncio
    async def test_success_returns_message_id(self):
        client = WhatsAppOutboundClient(
            _http(lambda request: httpx.Response(200, json={"messages": [{"id": "wamid.9"}]})),
            messages_endpoint=ENDPOINT,
            access_token="token",
        )

        response = await client.send_message(_text())

        assert response.success
        assert response.message_id == "wamid.9"

    @pytest.mark.asyncio
    async def test_api_error_is_returned_not_raised(self):
        """Falha da API vira resposta com error_code, sem exceção."""
        client = WhatsAppOutboundClient(
            _http(lambda request: httpx.Response(500)),
            messages_endpoint=ENDPOINT,
            access_token="token",
        )

        response = await client.send_message(_text())

        assert not response.success
        assert response.error_code == "WHATSAPP_API_ERROR"

    @pytest.mark.asyncio
    async def test_payload_build_error(self):
        client = WhatsAppOutboundClient(
            _http(lambda request: httpx.Response(200, json={})),
            messages_endpoint=ENDPOINT,
            access_token="token",
        )
        request = OutboundMessageRequest(
            to="573001112233", message_type=MessageType.INTERACTIVE, text="Hola"
        )

        response = await client.send_message(request)

        assert response.error_code == "PAYLOAD_BUILD_ERROR"
