"""Testes de integração do webhook WhatsApp e das rotas de diagnóstico."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from domipets_bot.adapters.whatsapp.signature import sign_body
from domipets_bot.api.app import create_app
from domipets_bot.application.copy import DEFAULT_COPY
from domipets_bot.config.settings import Settings
from domipets_bot.infra.dedupe import DedupeError
from tests.helpers.whatsapp_payloads import (
    PHONE_TEST,
    list_reply,
    status_only_payload,
    text_message,
    webhook_payload,
)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert "x-correlation-id" in response.headers


class TestWebhookVerification:
    """GET /webhooks/whatsapp."""

    def test_valid_challenge(self, client):
        response = client.get(
            "/webhooks/whatsapp",
            params={
                "hub.mode": "subscribe",
                "hub.verify_token": "test-token",
                "hub.challenge": "42",
            },
        )

        assert response.status_code == 200
        assert response.text == "42"

    def test_wrong_token(self, client):
        response = client.get(
            "/webhooks/whatsapp",
            params={"hub.mode": "subscribe", "hub.verify_token": "nope", "hub.challenge": "42"},
        )

        assert response.status_code == 403

    def test_link_preview_crawler_gets_empty_ok(self, client):
        """O crawler de preview da Meta recebe 200 vazio."""
        response = client.get(
            "/webhooks/whatsapp", headers={"user-agent": "facebookexternalhit/1.1"}
        )

        assert response.status_code == 200
        assert response.text == ""

    def test_missing_verify_token_config(self, monkeypatch):
        monkeypatch.delenv("WHATSAPP_VERIFY_TOKEN", raising=False)
        app = create_app(Settings(whatsapp_verify_token=None, session_sweep_interval_seconds=0))
        with TestClient(app) as test_client:
            response = test_client.get(
                "/webhooks/whatsapp", params={"hub.mode": "subscribe", "hub.challenge": "1"}
            )

        assert response.status_code == 500


class TestWebhookMessages:
    """POST /webhooks/whatsapp."""

    def test_message_is_processed_and_answered(self, client):
        """Mensagem nova gera resposta e sessão persistida."""
        response = client.post("/webhooks/whatsapp", json=webhook_payload(text_message("Hola")))

        assert response.status_code == 200
        body = response.json()
        assert body["accepted"] == 1
        assert body["signature_skipped"] is True

        sent = client.app.state.composer.sent
        assert sent[-1][0] == PHONE_TEST
        assert sent[-1][1].text == DEFAULT_COPY.welcome

    def test_conversation_over_webhook(self, client):
        client.post("/webhooks/whatsapp", json=webhook_payload(text_message("Hola", "m1")))
        client.post(
            "/webhooks/whatsapp", json=webhook_payload(list_reply("ver_catalogo", message_id="m2"))
        )

        sessions = client.get("/debug/sessions").json()

        assert sessions[0]["identifier"] == PHONE_TEST
        assert sessions[0]["state"] == "BROWSE_CATEGORY"

    def test_duplicate_message_id_is_skipped(self, client):
        """Reentrega da Meta com o mesmo id não gera segundo turno."""
        payload = webhook_payload(text_message("Hola", "wamid.DUP"))
        client.post("/webhooks/whatsapp", json=payload)
        response = client.post("/webhooks/whatsapp", json=payload)

        assert response.json()["duplicates"] == 1
        assert response.json()["accepted"] == 0
        assert len(client.app.state.composer.sent) == 1

    def test_status_updates_are_acknowledged(self, client):
        response = client.post("/webhooks/whatsapp", json=status_only_payload())

        assert response.status_code == 200
        assert response.json()["received"] == 0

    def test_invalid_json(self, client):
        response = client.post(
            "/webhooks/whatsapp",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "invalid_json"

    def test_non_object_payload(self, client):
        response = client.post("/webhooks/whatsapp", json=[1, 2])

        assert response.status_code == 400
        assert response.json()["detail"] == "invalid_payload"

    def test_dedupe_failure_is_fail_closed(self, client, monkeypatch):
        """Backend de dedupe fora do ar: 500 para a Meta reentregar."""

        def broken(key):
            raise DedupeError("redis down")

        monkeypatch.setattr(client.app.state.dedupe_store, "mark_if_new", broken)

        response = client.post("/webhooks/whatsapp", json=webhook_payload(text_message("Hola")))

        assert response.status_code == 500
        assert response.json()["detail"]["error"] == "inbound_dedupe_unavailable"


class TestWebhookSignature:
    @pytest.fixture()
    def signed_client(self):
        settings = Settings(
            whatsapp_verify_token="test-token",
            whatsapp_webhook_secret="webhook-secret",
            session_sweep_interval_seconds=0,
        )
        with TestClient(create_app(settings)) as test_client:
            yield test_client

    def test_valid_signature(self, signed_client):
        body = json.dumps(webhook_payload(text_message("Hola"))).encode()

        response = signed_client.post(
            "/webhooks/whatsapp",
            content=body,
            headers={
                "content-type": "application/json",
                "x-hub-signature-256": sign_body(body, "webhook-secret"),
            },
        )

        assert response.status_code == 200
        assert response.json()["signature_validated"] is True

    def test_invalid_signature(self, signed_client):
        response = signed_client.post(
            "/webhooks/whatsapp",
            json=webhook_payload(text_message("Hola")),
            headers={"x-hub-signature-256": "sha256=forged"},
        )

        assert response.status_code == 401
        assert signed_client.app.state.composer.sent == []


class TestDebugRoutes:
    def test_sweep_removes_sessions(self, client):
        client.post("/webhooks/whatsapp", json=webhook_payload(text_message("Hola")))

        response = client.post("/debug/sessions/sweep", params={"max_age_minutes": 0})

        assert response.json() == {"removed": 1, "max_age_minutes": 0}
        assert client.get("/debug/sessions").json() == []

    def test_sweep_defaults_to_retention(self, client):
        response = client.post("/debug/sessions/sweep")

        assert response.json() == {"removed": 0, "max_age_minutes": 1440}
