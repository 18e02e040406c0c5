"""Testes de leitura de sessões persistidas (upgrade de schema)."""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from domipets_bot.domain.session import (
    ConversationSession,
    ConversationState,
    SessionSchemaError,
    session_from_payload,
)

LEGACY_BLOB = {
    "state": "VIEW_CATALOG",
    "cart": [
        {"id": 101, "title": "Croquetas", "price": 50000, "quantity": 2, "sizes": ["2 kg"]},
        {"id": 102, "title": "Snack", "price": "abc", "quantity": 1},
        {"id": 103, "title": "Vazio", "price": 1000, "quantity": 0},
    ],
    "catalog": {
        "offset": 6,
        "animalCategory": "dog",
        "foodSubcategory": "Pet Food",
        "searchTerm": None,
    },
    "selectedProduct": {"id": 101, "title": "Croquetas", "price": 50000},
    "supportAction": "contact_agent",
    "errorCount": 2,
    "lastActivity": "2026-03-01T12:00:00+00:00",
}


class TestLegacyUpgrade:
    """Blob legado sem schema_version."""

    def test_upgrades_state_and_counters(self):
        session = session_from_payload(LEGACY_BLOB, "573001112233")

        assert session.schema_version == 1
        assert session.identifier == "573001112233"
        assert session.state == ConversationState.BROWSE_PRODUCTS
        assert session.error_count == 2
        assert session.last_activity_at == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def test_upgrades_cart_lines(self):
        """Linhas sem quantidade são descartadas; preço ilegível vira zero."""
        session = session_from_payload(LEGACY_BLOB, "573001112233")

        assert [(line.product_id, line.size, line.quantity) for line in session.cart] == [
            ("101", "2 kg", 2),
            ("102", "Única", 1),
        ]
        assert session.cart[0].unit_price == Decimal("50000")
        assert session.cart[1].unit_price == Decimal("0")

    def test_upgrades_cursor_and_selection(self):
        session = session_from_payload(LEGACY_BLOB, "573001112233")

        assert session.cursor.offset == 6
        assert session.cursor.category == "Pet Food"
        assert session.cursor.segment == "dog"
        assert session.selected_product.id == "101"

    def test_unknown_legacy_state_falls_back_to_init(self):
        session = session_from_payload({"state": "SOMETHING_OLD"}, "573001112233")

        assert session.state == ConversationState.INIT


class TestCurrentSchema:
    def test_current_payload_round_trip(self):
        original = ConversationSession.new("573001112233", state=ConversationState.SUPPORT)

        restored = session_from_payload(original.model_dump(mode="json"), "573001112233")

        assert restored == original

    def test_invalid_state_is_normalized(self):
        payload = ConversationSession.new("573001112233").model_dump(mode="json")
        payload["state"] = "WAITING_PAYMENT"

        assert session_from_payload(payload, "573001112233").state == ConversationState.INIT

    def test_future_version_is_rejected(self):
        """Versão mais nova que o código não é lida."""
        payload = ConversationSession.new("573001112233").model_dump(mode="json")
        payload["schema_version"] = 99

        with pytest.raises(SessionSchemaError):
            session_from_payload(payload, "573001112233")
