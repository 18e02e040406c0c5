"""Leitura de sessões persistidas, com upgrade de versões antigas.

Versões:
- 0: blob JSON legado (``state``, ``cart``, ``catalog``, ``supportAction``,
  ``errorCount``, ``lastActivity``, ``selectedProduct``), sem ``schema_version``
- 1: ConversationSession atual
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from domipets_bot.domain.catalog import DEFAULT_SIZE
from domipets_bot.domain.session.models import CURRENT_SCHEMA_VERSION, ConversationSession
from domipets_bot.domain.session.states import INITIAL_STATE, ConversationState
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

LEGACY_STATE_MAP: dict[str, ConversationState] = {
    "VIEW_CATALOG": ConversationState.BROWSE_PRODUCTS,
    "SELECT_QUANTITY": ConversationState.SET_QUANTITY,
    "SEARCH_PRODUCTS": ConversationState.SEARCH,
}

_VALID_STATES = {state.value for state in ConversationState}


class SessionSchemaError(Exception):
    """Registro com versão de schema desconhecida ou ilegível."""


def _legacy_price(raw: Any) -> Decimal:
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return Decimal("0")


def _upgrade_legacy_cart(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    upgraded: list[dict[str, Any]] = []
    for item in items or []:
        quantity = int(item.get("quantity") or 0)
        if quantity <= 0:
            continue
        sizes = item.get("sizes") or []
        upgraded.append(
            {
                "product_id": str(item.get("id", "")),
                "title": item.get("title", ""),
                "size": item.get("size") or (sizes[0] if sizes else DEFAULT_SIZE),
                "quantity": quantity,
                "unit_price": str(_legacy_price(item.get("price"))),
            }
        )
    return upgraded


def _upgrade_legacy_product(product: dict[str, Any] | None) -> dict[str, Any] | None:
    if not product or "id" not in product:
        return None
    return {
        "id": str(product["id"]),
        "title": product.get("title", ""),
        "description": product.get("description") or "",
        "price": str(_legacy_price(product.get("price"))),
        "sizes": product.get("sizes") or [],
        "image_url": product.get("image_url"),
        "category": product.get("category"),
    }


def upgrade_v0(data: dict[str, Any], identifier: str) -> dict[str, Any]:
    """Converte o blob legado para o schema versão 1."""
    catalog = data.get("catalog") or {}
    state = data.get("state") or INITIAL_STATE.value
    upgraded: dict[str, Any] = {
        "schema_version": 1,
        "identifier": identifier,
        "state": LEGACY_STATE_MAP.get(state, state),
        "cart": _upgrade_legacy_cart(data.get("cart") or []),
        "cursor": {
            "offset": int(catalog.get("offset") or 0),
            "segment": catalog.get("animalCategory"),
            "category": catalog.get("foodSubcategory"),
            "search_term": catalog.get("searchTerm"),
        },
        "selected_product": _upgrade_legacy_product(data.get("selectedProduct")),
        "support_action": data.get("supportAction"),
        "error_count": int(data.get("errorCount") or 0),
    }
    if data.get("lastActivity"):
        upgraded["last_activity_at"] = data["lastActivity"]
    return upgraded


def normalize_state(data: dict[str, Any]) -> None:
    """Garante que ``state`` seja um ConversationState válido (in place)."""
    value = data.get("state")
    if value in _VALID_STATES:
        return
    logger.warning(
        "invalid_state_normalized",
        extra={
            "event": "invalid_state_normalized",
            "invalid_state_value": str(value),
            "normalized_to": INITIAL_STATE.value,
            "identifier": mask_identifier(data.get("identifier")),
        },
    )
    data["state"] = INITIAL_STATE.value


def session_from_payload(data: dict[str, Any], identifier: str) -> ConversationSession:
    """Reconstrói a sessão a partir do dict persistido (qualquer versão)."""
    payload = dict(data)
    version = payload.get("schema_version")

    if version is None:
        logger.info(
            "legacy_session_upgraded",
            extra={"identifier": mask_identifier(identifier), "to_version": 1},
        )
        payload = upgrade_v0(payload, identifier)
    elif not isinstance(version, int) or version > CURRENT_SCHEMA_VERSION:
        raise SessionSchemaError(f"Unsupported session schema_version: {version!r}")

    payload.setdefault("identifier", identifier)
    normalize_state(payload)
    return ConversationSession.model_validate(payload)
