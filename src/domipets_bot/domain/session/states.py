"""Estados da conversa de compra.

Cada sessão está em exatamente um estado; o estado decide qual handler
interpreta a próxima mensagem.
"""

from __future__ import annotations

from enum import StrEnum


class ConversationState(StrEnum):
    """Estados canônicos da conversa."""

    INIT = "INIT"
    """Sessão recém-criada, ainda sem boas-vindas."""

    MENU = "MENU"
    """Menu principal."""

    BROWSE_CATEGORY = "BROWSE_CATEGORY"
    BROWSE_SEGMENT = "BROWSE_SEGMENT"
    BROWSE_SUBTYPE = "BROWSE_SUBTYPE"
    BROWSE_PRODUCTS = "BROWSE_PRODUCTS"
    """Página de produtos (navegação ou resultado de busca)."""

    SELECT_SIZE = "SELECT_SIZE"
    SET_QUANTITY = "SET_QUANTITY"

    VIEW_CART = "VIEW_CART"
    CONFIRM_ORDER = "CONFIRM_ORDER"
    """Pedido aguardando confirmação explícita."""

    SUPPORT = "SUPPORT"
    SEARCH = "SEARCH"
    """Aguardando o termo de busca em texto livre."""


INITIAL_STATE = ConversationState.INIT

BROWSE_STATES: frozenset[ConversationState] = frozenset(
    {
        ConversationState.BROWSE_CATEGORY,
        ConversationState.BROWSE_SEGMENT,
        ConversationState.BROWSE_SUBTYPE,
        ConversationState.BROWSE_PRODUCTS,
    }
)

# Destinos de reset: alcançáveis a partir de qualquer estado.
RESET_STATES: frozenset[ConversationState] = frozenset(
    {ConversationState.INIT, ConversationState.MENU}
)
