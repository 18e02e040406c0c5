"""Tabela de transições da conversa.

- TRANSITIONS[estado_atual] = destinos permitidos
- RESET_STATES (INIT, MENU) são permitidos a partir de qualquer estado
- Validação pura: sem side effects
"""

from __future__ import annotations

from domipets_bot.domain.session.states import (
    BROWSE_STATES,
    RESET_STATES,
    ConversationState,
)


S = ConversationState


class InvalidTransitionError(Exception):
    """Transição fora da tabela: defeito de handler, não erro do cliente."""


TRANSITIONS: dict[ConversationState, frozenset[ConversationState]] = {
    S.INIT: frozenset({S.MENU}),
    S.MENU: frozenset({S.MENU, S.SEARCH, S.SUPPORT, S.VIEW_CART, *BROWSE_STATES}),
    S.BROWSE_CATEGORY: BROWSE_STATES,
    S.BROWSE_SEGMENT: BROWSE_STATES,
    S.BROWSE_SUBTYPE: BROWSE_STATES,
    S.BROWSE_PRODUCTS: frozenset(
        {
            S.SELECT_SIZE,
            S.SET_QUANTITY,
            S.VIEW_CART,
            S.CONFIRM_ORDER,
            S.SEARCH,
            *BROWSE_STATES,
        }
    ),
    S.SELECT_SIZE: frozenset({S.SELECT_SIZE, S.SET_QUANTITY, S.BROWSE_PRODUCTS}),
    S.SET_QUANTITY: frozenset({S.SET_QUANTITY, S.VIEW_CART, S.BROWSE_PRODUCTS}),
    S.VIEW_CART: frozenset({S.VIEW_CART, S.CONFIRM_ORDER, *BROWSE_STATES}),
    S.CONFIRM_ORDER: frozenset({S.CONFIRM_ORDER, S.VIEW_CART, *BROWSE_STATES}),
    S.SUPPORT: frozenset({S.SUPPORT}),
    S.SEARCH: frozenset({S.SEARCH, *BROWSE_STATES}),
}


def validate_transition(
    current_state: ConversationState, next_state: ConversationState
) -> tuple[bool, str]:
    """Valida se uma transição é permitida.

    Retorna:
    - (True, ""): transição válida
    - (False, motivo): transição inválida

    Nunca lança exceção; apenas valida.
    """
    if next_state in RESET_STATES:
        return True, ""

    allowed = TRANSITIONS.get(current_state, frozenset())
    if next_state not in allowed:
        return False, f"No transition from {current_state} to {next_state}"
    return True, ""
