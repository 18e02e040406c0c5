"""Handlers por estado da conversa.

Cada handler recebe o TurnContext e o Command normalizado, muta a sessão
e devolve o ResponseDescriptor do turno.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.browse import (
    handle_browse_level,
    handle_products,
    handle_select_size,
    handle_set_quantity,
)
from domipets_bot.application.handlers.cart import handle_confirm_order, handle_view_cart
from domipets_bot.application.handlers.menu import handle_init, handle_menu
from domipets_bot.application.handlers.search import handle_search
from domipets_bot.application.handlers.support import handle_support
from domipets_bot.domain.commands import Command
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import ConversationState

Handler = Callable[[TurnContext, Command], Awaitable[ResponseDescriptor]]

S = ConversationState

HANDLERS: dict[ConversationState, Handler] = {
    S.INIT: handle_init,
    S.MENU: handle_menu,
    S.BROWSE_CATEGORY: handle_browse_level,
    S.BROWSE_SEGMENT: handle_browse_level,
    S.BROWSE_SUBTYPE: handle_browse_level,
    S.BROWSE_PRODUCTS: handle_products,
    S.SELECT_SIZE: handle_select_size,
    S.SET_QUANTITY: handle_set_quantity,
    S.VIEW_CART: handle_view_cart,
    S.CONFIRM_ORDER: handle_confirm_order,
    S.SUPPORT: handle_support,
    S.SEARCH: handle_search,
}

__all__ = ["HANDLERS", "Handler"]
