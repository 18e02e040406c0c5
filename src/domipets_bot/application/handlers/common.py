"""Telas compartilhadas entre handlers (menu e carrinho)."""

from __future__ import annotations

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.domain.catalog import Product
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import ConversationSession, ConversationState
from domipets_bot.utils.ids import new_order_token

S = ConversationState


def show_menu(ctx: TurnContext, text: str) -> ResponseDescriptor:
    """Volta ao MENU limpando seleção, suporte e pedido pendente."""
    session = ctx.session
    session.clear_selection()
    session.clear_support()
    session.pending_order_token = None
    ctx.transition_to(S.MENU)
    return views.main_menu(ctx.copy, text, len(session.cart))


def open_cart(ctx: TurnContext, notice: str | None = None) -> ResponseDescriptor:
    ctx.session.pending_order_token = None
    ctx.transition_to(S.VIEW_CART)
    return views.cart_view(ctx.copy, ctx.session.cart, notice)


def start_checkout(ctx: TurnContext) -> ResponseDescriptor:
    """Carrinho vazio fica em VIEW_CART; senão abre a confirmação."""
    session = ctx.session
    if not session.cart:
        return open_cart(ctx)
    session.pending_order_token = new_order_token()
    ctx.transition_to(S.CONFIRM_ORDER)
    return views.confirm_view(ctx.copy, session.cart)


def remaining_stock(session: ConversationSession, product: Product, size: str) -> int | None:
    """Estoque do tamanho menos o que já está no carrinho; None = sem controle."""
    stock = product.stock_for(size)
    if stock is None:
        return None
    return max(stock - session.quantity_in_cart(product.id, size), 0)
