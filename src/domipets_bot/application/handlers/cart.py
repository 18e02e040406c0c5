"""Carrinho e confirmação de pedido.

O commit é a única escrita de pedido no ledger. Roda sob o lock do
identificador e com a guarda ``order-commit:{token}``: uma confirmação
duplicada (duplo toque, outra instância com a mesma sessão) não grava um
segundo pedido.
"""

from __future__ import annotations

import logging

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.browse import show_products, start_browsing
from domipets_bot.application.handlers.common import open_cart, show_menu, start_checkout
from domipets_bot.domain.cart import format_price
from domipets_bot.domain.commands import Command, is_action
from domipets_bot.domain.enums import ActionKind
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier, new_order_token

logger: logging.Logger = get_logger(__name__)

A = ActionKind


async def handle_view_cart(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    if is_action(command, A.CHECKOUT, A.CONFIRM):
        return start_checkout(ctx)
    if is_action(command, A.BROWSE):
        return await start_browsing(ctx)
    if is_action(command, A.BACK):
        if ctx.session.catalog_visited:
            return await show_products(ctx)
        return show_menu(ctx, ctx.copy.back_to_menu)
    return open_cart(ctx)


async def handle_confirm_order(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    if is_action(command, A.CONFIRM):
        return await commit_order(ctx)

    # Qualquer outra entrada descarta a confirmação pendente, sem efeitos.
    ctx.session.pending_order_token = None
    if is_action(command, A.BROWSE):
        return await start_browsing(ctx)
    return open_cart(ctx)


async def commit_order(ctx: TurnContext) -> ResponseDescriptor:
    session = ctx.session
    if not session.cart:
        return open_cart(ctx)

    token = session.pending_order_token or new_order_token()
    if not await ctx.commit_guard.acquire(token):
        logger.warning(
            "duplicate_order_confirmation",
            extra={"identifier": mask_identifier(session.identifier)},
        )
        session.cart = []
        return show_menu(ctx, ctx.copy.order_already_registered)

    items = list(session.cart)
    total = session.cart_total
    try:
        order_id = await ctx.ledger.create_order(session.identifier, items, total)
    except Exception:
        await ctx.commit_guard.release(token)
        raise

    logger.info(
        "order_committed",
        extra={
            "identifier": mask_identifier(session.identifier),
            "order_id": order_id,
            "items": len(items),
        },
    )
    session.cart = []
    ctx.order_id = order_id
    text = ctx.copy.order_confirmed.format(
        order_id=order_id, lines=views.cart_lines(items), total=format_price(total)
    )
    return show_menu(ctx, text)
