"""Atendimento: FAQ, contato com asesor e status de pedido.

Sub-FSM guiada por ``session.support_action``.
"""

from __future__ import annotations

import logging

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.common import show_menu
from domipets_bot.domain.cart import format_price
from domipets_bot.domain.commands import Action, Command, FreeText, Number, is_action
from domipets_bot.domain.enums import ActionKind, SupportAction
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import ConversationState
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

A = ActionKind

ACTION_TO_SUPPORT: dict[ActionKind, SupportAction] = {
    A.FAQ: SupportAction.VIEW_FAQ,
    A.CONTACT_AGENT: SupportAction.CONTACT_AGENT,
    A.ORDER_STATUS: SupportAction.ORDER_STATUS,
}


async def start_support(
    ctx: TurnContext, action: SupportAction | None = None
) -> ResponseDescriptor:
    session = ctx.session
    session.clear_support()
    ctx.transition_to(ConversationState.SUPPORT)
    if action == SupportAction.VIEW_FAQ:
        return await _enter_faq(ctx)
    session.support_action = action
    if action == SupportAction.CONTACT_AGENT:
        return views.with_back(ctx.copy, ctx.copy.contact_prompt)
    if action == SupportAction.ORDER_STATUS:
        return views.with_back(ctx.copy, ctx.copy.order_status_prompt)
    return views.support_menu(ctx.copy, ctx.copy.support_prompt)


async def _enter_faq(ctx: TurnContext) -> ResponseDescriptor:
    faqs = await ctx.ledger.list_faqs(ctx.config.faq_limit)
    if not faqs:
        return views.support_menu(ctx.copy, ctx.copy.faq_empty)
    ctx.session.support_action = SupportAction.VIEW_FAQ
    ctx.session.faqs = faqs
    return views.faq_list(ctx.copy, faqs)


async def handle_support(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    session = ctx.session
    if is_action(command, A.BACK):
        return show_menu(ctx, ctx.copy.back_to_menu)
    if is_action(command, A.SUPPORT):
        return await start_support(ctx)
    if isinstance(command, Action) and command.kind in ACTION_TO_SUPPORT:
        return await start_support(ctx, ACTION_TO_SUPPORT[command.kind])

    action = session.support_action
    if action == SupportAction.CONTACT_AGENT:
        return await _contact_agent(ctx, command)
    if action == SupportAction.ORDER_STATUS:
        return await _order_status(ctx, command)
    if action == SupportAction.VIEW_FAQ:
        return _show_faq(ctx, command)
    return views.support_menu(ctx.copy, ctx.copy.support_prompt)


async def _contact_agent(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    if not isinstance(command, FreeText | Number):
        return views.with_back(ctx.copy, ctx.copy.contact_prompt)
    message = ctx.raw_text.strip()
    if not message:
        return views.with_back(ctx.copy, ctx.copy.contact_empty)

    identifier = ctx.session.identifier
    request_id = await ctx.ledger.create_support_request(identifier, message)
    logger.info(
        "support_request_created",
        extra={"identifier": mask_identifier(identifier), "request_id": request_id},
    )
    ctx.notifier.notify(ctx.copy.operator_alert.format(phone=identifier, message=message))
    return show_menu(ctx, ctx.copy.contact_sent.format(message=message))


async def _order_status(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    if isinstance(command, Number):
        order_id = str(command.value)
    elif isinstance(command, FreeText):
        order_id = command.text.strip().lstrip("#").strip()
    else:
        return views.with_back(ctx.copy, ctx.copy.order_status_prompt)
    if not order_id:
        return views.with_back(ctx.copy, ctx.copy.order_status_prompt)

    order = await ctx.ledger.get_order(ctx.session.identifier, order_id)
    if order is None:
        return show_menu(ctx, ctx.copy.order_status_not_found)
    return show_menu(
        ctx,
        ctx.copy.order_status_found.format(
            order_id=order.id, status=order.status, total=format_price(order.total)
        ),
    )


def _show_faq(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    faqs = ctx.session.faqs
    if not isinstance(command, Number):
        return views.faq_list(ctx.copy, faqs)
    if command.value > len(faqs):
        return views.with_back(ctx.copy, ctx.copy.faq_invalid)
    faq = faqs[command.value - 1]
    return views.with_back(
        ctx.copy, ctx.copy.faq_answer.format(question=faq.question, answer=faq.answer)
    )
