"""INIT e MENU."""

from __future__ import annotations

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.browse import start_browsing
from domipets_bot.application.handlers.common import open_cart, show_menu
from domipets_bot.application.handlers.support import ACTION_TO_SUPPORT, start_support
from domipets_bot.domain.commands import Action, Command, is_action
from domipets_bot.domain.enums import ActionKind
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import ConversationState

A = ActionKind


async def handle_init(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    """Primeira mensagem: qualquer entrada leva às boas-vindas."""
    return show_menu(ctx, ctx.copy.welcome)


async def handle_menu(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    if is_action(command, A.BROWSE):
        return await start_browsing(ctx)
    if is_action(command, A.SEARCH):
        ctx.transition_to(ConversationState.SEARCH)
        return views.with_back(ctx.copy, ctx.copy.search_prompt)
    if is_action(command, A.SUPPORT):
        return await start_support(ctx)
    if isinstance(command, Action) and command.kind in ACTION_TO_SUPPORT:
        return await start_support(ctx, ACTION_TO_SUPPORT[command.kind])
    if is_action(command, A.VIEW_CART):
        return open_cart(ctx)
    return show_menu(ctx, ctx.copy.menu_prompt)
