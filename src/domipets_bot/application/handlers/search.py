"""Busca por texto livre."""

from __future__ import annotations

import logging

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.browse import show_products, start_browsing
from domipets_bot.application.handlers.common import show_menu
from domipets_bot.domain.commands import Command, FreeText, Number, is_action
from domipets_bot.domain.enums import ActionKind
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import CatalogCursor
from domipets_bot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

A = ActionKind


async def handle_search(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    session = ctx.session
    if is_action(command, A.BACK):
        session.cursor = CatalogCursor()
        return show_menu(ctx, ctx.copy.back_to_menu)
    if is_action(command, A.BROWSE):
        return await start_browsing(ctx)
    if not isinstance(command, FreeText | Number):
        return views.with_back(ctx.copy, ctx.copy.search_prompt)

    term = ctx.raw_text.strip()
    if not term:
        return views.with_back(ctx.copy, ctx.copy.search_empty_term)

    results = await ctx.catalog.search(term, limit=ctx.config.search_limit)
    logger.info("catalog_search", extra={"term_length": len(term), "results": len(results)})
    if not results:
        return views.search_retry(ctx.copy, ctx.copy.search_no_results.format(term=term))

    session.cursor = CatalogCursor(search_term=term)
    session.catalog_visited = True
    return await show_products(ctx, results=results)
