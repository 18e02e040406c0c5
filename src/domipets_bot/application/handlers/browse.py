"""Navegação do catálogo: níveis de taxonomia, páginas, tamanho e quantidade.

Regra de colapso: um nível sem opções para o filtro atual é pulado (o
cursor guarda None, sem placeholder) e a navegação desce para o próximo.
"Volver" recalcula a tela anterior procurando o nível mais raso que ainda
tem opções.
"""

from __future__ import annotations

import logging

from domipets_bot.application import views
from domipets_bot.application.context import TurnContext
from domipets_bot.application.handlers.common import (
    open_cart,
    remaining_stock,
    show_menu,
    start_checkout,
)
from domipets_bot.domain.cart import CartLineItem
from domipets_bot.domain.catalog import CatalogOption, Product
from domipets_bot.domain.commands import (
    Command,
    Number,
    SelectOption,
    SelectProduct,
    SelectSize,
    is_action,
)
from domipets_bot.domain.enums import ActionKind, TaxonomyLevel
from domipets_bot.domain.responses import ResponseDescriptor
from domipets_bot.domain.session import CatalogCursor, ConversationState
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

logger: logging.Logger = get_logger(__name__)

A = ActionKind
S = ConversationState

LEVEL_STATES: dict[TaxonomyLevel, ConversationState] = {
    TaxonomyLevel.CATEGORY: S.BROWSE_CATEGORY,
    TaxonomyLevel.SEGMENT: S.BROWSE_SEGMENT,
    TaxonomyLevel.SUBTYPE: S.BROWSE_SUBTYPE,
}
STATE_LEVELS: dict[ConversationState, TaxonomyLevel] = {v: k for k, v in LEVEL_STATES.items()}


def _selected(cursor: CatalogCursor, level: TaxonomyLevel) -> str | None:
    return getattr(cursor, level.value)


def _select(cursor: CatalogCursor, level: TaxonomyLevel, value: str | None) -> None:
    setattr(cursor, level.value, value)
    cursor.offset = 0


async def _options(ctx: TurnContext, level: TaxonomyLevel) -> list[CatalogOption]:
    cursor = ctx.session.cursor
    return await ctx.catalog.list_options(level, cursor.category, cursor.segment)


async def descend(
    ctx: TurnContext, start: int = 0, notice: str | None = None
) -> ResponseDescriptor:
    """Mostra o primeiro nível a partir de ``start`` que tenha opções."""
    levels = ctx.config.taxonomy.levels
    for level in levels[start:]:
        options = await _options(ctx, level)
        if options:
            ctx.transition_to(LEVEL_STATES[level])
            return views.option_list(ctx.copy, level, options, notice)
        _select(ctx.session.cursor, level, None)
        logger.debug("taxonomy_level_collapsed", extra={"level": level.value})
    return await show_products(ctx, notice=notice)


async def start_browsing(ctx: TurnContext, notice: str | None = None) -> ResponseDescriptor:
    session = ctx.session
    session.cursor = CatalogCursor()
    session.catalog_visited = True
    session.clear_selection()
    session.pending_order_token = None
    return await descend(ctx, 0, notice)


async def _page(
    ctx: TurnContext, results: list[Product] | None = None
) -> tuple[list[Product], bool]:
    cursor = ctx.session.cursor
    size = ctx.config.page_size
    if cursor.search_term is not None:
        if results is None:
            results = await ctx.catalog.search(cursor.search_term, limit=ctx.config.search_limit)
        window = results[cursor.offset : cursor.offset + size + 1]
    else:
        window = await ctx.catalog.list_products(
            cursor.category, cursor.segment, cursor.subtype, cursor.offset, size + 1
        )
    return window[:size], len(window) > size


async def show_products(
    ctx: TurnContext,
    notice: str | None = None,
    results: list[Product] | None = None,
) -> ResponseDescriptor:
    """Página atual do cursor (navegação ou resultado de busca)."""
    cursor = ctx.session.cursor
    products, has_next = await _page(ctx, results)
    ctx.transition_to(S.BROWSE_PRODUCTS)
    if not products:
        text = ctx.copy.catalog_empty if notice is None else f"{notice}\n{ctx.copy.catalog_empty}"
        return views.with_back(ctx.copy, text)

    page = cursor.offset // ctx.config.page_size + 1
    if cursor.search_term is not None:
        header = ctx.copy.search_header.format(term=cursor.search_term, page=page)
    else:
        header = ctx.copy.products_header.format(page=page)
    return views.product_page(
        ctx.copy, header, products, has_prev=cursor.offset > 0, has_next=has_next, notice=notice
    )


async def go_back(ctx: TurnContext) -> ResponseDescriptor:
    """Volta ao nível mais raso anterior que tenha opções; senão MENU.

    Resultados de busca voltam para SEARCH.
    """
    session = ctx.session
    cursor = session.cursor
    if session.state == S.BROWSE_PRODUCTS and cursor.search_term is not None:
        session.cursor = CatalogCursor()
        ctx.transition_to(S.SEARCH)
        return views.with_back(ctx.copy, ctx.copy.search_prompt)

    levels = ctx.config.taxonomy.levels
    level = STATE_LEVELS.get(session.state)
    top = levels.index(level) if level in levels else len(levels)
    for index in range(top - 1, -1, -1):
        for deeper in levels[index:]:
            _select(cursor, deeper, None)
        options = await _options(ctx, levels[index])
        if options:
            ctx.transition_to(LEVEL_STATES[levels[index]])
            return views.option_list(ctx.copy, levels[index], options)

    session.cursor = CatalogCursor()
    return show_menu(ctx, ctx.copy.back_to_menu)


async def handle_browse_level(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    """BROWSE_CATEGORY, BROWSE_SEGMENT e BROWSE_SUBTYPE."""
    level = STATE_LEVELS[ctx.session.state]
    if is_action(command, A.BACK):
        return await go_back(ctx)

    options = await _options(ctx, level)
    chosen: str | None = None
    if isinstance(command, SelectOption) and command.level == level:
        chosen = command.value
    elif isinstance(command, Number) and command.value <= len(options):
        chosen = options[command.value - 1].value
    else:
        return views.option_list(ctx.copy, level, options)

    # A lista do cliente pode estar velha: valida contra a lista atual.
    if chosen not in {option.value for option in options}:
        return views.option_list(ctx.copy, level, options, ctx.copy.invalid_option)

    _select(ctx.session.cursor, level, chosen)
    levels = ctx.config.taxonomy.levels
    return await descend(ctx, levels.index(level) + 1)


async def select_product(ctx: TurnContext, product_id: str) -> ResponseDescriptor:
    session = ctx.session
    product = await ctx.catalog.get_product(product_id)
    if product is None:
        return await show_products(ctx, notice=ctx.copy.product_not_found)

    session.selected_product = product
    session.selected_size = None
    if product.has_single_size:
        size = product.default_size
        if remaining_stock(session, product, size) == 0:
            session.clear_selection()
            return await show_products(
                ctx, notice=ctx.copy.out_of_stock.format(title=product.title, size=size)
            )
        session.selected_size = size
        ctx.transition_to(S.SET_QUANTITY)
        return views.quantity_prompt(ctx.copy, product, size)

    ctx.transition_to(S.SELECT_SIZE)
    return _size_list(ctx, product)


def _size_list(ctx: TurnContext, product: Product, text: str | None = None) -> ResponseDescriptor:
    remaining = {size: remaining_stock(ctx.session, product, size) for size in product.sizes}
    return views.size_list(ctx.copy, product, remaining, text)


async def handle_products(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    session = ctx.session
    cursor = session.cursor
    page_size = ctx.config.page_size

    if is_action(command, A.BACK):
        return await go_back(ctx)
    if is_action(command, A.NEXT_PAGE):
        cursor.offset += page_size
        products, _ = await _page(ctx)
        if not products:
            cursor.offset -= page_size
            return await show_products(ctx, notice=ctx.copy.no_more_pages)
        return await show_products(ctx)
    if is_action(command, A.PREV_PAGE):
        if cursor.offset == 0:
            return await show_products(ctx, notice=ctx.copy.first_page)
        cursor.offset = max(cursor.offset - page_size, 0)
        return await show_products(ctx)
    if isinstance(command, SelectProduct):
        return await select_product(ctx, command.product_id)
    if isinstance(command, Number):
        products, _ = await _page(ctx)
        if command.value <= len(products):
            return await select_product(ctx, products[command.value - 1].id)
        return await show_products(ctx, notice=ctx.copy.product_not_found)
    if is_action(command, A.VIEW_CART):
        return open_cart(ctx)
    if is_action(command, A.CHECKOUT):
        return start_checkout(ctx)
    if is_action(command, A.BROWSE):
        return await start_browsing(ctx)
    if is_action(command, A.SEARCH):
        session.cursor = CatalogCursor()
        ctx.transition_to(S.SEARCH)
        return views.with_back(ctx.copy, ctx.copy.search_prompt)
    return await show_products(ctx)


async def handle_select_size(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    session = ctx.session
    product = session.selected_product
    if product is None or is_action(command, A.BACK):
        session.clear_selection()
        return await show_products(ctx)

    if isinstance(command, SelectSize):
        index = command.index
    elif isinstance(command, Number):
        index = command.value - 1
    else:
        return _size_list(ctx, product)

    if not 0 <= index < len(product.sizes):
        return _size_list(ctx, product, ctx.copy.invalid_size)
    size = product.sizes[index]
    if remaining_stock(session, product, size) == 0:
        notice = ctx.copy.out_of_stock.format(title=product.title, size=size)
        return _size_list(ctx, product, notice)

    session.selected_size = size
    ctx.transition_to(S.SET_QUANTITY)
    return views.quantity_prompt(ctx.copy, product, size)


async def handle_set_quantity(ctx: TurnContext, command: Command) -> ResponseDescriptor:
    session = ctx.session
    product = session.selected_product
    size = session.selected_size
    if product is None or size is None or is_action(command, A.BACK):
        session.clear_selection()
        return await show_products(ctx)

    if not isinstance(command, Number):
        return views.with_back(ctx.copy, ctx.copy.invalid_quantity)

    remaining = remaining_stock(session, product, size)
    if remaining is not None and command.value > remaining:
        logger.info(
            "quantity_exceeds_stock",
            extra={
                "identifier": mask_identifier(session.identifier),
                "product_id": product.id,
                "requested": command.value,
                "remaining": remaining,
            },
        )
        return views.with_back(
            ctx.copy,
            ctx.copy.stock_exceeded.format(remaining=remaining, title=product.title, size=size),
        )

    session.cart.append(
        CartLineItem(
            product_id=product.id,
            title=product.title,
            size=size,
            quantity=command.value,
            unit_price=product.effective_price,
        )
    )
    session.clear_selection()
    notice = ctx.copy.added_to_cart.format(quantity=command.value, title=product.title)
    return await show_products(ctx, notice=notice)
