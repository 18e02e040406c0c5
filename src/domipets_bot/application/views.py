"""Montagem dos ResponseDescriptor de cada tela da conversa."""

from __future__ import annotations

from decimal import Decimal

from domipets_bot.application.copy import BotCopy
from domipets_bot.application.normalizer import (
    option_token,
    product_token,
    size_token,
    token_for,
)
from domipets_bot.domain.cart import CartLineItem, format_price
from domipets_bot.domain.catalog import CatalogOption, Product
from domipets_bot.domain.enums import ActionKind, TaxonomyLevel
from domipets_bot.domain.ledger import Faq
from domipets_bot.domain.responses import Button, ListMenu, ListRow, ListSection, ResponseDescriptor

A = ActionKind

# Uma linha da lista fica reservada para o botão "Volver".
MAX_OPTION_ROWS = 9


def _button(kind: ActionKind, label: str) -> Button:
    return Button(id=token_for(kind), label=label)


def back_button(copy: BotCopy) -> Button:
    return _button(A.BACK, copy.label_back)


def with_back(copy: BotCopy, text: str) -> ResponseDescriptor:
    return ResponseDescriptor(text=text, buttons=(back_button(copy),))


def main_menu(copy: BotCopy, text: str, cart_items: int = 0) -> ResponseDescriptor:
    """Menu principal como lista (mais opções do que cabem em 3 botões)."""
    entries = [
        (A.BROWSE, copy.label_browse),
        (A.SEARCH, copy.label_search),
        (A.SUPPORT, copy.label_support),
        (A.ORDER_STATUS, copy.label_order_status),
    ]
    if cart_items:
        entries.append((A.VIEW_CART, copy.label_view_cart))
    entries.append((A.RESTART, copy.label_restart))
    rows = tuple(ListRow(id=token_for(kind), label=label) for kind, label in entries)
    return ResponseDescriptor(
        text=text,
        list_menu=ListMenu(
            button_label=copy.menu_button,
            sections=(ListSection(title="DOMIPETS", rows=rows),),
        ),
    )


def option_list(
    copy: BotCopy,
    level: TaxonomyLevel,
    options: list[CatalogOption],
    text: str | None = None,
) -> ResponseDescriptor:
    prompts = {
        TaxonomyLevel.CATEGORY: copy.pick_category,
        TaxonomyLevel.SEGMENT: copy.pick_segment,
        TaxonomyLevel.SUBTYPE: copy.pick_subtype,
    }
    rows = tuple(
        ListRow(id=option_token(level, option.value), label=option.label)
        for option in options[:MAX_OPTION_ROWS]
    )
    body = prompts[level] if text is None else f"{text}\n{prompts[level]}"
    return ResponseDescriptor(
        text=body,
        buttons=(back_button(copy),),
        list_menu=ListMenu(
            button_label=copy.options_button,
            sections=(ListSection(title=level.value.capitalize(), rows=rows),),
        ),
    )


def _product_row(product: Product) -> ListRow:
    description = format_price(product.effective_price)
    if product.special_price is not None and product.effective_price < product.price:
        description = f"{description} (antes {format_price(product.price)})"
    if product.stock_by_size and not any(v > 0 for v in product.stock_by_size.values()):
        description = f"{description} · agotado"
    return ListRow(id=product_token(product.id), label=product.title, description=description)


def product_page(
    copy: BotCopy,
    header: str,
    products: list[Product],
    has_prev: bool,
    has_next: bool,
    notice: str | None = None,
) -> ResponseDescriptor:
    """Página de produtos com navegação e atalhos de carrinho."""
    sections = [ListSection(title="Productos", rows=tuple(_product_row(p) for p in products))]
    nav: list[ListRow] = []
    if has_prev:
        nav.append(ListRow(id=token_for(A.PREV_PAGE), label=copy.label_prev))
    if has_next:
        nav.append(ListRow(id=token_for(A.NEXT_PAGE), label=copy.label_next))
    if nav:
        sections.append(ListSection(title="Páginas", rows=tuple(nav)))

    lines = [header]
    if notice:
        lines.insert(0, notice)
    lines.append(copy.pick_product)
    return ResponseDescriptor(
        text="\n".join(lines),
        buttons=(_button(A.VIEW_CART, copy.label_view_cart), back_button(copy)),
        list_menu=ListMenu(button_label=copy.products_button, sections=tuple(sections)),
    )


def size_list(
    copy: BotCopy, product: Product, remaining: dict[str, int | None], text: str | None = None
) -> ResponseDescriptor:
    rows = []
    for index, size in enumerate(product.sizes[:MAX_OPTION_ROWS]):
        left = remaining.get(size)
        description = None if left is None else f"Disponibles: {left}"
        rows.append(ListRow(id=size_token(index), label=size, description=description))
    body = copy.pick_size.format(
        title=product.title, price=format_price(product.effective_price)
    )
    return ResponseDescriptor(
        text=body if text is None else f"{text}\n{body}",
        buttons=(back_button(copy),),
        list_menu=ListMenu(
            button_label=copy.options_button,
            sections=(ListSection(title="Tallas", rows=tuple(rows)),),
        ),
    )


def quantity_prompt(copy: BotCopy, product: Product, size: str) -> ResponseDescriptor:
    return with_back(
        copy,
        copy.ask_quantity.format(
            title=product.title, size=size, price=format_price(product.effective_price)
        ),
    )


def cart_lines(items: list[CartLineItem]) -> str:
    return "\n".join(
        f"{item.quantity} x {item.title} ({item.size}) - {format_price(item.line_total)}"
        for item in items
    )


def cart_summary(copy: BotCopy, header: str, items: list[CartLineItem]) -> str:
    total = sum((item.line_total for item in items), Decimal("0"))
    return "\n".join(
        [header, cart_lines(items), copy.total_line.format(total=format_price(total))]
    )


def cart_view(
    copy: BotCopy, items: list[CartLineItem], notice: str | None = None
) -> ResponseDescriptor:
    if not items:
        return cart_empty(copy, notice)
    text = cart_summary(copy, copy.cart_header, items)
    return ResponseDescriptor(
        text=f"{notice}\n{text}" if notice else text,
        buttons=(
            _button(A.CHECKOUT, copy.label_checkout),
            _button(A.BROWSE, copy.label_keep_shopping),
            back_button(copy),
        ),
    )


def cart_empty(copy: BotCopy, notice: str | None = None) -> ResponseDescriptor:
    return ResponseDescriptor(
        text=f"{notice}\n{copy.cart_empty}" if notice else copy.cart_empty,
        buttons=(_button(A.BROWSE, copy.label_browse), back_button(copy)),
    )


def confirm_view(copy: BotCopy, items: list[CartLineItem]) -> ResponseDescriptor:
    return ResponseDescriptor(
        text=cart_summary(copy, copy.confirm_header, items),
        buttons=(
            _button(A.CONFIRM, copy.label_confirm),
            _button(A.VIEW_CART, copy.label_edit_cart),
            back_button(copy),
        ),
    )


def support_menu(copy: BotCopy, text: str) -> ResponseDescriptor:
    return ResponseDescriptor(
        text=text,
        buttons=(
            _button(A.FAQ, copy.label_faq),
            _button(A.CONTACT_AGENT, copy.label_contact_agent),
            back_button(copy),
        ),
    )


def faq_list(copy: BotCopy, faqs: list[Faq]) -> ResponseDescriptor:
    listing = "\n".join(f"{i}. {faq.question}" for i, faq in enumerate(faqs, start=1))
    return with_back(copy, copy.faq_header.format(faqs=listing))


def search_retry(copy: BotCopy, text: str) -> ResponseDescriptor:
    return ResponseDescriptor(
        text=text, buttons=(_button(A.BROWSE, copy.label_browse), back_button(copy))
    )
