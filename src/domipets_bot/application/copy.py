"""Textos e rótulos exibidos ao cliente (espanhol, marca DOMIPETS).

Configuração imutável: construída uma vez e injetada no motor.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BotCopy:
    """Todos os textos visíveis ao cliente, num só lugar."""

    welcome: str = (
        "🐾 ¡Bienvenid@ a DOMIPETS! Somos tu tienda favorita para consentir a tu "
        "peludo. 😻 ¿En qué te ayudamos hoy?"
    )
    welcome_back: str = (
        "🐾 ¡Hola de nuevo! Pasó un buen rato desde tu último mensaje, así que "
        "empezamos otra vez. ¿En qué te ayudamos hoy?"
    )
    menu_prompt: str = "🐾 ¿En qué te ayudamos hoy en DOMIPETS? 😻"
    back_to_menu: str = "🐾 ¡Volvemos al menú de DOMIPETS! ¿En qué te ayudamos hoy?"
    restart: str = "🔁 ¡Volvamos al inicio en DOMIPETS! ¿Qué quieres para tu mascota hoy? 🐾"
    recovery: str = (
        "😿 ¡Ups! Parece que te perdiste. Volvemos al menú de DOMIPETS. 🐾 ¿Qué quieres hacer?"
    )
    fatal: str = (
        "😿 ¡Ups! Algo falló en DOMIPETS. Escribe \"reiniciar\" para empezar de nuevo. 🐾"
    )
    menu_button: str = "Menú"
    options_button: str = "Ver opciones"
    products_button: str = "Ver productos"

    # Menu
    label_browse: str = "🛍️ Ver catálogo"
    label_search: str = "🔍 Buscar"
    label_support: str = "💬 Ayuda DOMIPETS"
    label_order_status: str = "🚚 Mi pedido"
    label_restart: str = "🔁 Reiniciar"
    label_back: str = "⬅️ Volver"
    label_view_cart: str = "🛒 Ver carrito"
    label_checkout: str = "✅ Finalizar pedido"
    label_keep_shopping: str = "🛍️ Seguir comprando"
    label_confirm: str = "✅ Confirmar"
    label_edit_cart: str = "🛒 Editar"
    label_next: str = "➡️ Siguiente"
    label_prev: str = "⬅️ Anterior"
    label_faq: str = "❓ FAQs"
    label_contact_agent: str = "📞 Asesor DOMIPETS"

    # Catálogo
    pick_category: str = "🛍️ Elige una categoría del catálogo de DOMIPETS:"
    pick_segment: str = "🐾 ¿Para qué mascota buscas?"
    pick_subtype: str = "📦 Elige el tipo de producto:"
    invalid_option: str = "😿 Esa opción ya no está disponible. Elige una de la lista."
    catalog_empty: str = "😿 No hay productos disponibles en DOMIPETS. Intenta más tarde."
    products_header: str = "🛍️ Productos de DOMIPETS (página {page}):"
    search_header: str = "🔍 Resultados para \"{term}\" (página {page}):"
    pick_product: str = "Elige un producto para ver tallas y cantidades."
    no_more_pages: str = "📄 No hay más productos en esta lista."
    first_page: str = "📄 Ya estás en la primera página."
    product_not_found: str = "😿 No encontramos ese producto. Elige uno de la lista."
    pick_size: str = "📏 \"{title}\" - {price}. Elige la talla o presentación:"
    invalid_size: str = "😿 Talla inválida. Elige una de la lista."
    ask_quantity: str = (
        "📦 Seleccionaste \"{title}\" ({size}) - {price}. ¿Cuántas unidades deseas? "
        "(Escribe un número)"
    )
    invalid_quantity: str = "😿 La cantidad debe ser un número mayor a 0. Intenta de nuevo."
    stock_exceeded: str = (
        "😿 Solo quedan {remaining} unidades disponibles de \"{title}\" ({size}). "
        "Escribe una cantidad menor."
    )
    out_of_stock: str = "😿 \"{title}\" ({size}) está agotado por ahora. Elige otro producto."
    added_to_cart: str = (
        "✅ Añadidas {quantity} unidades de \"{title}\" al carrito. "
        "¿Qué más necesitas?"
    )

    # Carrinho
    cart_empty: str = "🛒 ¡Tu carrito en DOMIPETS está vacío! Añade productos desde el catálogo."
    cart_header: str = "🛒 Tu carrito en DOMIPETS:"
    confirm_header: str = "📋 Confirma tu pedido en DOMIPETS:"
    total_line: str = "💰 Total: {total}"
    order_confirmed: str = (
        "🎉 ¡Pedido #{order_id} confirmado en DOMIPETS!\nResumen:\n{lines}\n"
        "💰 Total: {total}"
    )
    order_already_registered: str = (
        "✅ Este pedido ya fue registrado en DOMIPETS. Te contactaremos pronto. 🐾"
    )

    # Suporte
    support_prompt: str = "💬 ¿En qué puede ayudarte el equipo de DOMIPETS?"
    faq_header: str = (
        "📚 Preguntas frecuentes de DOMIPETS:\n{faqs}\nEscribe el número de la pregunta "
        "para ver la respuesta o \"volver\" para regresar."
    )
    faq_empty: str = "📚 No hay FAQs disponibles en este momento. ¡Contacta a un asesor! 🐾"
    faq_answer: str = "❓ {question}\n{answer}\nEscribe otro número o \"volver\" para regresar."
    faq_invalid: str = "😿 Número inválido. Elige un número de la lista o escribe \"volver\"."
    contact_prompt: str = "💬 Escribe tu consulta y el equipo de DOMIPETS te ayudará pronto. 🐾"
    contact_empty: str = "💬 Escribe tu consulta en un mensaje de texto."
    contact_sent: str = "✅ Mensaje enviado a DOMIPETS: \"{message}\". ¡Te contactaremos pronto! 🐾"
    order_status_prompt: str = "🚚 Ingresa el número de tu pedido en DOMIPETS:"
    order_status_found: str = "📦 Pedido #{order_id} en DOMIPETS: {status}. Total: {total}."
    order_status_not_found: str = (
        "🚚 No encontramos ese pedido. Verifica el número desde el menú \"Mi pedido\"."
    )
    operator_alert: str = (
        "🚨 Nueva solicitud de soporte de {phone}:\n\"{message}\"\n"
        "Por favor, responde pronto."
    )

    # Busca
    search_prompt: str = "🔍 Escribe el nombre o descripción del producto que buscas en DOMIPETS:"
    search_empty_term: str = (
        "🔍 Por favor, escribe un término de búsqueda (ej. \"alimento\" o \"arena\")."
    )
    search_no_results: str = (
        "😿 No encontramos \"{term}\" en DOMIPETS. ¡Intenta otra búsqueda o visita el catálogo! 🛍️"
    )


DEFAULT_COPY = BotCopy()
