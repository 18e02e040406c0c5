"""Enums de domínio: ações do usuário, níveis de taxonomia e tipos Meta/WhatsApp."""

from __future__ import annotations

from enum import StrEnum


class ActionKind(StrEnum):
    """Ações reconhecidas, independentes do estado."""

    BROWSE = "BROWSE"
    SEARCH = "SEARCH"
    SUPPORT = "SUPPORT"
    ORDER_STATUS = "ORDER_STATUS"
    RESTART = "RESTART"
    BACK = "BACK"
    VIEW_CART = "VIEW_CART"
    CHECKOUT = "CHECKOUT"
    CONFIRM = "CONFIRM"
    NEXT_PAGE = "NEXT_PAGE"
    PREV_PAGE = "PREV_PAGE"
    FAQ = "FAQ"
    CONTACT_AGENT = "CONTACT_AGENT"


class TaxonomyLevel(StrEnum):
    """Níveis de navegação do catálogo, do mais largo ao mais estreito."""

    CATEGORY = "category"
    SEGMENT = "segment"
    SUBTYPE = "subtype"


class SupportAction(StrEnum):
    """Sub-estado do atendimento (SUPPORT)."""

    CONTACT_AGENT = "contact_agent"
    ORDER_STATUS = "order_status"
    VIEW_FAQ = "view_faq"


class MessageType(StrEnum):
    """Tipos de conteúdo trocados com a API Meta/WhatsApp."""

    TEXT = "text"
    INTERACTIVE = "interactive"
    BUTTON = "button"


class InteractiveType(StrEnum):
    """Tipos de mensagens interativas usadas pelo bot.

    - button: até 3 botões de resposta predefinida
    - list: lista de opções (até 10 linhas no total)
    """

    BUTTON = "button"
    LIST = "list"
