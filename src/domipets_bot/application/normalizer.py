"""Normalização de entrada: texto ou resposta estruturada → Command.

Única etapa que lida com strings de token; os handlers só recebem
variantes de Command.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from domipets_bot.domain.commands import (
    Action,
    Command,
    FreeText,
    Number,
    SelectOption,
    SelectProduct,
    SelectSize,
)
from domipets_bot.domain.enums import ActionKind, TaxonomyLevel
from domipets_bot.domain.events import StructuredReply

A = ActionKind

ACTION_TOKENS: Mapping[str, ActionKind] = MappingProxyType(
    {
        "ver_catalogo": A.BROWSE,
        "buscar_productos": A.SEARCH,
        "hablar_agente": A.SUPPORT,
        "estado_pedido": A.ORDER_STATUS,
        "reiniciar": A.RESTART,
        "volver": A.BACK,
        "ver_carrito": A.VIEW_CART,
        "finalizar_pedido": A.CHECKOUT,
        "confirm_order": A.CONFIRM,
        "siguiente": A.NEXT_PAGE,
        "anterior": A.PREV_PAGE,
        "preguntas_frecuentes": A.FAQ,
        "contactar_agente": A.CONTACT_AGENT,
    }
)

# Prioridade fixa: a primeira regra cujo termo aparece no texto vence.
DEFAULT_KEYWORD_RULES: tuple[tuple[ActionKind, tuple[str, ...]], ...] = (
    (A.BROWSE, ("catalogo", "catálogo", "productos")),
    (A.SEARCH, ("buscar", "encontrar")),
    (A.SUPPORT, ("ayuda", "asesor")),
    (A.ORDER_STATUS, ("pedido", "estado")),
    (A.BACK, ("volver", "atras", "atrás")),
    (A.RESTART, ("reiniciar", "inicio")),
    (A.CONFIRM, ("confirmar", "confirm")),
    (A.CHECKOUT, ("finalizar", "pagar")),
    (A.VIEW_CART, ("carrito",)),
)

OPTION_PREFIXES: Mapping[str, TaxonomyLevel] = MappingProxyType(
    {
        "cat_": TaxonomyLevel.CATEGORY,
        "seg_": TaxonomyLevel.SEGMENT,
        "sub_": TaxonomyLevel.SUBTYPE,
    }
)
PRODUCT_PREFIX = "prod_"
SIZE_PREFIX = "size_"


def token_for(kind: ActionKind) -> str:
    """Id de botão/lista que o normalizador reconhece para a ação."""
    for token, action in ACTION_TOKENS.items():
        if action == kind:
            return token
    raise KeyError(kind)


def option_token(level: TaxonomyLevel, value: str) -> str:
    for prefix, prefix_level in OPTION_PREFIXES.items():
        if prefix_level == level:
            return f"{prefix}{value}"
    raise KeyError(level)


def product_token(product_id: str) -> str:
    return f"{PRODUCT_PREFIX}{product_id}"


def size_token(index: int) -> str:
    return f"{SIZE_PREFIX}{index}"


@dataclass(frozen=True, slots=True)
class KeywordTable:
    """Tokens exatos e regras de palavra-chave (configuração imutável)."""

    tokens: Mapping[str, ActionKind] = field(default_factory=lambda: ACTION_TOKENS)
    rules: tuple[tuple[ActionKind, tuple[str, ...]], ...] = DEFAULT_KEYWORD_RULES

    def match(self, text: str, *, whole_text: bool = False) -> ActionKind | None:
        for kind, keywords in self.rules:
            for keyword in keywords:
                if (text == keyword) if whole_text else (keyword in text):
                    return kind
        return None


DEFAULT_KEYWORDS = KeywordTable()


def _parse_positive_int(text: str) -> int | None:
    if not text.isdigit():
        return None
    value = int(text)
    return value if value > 0 else None


class InputNormalizer:
    """Converte a entrada de um turno em exatamente um Command."""

    def __init__(self, keywords: KeywordTable = DEFAULT_KEYWORDS) -> None:
        self._keywords = keywords

    def parse_token(self, token: str) -> Command | None:
        """Interpreta um id conhecido (ação ou seletor com prefixo)."""
        kind = self._keywords.tokens.get(token)
        if kind is not None:
            return Action(kind)
        for prefix, level in OPTION_PREFIXES.items():
            if token.startswith(prefix) and len(token) > len(prefix):
                return SelectOption(level=level, value=token[len(prefix) :])
        if token.startswith(PRODUCT_PREFIX) and len(token) > len(PRODUCT_PREFIX):
            return SelectProduct(product_id=token[len(PRODUCT_PREFIX) :])
        if token.startswith(SIZE_PREFIX):
            index = token[len(SIZE_PREFIX) :]
            if index.isdigit():
                return SelectSize(index=int(index))
        return None

    def normalize(
        self,
        text: str,
        structured_reply: StructuredReply | None = None,
        *,
        capture_free_text: bool = False,
    ) -> Command:
        """Normaliza a entrada.

        - resposta estruturada: o id é usado literalmente
        - texto: minúsculas/trim, token exato, inteiro positivo, palavra-chave
        - ``capture_free_text``: estados que esperam texto livre (busca,
          ticket, número de pedido) só aceitam palavra-chave igual ao texto
          inteiro, para não sequestrar a mensagem do cliente
        """
        if structured_reply is not None:
            token = structured_reply.id
            parsed = self.parse_token(token)
            if parsed is not None:
                return parsed
            number = _parse_positive_int(token)
            return Number(number) if number is not None else FreeText(token)

        raw = (text or "").strip()
        cleaned = raw.lower()
        parsed = self.parse_token(cleaned)
        if parsed is not None:
            return parsed
        number = _parse_positive_int(cleaned)
        if number is not None:
            return Number(number)
        kind = self._keywords.match(cleaned, whole_text=capture_free_text)
        if kind is not None:
            return Action(kind)
        return FreeText(raw)
