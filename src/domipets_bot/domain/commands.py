"""Comandos normalizados (união fechada).

Toda mensagem vira exatamente um destes comandos antes de chegar aos
handlers de estado.
"""

from __future__ import annotations

from dataclasses import dataclass

from domipets_bot.domain.enums import ActionKind, TaxonomyLevel


@dataclass(frozen=True, slots=True)
class Action:
    kind: ActionKind


@dataclass(frozen=True, slots=True)
class SelectOption:
    level: TaxonomyLevel
    value: str


@dataclass(frozen=True, slots=True)
class SelectProduct:
    product_id: str


@dataclass(frozen=True, slots=True)
class SelectSize:
    index: int
    """Índice base 0 na lista de tamanhos do produto."""


@dataclass(frozen=True, slots=True)
class Number:
    value: int
    """Inteiro positivo digitado pelo usuário."""


@dataclass(frozen=True, slots=True)
class FreeText:
    text: str


Command = Action | SelectOption | SelectProduct | SelectSize | Number | FreeText


def is_action(command: Command, *kinds: ActionKind) -> bool:
    """True se o comando é uma Action de um dos tipos informados."""
    return isinstance(command, Action) and command.kind in kinds
