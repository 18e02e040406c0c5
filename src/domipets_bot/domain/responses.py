"""Descritor de resposta, agnóstico de canal.

O motor produz um ResponseDescriptor por turno; o Composer decide como
renderizá-lo no canal (lista, botões ou texto).
"""

from __future__ import annotations

from dataclasses import dataclass, field

MAX_BUTTONS = 3


@dataclass(frozen=True, slots=True)
class Button:
    id: str
    label: str


@dataclass(frozen=True, slots=True)
class ListRow:
    id: str
    label: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class ListSection:
    title: str
    rows: tuple[ListRow, ...]


@dataclass(frozen=True, slots=True)
class ListMenu:
    button_label: str
    sections: tuple[ListSection, ...]

    @property
    def rows(self) -> list[ListRow]:
        return [row for section in self.sections for row in section.rows]


@dataclass(frozen=True, slots=True)
class ResponseDescriptor:
    """Texto obrigatório, até 3 botões e uma lista opcional."""

    text: str
    buttons: tuple[Button, ...] = field(default_factory=tuple)
    list_menu: ListMenu | None = None

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("response text is required")
        if len(self.buttons) > MAX_BUTTONS:
            raise ValueError(f"at most {MAX_BUTTONS} buttons are allowed")
