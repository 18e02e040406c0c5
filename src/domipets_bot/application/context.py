"""Configuração do motor e contexto de um turno."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from domipets_bot.application.copy import DEFAULT_COPY, BotCopy
from domipets_bot.application.normalizer import DEFAULT_KEYWORDS, KeywordTable
from domipets_bot.application.notifier import OperatorNotifier
from domipets_bot.application.services import CommitGuard, LedgerService
from domipets_bot.domain.catalog import CatalogGateway, TaxonomyDescriptor
from domipets_bot.domain.session import (
    ConversationSession,
    ConversationState,
    InvalidTransitionError,
    validate_transition,
)
from domipets_bot.observability.logging import get_logger
from domipets_bot.utils.ids import mask_identifier

if TYPE_CHECKING:
    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

# Produtos + anterior/siguiente + botões cabem nas 10 linhas da lista.
MAX_PAGE_SIZE = 6


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Parâmetros imutáveis do motor, montados uma vez no startup."""

    copy: BotCopy = DEFAULT_COPY
    keywords: KeywordTable = DEFAULT_KEYWORDS
    taxonomy: TaxonomyDescriptor = field(default_factory=TaxonomyDescriptor)
    error_threshold: int = 3
    inactivity: timedelta = timedelta(minutes=30)
    page_size: int = MAX_PAGE_SIZE
    search_limit: int = 10
    faq_limit: int = 5

    def __post_init__(self) -> None:
        if self.error_threshold < 1:
            raise ValueError("error_threshold must be >= 1")
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

    @classmethod
    def from_settings(cls, settings: Settings) -> EngineConfig:
        return cls(
            taxonomy=TaxonomyDescriptor.with_depth(settings.catalog_taxonomy_depth),
            error_threshold=settings.error_threshold,
            inactivity=timedelta(minutes=settings.session_inactivity_minutes),
            page_size=settings.catalog_page_size,
            search_limit=settings.catalog_search_limit,
            faq_limit=settings.faq_limit,
        )


@dataclass(slots=True)
class TurnContext:
    """Tudo que um handler de estado pode tocar durante um turno."""

    session: ConversationSession
    raw_text: str
    now: datetime
    config: EngineConfig
    catalog: CatalogGateway
    ledger: LedgerService
    commit_guard: CommitGuard
    notifier: OperatorNotifier
    order_id: str | None = None

    @property
    def copy(self) -> BotCopy:
        return self.config.copy

    def transition_to(self, state: ConversationState) -> None:
        """Aplica a mudança de estado validando contra a tabela.

        Raises:
            InvalidTransitionError: transição não prevista
        """
        current = self.session.state
        ok, reason = validate_transition(current, state)
        if not ok:
            raise InvalidTransitionError(reason)
        if current != state:
            logger.debug(
                "state_transition",
                extra={
                    "identifier": mask_identifier(self.session.identifier),
                    "from_state": current.value,
                    "to_state": state.value,
                },
            )
        self.session.state = state
