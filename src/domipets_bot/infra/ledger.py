"""Factory de OrderLedger conforme LEDGER_BACKEND."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from domipets_bot.domain.ledger import OrderLedger
from domipets_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from sqlalchemy.orm import sessionmaker

    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_order_ledger(
    settings: Settings, session_factory: sessionmaker | None = None
) -> OrderLedger:
    """Cria o ledger de pedidos/tickets.

    Raises:
        ValueError: backend desconhecido ou session_factory ausente
    """
    backend = settings.ledger_backend.lower()
    if backend == "memory":
        from domipets_bot.infra.ledger_memory import InMemoryOrderLedger

        logger.info("Usando InMemoryOrderLedger (apenas dev/testes)")
        return InMemoryOrderLedger()

    if backend == "sql":
        if session_factory is None:
            raise ValueError("session_factory é obrigatório para LEDGER_BACKEND=sql")
        from domipets_bot.infra.ledger_sql import SqlOrderLedger

        logger.info("Usando SqlOrderLedger")
        return SqlOrderLedger(session_factory)

    raise ValueError(f"Backend de ledger não reconhecido: {backend}")
