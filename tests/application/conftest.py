from __future__ import annotations

import pytest

from domipets_bot.adapters.whatsapp.composer import LoggingComposer
from domipets_bot.application.context import EngineConfig
from domipets_bot.application.engine import ConversationEngine
from domipets_bot.application.notifier import OperatorNotifier
from domipets_bot.application.session_manager import SessionManager
from domipets_bot.infra.catalog_memory import InMemoryCatalogGateway
from domipets_bot.infra.dedupe import InMemoryDedupeStore
from domipets_bot.infra.ledger_memory import InMemoryOrderLedger
from domipets_bot.infra.session_store_memory import InMemorySessionStore
from tests.helpers.conversation import OPERATOR, FakeClock, catalog_products


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def catalog() -> InMemoryCatalogGateway:
    return InMemoryCatalogGateway(catalog_products())


@pytest.fixture()
def ledger() -> InMemoryOrderLedger:
    return InMemoryOrderLedger()


@pytest.fixture()
def composer() -> LoggingComposer:
    return LoggingComposer()


@pytest.fixture()
def dedupe_store() -> InMemoryDedupeStore:
    return InMemoryDedupeStore()


@pytest.fixture()
def engine(session_store, catalog, ledger, composer, dedupe_store, clock) -> ConversationEngine:
    return ConversationEngine(
        sessions=SessionManager(session_store),
        catalog=catalog,
        ledger=ledger,
        composer=composer,
        dedupe_store=dedupe_store,
        config=EngineConfig(),
        notifier=OperatorNotifier(composer, OPERATOR),
        clock=clock,
    )
