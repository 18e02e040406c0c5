"""Camada de infraestrutura: adapters para serviços externos.

Este módulo exporta as factories principais para criação de
componentes de infraestrutura:

- Dedupe: InMemoryDedupeStore, RedisDedupeStore
- Session: InMemorySessionStore, RedisSessionStore, FirestoreSessionStore,
  SqlSessionStore, create_session_store
- Ledger: InMemoryOrderLedger, SqlOrderLedger, create_order_ledger
- Catálogo: InMemoryCatalogGateway, GraphCatalogGateway, create_catalog_gateway
- HTTP: HttpClient

Uso típico:
    from domipets_bot.infra import create_dedupe_store, create_session_store

Infraestrutura não decide regra de negócio; logs estruturados sem PII.
"""

from domipets_bot.infra.catalog import create_catalog_gateway
from domipets_bot.infra.catalog_graph import GraphCatalogGateway
from domipets_bot.infra.catalog_memory import InMemoryCatalogGateway
from domipets_bot.infra.dedupe import (
    DedupeError,
    DedupeStore,
    InMemoryDedupeStore,
    RedisDedupeStore,
    create_dedupe_store,
)
from domipets_bot.infra.http import HttpClient, HttpClientConfig, HttpError, build_http_config
from domipets_bot.infra.ledger import create_order_ledger
from domipets_bot.infra.ledger_memory import InMemoryOrderLedger
from domipets_bot.infra.ledger_sql import SqlOrderLedger
from domipets_bot.infra.session_contract import SessionStore, SessionStoreError
from domipets_bot.infra.session_store import create_session_store
from domipets_bot.infra.session_store_firestore import FirestoreSessionStore
from domipets_bot.infra.session_store_memory import InMemorySessionStore
from domipets_bot.infra.session_store_redis import RedisSessionStore
from domipets_bot.infra.session_store_sql import SqlSessionStore

__all__ = [
    # Dedupe
    "DedupeStore",
    "DedupeError",
    "InMemoryDedupeStore",
    "RedisDedupeStore",
    "create_dedupe_store",
    # Session
    "SessionStore",
    "SessionStoreError",
    "InMemorySessionStore",
    "RedisSessionStore",
    "FirestoreSessionStore",
    "SqlSessionStore",
    "create_session_store",
    # Ledger
    "InMemoryOrderLedger",
    "SqlOrderLedger",
    "create_order_ledger",
    # Catálogo
    "InMemoryCatalogGateway",
    "GraphCatalogGateway",
    "create_catalog_gateway",
    # HTTP
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "build_http_config",
]
