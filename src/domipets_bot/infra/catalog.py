"""Factory de CatalogGateway conforme CATALOG_BACKEND."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from domipets_bot.domain.catalog import CatalogGateway
from domipets_bot.infra.http import HttpClient, build_http_config
from domipets_bot.observability.logging import get_logger

if TYPE_CHECKING:
    from domipets_bot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)


def create_catalog_gateway(
    settings: Settings, http_client: HttpClient | None = None
) -> CatalogGateway:
    """Cria o gateway de catálogo.

    Raises:
        ValueError: backend desconhecido ou configuração ausente
        CatalogError: arquivo de seed ilegível
    """
    backend = settings.catalog_backend.lower()
    if backend == "memory":
        from domipets_bot.infra.catalog_memory import InMemoryCatalogGateway

        if settings.catalog_seed_path:
            return InMemoryCatalogGateway.from_json(settings.catalog_seed_path)
        logger.info("Usando InMemoryCatalogGateway com produtos de demonstração")
        return InMemoryCatalogGateway()

    if backend == "graph":
        if not settings.catalog_id or not settings.whatsapp_access_token:
            raise ValueError("CATALOG_BACKEND=graph requer CATALOG_ID e WHATSAPP_ACCESS_TOKEN")
        from domipets_bot.infra.catalog_graph import GraphCatalogGateway

        logger.info("Usando GraphCatalogGateway", extra={"catalog_id": settings.catalog_id})
        return GraphCatalogGateway(
            http_client or HttpClient(build_http_config(settings)),
            api_endpoint=settings.whatsapp_api_endpoint,
            catalog_id=settings.catalog_id,
            access_token=settings.whatsapp_access_token,
            in_stock_units=settings.catalog_graph_default_stock,
        )

    raise ValueError(f"Backend de catálogo não reconhecido: {backend}")
