"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode secrets ou valores sensíveis.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Constantes de API Meta (WhatsApp Cloud API + Commerce Catalog)
# Referência: https://developers.facebook.com/docs/graph-api/changelog
# -----------------------------------------------------------------------------
GRAPH_API_VERSION: str = "v22.0"
GRAPH_API_BASE_URL: str = "https://graph.facebook.com"

SESSION_BACKENDS = {"memory", "redis", "firestore", "sql"}
LEDGER_BACKENDS = {"memory", "sql"}
CATALOG_BACKENDS = {"memory", "graph"}
DEDUPE_BACKENDS = {"memory", "redis"}
OUTBOUND_BACKENDS = {"whatsapp", "log"}


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "domipets_bot"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # WhatsApp / Meta API
    whatsapp_verify_token: str | None = None  # Para verificação de webhook
    whatsapp_webhook_secret: str | None = None  # HMAC SHA-256 secret
    whatsapp_access_token: str | None = None  # Bearer token
    whatsapp_phone_number_id: str | None = None  # ID do número registrado
    whatsapp_api_version: str = GRAPH_API_VERSION
    whatsapp_api_base_url: str = GRAPH_API_BASE_URL

    @property
    def whatsapp_api_endpoint(self) -> str:
        """Retorna a URL base completa da Graph API (base + versão)."""
        return f"{self.whatsapp_api_base_url}/{self.whatsapp_api_version}"

    # Envio de mensagens (outbound)
    outbound_backend: str = "log"  # whatsapp | log (log só em dev)
    whatsapp_max_retries: int = 3
    whatsapp_retry_backoff_seconds: float = 2.0
    whatsapp_request_timeout_seconds: float = 30.0
    operator_phone_number: str | None = None  # Recebe avisos de novos tickets

    # Catálogo
    catalog_backend: str = "memory"  # memory | graph
    catalog_id: str | None = None  # ID do catálogo Meta Commerce
    catalog_seed_path: str | None = None  # JSON com produtos (backend memory)
    catalog_taxonomy_depth: int = 3  # 0..3 níveis (categoria, segmento, subtipo)
    catalog_page_size: int = 6
    catalog_search_limit: int = 10
    catalog_graph_default_stock: int = 10  # Estoque assumido para "in stock"

    # Sessão
    session_store_backend: str = "memory"  # memory | redis | firestore | sql
    session_inactivity_minutes: int = 30  # Sessão "stale" após esse tempo
    session_retention_minutes: int = 1440  # Varredura remove sessões mais antigas
    session_sweep_interval_seconds: int = 3600  # 0 desabilita a varredura periódica
    sessions_collection: str = "sessions"
    error_threshold: int = 3  # Entradas não reconhecidas antes de voltar ao menu

    # Pedidos / suporte
    ledger_backend: str = "memory"  # memory | sql
    faq_limit: int = 5

    # Armazenamento
    redis_url: str | None = None
    database_url: str | None = None  # SQLAlchemy URL (postgresql+psycopg://...)
    firestore_project_id: str | None = None
    firestore_database_id: str = "(default)"

    # Deduplicação (inbound e commit de pedidos)
    dedupe_backend: str = "memory"  # memory | redis
    dedupe_ttl_seconds: int = 86400

    # Endpoints de diagnóstico (nunca em produção)
    debug_endpoints_enabled: bool = True

    # Segurança
    zero_trust_mode: bool = False  # Exigir assinatura em todo webhook

    def validate_session_store_config(self) -> list[str]:
        """Valida backend de session store por ambiente.

        Em staging/prod, memory é proibido (instâncias não compartilham estado).
        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.session_store_backend.lower()

        if backend not in SESSION_BACKENDS:
            errors.append(
                f"SESSION_STORE_BACKEND '{backend}' inválido. Valores válidos: {SESSION_BACKENDS}"
            )

        if (self.is_staging or self.is_production) and backend == "memory":
            errors.append(
                "SESSION_STORE_BACKEND=memory é proibido em staging/production. "
                "Use 'redis', 'firestore' ou 'sql'."
            )

        if backend == "redis" and not self.redis_url:
            errors.append("SESSION_STORE_BACKEND=redis requer REDIS_URL configurado")
        if backend == "sql" and not self.database_url:
            errors.append("SESSION_STORE_BACKEND=sql requer DATABASE_URL configurado")

        if self.session_retention_minutes <= self.session_inactivity_minutes:
            errors.append(
                "SESSION_RETENTION_MINUTES deve ser maior que SESSION_INACTIVITY_MINUTES"
            )
        if self.error_threshold < 1:
            errors.append("ERROR_THRESHOLD deve ser >= 1")
        return errors

    def validate_ledger_config(self) -> list[str]:
        """Valida backend de pedidos e tickets de suporte."""
        errors: list[str] = []
        backend = self.ledger_backend.lower()
        if backend not in LEDGER_BACKENDS:
            errors.append("LEDGER_BACKEND inválido: use memory | sql")
        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append("LEDGER_BACKEND=memory é proibido em staging/production")
        if backend == "sql" and not self.database_url:
            errors.append("LEDGER_BACKEND=sql requer DATABASE_URL configurado")
        if self.faq_limit < 1:
            errors.append("FAQ_LIMIT deve ser >= 1")
        return errors

    def validate_catalog_config(self) -> list[str]:
        """Valida gateway de catálogo e limites de paginação."""
        errors: list[str] = []
        backend = self.catalog_backend.lower()
        if backend not in CATALOG_BACKENDS:
            errors.append("CATALOG_BACKEND inválido: use memory | graph")
        if backend == "graph":
            if not self.catalog_id:
                errors.append("CATALOG_BACKEND=graph requer CATALOG_ID configurado")
            if not self.whatsapp_access_token:
                errors.append("CATALOG_BACKEND=graph requer WHATSAPP_ACCESS_TOKEN configurado")
        if not 0 <= self.catalog_taxonomy_depth <= 3:
            errors.append("CATALOG_TAXONOMY_DEPTH deve estar entre 0 e 3")
        # Lista interativa comporta 10 linhas; 4 ficam para navegação.
        if not 1 <= self.catalog_page_size <= 6:
            errors.append("CATALOG_PAGE_SIZE deve estar entre 1 e 6")
        if self.catalog_search_limit < 1:
            errors.append("CATALOG_SEARCH_LIMIT deve ser >= 1")
        return errors

    def validate_dedupe_backend(self) -> list[str]:
        """Valida backend de dedupe (idempotência inbound e de pedidos)."""
        errors: list[str] = []
        backend = self.dedupe_backend.lower()
        if backend not in DEDUPE_BACKENDS:
            errors.append("DEDUPE_BACKEND inválido: use memory | redis")
        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "DEDUPE_BACKEND=memory é proibido em staging/production. Configure Redis."
            )
        if backend == "redis" and not self.redis_url:
            errors.append("DEDUPE_BACKEND=redis requer REDIS_URL configurado")
        return errors

    def validate_whatsapp_config(self) -> list[str]:
        """Valida se configurações mínimas de WhatsApp estão presentes.

        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.outbound_backend.lower()
        if backend not in OUTBOUND_BACKENDS:
            errors.append("OUTBOUND_BACKEND inválido: use whatsapp | log")
        if backend == "whatsapp":
            if not self.whatsapp_phone_number_id:
                errors.append("WHATSAPP_PHONE_NUMBER_ID não configurado")
            if not self.whatsapp_access_token:
                errors.append("WHATSAPP_ACCESS_TOKEN não configurado")
        if backend == "log" and (self.is_staging or self.is_production):
            errors.append("OUTBOUND_BACKEND=log é proibido em staging/production")
        if self.zero_trust_mode and not self.whatsapp_webhook_secret:
            errors.append("WHATSAPP_WEBHOOK_SECRET obrigatório em zero_trust_mode")
        return errors

    def validate_all(self) -> list[str]:
        """Agrega todos os validadores."""
        return [
            *self.validate_whatsapp_config(),
            *self.validate_session_store_config(),
            *self.validate_ledger_config(),
            *self.validate_catalog_config(),
            *self.validate_dedupe_backend(),
        ]

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def debug_endpoints_active(self) -> bool:
        """Endpoints de diagnóstico só existem fora de produção."""
        return self.debug_endpoints_enabled and not self.is_production

    def get_messages_endpoint(self, phone_number_id: str | None = None) -> str:
        """Retorna URL completa para envio de mensagens.

        Formato: https://graph.facebook.com/v22.0/{phone_number_id}/messages
        """
        pid = phone_number_id or self.whatsapp_phone_number_id
        if not pid:
            raise ValueError("phone_number_id é obrigatório")
        return f"{self.whatsapp_api_endpoint}/{pid}/messages"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
