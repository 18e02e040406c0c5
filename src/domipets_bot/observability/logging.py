"""Logging JSON do bot.

Cada linha sai com correlation_id, service e environment. Corpo de mensagens
e telefones completos não entram nos logs: use ``mask_identifier``.
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from domipets_bot.observability.middleware import get_correlation_id

LOG_FORMAT = (
    "%(asctime)s %(levelname)s %(name)s %(message)s "
    "%(correlation_id)s %(service)s %(environment)s"
)

# httpx registra a URL completa de cada request em INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "urllib3", "google.auth")


class TurnContextFilter(logging.Filter):
    """Completa o record com o contexto do serviço e do turno."""

    def __init__(self, service_name: str, environment: str) -> None:
        super().__init__()
        self._service_name = service_name
        self._environment = environment

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        record.service = self._service_name
        record.environment = self._environment
        return True


def configure_logging(level: str, service_name: str, environment: str = "development") -> None:
    formatter = JsonFormatter(LOG_FORMAT, rename_fields={"levelname": "level", "name": "logger"})

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(TurnContextFilter(service_name, environment))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_degraded(logger: logging.Logger, component: str, reason: str | None = None) -> None:
    """Registra que ``component`` caiu para o modo degradado (ex.: lista → texto)."""
    extra: dict[str, object] = {"degraded": True, "component": component}
    if reason:
        extra["reason"] = reason
    logger.warning("degraded_%s", component, extra=extra)
