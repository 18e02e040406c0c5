"""Configurações centralizadas do domipets_bot.

Uso típico:
    from domipets_bot.config import get_settings
"""

from domipets_bot.config.settings import (
    GRAPH_API_BASE_URL,
    GRAPH_API_VERSION,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "GRAPH_API_VERSION",
    "GRAPH_API_BASE_URL",
]
